"""
Rewardman signals: public event API.

Emitted signals:
- customer_registered: Emitted by services.ledger.register()
- points_adjusted: Emitted by services.ledger.adjust_points() / reset_points()
- customer_deleted: Emitted by services.ledger.delete()
- reward_redeemed: Emitted by services.redemption.redeem()
"""

from django.dispatch import Signal

# Ledger signals (emitted by services)
customer_registered = Signal()  # sender=CustomerInfo, customer=CustomerInfo
points_adjusted = Signal()  # sender=CustomerInfo, customer=CustomerInfo, previous=int
customer_deleted = Signal()  # sender=CustomerInfo, customer_id=int
reward_redeemed = Signal()  # sender=RedemptionRecord, record=RedemptionRecord
