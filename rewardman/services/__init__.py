"""Rewardman services.

- catalog: reward catalog (ordered, stored as one snapshot)
- ledger: customers and point balances
- redemption: eligibility and redemption
- metrics: summary statistics and date-filtered history
"""

from rewardman.services import catalog
from rewardman.services import ledger
from rewardman.services import redemption
from rewardman.services import metrics

__all__ = ["catalog", "ledger", "redemption", "metrics"]
