"""Rewardman protocols."""

from rewardman.protocols.ledger import (
    CustomerInfo,
    LedgerBackend,
    RedemptionRecord,
    Reward,
)

__all__ = [
    "CustomerInfo",
    "LedgerBackend",
    "RedemptionRecord",
    "Reward",
]
