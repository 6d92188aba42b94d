"""Redemption history."""

import uuid as uuid_lib

from django.db import models
from django.utils.translation import gettext_lazy as _


class Redemption(models.Model):
    """
    Immutable record of a redemption.

    customer_id and reward_id are plain columns, not foreign keys: deleting
    a customer or a reward leaves history untouched (the id dangles).
    Names are snapshots taken at redemption time.
    """

    id = models.UUIDField(primary_key=True, default=uuid_lib.uuid4, editable=False)

    customer_id = models.BigIntegerField(_("customer id"), db_index=True)
    customer_name = models.CharField(_("customer name"), max_length=200)

    reward_id = models.BigIntegerField(_("reward id"))
    reward_name = models.CharField(_("reward name"), max_length=200)

    points_spent = models.PositiveIntegerField(_("points spent"))
    points_before = models.PositiveIntegerField(
        _("points before"),
        help_text=_("Customer balance at redemption time"),
    )
    points_remaining_after = models.PositiveIntegerField(_("points remaining"), default=0)

    redeemed_at = models.DateTimeField(_("redeemed at"), db_index=True)

    class Meta:
        verbose_name = _("redemption")
        verbose_name_plural = _("redemptions")
        ordering = ["-redeemed_at"]

    def __str__(self):
        return f"{self.customer_name}: {self.reward_name} (-{self.points_spent}pts)"
