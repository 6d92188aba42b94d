"""Reward catalog storage."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class RewardCatalog(models.Model):
    """
    Single row holding the whole reward catalog as a JSON list.

    The catalog is small and rewritten wholesale on every edit.
    """

    SINGLETON_ID = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID)
    config = models.JSONField(
        _("rewards"),
        default=list,
        help_text=_("Ordered list of reward definitions"),
    )
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("reward catalog")
        verbose_name_plural = _("reward catalog")

    def __str__(self):
        return f"Reward catalog ({len(self.config)} rewards)"
