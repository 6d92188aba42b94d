"""Customer model: identity plus the current point balance."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Customer(models.Model):
    """
    Registered loyalty customer.

    Email uniqueness is enforced by the database and is case-sensitive
    (exact match on the stored value).
    """

    name = models.CharField(_("name"), max_length=200)
    email = models.EmailField(_("email"), unique=True)
    points = models.PositiveIntegerField(
        _("points"),
        default=0,
        help_text=_("Points available for redemption"),
    )
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("customer")
        verbose_name_plural = _("customers")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points__gte=0),
                name="rewardman_customer_points_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>: {self.points}pts"
