# Generated migration for Customer, RewardCatalog and Redemption

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                (
                    "email",
                    models.EmailField(max_length=254, unique=True, verbose_name="email"),
                ),
                (
                    "points",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Points available for redemption",
                        verbose_name="points",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, verbose_name="created at"
                    ),
                ),
            ],
            options={
                "verbose_name": "customer",
                "verbose_name_plural": "customers",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(points__gte=0),
                        name="rewardman_customer_points_non_negative",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="RewardCatalog",
            fields=[
                (
                    "id",
                    models.PositiveSmallIntegerField(
                        default=1, primary_key=True, serialize=False
                    ),
                ),
                (
                    "config",
                    models.JSONField(
                        default=list,
                        help_text="Ordered list of reward definitions",
                        verbose_name="rewards",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "reward catalog",
                "verbose_name_plural": "reward catalog",
            },
        ),
        migrations.CreateModel(
            name="Redemption",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "customer_id",
                    models.BigIntegerField(db_index=True, verbose_name="customer id"),
                ),
                (
                    "customer_name",
                    models.CharField(max_length=200, verbose_name="customer name"),
                ),
                ("reward_id", models.BigIntegerField(verbose_name="reward id")),
                (
                    "reward_name",
                    models.CharField(max_length=200, verbose_name="reward name"),
                ),
                ("points_spent", models.PositiveIntegerField(verbose_name="points spent")),
                (
                    "points_before",
                    models.PositiveIntegerField(
                        help_text="Customer balance at redemption time",
                        verbose_name="points before",
                    ),
                ),
                (
                    "points_remaining_after",
                    models.PositiveIntegerField(default=0, verbose_name="points remaining"),
                ),
                (
                    "redeemed_at",
                    models.DateTimeField(db_index=True, verbose_name="redeemed at"),
                ),
            ],
            options={
                "verbose_name": "redemption",
                "verbose_name_plural": "redemptions",
                "ordering": ["-redeemed_at"],
            },
        ),
    ]
