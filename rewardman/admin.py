"""Rewardman admin.

Redemptions are history: listed read-only, never added, edited or deleted.
Point changes made here bypass the service layer; use RewardsService for
clamped adjustments.
"""

from django.contrib import admin
from django.utils.html import format_html

from rewardman.models import Customer, Redemption


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ["name", "email", "points", "created_at"]
    search_fields = ["name", "email"]
    readonly_fields = ["created_at"]
    ordering = ["-created_at"]


@admin.register(Redemption)
class RedemptionAdmin(admin.ModelAdmin):
    list_display = [
        "redeemed_at",
        "customer_name",
        "reward_name",
        "points_badge",
        "points_before",
    ]
    list_filter = ["reward_name"]
    search_fields = ["customer_name", "reward_name"]
    date_hierarchy = "redeemed_at"
    readonly_fields = [
        "id",
        "customer_id",
        "customer_name",
        "reward_id",
        "reward_name",
        "points_spent",
        "points_before",
        "points_remaining_after",
        "redeemed_at",
    ]

    def points_badge(self, obj):
        return format_html(
            '<span style="background:#4CAF50; color:#fff; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">-{} pts</span>',
            obj.points_spent,
        )

    points_badge.short_description = "Points spent"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
