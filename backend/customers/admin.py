from django.contrib import admin

from .models import LoyaltyAccount


@admin.register(LoyaltyAccount)
class LoyaltyAccountAdmin(admin.ModelAdmin):
    list_display = ("customer_key", "points", "updated_at")
    search_fields = ("customer_key",)
    readonly_fields = ("points", "updated_at")
