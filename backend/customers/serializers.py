from rest_framework import serializers

from .models import LoyaltyAccount


class LoyaltyAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyAccount
        fields = ["customer_key", "points", "updated_at"]
        read_only_fields = fields
