from rest_framework.response import Response
from rest_framework.views import APIView

from .models import LoyaltyAccount
from .serializers import LoyaltyAccountSerializer
from .services import LoyaltyService


class LoyaltyAccountView(APIView):
    """Current points balance for a customer context (?customer_key=...)."""

    def get(self, request):
        customer_key = request.query_params.get("customer_key") or LoyaltyAccount.DEFAULT_KEY
        account = LoyaltyService.get_account(customer_key)
        return Response(LoyaltyAccountSerializer(account).data)
