from django.urls import path

from .views import LoyaltyAccountView

urlpatterns = [
    path("loyalty/", LoyaltyAccountView.as_view(), name="loyalty-account"),
]
