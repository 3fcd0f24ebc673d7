from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import MenuItem
from .serializers import MenuItemSerializer
from .services import ProductService


class MenuItemViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public, read-only menu catalog.

    Supports ?category=<name> and ?available=true filtering.
    """

    serializer_class = MenuItemSerializer
    queryset = MenuItem.objects.prefetch_related("modifiers")

    def get_queryset(self):
        available = self.request.query_params.get("available", "").lower() in ("1", "true")
        category = self.request.query_params.get("category")
        return ProductService.menu_items_queryset(available_only=available, category=category)

    @action(detail=False, methods=["get"])
    def categories(self, request):
        return Response(ProductService.list_categories())

    @action(detail=False, methods=["get"])
    def featured(self, request):
        serializer = self.get_serializer(ProductService.list_featured_items(), many=True)
        return Response(serializer.data)
