from typing import List, Optional

from core_backend.exceptions import NotFoundError
from .models import MenuItem


class ProductService:
    """Read-only access to the menu catalog."""

    @staticmethod
    def menu_items_queryset(available_only: bool = False, category: Optional[str] = None):
        queryset = MenuItem.objects.prefetch_related("modifiers")
        if available_only:
            queryset = queryset.filter(is_available=True)
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    @staticmethod
    def list_menu_items(available_only: bool = False, category: Optional[str] = None) -> List[MenuItem]:
        return list(ProductService.menu_items_queryset(available_only, category))

    @staticmethod
    def get_menu_item(item_id) -> MenuItem:
        try:
            return MenuItem.objects.prefetch_related("modifiers").get(pk=item_id)
        except MenuItem.DoesNotExist:
            raise NotFoundError(f"Menu item {item_id} not found.")

    @staticmethod
    def list_categories() -> List[str]:
        return list(
            MenuItem.objects.order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )

    @staticmethod
    def list_featured_items() -> List[MenuItem]:
        return list(
            MenuItem.objects.prefetch_related("modifiers").filter(is_featured=True, is_available=True)
        )
