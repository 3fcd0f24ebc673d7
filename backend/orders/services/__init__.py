"""
Orders services package - service layer for order management.

- OrderService: Core order lifecycle (create, transition, merge items, edit details)
- OrderReportService: Daily sales summary for the manager dashboard
"""

# Core order operations
from .order_service import OrderService

# Reporting
from .report_service import OrderReportService

__all__ = [
    'OrderService',
    'OrderReportService',
]
