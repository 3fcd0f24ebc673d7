from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("new", "New"),
                            ("preparing", "Preparing"),
                            ("ready", "Ready"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="new",
                        max_length=10,
                    ),
                ),
                (
                    "order_type",
                    models.CharField(
                        choices=[("Dine-in", "Dine-in"), ("Takeaway", "Takeaway"), ("Delivery", "Delivery")],
                        max_length=10,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("Cash", "Cash"),
                            ("Credit/Debit Card", "Credit/Debit Card"),
                            ("FPX", "FPX"),
                            ("Touch n Go", "Touch n Go"),
                            ("GrabPay", "GrabPay"),
                            ("ShopeePay", "ShopeePay"),
                            ("Boost", "Boost"),
                            ("Google Pay", "Google Pay"),
                            ("Apple Pay", "Apple Pay"),
                        ],
                        default="Cash",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("Pending", "Pending"), ("Paid", "Paid"), ("Refunded", "Refunded")],
                        default="Pending",
                        max_length=10,
                    ),
                ),
                ("table_number", models.CharField(blank=True, default="", max_length=20)),
                ("customer_name", models.CharField(blank=True, default="", max_length=100)),
                ("customer_phone", models.CharField(blank=True, default="", max_length=30)),
                ("notes", models.TextField(blank=True, default="")),
                ("lines", models.JSONField(default=list)),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("points_earned", models.PositiveIntegerField(default=0)),
                ("revision", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "loyalty_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="customers.loyaltyaccount",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["status", "created_at"], name="order_status_created_idx")],
            },
        ),
    ]
