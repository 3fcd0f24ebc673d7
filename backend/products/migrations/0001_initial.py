from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Modifier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="The amount added to the item price when selected.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Name of the menu item.", max_length=200)),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="The selling price of the item.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("category", models.CharField(db_index=True, max_length=100)),
                ("image", models.URLField(blank=True)),
                (
                    "is_available",
                    models.BooleanField(default=True, help_text="Unavailable items are hidden from the customer menu."),
                ),
                ("is_featured", models.BooleanField(default=False)),
                ("modifiers", models.ManyToManyField(blank=True, related_name="menu_items", to="products.modifier")),
            ],
            options={
                "ordering": ["category", "name"],
                "indexes": [models.Index(fields=["category", "is_available"], name="menuitem_category_avail_idx")],
            },
        ),
    ]
