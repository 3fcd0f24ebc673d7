from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LoyaltyAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "customer_key",
                    models.CharField(
                        default="default",
                        help_text="Identifies the customer context owning this balance.",
                        max_length=100,
                        unique=True,
                    ),
                ),
                ("points", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Loyalty Account",
                "verbose_name_plural": "Loyalty Accounts",
            },
        ),
    ]
