import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "fulfillment",
                    models.CharField(
                        choices=[("delivery", "Delivery"), ("takeaway", "Takeaway")],
                        default="delivery",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("preparing", "Preparing"),
                            ("out_for_delivery", "Out for Delivery"),
                            ("ready_for_pickup", "Ready for Pickup"),
                            ("delivered", "Delivered"),
                            ("picked_up", "Picked Up"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "total_amount",
                    models.DecimalField(decimal_places=2, max_digits=10),
                ),
                (
                    "points_earned",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Points credited to the owner when the order was placed",
                    ),
                ),
                (
                    "points_redeemed",
                    models.PositiveIntegerField(
                        blank=True, help_text="Set once; null = never redeemed", null=True
                    ),
                ),
                (
                    "discount_applied",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True
                    ),
                ),
                ("redeemed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("online", "Online"),
                            ("cash_on_delivery", "Cash on Delivery"),
                            ("cash_at_shop", "Cash at Shop"),
                        ],
                        default="cash_on_delivery",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("paid", "Paid")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("delivery_address", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                (
                    "pickup_time",
                    models.DateTimeField(
                        blank=True,
                        help_text="Estimated pickup time (takeaway orders)",
                        null=True,
                    ),
                ),
                ("version", models.PositiveIntegerField(default=0)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-pk"],
                "indexes": [
                    models.Index(
                        fields=["owner", "created_at"], name="order_owner_created_idx"
                    ),
                    models.Index(fields=["status"], name="order_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("total_amount__gte", 0)),
                        name="order_total_amount_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("discount_applied__isnull", True),
                                ("points_redeemed__isnull", True),
                            ),
                            models.Q(
                                ("discount_applied__isnull", False),
                                ("points_redeemed__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="order_redemption_complete",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                (
                    "unit_price",
                    models.DecimalField(decimal_places=2, max_digits=10),
                ),
                (
                    "line_total",
                    models.DecimalField(
                        decimal_places=2, help_text="unit_price * quantity", max_digits=10
                    ),
                ),
                (
                    "menu_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="catalog.menuitem",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["pk"],
            },
        ),
    ]
