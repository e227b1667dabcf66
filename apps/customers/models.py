# apps/customers/models.py
"""
Customer model for milk delivery subscribers.

Only the fields the billing engine reads are kept here; category,
subcategory and login management live elsewhere.
"""
from django.db import models
from shared.models import ActiveMixin, TimestampMixin


class Customer(ActiveMixin, TimestampMixin):
    """
    A household or shop receiving daily milk deliveries.

    customer_no is a small human-facing number (printed on statements and
    used in payment transaction ids). It is assigned on first save as one
    more than the highest existing number.

    Example:
        Customer #7: Mehul Patel, 98250 12345
        Price: 40.00 per litre
        Morning: 1.5 L, Evening: 0.5 L
    """
    customer_no = models.PositiveIntegerField(
        unique=True,
        blank=True,
        help_text="Sequential customer number"
    )
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Customer name"
    )
    phone_no = models.CharField(
        max_length=20,
        unique=True,
        help_text="Contact phone number"
    )
    address = models.TextField(
        help_text="Delivery address"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Current price per litre"
    )
    morning_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        help_text="Default morning delivery (litres)"
    )
    evening_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        help_text="Default evening delivery (litres)"
    )

    class Meta:
        verbose_name = "Customer"
        verbose_name_plural = "Customers"
        ordering = ['customer_no']

    def __str__(self):
        return f"#{self.customer_no} {self.name}"

    def save(self, *args, **kwargs):
        if self.customer_no is None:
            last = Customer.objects.aggregate(
                last=models.Max('customer_no')
            )['last'] or 0
            self.customer_no = last + 1
        super().save(*args, **kwargs)
