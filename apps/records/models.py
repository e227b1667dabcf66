# apps/records/models.py
"""
Daily delivery records.

One DeliveryRecord exists per customer per day. Records are written by the
daily scheduling job and are read-only input to invoicing.
"""
from django.db import models
from shared.models import TimestampMixin


class DeliveryRecord(TimestampMixin):
    """
    Quantity delivered to a customer on one date, priced at that day's rate.

    total_quantity and total_amount are stored as delivered; invoicing sums
    them as-is rather than recomputing from price.
    """
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='delivery_records',
        help_text="Customer the milk was delivered to"
    )
    date = models.DateField(
        db_index=True,
        help_text="Delivery date"
    )
    morning_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        help_text="Morning delivery (litres)"
    )
    evening_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        help_text="Evening delivery (litres)"
    )
    total_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        help_text="Total litres for the day"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Price per litre on this date"
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount charged for the day"
    )

    class Meta:
        verbose_name = "Delivery Record"
        verbose_name_plural = "Delivery Records"
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(
                fields=['customer', 'date'],
                name='unique_delivery_record_per_day',
            ),
        ]
        indexes = [
            models.Index(fields=['customer', 'date'], name='record_customer_date_idx'),
        ]

    def __str__(self):
        return f"{self.customer} {self.date}: {self.total_quantity} L"
