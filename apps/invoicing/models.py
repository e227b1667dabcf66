# apps/invoicing/models.py
"""
Invoice models for monthly milk billing.

Models:
- Invoice: One customer's bill for one calendar month
- InvoiceLine: Frozen daily delivery snapshot on an invoice
- Payment: Append-only payment log against an invoice
- InvoiceSequence: Locked counter row backing invoice numbers
"""
from decimal import Decimal
from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords
from shared.models import TimestampMixin


def derive_status(due_amount, amount_paid, due_date, today):
    """
    Status of an invoice as a pure function of its balance and due date.

    Order matters: a settled invoice is paid even when past due, and any
    payment at all marks it partially paid before overdue is considered.
    """
    if due_amount <= 0:
        return Invoice.STATUS_PAID
    if amount_paid > 0:
        return Invoice.STATUS_PARTIALLY_PAID
    if due_date < today:
        return Invoice.STATUS_OVERDUE
    return Invoice.STATUS_PENDING


class Invoice(TimestampMixin):
    """
    Monthly invoice for a milk delivery customer.

    Built from the customer's DeliveryRecords between start_date and
    end_date (inclusive). due_amount and status are derived on every save
    and never written directly.

    Example:
        Invoice: INV-24-03-0042
        Customer: #7 Mehul Patel
        Period: 2024-02-01 .. 2024-02-29
        Amount: 2,320.00, Paid: 1,000.00, Due: 1,320.00
        Status: Partially Paid
    """
    STATUS_PENDING = 'pending'
    STATUS_PARTIALLY_PAID = 'partially_paid'
    STATUS_PAID = 'paid'
    STATUS_OVERDUE = 'overdue'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PARTIALLY_PAID, 'Partially Paid'),
        (STATUS_PAID, 'Paid'),
        (STATUS_OVERDUE, 'Overdue'),
    ]

    invoice_number = models.CharField(
        max_length=30,
        unique=True,
        help_text="Invoice number (INV-YY-MM-NNNN, assigned once)"
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='invoices',
        help_text="Customer being billed"
    )

    # Billing period
    start_date = models.DateField(
        help_text="First day of the billing period"
    )
    end_date = models.DateField(
        help_text="Last day of the billing period (inclusive)"
    )
    due_date = models.DateField(
        help_text="Payment due date"
    )

    # Totals
    total_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text="Litres delivered in the period"
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text="Total invoice amount"
    )
    amount_paid = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text="Amount paid to date"
    )
    due_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text="Total amount minus amount paid (derived)"
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        help_text="Invoice status (derived)"
    )

    notes = models.TextField(
        blank=True,
        help_text="Invoice notes"
    )

    # Audit trail
    history = HistoricalRecords()

    class Meta:
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['customer', 'start_date'],
                name='unique_invoice_per_customer_period',
            ),
        ]
        indexes = [
            models.Index(fields=['customer', 'start_date', 'end_date'], name='invoice_customer_period_idx'),
            models.Index(fields=['status', 'due_date'], name='invoice_status_due_idx'),
        ]

    def __str__(self):
        return self.invoice_number

    @property
    def is_paid(self):
        """True if invoice is fully paid."""
        return self.due_amount <= 0

    def recalculate(self, as_of=None):
        """Recompute due_amount and status from totals, payments and due date."""
        if as_of is None:
            as_of = timezone.localdate()
        self.due_amount = Decimal(self.total_amount) - Decimal(self.amount_paid)
        self.status = derive_status(self.due_amount, Decimal(self.amount_paid), self.due_date, as_of)

    def save(self, *args, **kwargs):
        # Status and balance are always derived, whoever calls save()
        self.recalculate(kwargs.pop('as_of', None))
        super().save(*args, **kwargs)


class InvoiceLine(models.Model):
    """
    One day's delivery as billed on an invoice.

    Lines are copied from DeliveryRecords when the invoice is generated
    or regenerated; later edits to the records do not change them.
    """
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name='lines',
        help_text="Parent invoice"
    )
    date = models.DateField(
        help_text="Delivery date"
    )
    morning_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
    )
    evening_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
    )
    daily_quantity = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        help_text="Total litres for the day"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Price per litre on that date"
    )
    daily_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount charged for the day"
    )

    class Meta:
        verbose_name = "Invoice Line"
        verbose_name_plural = "Invoice Lines"
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(fields=['invoice', 'date'], name='unique_invoice_line_date'),
        ]

    def __str__(self):
        return f"{self.invoice.invoice_number} {self.date}: {self.daily_quantity} L"


class Payment(models.Model):
    """
    Payment recorded against an invoice.

    Payments are append-only. Corrections are made with further entries,
    never by editing or deleting an existing row.
    """
    METHOD_CASH = 'cash'
    METHOD_ONLINE = 'online'

    PAYMENT_METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_ONLINE, 'Online'),
    ]

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name='payments',
        help_text="Invoice being paid"
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Payment amount"
    )
    payment_date = models.DateTimeField(
        default=timezone.now,
        help_text="When the payment was received"
    )
    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHOD_CHOICES,
        default=METHOD_CASH,
        help_text="Payment method"
    )
    transaction_id = models.CharField(
        max_length=50,
        blank=True,
        help_text="Transaction reference ({year}_{customer_no}_{seq} when generated)"
    )
    notes = models.TextField(
        blank=True,
        help_text="Payment notes"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(
                fields=['transaction_id'],
                condition=~models.Q(transaction_id=''),
                name='unique_payment_transaction_id',
            ),
        ]

    def __str__(self):
        return f"Payment {self.amount} on {self.invoice.invoice_number}"


class InvoiceSequence(models.Model):
    """
    Counter row for invoice numbers.

    Incremented under select_for_update() so concurrent generators
    never receive the same value.
    """
    name = models.CharField(max_length=30, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.name}: {self.last_value}"
