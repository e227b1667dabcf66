# apps/invoicing/admin.py
"""
Django admin configuration for Invoice models.

Invoices are generated by InvoicingService; the admin is read-mostly so
derived fields and the payment log cannot be edited by hand.
"""
from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin
from .models import Invoice, InvoiceLine, Payment


class InvoiceLineInline(admin.TabularInline):
    """Read-only daily lines."""
    model = InvoiceLine
    extra = 0
    fields = ['date', 'morning_quantity', 'evening_quantity', 'daily_quantity', 'price', 'daily_amount']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    """Read-only payment log."""
    model = Payment
    extra = 0
    fields = ['payment_date', 'amount', 'payment_method', 'transaction_id', 'notes']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(SimpleHistoryAdmin):
    """Admin interface for Invoice."""
    list_display = [
        'invoice_number', 'customer', 'start_date', 'end_date', 'due_date',
        'status', 'total_amount', 'amount_paid', 'due_amount',
    ]
    list_filter = ['status', 'start_date']
    search_fields = ['invoice_number', 'customer__name', 'customer__phone_no']
    raw_id_fields = ['customer']
    date_hierarchy = 'start_date'
    readonly_fields = [
        'invoice_number', 'customer', 'start_date', 'end_date', 'due_date',
        'total_quantity', 'total_amount', 'amount_paid', 'due_amount', 'status',
        'created_at', 'updated_at',
    ]
    inlines = [InvoiceLineInline, PaymentInline]

    fieldsets = [
        (None, {
            'fields': ['invoice_number', 'customer', 'status']
        }),
        ('Period', {
            'fields': ['start_date', 'end_date', 'due_date']
        }),
        ('Totals', {
            'fields': ['total_quantity', 'total_amount', 'amount_paid', 'due_amount']
        }),
        ('Notes', {
            'fields': ['notes']
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse']
        }),
    ]
