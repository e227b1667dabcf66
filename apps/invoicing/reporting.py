# apps/invoicing/reporting.py
"""
Invoice aggregation for the customer summary and the billing dashboard.
"""
from datetime import date
from decimal import Decimal
from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Invoice

ZERO = Decimal('0.00')


def _status_count(status):
    return Count('id', filter=Q(status=status))


def get_customer_summary(customer):
    """
    Totals across all invoices of one customer.

    Returns dict with summary, recent_invoices (five newest) and a
    customer header.
    """
    invoices = Invoice.objects.filter(customer=customer)

    summary = invoices.aggregate(
        total_invoices=Count('id'),
        total_amount=Sum('total_amount'),
        total_paid=Sum('amount_paid'),
        total_due=Sum('due_amount'),
        pending_invoices=_status_count(Invoice.STATUS_PENDING),
        overdue_invoices=_status_count(Invoice.STATUS_OVERDUE),
    )
    for key in ('total_amount', 'total_paid', 'total_due'):
        summary[key] = summary[key] or ZERO

    return {
        'summary': summary,
        'recent_invoices': list(invoices.order_by('-created_at', '-pk')[:5]),
        'customer': {
            'id': customer.pk,
            'name': customer.name,
            'phone_no': customer.phone_no,
            'customer_no': customer.customer_no,
        },
    }


def get_dashboard_stats(today=None):
    """
    System-wide billing statistics.

    Returns dict with summary (totals and counts per status),
    monthly_data (invoices created per month over the last six months),
    recent_invoices (ten newest) and top_customers (five largest by
    billed amount).
    """
    if today is None:
        today = timezone.localdate()

    summary = Invoice.objects.aggregate(
        total_amount=Sum('total_amount'),
        total_paid=Sum('amount_paid'),
        total_due=Sum('due_amount'),
        total_invoices=Count('id'),
        pending_count=_status_count(Invoice.STATUS_PENDING),
        paid_count=_status_count(Invoice.STATUS_PAID),
        partially_paid_count=_status_count(Invoice.STATUS_PARTIALLY_PAID),
        overdue_count=_status_count(Invoice.STATUS_OVERDUE),
    )
    for key in ('total_amount', 'total_paid', 'total_due'):
        summary[key] = summary[key] or ZERO

    # First day of the month five months back
    month_index = today.year * 12 + today.month - 1 - 5
    six_months_ago = date(month_index // 12, month_index % 12 + 1, 1)

    monthly = (
        Invoice.objects.filter(created_at__date__gte=six_months_ago)
        .annotate(month=TruncMonth('created_at'))
        .values('month')
        .annotate(
            total_amount=Sum('total_amount'),
            paid_amount=Sum('amount_paid'),
            count=Count('id'),
        )
        .order_by('month')
    )
    monthly_data = [
        {
            'month': f"{row['month']:%Y-%m}",
            'total_amount': row['total_amount'] or ZERO,
            'paid_amount': row['paid_amount'] or ZERO,
            'count': row['count'],
        }
        for row in monthly
    ]

    top_customers = (
        Invoice.objects.values('customer', 'customer__name', 'customer__customer_no')
        .annotate(
            total_amount=Sum('total_amount'),
            paid_amount=Sum('amount_paid'),
            invoice_count=Count('id'),
        )
        .order_by('-total_amount')[:5]
    )

    return {
        'summary': summary,
        'monthly_data': monthly_data,
        'recent_invoices': list(
            Invoice.objects.select_related('customer').order_by('-created_at', '-pk')[:10]
        ),
        'top_customers': [
            {
                'customer': row['customer'],
                'name': row['customer__name'],
                'customer_no': row['customer__customer_no'],
                'total_amount': row['total_amount'],
                'paid_amount': row['paid_amount'],
                'invoice_count': row['invoice_count'],
            }
            for row in top_customers
        ],
    }
