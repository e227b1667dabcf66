# apps/invoicing/numbering.py
"""
Invoice number and payment transaction id allocation.

Invoice numbers: INV-YY-MM-NNNN where YY-MM is the generation date and
NNNN is a global counter. Transaction ids: {year}_{customer_no}_{seq}
where seq is per customer per calendar year.
"""
import logging
from django.conf import settings
from django.db import transaction

from .models import Invoice, InvoiceSequence, Payment

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE = 'invoice'


def _number_prefix():
    return getattr(settings, 'INVOICING', {}).get('NUMBER_PREFIX', 'INV')


def parse_invoice_counter(invoice_number):
    """
    Return the counter segment of an invoice number, or None.

    INV-24-03-0042 -> 42
    """
    parts = (invoice_number or '').split('-')
    if len(parts) < 4:
        return None
    try:
        return int(parts[3])
    except ValueError:
        return None


def _latest_counter():
    """Counter of the most recently created invoice, 0 when none parse."""
    latest = Invoice.objects.order_by('-created_at', '-pk').values_list(
        'invoice_number', flat=True
    ).first()
    return parse_invoice_counter(latest) or 0


def next_invoice_number(today):
    """
    Allocate the next invoice number.

    The counter row is locked for the rest of the caller's transaction.
    On first use it is seeded from the latest existing invoice number.

    Args:
        today: Generation date (supplies YY and MM)

    Returns:
        str: e.g. 'INV-24-03-0042'
    """
    with transaction.atomic():
        sequence = InvoiceSequence.objects.select_for_update().filter(
            name=INVOICE_SEQUENCE
        ).first()
        if sequence is None:
            sequence = InvoiceSequence.objects.create(
                name=INVOICE_SEQUENCE,
                last_value=_latest_counter(),
            )
        sequence.last_value += 1
        sequence.save(update_fields=['last_value'])

    number = f"{_number_prefix()}-{today:%y}-{today:%m}-{sequence.last_value:04d}"
    logger.debug(f'Allocated invoice number {number}')
    return number


def parse_transaction_sequence(transaction_id, prefix):
    """Sequence part of a generated transaction id, or None."""
    if not transaction_id or not transaction_id.startswith(prefix):
        return None
    parts = transaction_id.split('_')
    if len(parts) < 3:
        return None
    try:
        return int(parts[2])
    except ValueError:
        return None


def next_transaction_id(customer, year):
    """
    Generate the next payment transaction id for a customer.

    Looks at payments on every invoice of the customer, not only the one
    being paid, and continues from the highest sequence used this year.
    Ids are unique across all payments, so a value already entered by hand
    elsewhere is skipped.

    Args:
        customer: Customer instance
        year: Calendar year of the payment

    Returns:
        str: e.g. '2024_7_3'
    """
    prefix = f"{year}_{customer.customer_no}_"
    existing = Payment.objects.filter(
        invoice__customer=customer,
        transaction_id__startswith=prefix,
    ).values_list('transaction_id', flat=True)

    max_sequence = 0
    for transaction_id in existing:
        sequence = parse_transaction_sequence(transaction_id, prefix)
        if sequence is not None and sequence > max_sequence:
            max_sequence = sequence

    sequence = max_sequence + 1
    while Payment.objects.filter(transaction_id=f"{prefix}{sequence}").exists():
        sequence += 1

    transaction_id = f"{prefix}{sequence}"
    logger.debug(f'Generated transaction id {transaction_id} for customer {customer.customer_no}')
    return transaction_id
