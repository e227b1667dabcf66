# apps/invoicing/exceptions.py
"""
Billing outcomes that stop a single invoice from being generated.

Malformed input is reported with django.core.exceptions.ValidationError;
these classes cover the business refusals the API and the batch run need
to tell apart.
"""


class InvoicingError(Exception):
    """Base class for invoicing refusals."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class DuplicatePeriod(InvoicingError):
    """An invoice already covers the period and updating was not allowed."""

    def __init__(self, invoice):
        super().__init__('Invoice already exists for this period')
        self.invoice = invoice


class NoRecordsFound(InvoicingError):
    """The customer has no delivery records inside the period."""

    def __init__(self, customer=None, period=None):
        super().__init__('No records found for this period')
        self.customer = customer
        self.period = period


class BillingPeriodOpen(InvoicingError):
    """The current month is not close enough to its end to be billed."""

    def __init__(self, days_remaining):
        super().__init__(
            'Cannot generate invoices for the current month until the end of the month '
            f'({days_remaining} days remaining). This ensures all milk deliveries are '
            'included in the invoice.'
        )
        self.days_remaining = days_remaining


class RegenerationConflict(InvoicingError):
    """Regenerating would leave the invoice with more paid than billed."""

    def __init__(self, invoice, new_total):
        super().__init__(
            f'Cannot update invoice {invoice.invoice_number}: amount paid '
            f'({invoice.amount_paid}) exceeds the regenerated total ({new_total})'
        )
        self.invoice = invoice
        self.new_total = new_total
