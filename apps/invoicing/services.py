# apps/invoicing/services.py
"""
Invoicing service for monthly milk bills.

InvoicingService handles:
- Aggregating delivery records into a billing period
- Generating or regenerating one customer's monthly invoice
- Batch generation for every active customer
- Recording payments against invoices
- Status refresh and deletion
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.customers.models import Customer
from apps.records.models import DeliveryRecord
from .exceptions import (
    BillingPeriodOpen, DuplicatePeriod, InvoicingError, NoRecordsFound, RegenerationConflict,
)
from .models import Invoice, InvoiceLine, Payment
from .numbering import next_invoice_number, next_transaction_id
from .periods import BillingPeriod

logger = logging.getLogger(__name__)


@dataclass
class PeriodTotals:
    """Snapshot of one customer's deliveries over a billing period."""
    period: BillingPeriod
    lines: list = field(default_factory=list)
    total_quantity: Decimal = Decimal('0')
    total_amount: Decimal = Decimal('0')


class InvoicingService:
    """
    Service for generating invoices and recording payments.

    Usage:
        service = InvoicingService()

        # Bill one customer for February 2024
        invoice, created = service.generate_invoice(customer, month=2, year=2024)

        # Bill everybody, regenerating invoices that already exist
        result = service.generate_batch(month=2, year=2024, allow_update=True)

        # Record payment
        invoice = service.record_payment(invoice, amount=Decimal('500'), payment_method='online')
    """

    def __init__(self, user=None, today=None):
        """
        Initialize invoicing service.

        Args:
            user: User performing operations (for audit trail)
            today: Date to treat as the current date (defaults to local today)
        """
        self.user = user
        self._today = today

    @property
    def today(self):
        return self._today or timezone.localdate()

    @property
    def config(self):
        return getattr(settings, 'INVOICING', {})

    # ===== AGGREGATION =====

    def aggregate_period(self, customer, period):
        """
        Sum a customer's delivery records over a billing period.

        Args:
            customer: Customer instance
            period: BillingPeriod

        Returns:
            PeriodTotals with one line per record, ascending by date

        Raises:
            NoRecordsFound: If the customer has no records in the period
        """
        records = DeliveryRecord.objects.filter(
            customer=customer,
            date__gte=period.start,
            date__lte=period.end,
        ).order_by('date')

        totals = PeriodTotals(period=period)
        for record in records:
            totals.total_quantity += record.total_quantity
            totals.total_amount += record.total_amount
            totals.lines.append({
                'date': record.date,
                'morning_quantity': record.morning_quantity,
                'evening_quantity': record.evening_quantity,
                'daily_quantity': record.total_quantity,
                'price': record.price,
                'daily_amount': record.total_amount,
            })

        if not totals.lines:
            raise NoRecordsFound(customer, period)
        return totals

    # ===== INVOICE GENERATION =====

    def find_existing(self, customer, period):
        """Invoice of this customer whose dates overlap the period, if any."""
        return Invoice.objects.filter(
            customer=customer,
            start_date__lte=period.end,
            end_date__gte=period.start,
        ).first()

    def check_period_closed(self, period):
        """Raise BillingPeriodOpen if the period is the still-running current month."""
        try:
            period.ensure_closed(self.today, self.config.get('CLOSE_WINDOW_DAYS', 2))
        except BillingPeriodOpen as e:
            logger.warning(f'Refused to bill {period}: {e.days_remaining} days remaining')
            raise

    def generate_invoice(self, customer, month, year, allow_update=False):
        """
        Create or regenerate a customer's invoice for one month.

        Args:
            customer: Customer instance
            month: Month number (1-12)
            year: Four-digit year
            allow_update: Regenerate an existing invoice instead of refusing

        Returns:
            tuple: (Invoice, created) where created is False for an update

        Raises:
            ValidationError: If month/year is invalid
            BillingPeriodOpen: If the month is still running
            DuplicatePeriod: If an invoice exists and allow_update is False
            NoRecordsFound: If there is nothing to bill
            RegenerationConflict: If the new total is below the amount paid
        """
        period = BillingPeriod.for_month(month, year)
        self.check_period_closed(period)
        return self._generate_for_period(customer, period, allow_update)

    def _generate_for_period(self, customer, period, allow_update):
        with transaction.atomic():
            # Serializes invoice mutations per customer
            Customer.objects.select_for_update().filter(pk=customer.pk).first()

            existing = self.find_existing(customer, period)
            if existing and not allow_update:
                logger.warning(
                    f'Invoice {existing.invoice_number} already covers {period} '
                    f'for customer {customer.customer_no}'
                )
                raise DuplicatePeriod(existing)

            totals = self.aggregate_period(customer, period)

            if existing:
                invoice = self._apply_totals(existing, totals)
                logger.info(
                    f'Updated invoice {invoice.invoice_number} for customer '
                    f'{customer.customer_no} ({period}): {invoice.total_amount}'
                )
                return invoice, False

            invoice = Invoice(
                customer=customer,
                invoice_number=next_invoice_number(self.today),
                start_date=period.start,
                end_date=period.end,
                due_date=period.end + timedelta(days=self.config.get('DUE_DAYS', 15)),
                total_quantity=totals.total_quantity,
                total_amount=totals.total_amount,
            )
            invoice.save(as_of=self.today)
            self._replace_lines(invoice, totals)
            logger.info(
                f'Created invoice {invoice.invoice_number} for customer '
                f'{customer.customer_no} ({period}): {invoice.total_amount}'
            )
            return invoice, True

    def _apply_totals(self, invoice, totals):
        """Overwrite an invoice's snapshot with freshly aggregated totals."""
        if invoice.amount_paid > totals.total_amount:
            raise RegenerationConflict(invoice, totals.total_amount)

        invoice.total_quantity = totals.total_quantity
        invoice.total_amount = totals.total_amount
        invoice.end_date = totals.period.end
        invoice.save(as_of=self.today)
        self._replace_lines(invoice, totals)
        return invoice

    def _replace_lines(self, invoice, totals):
        invoice.lines.all().delete()
        InvoiceLine.objects.bulk_create([
            InvoiceLine(invoice=invoice, **line) for line in totals.lines
        ])

    def generate_batch(self, month, year, allow_update=False):
        """
        Generate invoices for every active customer.

        The current-month guard is checked once for the whole run. After
        that each customer is processed on its own: a refusal or error is
        recorded under 'failed' and the run moves on.

        Returns:
            dict with total_processed, created/updated/failed counts and
            the itemized lists for each bucket
        """
        period = BillingPeriod.for_month(month, year)
        self.check_period_closed(period)

        created, updated, failed = [], [], []
        customers = list(Customer.active.order_by('customer_no'))

        for customer in customers:
            entry = {
                'customer': customer.pk,
                'customer_no': customer.customer_no,
                'name': customer.name,
            }
            try:
                invoice, was_created = self._generate_for_period(customer, period, allow_update)
            except DuplicatePeriod as e:
                entry.update(reason=e.message, invoice_number=e.invoice.invoice_number)
                failed.append(entry)
                continue
            except InvoicingError as e:
                entry['reason'] = e.message
                failed.append(entry)
                continue
            except ValidationError as e:
                entry['reason'] = '; '.join(e.messages)
                failed.append(entry)
                continue
            except Exception as e:
                logger.exception(f'Invoice generation failed for customer {customer.customer_no}')
                entry['reason'] = str(e)
                failed.append(entry)
                continue

            entry.update(
                invoice_id=invoice.pk,
                invoice_number=invoice.invoice_number,
                total_amount=invoice.total_amount,
            )
            (created if was_created else updated).append(entry)

        for entry in failed:
            logger.warning(f"Batch {period}: customer {entry['customer_no']} skipped: {entry['reason']}")
        logger.info(
            f'Batch {period}: {len(created)} created, {len(updated)} updated, '
            f'{len(failed)} failed of {len(customers)} customers'
        )

        return {
            'total_processed': len(customers),
            'created': len(created),
            'updated': len(updated),
            'failed': len(failed),
            'created_invoices': created,
            'updated_invoices': updated,
            'failed_invoices': failed,
        }

    # ===== STATUS MANAGEMENT =====

    def set_status(self, invoice, status):
        """
        Apply a requested status and re-derive it.

        The stored status always follows the balance/due-date rule, so a
        request that disagrees with it is overridden on save.
        """
        valid = [choice for choice, _ in Invoice.STATUS_CHOICES]
        if status not in valid:
            raise ValidationError('Invalid status')

        invoice.status = status
        invoice.save(as_of=self.today)
        if invoice.status != status:
            logger.info(
                f'Invoice {invoice.invoice_number}: requested status {status}, '
                f'derived {invoice.status}'
            )
        return invoice

    def refresh_statuses(self):
        """
        Re-derive status on unpaid invoices.

        Invoices become overdue by the passage of time alone; this catches
        those that have not been saved since their due date.

        Returns:
            int: Number of invoices whose status changed
        """
        changed = 0
        unpaid = Invoice.objects.exclude(status=Invoice.STATUS_PAID)
        for invoice in unpaid:
            previous = invoice.status
            invoice.recalculate(self.today)
            if invoice.status != previous:
                invoice.save(as_of=self.today)
                changed += 1
        return changed

    def delete_invoice(self, invoice):
        """
        Delete an invoice that has no payments.

        Raises:
            ValidationError: If any payment was recorded
        """
        if invoice.payments.exists():
            raise ValidationError(
                'Cannot delete an invoice that has recorded payments'
            )
        number = invoice.invoice_number
        invoice.delete()
        logger.info(f'Deleted invoice {number}')

    # ===== PAYMENTS =====

    def record_payment(
        self,
        invoice,
        amount,
        payment_method=Payment.METHOD_CASH,
        transaction_id='',
        notes='',
    ):
        """
        Append a payment to an invoice.

        Args:
            invoice: Invoice instance
            amount: Payment amount (Decimal), at most the current due amount
            payment_method: 'cash' or 'online'
            transaction_id: Reference; generated for non-cash payments when blank
            notes: Payment notes

        Returns:
            Invoice with the payment appended and balance/status re-derived

        Raises:
            ValidationError: If amount or method is invalid, or the
                transaction id is already used
        """
        amount = self._to_amount(amount)
        payment_method = payment_method or Payment.METHOD_CASH
        if payment_method not in dict(Payment.PAYMENT_METHOD_CHOICES):
            raise ValidationError(f"Invalid payment method '{payment_method}'")

        with transaction.atomic():
            Customer.objects.select_for_update().filter(pk=invoice.customer_id).first()
            invoice = Invoice.objects.select_for_update().select_related('customer').get(pk=invoice.pk)

            if amount > invoice.due_amount:
                raise ValidationError(
                    f'Payment amount exceeds due amount. Maximum payment allowed: {invoice.due_amount}'
                )

            if transaction_id:
                if Payment.objects.filter(transaction_id=transaction_id).exists():
                    raise ValidationError(f"Transaction id '{transaction_id}' is already recorded")
            elif payment_method != Payment.METHOD_CASH:
                transaction_id = next_transaction_id(invoice.customer, self.today.year)

            Payment.objects.create(
                invoice=invoice,
                amount=amount,
                payment_method=payment_method,
                transaction_id=transaction_id or '',
                notes=notes or '',
            )
            invoice.amount_paid += amount
            invoice.save(as_of=self.today)

        logger.info(
            f'Recorded {payment_method} payment of {amount} on {invoice.invoice_number}; '
            f'due now {invoice.due_amount}'
        )
        return invoice

    # ===== HELPERS =====

    def _to_amount(self, amount):
        """Coerce input to a positive two-place Decimal."""
        try:
            amount = Decimal(str(amount))
            quantized = amount.quantize(Decimal('0.01'))
        except (ArithmeticError, ValueError, TypeError):
            raise ValidationError('Valid payment amount is required')
        if quantized != amount:
            raise ValidationError('Payment amount cannot have more than two decimal places')
        if quantized <= 0:
            raise ValidationError('Valid payment amount is required')
        return quantized
