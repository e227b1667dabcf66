# apps/documents/tests.py
"""
Tests for the monthly statement PDF.
"""
from datetime import date
from decimal import Decimal
from unittest import mock
from django.test import TestCase, override_settings

from apps.customers.models import Customer
from apps.documents.pdf import PDFService
from apps.invoicing.services import InvoicingService
from apps.invoicing.tests.test_services import add_month_records


class StatementContextTestCase(TestCase):
    """Tests for the statement template context."""

    @classmethod
    def setUpTestData(cls):
        cls.customer = Customer.objects.create(
            customer_no=7,
            name='Mehul Patel',
            phone_no='9825012345',
            address='12 Station Road',
            price=Decimal('42'),
        )
        add_month_records(cls.customer, 2024, 2, 29)
        cls.svc = InvoicingService(today=date(2024, 3, 5))
        cls.invoice, _ = cls.svc.generate_invoice(cls.customer, 2, 2024)

    def test_grid_has_31_days_in_three_columns(self):
        context = PDFService.statement_context(self.invoice)
        grid = context['grid']

        self.assertEqual([len(column) for column in grid], [10, 10, 11])
        self.assertEqual(grid[0][0]['day'], 1)
        self.assertEqual(grid[2][-1]['day'], 31)
        self.assertEqual(grid[0][0]['morning'], Decimal('1.5'))
        self.assertEqual(grid[0][0]['evening'], Decimal('0.5'))

    def test_days_past_month_end_are_blank(self):
        grid = PDFService.statement_context(self.invoice)['grid']
        for row in grid[2][9:]:
            self.assertEqual(row['morning'], '')
            self.assertEqual(row['evening'], '')

    def test_price_comes_from_billed_lines(self):
        context = PDFService.statement_context(self.invoice)
        self.assertEqual(context['price'], Decimal('40'))

    def test_totals_and_header(self):
        self.svc.record_payment(self.invoice, Decimal('1000'))
        self.invoice.refresh_from_db()

        context = PDFService.statement_context(self.invoice)

        self.assertEqual(context['invoice']['number'], self.invoice.invoice_number)
        self.assertEqual(context['customer']['customer_no'], 7)
        self.assertEqual(context['totals']['amount'], Decimal('2320'))
        self.assertEqual(context['totals']['paid'], Decimal('1000'))
        self.assertEqual(context['totals']['due'], Decimal('1320'))

    @override_settings(INVOICING={'BUSINESS_NAME': 'Test Dairy', 'STATEMENT_UPI_ID': 'test@upi'})
    def test_business_details_from_settings(self):
        business = PDFService.statement_context(self.invoice)['business']
        self.assertEqual(business['name'], 'Test Dairy')
        self.assertEqual(business['upi_id'], 'test@upi')
        self.assertEqual(business['contacts'], [])

    def test_statement_does_not_modify_invoice(self):
        before = self.invoice.history.count()
        PDFService.statement_context(self.invoice)
        self.assertEqual(self.invoice.history.count(), before)

    @mock.patch('apps.documents.pdf._get_weasyprint_html')
    def test_render_invoice_statement(self, mock_html_cls):
        html = mock_html_cls.return_value.return_value
        html.write_pdf.side_effect = lambda target: target.write(b'%PDF-1.4')

        pdf = PDFService.render_invoice_statement(self.invoice)

        self.assertEqual(pdf, b'%PDF-1.4')
        rendered = mock_html_cls.return_value.call_args.kwargs['string']
        self.assertIn(self.invoice.invoice_number, rendered)
        self.assertIn('Mehul Patel', rendered)
