# apps/api/tests/test_invoicing.py
"""
Tests for the invoice API endpoints.

Test coverage:
- Generation: single customer, batch, duplicate and open-month refusals
- Listing: pagination, filters, per-customer list
- Payments, status, deletion
- Summary, dashboard and statement PDF
"""
from decimal import Decimal
from datetime import date
from unittest import mock
from django.test import TestCase
from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework.test import APIClient
from rest_framework import status

from apps.customers.models import Customer
from apps.invoicing.models import Invoice
from apps.invoicing.services import InvoicingService
from apps.invoicing.tests.test_services import add_month_records

User = get_user_model()

BASE_URL = '/api/v1/invoices/'


# =============================================================================
# BASE TEST CLASS
# =============================================================================

class InvoiceAPITestCase(TestCase):
    """Base test case with a staff client and one billable customer."""

    today = date(2024, 3, 5)

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(
            username='admin',
            email='admin@test.com',
            password='testpass123',
            is_staff=True,
        )
        cls.customer = Customer.objects.create(
            customer_no=7,
            name='Mehul Patel',
            phone_no='9825012345',
            address='12 Station Road',
            price=Decimal('40'),
        )
        add_month_records(cls.customer, 2024, 2, 29)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        patcher = mock.patch('django.utils.timezone.localdate', return_value=self.today)
        patcher.start()
        self.addCleanup(patcher.stop)

    def create_invoice(self, customer=None, month=2, year=2024):
        invoice, _ = InvoicingService(today=self.today).generate_invoice(
            customer or self.customer, month, year,
        )
        return invoice


# =============================================================================
# AUTHENTICATION
# =============================================================================

class InvoiceAuthTest(InvoiceAPITestCase):

    def test_anonymous_rejected(self):
        response = APIClient().get(BASE_URL)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_non_staff_rejected(self):
        user = User.objects.create_user(username='driver', password='testpass123')
        client = APIClient()
        client.force_authenticate(user=user)
        response = client.get(BASE_URL)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


# =============================================================================
# GENERATION
# =============================================================================

class GenerateInvoiceAPITest(InvoiceAPITestCase):

    def url(self, customer_id=None):
        return f'{BASE_URL}generate/customer/{customer_id or self.customer.pk}/'

    def test_generate_creates_invoice(self):
        response = self.client.post(self.url(), {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice_number'], 'INV-24-03-0001')
        self.assertEqual(response.data['total_amount'], '2320.00')
        self.assertEqual(response.data['total_quantity'], '58.00')
        self.assertEqual(response.data['status'], Invoice.STATUS_PENDING)
        self.assertEqual(response.data['due_date'], '2024-03-15')
        self.assertEqual(len(response.data['items']), 29)
        self.assertEqual(response.data['customer']['customer_no'], 7)

    def test_duplicate_returns_existing_invoice(self):
        invoice = self.create_invoice()

        response = self.client.post(self.url(), {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['detail'], 'Invoice already exists for this period')
        self.assertEqual(response.data['invoice_id'], invoice.pk)
        self.assertEqual(response.data['invoice_number'], invoice.invoice_number)

    def test_update_existing_returns_200(self):
        invoice = self.create_invoice()

        response = self.client.post(
            self.url(), {'month': 2, 'year': 2024, 'update_existing': True}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], invoice.pk)
        self.assertEqual(response.data['invoice_number'], invoice.invoice_number)

    def test_no_records_returns_404(self):
        response = self.client.post(self.url(), {'month': 1, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'No records found for this period')

    def test_open_month_returns_days_remaining(self):
        with mock.patch('django.utils.timezone.localdate', return_value=date(2024, 2, 24)):
            response = self.client.post(self.url(), {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['days_remaining'], 5)
        self.assertFalse(Invoice.objects.exists())

    def test_invalid_month_rejected(self):
        response = self.client.post(self.url(), {'month': 13, 'year': 2024}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_year_before_supported_range_rejected(self):
        response = self.client.post(self.url(), {'month': 2, 'year': 1999}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid year', str(response.data))
        self.assertFalse(Invoice.objects.exists())

    def test_store_error_returns_500_with_message(self):
        with mock.patch(
            'apps.api.v1.views.invoicing.InvoicingService.generate_invoice',
            side_effect=DatabaseError('boom'),
        ):
            response = self.client.post(self.url(), {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'detail': 'boom'})

    def test_missing_year_rejected(self):
        response = self.client.post(self.url(), {'month': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_customer_returns_404(self):
        response = self.client.post(self.url(999999), {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'Customer not found')


class GenerateBatchAPITest(InvoiceAPITestCase):

    url = f'{BASE_URL}generate/batch/'

    def test_batch_reports_each_bucket(self):
        Customer.objects.create(
            customer_no=3, name='No Deliveries', phone_no='9000000003', address='a', price=Decimal('40'),
        )

        response = self.client.post(self.url, {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_processed'], 2)
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['failed'], 1)
        self.assertEqual(response.data['failed_invoices'][0]['customer_no'], 3)
        self.assertEqual(response.data['created_invoices'][0]['customer_no'], 7)

    def test_batch_refused_for_open_month(self):
        with mock.patch('django.utils.timezone.localdate', return_value=date(2024, 2, 10)):
            response = self.client.post(self.url, {'month': 2, 'year': 2024}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['days_remaining'], 19)


class CheckExistingAPITest(InvoiceAPITestCase):

    url = f'{BASE_URL}check-existing/'

    def test_found(self):
        invoice = self.create_invoice()

        response = self.client.get(
            self.url, {'customer_id': self.customer.pk, 'month': 2, 'year': 2024},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['exists'])
        self.assertEqual(response.data['id'], invoice.pk)
        self.assertEqual(response.data['invoice_number'], invoice.invoice_number)

    def test_not_found(self):
        self.create_invoice()

        response = self.client.get(
            self.url, {'customer_id': self.customer.pk, 'month': 3, 'year': 2024},
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'exists': False})

    def test_missing_params_rejected(self):
        response = self.client.get(self.url, {'customer_id': self.customer.pk})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


# =============================================================================
# LISTING
# =============================================================================

class InvoiceListAPITest(InvoiceAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.other = Customer.objects.create(
            customer_no=8, name='Asha Shah', phone_no='9825099999', address='4 Lake View', price=Decimal('40'),
        )
        add_month_records(cls.other, 2024, 2, 10)
        add_month_records(cls.customer, 2024, 1, 31)

    def setUp(self):
        super().setUp()
        self.feb = self.create_invoice()
        self.jan = self.create_invoice(month=1)
        self.other_feb = self.create_invoice(customer=self.other)

    def test_list_is_paginated(self):
        response = self.client.get(BASE_URL, {'limit': 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['current_page'], 1)
        self.assertEqual(len(response.data['results']), 2)

    def test_list_newest_first(self):
        response = self.client.get(BASE_URL)
        ids = [row['id'] for row in response.data['results']]
        self.assertEqual(ids, [self.other_feb.pk, self.jan.pk, self.feb.pk])

    def test_filter_by_customer(self):
        response = self.client.get(BASE_URL, {'customer_id': self.other.pk})
        self.assertEqual([row['id'] for row in response.data['results']], [self.other_feb.pk])

    def test_filter_by_month(self):
        response = self.client.get(BASE_URL, {'month': 1, 'year': 2024})
        self.assertEqual([row['id'] for row in response.data['results']], [self.jan.pk])

    def test_filter_by_year(self):
        response = self.client.get(BASE_URL, {'year': 2024})
        self.assertEqual(response.data['total'], 3)
        response = self.client.get(BASE_URL, {'year': 2023})
        self.assertEqual(response.data['total'], 0)

    def test_filter_by_status(self):
        InvoicingService(today=self.today).record_payment(self.jan, Decimal('10'))
        response = self.client.get(BASE_URL, {'status': Invoice.STATUS_PARTIALLY_PAID})
        self.assertEqual([row['id'] for row in response.data['results']], [self.jan.pk])

    def test_retrieve_includes_lines_and_payments(self):
        response = self.client.get(f'{BASE_URL}{self.jan.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 31)
        self.assertEqual(response.data['items'][0]['date'], '2024-01-01')
        self.assertEqual(response.data['payments'], [])
        self.assertEqual(response.data['customer']['address'], '12 Station Road')

    def test_retrieve_unknown_returns_404(self):
        response = self.client.get(f'{BASE_URL}999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_invoices(self):
        response = self.client.get(f'{BASE_URL}customer/{self.customer.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(
            [row['id'] for row in response.data['results']], [self.jan.pk, self.feb.pk],
        )

    def test_customer_summary(self):
        InvoicingService(today=self.today).record_payment(self.feb, Decimal('2320'))

        response = self.client.get(f'{BASE_URL}customer/{self.customer.pk}/summary/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['summary']
        self.assertEqual(summary['total_invoices'], 2)
        self.assertEqual(summary['total_amount'], Decimal('4800'))
        self.assertEqual(summary['total_paid'], Decimal('2320'))
        self.assertEqual(summary['total_due'], Decimal('2480'))
        self.assertEqual(summary['pending_invoices'], 0)
        self.assertEqual(summary['overdue_invoices'], 1)
        self.assertEqual(response.data['customer']['customer_no'], 7)
        self.assertEqual(len(response.data['recent_invoices']), 2)

    def test_dashboard(self):
        response = self.client.get(f'{BASE_URL}dashboard/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_invoices'], 3)
        self.assertEqual(response.data['summary']['pending_count'], 2)
        self.assertEqual(response.data['summary']['overdue_count'], 1)
        self.assertEqual(len(response.data['recent_invoices']), 3)
        self.assertEqual(response.data['top_customers'][0]['customer_no'], 7)
        self.assertEqual(response.data['top_customers'][0]['invoice_count'], 2)


# =============================================================================
# PAYMENTS, STATUS, DELETION
# =============================================================================

class InvoiceActionsAPITest(InvoiceAPITestCase):

    def setUp(self):
        super().setUp()
        self.invoice = self.create_invoice()
        self.detail_url = f'{BASE_URL}{self.invoice.pk}/'

    def test_online_payment(self):
        response = self.client.post(
            f'{self.detail_url}payment/', {'amount': '1000', 'payment_method': 'online'}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount_paid'], '1000.00')
        self.assertEqual(response.data['due_amount'], '1320.00')
        self.assertEqual(response.data['status'], Invoice.STATUS_PARTIALLY_PAID)
        self.assertEqual(response.data['payments'][0]['transaction_id'], '2024_7_1')

    def test_full_cash_payment(self):
        response = self.client.post(f'{self.detail_url}payment/', {'amount': '2320'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Invoice.STATUS_PAID)
        self.assertEqual(response.data['payments'][0]['payment_method'], 'cash')
        self.assertEqual(response.data['payments'][0]['transaction_id'], '')

    def test_overpayment_rejected(self):
        response = self.client.post(f'{self.detail_url}payment/', {'amount': '2400'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Maximum payment allowed', response.data['detail'])
        self.assertFalse(self.invoice.payments.exists())

    def test_negative_payment_rejected(self):
        response = self.client.post(f'{self.detail_url}payment/', {'amount': '-5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_amount_rejected(self):
        response = self.client.post(f'{self.detail_url}payment/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_set_status_is_rederived(self):
        response = self.client.put(f'{self.detail_url}status/', {'status': 'paid'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['invoice']['status'], Invoice.STATUS_PENDING)

    def test_set_status_marks_overdue_after_due_date(self):
        with mock.patch('django.utils.timezone.localdate', return_value=date(2024, 4, 1)):
            response = self.client.put(f'{self.detail_url}status/', {'status': 'pending'}, format='json')

        self.assertEqual(response.data['invoice']['status'], Invoice.STATUS_OVERDUE)

    def test_set_invalid_status_rejected(self):
        response = self.client.put(f'{self.detail_url}status/', {'status': 'void'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete(self):
        response = self.client.delete(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['detail'], 'Invoice removed')
        self.assertFalse(Invoice.objects.filter(pk=self.invoice.pk).exists())

    def test_delete_with_payment_rejected(self):
        InvoicingService(today=self.today).record_payment(self.invoice, Decimal('100'))

        response = self.client.delete(self.detail_url)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Invoice.objects.filter(pk=self.invoice.pk).exists())

    @mock.patch('apps.api.v1.views.invoicing.PDFService.render_invoice_statement')
    def test_statement_pdf(self, mock_render):
        mock_render.return_value = b'%PDF-1.4 statement'

        response = self.client.get(f'{self.detail_url}modern-pdf/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertEqual(
            response['Content-Disposition'],
            f'attachment; filename="invoice-{self.invoice.invoice_number}-modern.pdf"',
        )
        self.assertEqual(response.content, b'%PDF-1.4 statement')
        mock_render.assert_called_once()
