# apps/api/v1/views/invoicing.py
"""
ViewSet for monthly invoices: generation, listing, payments, summaries
and statement PDFs.
"""
import logging
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.customers.models import Customer
from apps.documents.pdf import PDFService
from apps.invoicing import reporting
from apps.invoicing.exceptions import (
    BillingPeriodOpen, DuplicatePeriod, InvoicingError, NoRecordsFound,
)
from apps.invoicing.models import Invoice
from apps.invoicing.periods import BillingPeriod
from apps.invoicing.services import InvoicingService
from apps.api.v1.filters import InvoiceFilter
from apps.api.v1.serializers.invoicing import (
    CheckExistingSerializer, GenerateInvoiceSerializer,
    InvoiceDetailSerializer, InvoiceListSerializer, InvoiceStatusSerializer,
    RecordPaymentSerializer,
)

logger = logging.getLogger(__name__)


def _error_response(exc):
    """Map an invoicing refusal or store failure to an HTTP response."""
    if isinstance(exc, DuplicatePeriod):
        return Response(
            {
                'detail': exc.message,
                'invoice_id': exc.invoice.pk,
                'invoice_number': exc.invoice.invoice_number,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, BillingPeriodOpen):
        return Response(
            {'detail': exc.message, 'days_remaining': exc.days_remaining},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, NoRecordsFound):
        return Response({'detail': exc.message}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, InvoicingError):
        return Response({'detail': exc.message}, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, DjangoValidationError):
        return Response({'detail': ' '.join(exc.messages)}, status=status.HTTP_400_BAD_REQUEST)

    logger.error(f'Invoice store error: {exc}')
    return Response({'detail': str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _get_customer(customer_id):
    try:
        return Customer.objects.get(pk=customer_id)
    except (Customer.DoesNotExist, ValueError):
        raise NotFound('Customer not found')


@extend_schema_view(
    list=extend_schema(tags=['invoicing'], summary='List invoices'),
    retrieve=extend_schema(tags=['invoicing'], summary='Get invoice details'),
    destroy=extend_schema(tags=['invoicing'], summary='Delete an invoice without payments'),
)
class InvoiceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for Invoice model.

    Invoices are never created or edited directly; they come from the
    generate actions and change through payments.
    """
    filterset_class = InvoiceFilter
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        return Invoice.objects.select_related('customer').prefetch_related(
            'lines', 'payments'
        ).order_by('-created_at', '-pk')

    def get_serializer_class(self):
        if self.action in ('list', 'customer_invoices'):
            return InvoiceListSerializer
        return InvoiceDetailSerializer

    def handle_exception(self, exc):
        if isinstance(exc, (InvoicingError, DjangoValidationError, DatabaseError)):
            return _error_response(exc)
        return super().handle_exception(exc)

    def _detail(self, invoice, status_code=status.HTTP_200_OK):
        serializer = InvoiceDetailSerializer(invoice, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    @extend_schema(
        tags=['invoicing'],
        summary='Check for an invoice overlapping a month',
        parameters=[CheckExistingSerializer],
    )
    @action(detail=False, methods=['get'], url_path='check-existing')
    def check_existing(self, request):
        """Report whether the customer already has an invoice for the month."""
        params = CheckExistingSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data

        svc = InvoicingService(request.user)
        period = BillingPeriod.for_month(data['month'], data['year'])
        existing = svc.find_existing(data['customer_id'], period)
        if existing is None:
            return Response({'exists': False}, status=status.HTTP_404_NOT_FOUND)

        return Response({
            'exists': True,
            'id': existing.pk,
            'invoice_number': existing.invoice_number,
            'status': existing.status,
            'total_amount': existing.total_amount,
            'amount_paid': existing.amount_paid,
            'due_amount': existing.due_amount,
            'updated_at': existing.updated_at,
        })

    @extend_schema(
        tags=['invoicing'],
        summary='Generate or update one customer\'s monthly invoice',
        request=GenerateInvoiceSerializer,
        responses={200: InvoiceDetailSerializer, 201: InvoiceDetailSerializer},
    )
    @action(detail=False, methods=['post'], url_path=r'generate/customer/(?P<customer_id>\d+)')
    def generate_for_customer(self, request, customer_id=None):
        """Create the invoice, or regenerate it when update_existing is set."""
        body = GenerateInvoiceSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        customer = _get_customer(customer_id)
        svc = InvoicingService(request.user)
        invoice, created = svc.generate_invoice(
            customer, data['month'], data['year'], allow_update=data['update_existing'],
        )
        invoice = self.get_queryset().get(pk=invoice.pk)
        return self._detail(invoice, status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @extend_schema(
        tags=['invoicing'],
        summary='Generate or update invoices for all active customers',
        request=GenerateInvoiceSerializer,
        responses={200: {'type': 'object'}},
    )
    @action(detail=False, methods=['post'], url_path='generate/batch')
    def generate_batch(self, request):
        """Run generation for every active customer; failures are reported, not raised."""
        body = GenerateInvoiceSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        svc = InvoicingService(request.user)
        result = svc.generate_batch(data['month'], data['year'], allow_update=data['update_existing'])
        return Response(result)

    @extend_schema(tags=['invoicing'], summary='Set invoice status', request=InvoiceStatusSerializer)
    @action(detail=True, methods=['put'], url_path='status')
    def set_status(self, request, pk=None):
        """Apply a status; the stored value is re-derived from the balance."""
        invoice = self.get_object()
        body = InvoiceStatusSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        svc = InvoicingService(request.user)
        invoice = svc.set_status(invoice, body.validated_data['status'])
        return Response({'success': True, 'invoice': InvoiceDetailSerializer(invoice).data})

    @extend_schema(
        tags=['invoicing'],
        summary='Record a payment',
        request=RecordPaymentSerializer,
        responses={200: InvoiceDetailSerializer},
    )
    @action(detail=True, methods=['post'], url_path='payment')
    def payment(self, request, pk=None):
        """Append a payment to this invoice."""
        invoice = self.get_object()
        body = RecordPaymentSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        svc = InvoicingService(request.user)
        invoice = svc.record_payment(
            invoice,
            amount=data['amount'],
            payment_method=data['payment_method'],
            transaction_id=data['transaction_id'],
            notes=data['notes'],
        )
        invoice = self.get_queryset().get(pk=invoice.pk)
        return self._detail(invoice)

    def destroy(self, request, *args, **kwargs):
        invoice = self.get_object()
        InvoicingService(request.user).delete_invoice(invoice)
        return Response({'detail': 'Invoice removed'})

    @extend_schema(tags=['invoicing'], summary='List invoices of one customer')
    @action(detail=False, methods=['get'], url_path=r'customer/(?P<customer_id>\d+)')
    def customer_invoices(self, request, customer_id=None):
        """Paginated invoices of a single customer, newest first."""
        customer = _get_customer(customer_id)
        queryset = self.get_queryset().filter(customer=customer)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = InvoiceListSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(InvoiceListSerializer(queryset, many=True).data)

    @extend_schema(tags=['invoicing'], summary='Invoice totals for one customer')
    @action(detail=False, methods=['get'], url_path=r'customer/(?P<customer_id>\d+)/summary')
    def customer_summary(self, request, customer_id=None):
        """Totals, open counts and recent invoices for one customer."""
        customer = _get_customer(customer_id)
        data = reporting.get_customer_summary(customer)
        data['recent_invoices'] = InvoiceListSerializer(data['recent_invoices'], many=True).data
        return Response(data)

    @extend_schema(tags=['invoicing'], summary='Billing dashboard')
    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        """System totals, six-month trend, recent invoices and top customers."""
        data = reporting.get_dashboard_stats()
        data['recent_invoices'] = InvoiceListSerializer(data['recent_invoices'], many=True).data
        return Response(data)

    @extend_schema(tags=['invoicing'], summary='Download monthly statement PDF')
    @action(detail=True, methods=['get'], url_path='modern-pdf')
    def modern_pdf(self, request, pk=None):
        """Render the statement for this invoice as a PDF attachment."""
        invoice = self.get_object()
        pdf_bytes = PDFService.render_invoice_statement(invoice)
        response = HttpResponse(pdf_bytes, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="invoice-{invoice.invoice_number}-modern.pdf"'
        return response
