# apps/api/v1/serializers/invoicing.py
"""
Serializers for Invoicing models: Invoice, InvoiceLine, Payment,
plus the request bodies of the generation and payment endpoints.
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from apps.customers.models import Customer
from apps.invoicing.models import Invoice, InvoiceLine, Payment
from apps.invoicing.periods import BillingPeriod


class CustomerBriefSerializer(serializers.ModelSerializer):
    """Customer header embedded in invoice lists."""

    class Meta:
        model = Customer
        fields = ['id', 'customer_no', 'name', 'phone_no']


class CustomerDetailBriefSerializer(serializers.ModelSerializer):
    """Customer header embedded in invoice detail."""

    class Meta:
        model = Customer
        fields = ['id', 'customer_no', 'name', 'phone_no', 'address']


class InvoiceLineSerializer(serializers.ModelSerializer):
    """Serializer for InvoiceLine model."""

    class Meta:
        model = InvoiceLine
        fields = [
            'date', 'morning_quantity', 'evening_quantity',
            'daily_quantity', 'price', 'daily_amount',
        ]


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for Payment model."""

    class Meta:
        model = Payment
        fields = [
            'id', 'amount', 'payment_date', 'payment_method',
            'transaction_id', 'notes',
        ]


class InvoiceListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for Invoice list views."""
    customer = CustomerBriefSerializer(read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'customer',
            'start_date', 'end_date', 'due_date', 'status',
            'total_quantity', 'total_amount', 'amount_paid', 'due_amount',
            'created_at', 'updated_at',
        ]


class InvoiceDetailSerializer(serializers.ModelSerializer):
    """Detailed serializer for Invoice with nested lines and payments."""
    customer = CustomerDetailBriefSerializer(read_only=True)
    items = InvoiceLineSerializer(source='lines', many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'customer',
            'start_date', 'end_date', 'due_date', 'status',
            'total_quantity', 'total_amount', 'amount_paid', 'due_amount',
            'items', 'payments', 'notes',
            'created_at', 'updated_at',
        ]


class BillingPeriodSerializer(serializers.Serializer):
    """Month/year of a billing period; range rules come from BillingPeriod."""
    month = serializers.IntegerField()
    year = serializers.IntegerField()

    def validate(self, attrs):
        try:
            BillingPeriod.for_month(attrs['month'], attrs['year'])
        except DjangoValidationError as e:
            raise serializers.ValidationError({'detail': ' '.join(e.messages)})
        return attrs


class CheckExistingSerializer(BillingPeriodSerializer):
    """Query parameters for the existing-invoice check."""
    customer_id = serializers.IntegerField()


class GenerateInvoiceSerializer(BillingPeriodSerializer):
    """Request body for single-customer and batch generation."""
    update_existing = serializers.BooleanField(default=False)


class InvoiceStatusSerializer(serializers.Serializer):
    """Request body for PUT /invoices/{id}/status/."""
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES)


class RecordPaymentSerializer(serializers.Serializer):
    """Request body for POST /invoices/{id}/payment/."""
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(
        choices=Payment.PAYMENT_METHOD_CHOICES,
        default=Payment.METHOD_CASH,
    )
    transaction_id = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
