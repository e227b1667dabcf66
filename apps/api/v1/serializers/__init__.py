# API Serializers
from .invoicing import (
    InvoiceListSerializer, InvoiceDetailSerializer,
    InvoiceLineSerializer, PaymentSerializer,
)
