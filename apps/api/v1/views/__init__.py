# API Views
from .invoicing import InvoiceViewSet
