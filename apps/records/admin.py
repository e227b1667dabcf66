# apps/records/admin.py
"""
Django admin configuration for DeliveryRecord.
"""
from django.contrib import admin
from .models import DeliveryRecord


@admin.register(DeliveryRecord)
class DeliveryRecordAdmin(admin.ModelAdmin):
    """Admin interface for DeliveryRecord."""
    list_display = [
        'date', 'customer', 'morning_quantity', 'evening_quantity',
        'total_quantity', 'price', 'total_amount',
    ]
    list_filter = ['date']
    search_fields = ['customer__name', 'customer__phone_no']
    raw_id_fields = ['customer']
    date_hierarchy = 'date'
