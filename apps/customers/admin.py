# apps/customers/admin.py
"""
Django admin configuration for Customer.
"""
from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    """Admin interface for Customer."""
    list_display = ['customer_no', 'name', 'phone_no', 'price', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'phone_no', 'address']
    readonly_fields = ['customer_no', 'created_at', 'updated_at']
