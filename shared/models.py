# shared/models.py
"""
Abstract base models for the entire application.

TimestampMixin: Adds created_at and updated_at timestamps
ActiveMixin: Adds an is_active flag plus an `active` manager
"""
from django.db import models
from .managers import ActiveManager


class TimestampMixin(models.Model):
    """
    Abstract base model that adds timestamp tracking.

    Provides:
    - created_at: Set once when record is created
    - updated_at: Updated every time record is saved
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ActiveMixin(models.Model):
    """
    Abstract base model for records that can be switched off without deletion.

    Example:
        class Customer(ActiveMixin, TimestampMixin):
            name = models.CharField(max_length=255)

        Customer.objects.all()  # Every customer
        Customer.active.all()   # Only customers with is_active=True
    """
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive records are kept but excluded from daily work"
    )

    objects = models.Manager()
    active = ActiveManager()

    class Meta:
        abstract = True
