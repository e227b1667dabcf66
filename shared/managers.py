# shared/managers.py
"""
Manager that scopes queries to active records.
"""
from django.db import models


class ActiveManager(models.Manager):
    """
    Manager that automatically filters queries to is_active=True.

    Usage:
        class MyModel(ActiveMixin):
            pass

        MyModel.active.all()  # Only active rows
        MyModel.objects.all()  # Everything, active or not
    """

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)
