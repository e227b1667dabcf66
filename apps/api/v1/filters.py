# apps/api/v1/filters.py
"""
FilterSets for list endpoints.
"""
import django_filters
from django.utils import timezone

from apps.invoicing.models import Invoice
from apps.invoicing.periods import BillingPeriod


class InvoiceFilter(django_filters.FilterSet):
    """
    Invoice list filters.

    month/year select invoices whose period overlaps that month; year
    alone selects invoices overlapping any part of that year. month
    without year uses the current year.
    """
    customer_id = django_filters.NumberFilter(field_name='customer_id')
    status = django_filters.ChoiceFilter(choices=Invoice.STATUS_CHOICES)
    month = django_filters.NumberFilter(method='filter_period')
    year = django_filters.NumberFilter(method='filter_period')

    class Meta:
        model = Invoice
        fields = ['customer_id', 'status', 'month', 'year']

    def filter_period(self, queryset, name, value):
        month = self.form.cleaned_data.get('month')
        year = self.form.cleaned_data.get('year')

        if name == 'year' and month:
            # Applied together with month
            return queryset

        if month:
            period = BillingPeriod.for_month(month, year or timezone.localdate().year)
            start, end = period.start, period.end
        else:
            start = BillingPeriod.for_month(1, year).start
            end = BillingPeriod.for_month(12, year).end

        return queryset.filter(start_date__lte=end, end_date__gte=start)
