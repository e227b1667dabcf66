"""Management command to re-derive invoice status (marks past-due invoices overdue)."""
from django.core.management.base import BaseCommand
from apps.invoicing.services import InvoicingService


class Command(BaseCommand):
    help = 'Re-derive status on unpaid invoices so past-due ones become overdue'

    def handle(self, *args, **options):
        svc = InvoicingService()
        count = svc.refresh_statuses()
        self.stdout.write(self.style.SUCCESS(f"Done. Updated status on {count} invoices."))
