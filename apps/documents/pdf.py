# apps/documents/pdf.py
"""
PDF generation service using WeasyPrint.

Renders Django templates to HTML, then converts to PDF bytes.
"""
import logging
from io import BytesIO
from django.conf import settings
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def _get_weasyprint_html():
    """Lazy import of WeasyPrint to avoid startup crash when its system libs are missing."""
    try:
        from weasyprint import HTML
        return HTML
    except (ImportError, OSError) as e:
        raise RuntimeError(
            "WeasyPrint is not available. Install its system dependencies "
            "(https://doc.courtbouillon.org/weasyprint/stable/first_steps.html). "
            f"Original error: {e}"
        )


class PDFService:
    """
    Service for generating PDF documents from Django templates.

    Usage:
        pdf_bytes = PDFService.render_to_pdf('documents/invoice_statement.html', context)
        pdf_bytes = PDFService.render_invoice_statement(invoice)
    """

    @staticmethod
    def render_to_pdf(template_name, context):
        """
        Render a Django template to PDF bytes.

        Args:
            template_name: Path to Django template
            context: Template context dict

        Returns:
            bytes: PDF file content
        """
        HTML = _get_weasyprint_html()
        html_string = render_to_string(template_name, context)
        html = HTML(string=html_string)
        pdf_buffer = BytesIO()
        html.write_pdf(target=pdf_buffer)
        return pdf_buffer.getvalue()

    @staticmethod
    def statement_context(invoice):
        """
        Template context for a monthly statement.

        Reads the invoice, its lines and customer; never modifies them.
        The delivery grid always has 31 rows so every month prints on the
        same form; days past month end stay blank.
        """
        config = getattr(settings, 'INVOICING', {})
        customer = invoice.customer
        lines = list(invoice.lines.all())
        by_day = {line.date.day: line for line in lines}

        days = []
        for day in range(1, 32):
            line = by_day.get(day)
            days.append({
                'day': day,
                'morning': line.morning_quantity if line else '',
                'evening': line.evening_quantity if line else '',
            })

        price = lines[-1].price if lines else customer.price

        return {
            'business': {
                'name': config.get('BUSINESS_NAME', ''),
                'contacts': config.get('BUSINESS_CONTACTS', []),
                'upi_id': config.get('STATEMENT_UPI_ID', ''),
            },
            'invoice': {
                'number': invoice.invoice_number,
                'period': invoice.start_date,
                'start_date': invoice.start_date,
                'end_date': invoice.end_date,
                'due_date': invoice.due_date,
                'status': invoice.get_status_display(),
                'notes': invoice.notes,
            },
            'customer': {
                'customer_no': customer.customer_no,
                'name': customer.name,
                'phone_no': customer.phone_no,
                'address': customer.address,
            },
            'price': price,
            # Three side-by-side columns of the month: 1-10, 11-20, 21-31
            'grid': [days[0:10], days[10:20], days[20:31]],
            'totals': {
                'quantity': invoice.total_quantity,
                'amount': invoice.total_amount,
                'paid': invoice.amount_paid,
                'due': invoice.due_amount,
            },
        }

    @classmethod
    def render_invoice_statement(cls, invoice):
        """
        Generate the monthly statement PDF for an Invoice.

        Args:
            invoice: Invoice model instance (customer and lines available)

        Returns:
            bytes: PDF file content
        """
        context = cls.statement_context(invoice)
        logger.debug(f'Rendering statement for {invoice.invoice_number}')
        return cls.render_to_pdf('documents/invoice_statement.html', context)
