import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('customers', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InvoiceSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=30, unique=True)),
                ('last_value', models.PositiveIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name='Invoice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('invoice_number', models.CharField(help_text='Invoice number (INV-YY-MM-NNNN, assigned once)', max_length=30, unique=True)),
                ('start_date', models.DateField(help_text='First day of the billing period')),
                ('end_date', models.DateField(help_text='Last day of the billing period (inclusive)')),
                ('due_date', models.DateField(help_text='Payment due date')),
                ('total_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Litres delivered in the period', max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, default=0, help_text='Total invoice amount', max_digits=12)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=0, help_text='Amount paid to date', max_digits=12)),
                ('due_amount', models.DecimalField(decimal_places=2, default=0, help_text='Total amount minus amount paid (derived)', max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('partially_paid', 'Partially Paid'), ('paid', 'Paid'), ('overdue', 'Overdue')], default='pending', help_text='Invoice status (derived)', max_length=20)),
                ('notes', models.TextField(blank=True, help_text='Invoice notes')),
                ('customer', models.ForeignKey(help_text='Customer being billed', on_delete=django.db.models.deletion.PROTECT, related_name='invoices', to='customers.customer')),
            ],
            options={
                'verbose_name': 'Invoice',
                'verbose_name_plural': 'Invoices',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['customer', 'start_date', 'end_date'], name='invoice_customer_period_idx'),
                    models.Index(fields=['status', 'due_date'], name='invoice_status_due_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('customer', 'start_date'), name='unique_invoice_per_customer_period'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HistoricalInvoice',
            fields=[
                ('id', models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name='ID')),
                ('created_at', models.DateTimeField(blank=True, editable=False)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('invoice_number', models.CharField(db_index=True, help_text='Invoice number (INV-YY-MM-NNNN, assigned once)', max_length=30)),
                ('start_date', models.DateField(help_text='First day of the billing period')),
                ('end_date', models.DateField(help_text='Last day of the billing period (inclusive)')),
                ('due_date', models.DateField(help_text='Payment due date')),
                ('total_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Litres delivered in the period', max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, default=0, help_text='Total invoice amount', max_digits=12)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=0, help_text='Amount paid to date', max_digits=12)),
                ('due_amount', models.DecimalField(decimal_places=2, default=0, help_text='Total amount minus amount paid (derived)', max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('partially_paid', 'Partially Paid'), ('paid', 'Paid'), ('overdue', 'Overdue')], default='pending', help_text='Invoice status (derived)', max_length=20)),
                ('notes', models.TextField(blank=True, help_text='Invoice notes')),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('customer', models.ForeignKey(blank=True, db_constraint=False, help_text='Customer being billed', null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='customers.customer')),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'historical Invoice',
                'verbose_name_plural': 'historical Invoices',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name='InvoiceLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(help_text='Delivery date')),
                ('morning_quantity', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('evening_quantity', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('daily_quantity', models.DecimalField(decimal_places=2, help_text='Total litres for the day', max_digits=8)),
                ('price', models.DecimalField(decimal_places=2, help_text='Price per litre on that date', max_digits=10)),
                ('daily_amount', models.DecimalField(decimal_places=2, help_text='Amount charged for the day', max_digits=12)),
                ('invoice', models.ForeignKey(help_text='Parent invoice', on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='invoicing.invoice')),
            ],
            options={
                'verbose_name': 'Invoice Line',
                'verbose_name_plural': 'Invoice Lines',
                'ordering': ['date'],
                'constraints': [
                    models.UniqueConstraint(fields=('invoice', 'date'), name='unique_invoice_line_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, help_text='Payment amount', max_digits=12)),
                ('payment_date', models.DateTimeField(default=django.utils.timezone.now, help_text='When the payment was received')),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('online', 'Online')], default='cash', help_text='Payment method', max_length=10)),
                ('transaction_id', models.CharField(blank=True, help_text='Transaction reference ({year}_{customer_no}_{seq} when generated)', max_length=50)),
                ('notes', models.TextField(blank=True, help_text='Payment notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('invoice', models.ForeignKey(help_text='Invoice being paid', on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='invoicing.invoice')),
            ],
            options={
                'verbose_name': 'Payment',
                'verbose_name_plural': 'Payments',
                'ordering': ['id'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('transaction_id', ''), _negated=True), fields=('transaction_id',), name='unique_payment_transaction_id'),
                ],
            },
        ),
    ]
