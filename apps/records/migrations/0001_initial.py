import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('customers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DeliveryRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('date', models.DateField(db_index=True, help_text='Delivery date')),
                ('morning_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Morning delivery (litres)', max_digits=8)),
                ('evening_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Evening delivery (litres)', max_digits=8)),
                ('total_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Total litres for the day', max_digits=8)),
                ('price', models.DecimalField(decimal_places=2, help_text='Price per litre on this date', max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, help_text='Amount charged for the day', max_digits=12)),
                ('customer', models.ForeignKey(help_text='Customer the milk was delivered to', on_delete=django.db.models.deletion.PROTECT, related_name='delivery_records', to='customers.customer')),
            ],
            options={
                'verbose_name': 'Delivery Record',
                'verbose_name_plural': 'Delivery Records',
                'ordering': ['date'],
                'indexes': [models.Index(fields=['customer', 'date'], name='record_customer_date_idx')],
                'constraints': [models.UniqueConstraint(fields=('customer', 'date'), name='unique_delivery_record_per_day')],
            },
        ),
    ]
