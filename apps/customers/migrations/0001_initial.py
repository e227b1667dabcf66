from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Inactive records are kept but excluded from daily work')),
                ('customer_no', models.PositiveIntegerField(blank=True, help_text='Sequential customer number', unique=True)),
                ('name', models.CharField(db_index=True, help_text='Customer name', max_length=200)),
                ('phone_no', models.CharField(help_text='Contact phone number', max_length=20, unique=True)),
                ('address', models.TextField(help_text='Delivery address')),
                ('price', models.DecimalField(decimal_places=2, help_text='Current price per litre', max_digits=10)),
                ('morning_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Default morning delivery (litres)', max_digits=8)),
                ('evening_quantity', models.DecimalField(decimal_places=2, default=0, help_text='Default evening delivery (litres)', max_digits=8)),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'ordering': ['customer_no'],
            },
        ),
    ]
