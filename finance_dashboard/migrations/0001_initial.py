from decimal import Decimal

from django.db import migrations, models


def _ledger_fields():
    return [
        ('counterparty_code', models.IntegerField(default=0)),
        ('counterparty_name', models.CharField(blank=True, max_length=255, null=True)),
        ('original_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
        ('outstanding_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
        ('due_date', models.DateField(blank=True, null=True)),
        ('issue_date', models.DateField(blank=True, null=True)),
        ('settlement_date', models.DateField(blank=True, null=True)),
        ('ledger_entry_number', models.IntegerField(default=0)),
        ('document_type_code', models.CharField(blank=True, max_length=20, null=True)),
        ('document_number', models.CharField(blank=True, max_length=100, null=True)),
        ('installment', models.CharField(blank=True, max_length=20, null=True)),
        ('internal_document_id', models.CharField(blank=True, max_length=100, null=True)),
        ('nature', models.CharField(default='C', max_length=1)),
        ('reconciled_flag', models.CharField(default='N', max_length=1)),
        ('note', models.CharField(blank=True, max_length=100, null=True)),
        ('synced_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='PayableRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *_ledger_fields(),
                ('branch_code', models.IntegerField(default=0)),
                ('org_code', models.IntegerField(default=0)),
                ('document_date', models.DateField(blank=True, null=True)),
                ('payable_number', models.IntegerField(default=0)),
                ('source_counter', models.IntegerField(default=0)),
                ('source_number', models.IntegerField(default=0)),
                ('amount_settled', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('interest_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('settlement_account_code', models.IntegerField(default=0)),
            ],
            options={
                'db_table': 'rel_financeiro',
                'ordering': ['-due_date', '-id'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['due_date'], name='payable_due_date_idx'),
                    models.Index(fields=['settlement_date'], name='payable_settlement_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('branch_code', 'ledger_entry_number'), name='uniq_payable_branch_entry'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReceivableRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *_ledger_fields(),
                ('org_code', models.IntegerField(default=0)),
                ('entry_date', models.DateField(blank=True, null=True)),
                ('receivable_number', models.IntegerField(default=0)),
            ],
            options={
                'db_table': 'rel_contas_receber',
                'ordering': ['-due_date', '-id'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['due_date'], name='receivable_due_date_idx'),
                    models.Index(fields=['settlement_date'], name='receivable_settlement_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('ledger_entry_number',), name='uniq_receivable_entry'),
                ],
            },
        ),
    ]
