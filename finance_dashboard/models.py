from decimal import Decimal

from django.db import models


class LedgerRecord(models.Model):
    """Fields and behaviour shared by payable and receivable line items"""
    counterparty_code = models.IntegerField(default=0)
    counterparty_name = models.CharField(max_length=255, blank=True, null=True)

    original_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    outstanding_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    due_date = models.DateField(blank=True, null=True)
    issue_date = models.DateField(blank=True, null=True)
    settlement_date = models.DateField(blank=True, null=True)

    ledger_entry_number = models.IntegerField(default=0)
    document_type_code = models.CharField(max_length=20, blank=True, null=True)
    document_number = models.CharField(max_length=100, blank=True, null=True)
    installment = models.CharField(max_length=20, blank=True, null=True)
    internal_document_id = models.CharField(max_length=100, blank=True, null=True)

    # 'C' credit / 'D' debit
    nature = models.CharField(max_length=1, default='C')
    reconciled_flag = models.CharField(max_length=1, default='N')
    note = models.CharField(max_length=100, blank=True, null=True)

    synced_at = models.DateTimeField(auto_now=True)

    # Column of the upstream date used for each filter basis
    BASIS_FIELDS = {
        'due': 'due_date',
        'issue': 'issue_date',
        'settlement': 'settlement_date',
    }

    class Meta:
        abstract = True

    @property
    def branch(self):
        return self.org_code

    @property
    def is_paid(self):
        return self.outstanding_balance <= 0

    @property
    def status(self):
        return 'PAID' if self.is_paid else 'OPEN'

    @property
    def effective_settlement_date(self):
        return self.settlement_date

    @property
    def settled_amount(self):
        raise NotImplementedError

    def basis_date(self, basis):
        """Date that a filter on `basis` compares against"""
        if basis == 'settlement':
            return self.effective_settlement_date
        return getattr(self, self.BASIS_FIELDS[basis])


class PayableRecord(LedgerRecord):
    """Accounts-payable line item, unique per branch and ledger entry"""
    branch_code = models.IntegerField(default=0)
    org_code = models.IntegerField(default=0)

    document_date = models.DateField(blank=True, null=True)
    payable_number = models.IntegerField(default=0)
    source_counter = models.IntegerField(default=0)
    source_number = models.IntegerField(default=0)

    # Settlement (check / bank write-off)
    amount_settled = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    interest_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    settlement_account_code = models.IntegerField(default=0)

    # The payables screen treats the document date as the issue date
    BASIS_FIELDS = {
        'due': 'due_date',
        'issue': 'document_date',
        'settlement': 'settlement_date',
    }

    class Meta:
        db_table = 'rel_financeiro'
        ordering = ['-due_date', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['branch_code', 'ledger_entry_number'],
                name='uniq_payable_branch_entry',
            ),
        ]
        indexes = [
            models.Index(fields=['due_date'], name='payable_due_date_idx'),
            models.Index(fields=['settlement_date'], name='payable_settlement_idx'),
        ]

    def __str__(self):
        return f"{self.branch_code}/{self.ledger_entry_number} - {self.counterparty_name}"

    @property
    def branch(self):
        return self.branch_code

    @property
    def settled_amount(self):
        # Upstream tracks partial settlements in their own column
        return self.amount_settled


class ReceivableRecord(LedgerRecord):
    """Accounts-receivable line item, unique per ledger entry across branches"""
    org_code = models.IntegerField(default=0)
    entry_date = models.DateField(blank=True, null=True)
    receivable_number = models.IntegerField(default=0)

    class Meta:
        db_table = 'rel_contas_receber'
        ordering = ['-due_date', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['ledger_entry_number'],
                name='uniq_receivable_entry',
            ),
        ]
        indexes = [
            models.Index(fields=['due_date'], name='receivable_due_date_idx'),
            models.Index(fields=['settlement_date'], name='receivable_settlement_idx'),
        ]

    def __str__(self):
        return f"{self.ledger_entry_number} - {self.counterparty_name}"

    @property
    def effective_settlement_date(self):
        """Settlement date, absent while the item still has a balance"""
        if self.outstanding_balance > 0:
            return None
        return self.settlement_date

    @property
    def settled_amount(self):
        return max(Decimal('0'), self.original_amount - self.outstanding_balance)
