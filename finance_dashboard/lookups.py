"""Display names for branch and settlement-account codes"""

BRANCH_NAMES = {
    '10': 'AIRSLAID',
    '20': 'BIG TELAS',
    '30': 'ITELFA',
    '40': 'GRASSI HOLDING',
    '100': 'AIRSLAID',
    '200': 'BIG TELAS',
    '300': 'ITELFA',
    '400': 'GRASSI HOLDING',
    '500': 'FAZENDA BOM SOSSEGO',
}

ACCOUNT_NAMES = {
    '10359': 'SANTANDER AGRO',
    '10268': 'BANCO DO BRASIL AGRO 2',
    '1099': 'ADIANTAMENTOS REFERENTES NOTAS DE DEVOLUÇÕES',
    '1001': 'CAIXA GERAL',
    '1098': 'BANCO VIRTUAL',
    '1097': 'CHEQUES RECEBIDOS EM CARTEIRA',
    '9255': 'SAFRA AIRSLAID',
    '9256': 'SANTANDER AIRSLAID',
    '9261': 'SANTANDER ITELFA',
    '9253': 'BANCO DO BRASIL ITELFA',
    '9265': 'SICRED ITELFA',
    '9257': 'SANTANDER BIG TELAS',
    '9262': 'SANTANDER GRASSI HOLDING',
    '9251': 'BANCO DO BRASIL AIRSLAID',
    '9254': 'BANCO DO BRASIL AGRO',
    '9266': 'SICREDI GRASSI',
    '9264': 'SICRED BIG TELAS',
    '9252': 'BANCO DO BRASIL BIG TELAS',
    '9263': 'SICRED AIRSLAID',
    '9267': 'CAIXA INTERNO',
}

UNKNOWN_COUNTERPARTY = 'UNKNOWN'


def branch_label(code):
    code = str(code)
    return BRANCH_NAMES.get(code, code)


def account_label(code):
    code = str(code)
    return ACCOUNT_NAMES.get(code, f'ACCOUNT {code}')


def branch_names():
    """Distinct branch display names, sorted"""
    return sorted(set(BRANCH_NAMES.values()))
