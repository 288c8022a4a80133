"""Shared fixtures for invoice parser tests."""

import pytest

from invoice_parser.config import Settings
from invoice_parser.parsers.factory import create_parser_factory

ITAU_INVOICE = """\
Banco Itaú
Fatura do cartão
Vencimento: 10/04/2024
Lançamentos: compras e saques
JOAO SILVA (final 1234)
15/03 UBER *TRIP 45,90
16/03 AUTO POSTO S-CT PRIMOS 206,60
VEÍCULOS .PONTA GROSSA
18/03 RESTAURANTE
BOM SABOR 89,00
20/03 LOJA ELETRO 03/10 150,00
Total lançamentos JOAO 491,50
MARIA SOUZA
final 5678
21/03 FARMACIA -12,30
Compras parceladas - próximas faturas
20/04 LOJA ELETRO 04/10 150,00
"""

INTER_INVOICE = """\
Banco Inter
Super App
Titular: JOAO SILVA
CARTÃO 5364****3145
Data Movimentação Beneficiário Valor
14 de jan. 2026 PAGAMENTO ON LINE - + R$ 955,51
16 de jan. 2026 ABAST SHELL BOX - R$ 133,02
20 de jan. 2026 LOJA X (Parcela 02 de 05) - R$ 80,00
22 de jan. 2026 ESTORNO LOJA Y - -R$ 25,00
Total CARTÃO 5364****3145 R$ 188,02
CARTÃO 4111****9876
25 de jan. 2026 PADARIA
DOCE PÃO - R$ 1.234,56
"""

XP_CSV = """\
Data;Estabelecimento;Portador;Valor;Parcela
10/01/2024;SUPERMERCADO BOM;JOAO SILVA;R$ 1.234,56;-
11/01/2024;LOJA ELETRO;MARIA SOUZA;150,00;2 de 10
12/01/2024;PAGAMENTO FATURA;JOAO SILVA;-2.000,00;-
13/01/2024;LINHA RUIM;JOAO SILVA;abc;-
"""

NUBANK_CSV = """\
date,title,amount
2024-01-10,Padaria,12.50
2024-01-11,Uber,-3.20
"""


@pytest.fixture
def settings():
    """Settings with a fixed fallback year, independent of the environment."""
    return Settings(_env_file=None, fallback_year=2024)


@pytest.fixture
def factory(settings):
    """Factory with every bank strategy registered."""
    return create_parser_factory(settings=settings)


@pytest.fixture
def itau_invoice():
    return ITAU_INVOICE


@pytest.fixture
def inter_invoice():
    return INTER_INVOICE


@pytest.fixture
def xp_csv():
    return XP_CSV


@pytest.fixture
def nubank_csv():
    return NUBANK_CSV
