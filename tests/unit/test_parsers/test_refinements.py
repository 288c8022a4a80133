"""Tests for bank-specific parser refinements."""

from datetime import date
from decimal import Decimal

import pytest

from invoice_parser.parsers.refinements import InterParser, ItauParser
from invoice_parser.schemas.internal import ParseContext


class TestItauParser:
    """Test suite for ItauParser."""

    @pytest.fixture
    def parser(self, settings):
        return ItauParser(settings=settings)

    def test_single_holder_section(self, parser):
        """Test the minimal holder + transaction layout."""
        transactions = parser.parse("JOAO SILVA\n15/03 UBER *TRIP 45,90\n", ParseContext(year=2024))

        assert len(transactions) == 1
        assert transactions[0].to_dict() == {
            "date": "2024-03-15",
            "description": "UBER *TRIP",
            "amount": 45.9,
            "cardholder": "JOAO SILVA",
            "installment": "",
            "card": "",
        }

    def test_full_invoice(self, parser, itau_invoice):
        """Test a complete invoice with two holders."""
        transactions = parser.parse(itau_invoice)

        assert [t.description for t in transactions] == [
            "UBER *TRIP",
            "AUTO POSTO S PRIMOS",
            "RESTAURANTE BOM SABOR",
            "LOJA ELETRO",
            "FARMACIA",
        ]
        assert sum(t.amount for t in transactions) == Decimal("479.20")

    def test_year_from_due_date(self, parser, itau_invoice):
        """Test dates take the year of the due date."""
        transactions = parser.parse(itau_invoice)
        assert transactions[0].date == date(2024, 3, 15)

    def test_holder_and_card_sections(self, parser, itau_invoice):
        """Test holder and card labels follow the section headers."""
        transactions = parser.parse(itau_invoice)

        assert {(t.cardholder, t.card) for t in transactions[:4]} == {("JOAO SILVA", "1234")}
        assert (transactions[4].cardholder, transactions[4].card) == ("MARIA SOUZA", "5678")
        assert transactions[4].amount == Decimal("-12.30")

    def test_installment(self, parser, itau_invoice):
        """Test k/n markers become the installment field."""
        transactions = parser.parse(itau_invoice)
        assert transactions[3].installment == "03/10"

    def test_future_installments_skipped(self, parser, itau_invoice):
        """Test next invoices' installments are not extracted."""
        transactions = parser.parse(itau_invoice)
        assert all(t.date.month != 4 for t in transactions)

    def test_future_installments_end_at_next_holder(self, parser):
        """Test a holder header ends the skipped section."""
        text = (
            "JOAO SILVA\n"
            "Compras parceladas - próximas faturas\n"
            "20/04 LOJA 04/10 150,00\n"
            "MARIA SOUZA\n"
            "21/03 FARMACIA 12,30\n"
        )
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [t.description for t in transactions] == ["FARMACIA"]
        assert transactions[0].cardholder == "MARIA SOUZA"

    def test_titular_line(self, parser):
        """Test "Titular NAME Cartão ..." headers."""
        text = "Titular MARIA SOUZA Cartão 1234\n01/03 MERCADO 10,00\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert transactions[0].cardholder == "MARIA SOUZA"

    def test_year_rollover(self, parser):
        """Test December purchases on a January invoice."""
        text = "Vencimento: 05/01/2025\nJOAO SILVA\n28/12 MERCADO 100,00\n02/01 PADARIA 10,00\n"
        transactions = parser.parse(text)

        assert [t.date for t in transactions] == [date(2024, 12, 28), date(2025, 1, 2)]

    def test_date_alone_on_its_line(self, parser):
        """Test a record whose date, description and amount sit on separate lines."""
        transactions = parser.parse("JOAO SILVA\n15/03\nUBER *TRIP\n45,90\n", ParseContext(year=2024))

        assert [(t.date, t.description, t.amount, t.cardholder) for t in transactions] == [
            (date(2024, 3, 15), "UBER *TRIP", Decimal("45.90"), "JOAO SILVA"),
        ]

    def test_location_line_keeps_holder(self, parser):
        """Test an upper-case line after a holder's transactions is not a new holder."""
        text = "JOAO SILVA\n15/03 UBER *TRIP 45,90\nVESTUARIO SAO PAULO\n16/03 LOJA 10,00\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [(t.description, t.cardholder) for t in transactions] == [
            ("UBER *TRIP", "JOAO SILVA"),
            ("LOJA", "JOAO SILVA"),
        ]

    def test_total_line_opens_next_holder(self, parser):
        """Test a bare holder name after a total line starts a new section."""
        text = (
            "JOAO SILVA\n"
            "15/03 UBER *TRIP 45,90\n"
            "Total lançamentos JOAO 45,90\n"
            "MARIA SOUZA\n"
            "16/03 LOJA 10,00\n"
        )
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [t.cardholder for t in transactions] == ["JOAO SILVA", "MARIA SOUZA"]

    def test_upper_case_continuation_is_not_holder(self, parser):
        """Test an upper-case wrapped line continues the open record."""
        text = "JOAO SILVA\n15/03 MERCADO\nLIVRE BRASIL\n45,90\n16/03 PADARIA 10,00\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [(t.description, t.amount, t.cardholder) for t in transactions] == [
            ("MERCADO LIVRE BRASIL", Decimal("45.90"), "JOAO SILVA"),
            ("PADARIA", Decimal("10.00"), "JOAO SILVA"),
        ]

    def test_holder_with_card_closes_open_record(self, parser):
        """Test "NAME (final 1234)" still starts a new section mid-record."""
        text = "JOAO SILVA\n15/03 MERCADO\nMARIA SOUZA (final 5678)\n16/03 PADARIA 10,00\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [(t.description, t.cardholder, t.card) for t in transactions] == [
            ("PADARIA", "MARIA SOUZA", "5678"),
        ]

    def test_installment_label_only_description(self, parser):
        """Test the k/n marker leaves the description when only the label remains."""
        transactions = parser.parse("JOAO SILVA\n15/03 Parcela 03/10 45,90\n", ParseContext(year=2024))

        assert transactions[0].description == "Parcela"
        assert transactions[0].installment == "03/10"

    def test_leap_day_in_previous_year(self, parser):
        """Test 29/02 on a January invoice resolves in the previous, leap, year."""
        text = "Vencimento: 05/01/2025\nJOAO SILVA\n29/02 LOJA ELETRO 11/12 100,00\n"
        transactions = parser.parse(text)

        assert [t.date for t in transactions] == [date(2024, 2, 29)]
        assert transactions[0].installment == "11/12"

    def test_summary_lines_ignored(self, parser):
        """Test interest and total lines are not transactions."""
        text = "JOAO SILVA\n10/03 Juros do rotativo 12,00\n10/03 IOF 1,50\n"
        assert parser.parse(text, ParseContext(year=2024)) == []


class TestInterParser:
    """Test suite for InterParser."""

    @pytest.fixture
    def parser(self, settings):
        return InterParser(settings=settings)

    def test_full_invoice(self, parser, inter_invoice):
        """Test a complete invoice with two cards."""
        transactions = parser.parse(inter_invoice)

        assert [t.description for t in transactions] == [
            "ABAST SHELL BOX",
            "LOJA X",
            "ESTORNO LOJA Y",
            "PADARIA DOCE PÃO",
        ]
        assert [t.amount for t in transactions] == [
            Decimal("133.02"),
            Decimal("80.00"),
            Decimal("-25.00"),
            Decimal("1234.56"),
        ]

    def test_dates_carry_year(self, parser, inter_invoice):
        """Test named-month dates keep their own year."""
        transactions = parser.parse(inter_invoice, ParseContext(year=2020))
        assert transactions[0].date == date(2026, 1, 16)

    def test_payments_skipped(self, parser, inter_invoice):
        """Test invoice payments are not extracted."""
        transactions = parser.parse(inter_invoice)
        assert not any("PAGAMENTO" in t.description for t in transactions)

    def test_card_sections(self, parser, inter_invoice):
        """Test the last four digits of each card section."""
        transactions = parser.parse(inter_invoice)

        assert [t.card for t in transactions] == ["3145", "3145", "3145", "9876"]
        assert all(t.cardholder == "JOAO SILVA" for t in transactions)

    def test_installment(self, parser, inter_invoice):
        """Test "(Parcela k de n)" markers."""
        transactions = parser.parse(inter_invoice)
        assert transactions[1].installment == "02/05"

    def test_plus_sign_is_credit(self, parser):
        """Test an explicit plus sign marks a credit."""
        text = "CARTÃO 5364****3145\n14 de jan. 2026 ESTORNO COMPRA - + R$ 50,00\n"
        transactions = parser.parse(text)

        assert transactions[0].amount == Decimal("-50.00")

    def test_single_card_without_holder(self, parser):
        """Test cardholder stays empty when the invoice names none."""
        text = "CARTÃO 5364****3145\n16 de jan. 2026 ABAST SHELL BOX - R$ 133,02\n"
        transactions = parser.parse(text)

        assert transactions[0].cardholder == ""
        assert transactions[0].card == "3145"

    def test_holder_before_card_number(self, parser):
        """Test a holder name printed before the card number."""
        text = "JOAO SILVA CARTÃO 5364****3145\n16 de jan. 2026 ABAST SHELL BOX - R$ 133,02\n"
        transactions = parser.parse(text)

        assert transactions[0].cardholder == "JOAO SILVA"

    def test_card_total_does_not_change_holder(self, parser, inter_invoice):
        """Test per-card total lines are not read as card sections."""
        transactions = parser.parse(inter_invoice)
        assert transactions[-1].cardholder == "JOAO SILVA"
