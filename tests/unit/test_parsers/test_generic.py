"""Tests for the generic invoice parser."""

from datetime import date
from decimal import Decimal

import pytest

from invoice_parser.config import Settings
from invoice_parser.parsers.generic import GenericParser
from invoice_parser.schemas.internal import ParseContext


class TestGenericParser:
    """Test suite for GenericParser."""

    @pytest.fixture
    def parser(self, settings):
        return GenericParser(settings=settings)

    def test_extracts_date_description_amount(self, parser):
        """Test simple one-line transactions."""
        text = (
            "Extrato\n"
            "05/02 PADARIA CENTRAL 12,50\n"
            "07/02 POSTO 1.234,56\n"
            "Total 1.247,06\n"
        )
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [t.description for t in transactions] == ["PADARIA CENTRAL", "POSTO"]
        assert transactions[0].date == date(2024, 2, 5)
        assert transactions[1].amount == Decimal("1234.56")

    def test_no_holder_or_card_awareness(self, parser):
        """Test cardholder and card come only from the context."""
        text = "JOAO SILVA\n05/02 PADARIA 12,50\n"

        plain = parser.parse(text, ParseContext(year=2024))
        hinted = parser.parse(text, ParseContext(year=2024, cardholder="ANA", card="1234"))

        assert plain[0].cardholder == ""
        assert plain[0].card == ""
        assert hinted[0].cardholder == "ANA"
        assert hinted[0].card == "1234"

    def test_wrapped_line(self, parser):
        """Test a record split across lines is rejoined."""
        transactions = parser.parse("05/02 PADARIA\nCENTRAL 12,50", ParseContext(year=2024))

        assert len(transactions) == 1
        assert transactions[0].description == "PADARIA CENTRAL"

    def test_currency_symbol_and_credit(self, parser):
        """Test R$ prefixes and negative amounts."""
        text = "05/02 PADARIA R$ 12,50\n06/02 ESTORNO -45,00\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [t.amount for t in transactions] == [Decimal("12.50"), Decimal("-45.00")]

    def test_dot_decimal_amounts(self, parser):
        """Test "123.45" and "1,234.56" amounts on unfamiliar layouts."""
        text = "05/02 PADARIA 12.50\n06/02 LOJA 1,234.56\n07/02 POSTO 1.234,56\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [t.amount for t in transactions] == [
            Decimal("12.50"),
            Decimal("1234.56"),
            Decimal("1234.56"),
        ]

    def test_installment_split(self, parser):
        """Test an installment marker is moved out of the description."""
        transactions = parser.parse("05/02 LOJA 02/06 100,00", ParseContext(year=2024))

        assert transactions[0].description == "LOJA"
        assert transactions[0].installment == "02/06"

    def test_summary_lines_ignored(self, parser):
        """Test payment and balance lines are not transactions."""
        text = "05/02 Pagamento efetuado -100,00\n06/02 Saldo anterior 50,00\n"
        assert parser.parse(text, ParseContext(year=2024)) == []

    @pytest.mark.parametrize(
        "text",
        [
            "",
            None,
            "lorem ipsum\n\x00\n99/99 X 1,00\n",
            "05/02 SEM VALOR\n",
            "R$ 10,00\n12,50\n",
        ],
    )
    def test_never_raises(self, parser, text):
        """Test unstructured text yields no transactions instead of raising."""
        assert parser.parse(text, ParseContext(year=2024)) == []

    def test_year_from_due_date_with_rollover(self, parser):
        """Test December purchases on a January invoice belong to the previous year."""
        text = "Vencimento: 10/01/2025\n20/12 LOJA 10,00\n05/01 CAFE 5,00\n"
        transactions = parser.parse(text)

        assert [t.date for t in transactions] == [date(2024, 12, 20), date(2025, 1, 5)]

    def test_rollover_before_day_validation(self, parser):
        """Test a leap day is validated against the rolled-over year."""
        text = "Vencimento: 10/01/2025\n29/02 LOJA 10,00\n"
        transactions = parser.parse(text)

        assert [t.date for t in transactions] == [date(2024, 2, 29)]

    def test_context_year_disables_rollover(self, parser):
        """Test an explicit year is used as-is."""
        text = "Vencimento: 10/01/2025\n20/12 LOJA 10,00\n"
        transactions = parser.parse(text, ParseContext(year=2023))

        assert transactions[0].date == date(2023, 12, 20)

    def test_fallback_year(self):
        """Test the configured fallback year when nothing else is known."""
        parser = GenericParser(settings=Settings(_env_file=None, fallback_year=2021))
        transactions = parser.parse("05/02 PADARIA 12,50")

        assert transactions[0].date == date(2021, 2, 5)

    def test_documents_in_order(self, parser):
        """Test transactions keep document order."""
        text = "07/02 B 2,00\n05/02 A 1,00\n"
        transactions = parser.parse(text, ParseContext(year=2024))

        assert [t.description for t in transactions] == ["B", "A"]
