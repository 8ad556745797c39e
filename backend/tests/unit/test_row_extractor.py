"""
Unit tests for open-position row extraction.

Tests cover:
- Field extraction from row attributes and cells
- Market value fallbacks
- Entity-encoded currency glyphs
- Rows without a symbol and non-finite numbers
- Exchange column fallback
- Same-key rows folded within one page
"""

import json

import pytest

from foliosync.services.row_extractor import extract

from tests.pages import portfolio_page, position_row


class TestExtractFields:
    def test_reads_row_attributes_and_cells(self):
        markup = portfolio_page(
            "101",
            position_row(
                "AAPL",
                10,
                150.25,
                market_value="$1,890.00",
                pair_id="6408",
                name="Apple",
                full_name="Apple Inc",
                open_time="03/04/2024 09:31",
            ),
        )

        table = extract(markup)

        holding = table["AAPL"]
        assert holding.symbol == "AAPL"
        assert holding.exchange == ""
        assert holding.quantity == 10.0
        assert holding.avg_price == 150.25
        assert holding.total_value == pytest.approx(1890.0)
        assert holding.pair_id == "6408"
        assert holding.name == "Apple"
        assert holding.full_name == "Apple Inc"
        assert holding.open_time == "03/04/2024 09:31"
        assert holding.currency_symbol == "$"
        assert holding.url == "/equities/aapl"
        assert holding.portfolios == []

    def test_exchange_becomes_part_of_key(self):
        markup = portfolio_page(
            "101",
            position_row("SAP", 3, 120, market_value="€400", exchange="Xetra"),
            position_row("SAP", 2, 110, market_value="$250", exchange="NYSE"),
        )

        table = extract(markup)

        assert set(table) == {"SAP:Xetra", "SAP:NYSE"}
        assert table["SAP:Xetra"].exchange == "Xetra"

    def test_entity_encoded_currency_is_decoded(self):
        markup = portfolio_page(
            "101",
            position_row("ASML", 1, 600, market_value="&#x20ac;650", currency="&#x20ac;"),
        )

        holding = extract(markup)["ASML"]

        assert holding.currency_symbol == "€"
        assert holding.total_value == pytest.approx(650.0)

    def test_missing_currency_defaults_to_dollar(self):
        markup = portfolio_page("101", position_row("MSFT", 1, 300, currency=None))

        assert extract(markup)["MSFT"].currency_symbol == "$"

    def test_non_asset_links_are_not_used_as_url(self):
        markup = portfolio_page("101", position_row("MSFT", 1, 300, href="/news/msft"))

        assert extract(markup)["MSFT"].url == ""


class TestExchange:
    def test_empty_exchange_marker_falls_back_to_column(self):
        row = (
            '<tr class="openPositionTR" data-amount="4" data-open-price="50">'
            '<td data-column-name="sum_pos_fpb_symbols">'
            '<a href="/equities/bmw">BMW</a><i class="exchangeFlag"></i></td>'
            '<td data-column-name="sum_pos_exchange">Xetra</td>'
            "</tr>"
        )

        table = extract(portfolio_page("101", row))

        assert list(table) == ["BMW:Xetra"]


class TestMarketValue:
    def test_derived_from_current_price_when_title_missing(self):
        markup = portfolio_page("101", position_row("TSLA", 4, 200, cur_price=250))

        assert extract(markup)["TSLA"].total_value == pytest.approx(1000.0)

    def test_derived_when_title_is_zero(self):
        markup = portfolio_page(
            "101", position_row("TSLA", 4, 200, market_value="$0.00", cur_price="250")
        )

        assert extract(markup)["TSLA"].total_value == pytest.approx(1000.0)

    def test_reported_zero_without_current_price(self):
        markup = portfolio_page("101", position_row("TSLA", 4, 200))

        assert extract(markup)["TSLA"].total_value == 0.0


class TestTolerance:
    def test_rows_without_symbol_are_skipped(self):
        markup = portfolio_page(
            "101",
            position_row("", 5, 10, market_value="$50"),
            position_row("NVDA", 2, 400, market_value="$1.1K"),
        )

        table = extract(markup)

        assert list(table) == ["NVDA"]
        assert table["NVDA"].total_value == pytest.approx(1100.0)

    def test_bad_numbers_default_to_zero(self):
        markup = portfolio_page("101", position_row("AMD", "n/a", "", market_value="--"))

        holding = extract(markup)["AMD"]

        assert holding.quantity == 0.0
        assert holding.avg_price == 0.0
        assert holding.total_value == 0.0

    def test_non_finite_numbers_default_to_zero(self):
        markup = portfolio_page(
            "101", position_row("AMD", "NaN", "nan", cur_price="inf", market_value="Infinity")
        )

        holding = extract(markup)["AMD"]

        assert holding.quantity == 0.0
        assert holding.avg_price == 0.0
        assert holding.total_value == 0.0
        json.dumps(holding.to_dict(), allow_nan=False)

    def test_page_without_rows(self):
        assert extract(portfolio_page("101")) == {}
        assert extract("") == {}


class TestIntraPageMerge:
    def test_duplicate_rows_fold_with_weighted_average(self):
        markup = portfolio_page(
            "101",
            position_row("AAPL", 10, 100, market_value="$1,500", pair_id="1", name="Apple"),
            position_row("AAPL", 5, 130, market_value="$750", pair_id="2", name="Other"),
        )

        table = extract(markup)

        assert list(table) == ["AAPL"]
        holding = table["AAPL"]
        assert holding.quantity == 15.0
        assert holding.avg_price == pytest.approx(110.0)
        assert holding.total_value == pytest.approx(2250.0)
        assert holding.pair_id == "1"
        assert holding.name == "Apple"
