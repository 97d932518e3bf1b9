# tests/services/test_price_cache.py
"""
Tests for the in-memory PriceCache.

Time is driven by the FakeClock fixture; nothing sleeps.
"""

from decimal import Decimal

import pytest

from projectdollar.services.market_data.price_cache import PriceCache, normalize_symbol


class TestPriceCache:
    """Tests for freshness rules."""

    def test_put_then_get(self, price_cache):
        price_cache.put("AAPL", Decimal("189.20"))
        assert price_cache.get("AAPL") == Decimal("189.20")

    def test_symbol_is_case_insensitive(self, price_cache):
        price_cache.put(" aapl ", Decimal("1"))
        assert price_cache.get("AAPL") == Decimal("1")
        assert "aapl" in price_cache

    def test_expires_after_ttl(self, price_cache, clock):
        price_cache.put("AAPL", Decimal("1"))

        clock.advance(299)
        assert price_cache.get("AAPL") == Decimal("1")

        clock.advance(1)
        assert price_cache.get("AAPL") is None
        assert "AAPL" not in price_cache

    def test_reader_chooses_max_age(self, price_cache, clock):
        price_cache.put("AAPL", Decimal("1"))
        clock.advance(400)

        assert price_cache.get("AAPL") is None
        assert price_cache.get("AAPL", max_age=600) == Decimal("1")

    def test_max_age_zero_always_misses(self, price_cache):
        price_cache.put("AAPL", Decimal("1"))
        assert price_cache.get("AAPL", max_age=0) is None

    def test_put_replaces_and_refreshes_timestamp(self, price_cache, clock):
        price_cache.put("AAPL", Decimal("1"))
        clock.advance(250)
        price_cache.put("AAPL", Decimal("2"))
        clock.advance(250)

        quote = price_cache.get_quote("AAPL")
        assert quote.price == Decimal("2")
        assert quote.age(clock()) == 250

    def test_len_counts_fresh_entries_only(self, price_cache, clock):
        price_cache.put("AAPL", Decimal("1"))
        clock.advance(200)
        price_cache.put("MSFT", Decimal("2"))
        clock.advance(150)

        assert len(price_cache) == 1

    def test_invalidate_and_clear(self, price_cache):
        price_cache.put("AAPL", Decimal("1"))
        price_cache.put("MSFT", Decimal("2"))

        price_cache.invalidate("aapl")
        assert price_cache.get("AAPL") is None
        assert price_cache.get("MSFT") == Decimal("2")

        price_cache.clear()
        assert len(price_cache) == 0

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            PriceCache(ttl_seconds=0)

    def test_non_string_membership(self, price_cache):
        assert 42 not in price_cache


def test_normalize_symbol():
    assert normalize_symbol("  jepq ") == "JEPQ"
    assert normalize_symbol(None) == ""
