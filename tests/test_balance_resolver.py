"""
Unit tests for balance resolution and token discovery.

Tests follow the Given/When/Then pattern for clarity.
"""

import pytest

from approval_guard.lib.balance_resolver import (
    BalanceResolver,
    categorize_token,
    parse_decimals,
)
from approval_guard.lib.batch_reader import BatchReadError
from approval_guard.lib.catalog import default_catalog
from approval_guard.lib.explorer_client import (
    ExplorerAPIError,
    ExplorerRateLimitError,
    TokenHolding,
    TokenTransfer,
)
from approval_guard.lib.models import DiscoveryMethod, TokenCategory
from conftest import USDC, WETH, FakeExplorer

DISCOVERED = "0x532f27101965dd16442E59d40670FaF5eBb142E4"
HELD = "0xAC1Bd2486aAf3B5C0fc3Fd868558b082a531B2B4"
UNKNOWN = "0x" + "5a" * 20


class TestParseDecimals:
    """Tests for parse_decimals function."""

    @pytest.mark.parametrize("value, expected", [("6", 6), ("0", 0), ("", 18), (None, 18), ("x", 18), ("-3", 18)])
    def test_defaults_to_18_when_unparseable(self, value, expected):
        assert parse_decimals(value) == expected


class TestCategorizeToken:
    """Tests for categorize_token function."""

    def test_catalog_category_wins(self, catalog):
        """
        Given a token present in the catalog
        When categorizing it with a misleading symbol
        Then the catalog category should be used
        """
        assert categorize_token(catalog, WETH, "DEGEN") is TokenCategory.NATIVE

    @pytest.mark.parametrize(
        "symbol, expected",
        [
            ("usdt", TokenCategory.STABLECOIN),
            ("cbBTC", TokenCategory.NATIVE),
            ("BRETT", TokenCategory.MEME),
            ("AERO", TokenCategory.DEFI),
            ("XYZ", TokenCategory.OTHER),
        ],
    )
    def test_unknown_tokens_use_symbol_patterns(self, catalog, symbol, expected):
        assert categorize_token(catalog, UNKNOWN, symbol) is expected


class TestDiscoverCandidates:
    """Tests for BalanceResolver.discover_candidates."""

    def test_merges_catalog_transfers_and_holdings(self, catalog, fake_reader, owner):
        """
        Given an explorer reporting one transfer token, one held token and a catalog duplicate
        When discovering candidates
        Then each token should appear once with its provenance
        """
        # Given
        explorer = FakeExplorer(
            transfers=[
                TokenTransfer(USDC.lower(), "USDC", "USD Coin", "6"),
                TokenTransfer(DISCOVERED, "BRETT", "Brett", "18"),
                TokenTransfer(DISCOVERED, "BRETT", "Brett", "18"),
            ],
            holdings=[TokenHolding(HELD, "PRIME", "Prime", 5, "")],
        )
        resolver = BalanceResolver(fake_reader, catalog, explorer)

        # When
        report = resolver.discover_candidates(owner)

        # Then
        methods = {t.key: t.discovery_method for t in report.candidates}
        assert len(report.candidates) == 5
        assert methods[USDC.lower()] is DiscoveryMethod.KNOWN
        assert methods[DISCOVERED.lower()] is DiscoveryMethod.TRANSACTION
        assert methods[HELD.lower()] is DiscoveryMethod.BALANCE
        held = next(t for t in report.candidates if t.key == HELD.lower())
        assert held.decimals == 18
        assert not report.discovery_errors

    def test_explorer_failure_degrades_to_catalog(self, fake_reader, owner):
        """
        Given an explorer whose history lookup throws and a 20-token catalog
        When discovering candidates
        Then the catalog tokens should still be returned and the error recorded
        """
        # Given
        catalog = default_catalog()
        explorer = FakeExplorer(
            transfer_error=ExplorerRateLimitError("rate limited"),
            holdings_error=ExplorerAPIError("down"),
        )
        resolver = BalanceResolver(fake_reader, catalog, explorer)

        # When
        report = resolver.discover_candidates(owner)

        # Then
        assert len(report.candidates) == len(catalog.tokens) == 20
        assert len(report.discovery_errors) == 2

    def test_invalid_discovered_addresses_are_ignored(self, catalog, fake_reader, owner):
        # Given
        explorer = FakeExplorer(transfers=[TokenTransfer("0xnothex", "BAD", "Bad", "18")])
        resolver = BalanceResolver(fake_reader, catalog, explorer)

        # When
        report = resolver.discover_candidates(owner)

        # Then
        assert len(report.candidates) == len(catalog.tokens)


class TestResolve:
    """Tests for BalanceResolver.resolve."""

    def test_reads_all_balances_in_one_batch(self, catalog, fake_reader, owner):
        """
        Given a catalog of three tokens and one non-zero balance
        When resolving balances
        Then a single batched read should settle every candidate
        """
        # Given
        fake_reader.set_balance(USDC, 100_000000)
        resolver = BalanceResolver(fake_reader, catalog)

        # When
        report = resolver.resolve(owner)

        # Then
        assert len(fake_reader.requests) == 1
        assert all(t.settled for t in report.candidates)
        assert [t.symbol for t in report.owned] == ["USDC"]
        assert report.owned[0].balance_formatted == "100"

    def test_per_call_failure_counts_as_zero(self, catalog, fake_reader, owner):
        """
        Given one token whose balance call reverts
        When resolving balances
        Then that token should have zero balance and the rest should resolve
        """
        # Given
        fake_reader.set_balance(USDC, 5)
        fake_reader.set_balance(WETH, 7)
        fake_reader.fail_call("balanceOf", WETH)
        resolver = BalanceResolver(fake_reader, catalog)

        # When
        report = resolver.resolve(owner)

        # Then
        assert [t.symbol for t in report.owned] == ["USDC"]

    def test_batch_failure_propagates(self, catalog, fake_reader, owner):
        """
        Given a batched read that fails as a whole
        When resolving balances
        Then BatchReadError should propagate to the caller
        """
        # Given
        fake_reader.errors["balanceOf"] = [BatchReadError("network down")]
        resolver = BalanceResolver(fake_reader, catalog)

        # When / Then
        with pytest.raises(BatchReadError):
            resolver.resolve(owner)
