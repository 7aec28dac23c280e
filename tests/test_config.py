"""
Unit tests for configuration and the price table.

Tests follow the Given/When/Then pattern for clarity.
"""

import argparse
import json
import os
import tempfile
from decimal import Decimal

import pytest

from approval_guard.lib.config import ConfigError, ScannerConfig, StaticPriceTable
from approval_guard.lib.explorer_client import DEFAULT_EXPLORER_URL
from approval_guard.lib.rpc_client import DEFAULT_RPC_URL
from conftest import make_owned


def cli_args(**overrides):
    values = {
        "wallet": "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045",
        "rpc_url": None,
        "explorer_url": None,
        "explorer_api_key": None,
        "catalog": None,
        "prices": None,
        "timeout": 30.0,
        "chunk_size": 100,
        "output": None,
        "verbose": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestScannerConfig:
    """Tests for ScannerConfig.from_args."""

    def test_uses_defaults_without_flags_or_environment(self):
        config = ScannerConfig.from_args(cli_args(), environ={})

        assert config.rpc_url == DEFAULT_RPC_URL
        assert config.explorer_url == DEFAULT_EXPLORER_URL
        assert config.explorer_api_key == ""
        assert config.chain_id == 8453

    def test_environment_fills_unset_flags(self):
        """
        Given environment variables for the endpoints and key
        When no flags are passed
        Then the environment values should be used
        """
        # Given
        environ = {
            "BASE_RPC_URL": "https://rpc.env.invalid",
            "BASESCAN_API_KEY": "env-key",
            "BASESCAN_API_URL": "https://explorer.env.invalid/api",
        }

        # When
        config = ScannerConfig.from_args(cli_args(), environ=environ)

        # Then
        assert config.rpc_url == "https://rpc.env.invalid"
        assert config.explorer_api_key == "env-key"
        assert config.explorer_url == "https://explorer.env.invalid/api"

    def test_flags_take_precedence_over_environment(self):
        config = ScannerConfig.from_args(
            cli_args(rpc_url="https://rpc.flag.invalid"),
            environ={"BASE_RPC_URL": "https://rpc.env.invalid"},
        )

        assert config.rpc_url == "https://rpc.flag.invalid"

    @pytest.mark.parametrize("overrides", [{"timeout": 0}, {"chunk_size": 0}])
    def test_rejects_non_positive_limits(self, overrides):
        with pytest.raises(ConfigError):
            ScannerConfig.from_args(cli_args(**overrides), environ={})


class TestStaticPriceTable:
    """Tests for StaticPriceTable."""

    def test_lookup_is_case_insensitive(self, weth, usdc):
        """
        Given a price table keyed by lower-case symbol
        When looking up tokens
        Then matching symbols should be priced and others return None
        """
        # Given
        table = StaticPriceTable.from_dict({"weth": "3000.5"})

        # When / Then
        assert table(make_owned(weth)) == Decimal("3000.5")
        assert table(make_owned(usdc)) is None

    def test_loads_from_file(self, weth):
        # Given
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "prices.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"WETH": 2500}, f)

            # When
            table = StaticPriceTable.from_file(path)

        # Then
        assert table(make_owned(weth)) == Decimal(2500)

    @pytest.mark.parametrize("value", ["abc", -1, "NaN"])
    def test_rejects_invalid_prices(self, value):
        with pytest.raises(ConfigError):
            StaticPriceTable.from_dict({"WETH": value})

    def test_rejects_non_object_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "prices.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump([1, 2], f)

            with pytest.raises(ConfigError, match="JSON object"):
                StaticPriceTable.from_file(path)
