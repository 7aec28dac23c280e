"""
Scanner configuration and unit price lookup.

CLI flags take precedence, then environment variables, then the module
defaults of the client modules.
"""

import json
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional

from .abi import MULTICALL3_ADDRESS
from .batch_reader import DEFAULT_MAX_BATCH_SIZE
from .explorer_client import DEFAULT_EXPLORER_URL
from .models import OwnedToken
from .rpc_client import BASE_CHAIN_ID, DEFAULT_RPC_URL
from .scanner import DEFAULT_ALLOWANCE_TIMEOUT, DEFAULT_CHUNK_SIZE

ENV_RPC_URL = "BASE_RPC_URL"
ENV_EXPLORER_API_KEY = "BASESCAN_API_KEY"
ENV_EXPLORER_URL = "BASESCAN_API_URL"


class ConfigError(ValueError):
    """Raised for invalid configuration values or files."""

    pass


@dataclass
class ScannerConfig:
    wallet: str
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = BASE_CHAIN_ID
    multicall_address: str = MULTICALL3_ADDRESS
    explorer_url: str = DEFAULT_EXPLORER_URL
    explorer_api_key: str = ""
    catalog_path: Optional[str] = None
    prices_path: Optional[str] = None
    allowance_timeout: float = DEFAULT_ALLOWANCE_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    multicall_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    output: Optional[str] = None
    verbose: bool = False

    def __post_init__(self):
        if self.allowance_timeout <= 0:
            raise ConfigError("timeout must be positive")
        if self.chunk_size <= 0:
            raise ConfigError("chunk size must be positive")
        if self.multicall_batch_size <= 0:
            raise ConfigError("multicall batch size must be positive")

    @classmethod
    def from_args(cls, args, environ: Optional[Mapping[str, str]] = None) -> "ScannerConfig":
        """
        Build a config from parsed CLI arguments with environment fallback.

        Args:
            args: argparse namespace from the CLI
            environ: Environment mapping (os.environ if None)

        Returns:
            ScannerConfig
        """
        env = os.environ if environ is None else environ
        return cls(
            wallet=args.wallet,
            rpc_url=args.rpc_url or env.get(ENV_RPC_URL) or DEFAULT_RPC_URL,
            explorer_url=args.explorer_url or env.get(ENV_EXPLORER_URL) or DEFAULT_EXPLORER_URL,
            explorer_api_key=args.explorer_api_key or env.get(ENV_EXPLORER_API_KEY) or "",
            catalog_path=args.catalog,
            prices_path=args.prices,
            allowance_timeout=args.timeout,
            chunk_size=args.chunk_size,
            output=args.output,
            verbose=args.verbose,
        )


class StaticPriceTable:
    """
    Unit prices keyed by token symbol (case-insensitive).

    Callable as a price lookup; unknown symbols return None, which the
    classifier treats as a price of 1.
    """

    def __init__(self, prices: Mapping[str, Decimal]):
        self._prices: Dict[str, Decimal] = {symbol.upper(): price for symbol, price in prices.items()}

    def __call__(self, token: OwnedToken) -> Optional[Decimal]:
        return self._prices.get(token.symbol.upper())

    def __len__(self) -> int:
        return len(self._prices)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "StaticPriceTable":
        prices: Dict[str, Decimal] = {}
        for symbol, value in data.items():
            try:
                price = Decimal(str(value))
            except InvalidOperation as e:
                raise ConfigError(f"Invalid price for {symbol}: {value!r}") from e
            if not price.is_finite() or price < 0:
                raise ConfigError(f"Invalid price for {symbol}: {value!r}")
            prices[symbol] = price
        return cls(prices)

    @classmethod
    def from_file(cls, path: str) -> "StaticPriceTable":
        """Load a JSON object mapping symbol to unit price."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read price table {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Price table {path} must be a JSON object")
        return cls.from_dict(data)
