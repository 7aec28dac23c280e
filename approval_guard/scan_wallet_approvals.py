#!/usr/bin/env python3
"""
Scan a Base wallet for live token approvals.

This script discovers the ERC-20 tokens a wallet holds, checks every known
spender contract's allowance over each of them in batched reads, classifies
the risk of each approval and writes a CSV report. Optionally it revokes one
approval by id after an explicit confirmation.
"""

import argparse
import logging
import sys
from typing import List, Optional

from eth_utils import is_hex_address

from approval_guard.lib.batch_reader import MulticallReader
from approval_guard.lib.catalog import CatalogError, default_catalog, load_catalog, log_catalog_summary
from approval_guard.lib.classifier import UNLIMITED_LABEL
from approval_guard.lib.config import ScannerConfig, StaticPriceTable
from approval_guard.lib.explorer_client import ExplorerClient
from approval_guard.lib.formatters import format_summary, write_report
from approval_guard.lib.models import Approval, GasEstimate, RiskLevel, ScanProgress
from approval_guard.lib.revoker import RevocationOrchestrator
from approval_guard.lib.rpc_client import JsonRpcClient
from approval_guard.lib.scanner import DEFAULT_ALLOWANCE_TIMEOUT, DEFAULT_CHUNK_SIZE, ApprovalScanner
from approval_guard.lib.session import ScanSession
from approval_guard.lib.wallet import JsonRpcWallet

WEI_PER_GWEI = 10**9


def log(phase: str, message: str) -> None:
    """Log a message with phase prefix."""
    print(f"[{phase}] {message}", file=sys.stderr)


def validate_address(address: str) -> str:
    """
    Validate a wallet address.

    Raises:
        ValueError: If the address is not a 20-byte hex address
    """
    address = address.strip()
    if not is_hex_address(address):
        raise ValueError(f"Invalid wallet address: {address}")
    return address


def report_progress(progress: ScanProgress) -> None:
    log(progress.phase.value, f"({progress.current}/{progress.total}) {progress.step}")


def prompt_confirmation(approval: Approval, estimate: GasEstimate) -> bool:
    """Ask on the terminal before submitting a revocation."""
    amount = approval.allowance_formatted
    if amount != UNLIMITED_LABEL:
        amount = f"{amount} {approval.token.symbol}"
    gas_note = " (fallback estimate)" if estimate.is_fallback else ""
    print(
        f"Revoke {amount} approval of {approval.token.symbol} to "
        f"{approval.spender.name} ({approval.spender_address}), risk {approval.risk_level.value}?\n"
        f"Estimated gas: {estimate.gas_limit} at {estimate.gas_price / WEI_PER_GWEI:.4f} gwei{gas_note}",
        file=sys.stderr,
    )
    answer = input("Type 'yes' to confirm: ")
    return answer.strip().lower() in ("y", "yes")


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(
        description="Scan a Base wallet for token approvals and report their risk.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan with the bundled catalog, report to stdout
  %(prog)s --wallet 0x...

  # Use BaseScan discovery and save to file
  %(prog)s --wallet 0x... --explorer-api-key YOUR_KEY --output approvals.csv

  # Revoke one approval through a node-managed account
  %(prog)s --wallet 0x... --rpc-url http://localhost:8545 --revoke 0xtoken-0xspender
        """,
    )

    parser.add_argument("--wallet", required=True, help="Wallet address to scan")
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (env BASE_RPC_URL)")
    parser.add_argument("--explorer-api-key", help="BaseScan API key (env BASESCAN_API_KEY)")
    parser.add_argument("--explorer-url", help="Explorer API URL (env BASESCAN_API_URL)")
    parser.add_argument("--no-explorer", action="store_true", help="Use the catalog tokens only")
    parser.add_argument("--catalog", help="JSON catalog with 'tokens' and 'spenders' arrays")
    parser.add_argument("--prices", help="JSON object of token symbol to unit price")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_ALLOWANCE_TIMEOUT,
        help="Upper bound in seconds for the allowance scan",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help="Allowance calls per batched read",
    )
    parser.add_argument(
        "--risk",
        choices=[level.value for level in RiskLevel],
        help="Only report approvals of this risk level",
    )
    parser.add_argument(
        "--output",
        help="Output file path (timestamp auto-appended). If not specified, outputs to stdout.",
    )
    parser.add_argument("--revoke", metavar="APPROVAL_ID", help="Revoke this approval after the scan")
    parser.add_argument("--from-account", help="Sending account for --revoke (default: node's first)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        parsed_args.wallet = validate_address(parsed_args.wallet)
        config = ScannerConfig.from_args(parsed_args)
        catalog = load_catalog(config.catalog_path) if config.catalog_path else default_catalog()
        prices = StaticPriceTable.from_file(config.prices_path) if config.prices_path else None
    except (ValueError, CatalogError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    log_catalog_summary(catalog)

    client = JsonRpcClient(config.rpc_url, config.chain_id)
    reader = MulticallReader(client, config.multicall_address, config.multicall_batch_size)
    explorer = None
    if not parsed_args.no_explorer:
        explorer = ExplorerClient(config.explorer_api_key, config.explorer_url)

    scanner = ApprovalScanner(
        catalog,
        reader,
        explorer=explorer,
        price_lookup=prices,
        allowance_timeout=config.allowance_timeout,
        chunk_size=config.chunk_size,
        progress_callback=report_progress,
    )
    session = ScanSession()
    result = session.run_scan(scanner, config.wallet)

    for line in format_summary(result):
        log("summary", line)
    if not result.succeeded:
        return 1

    exit_code = 0
    if parsed_args.revoke:
        wallet = JsonRpcWallet(client, parsed_args.from_account)
        orchestrator = RevocationOrchestrator(session, wallet, prompt_confirmation, reader=reader)
        revocation = orchestrator.revoke(parsed_args.revoke.strip().lower())
        if revocation.confirmed:
            log("revoke", f"Revoked {revocation.approval_id} in {revocation.tx_hash}")
        elif revocation.cancelled:
            log("revoke", "Cancelled")
        else:
            log("revoke", f"ERROR: {revocation.error}")
            exit_code = 1

    approvals = session.approvals
    if parsed_args.risk:
        approvals = session.by_risk(RiskLevel(parsed_args.risk))

    approvals_file, tokens_file = write_report(approvals, session.owned_tokens(), config.output)
    if approvals_file:
        print(f"\nResults written to: {approvals_file}", file=sys.stderr)
        if tokens_file:
            print(f"Owned tokens written to: {tokens_file}", file=sys.stderr)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
