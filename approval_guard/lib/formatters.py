"""
Output formatters for approval scan reports.

This module handles CSV generation with timestamp-based filenames and the
plain-text summary printed after a scan.
"""

import csv
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from .models import (
    APPROVAL_CSV_COLUMNS,
    TOKEN_CSV_COLUMNS,
    Approval,
    OwnedToken,
    RiskLevel,
    ScanResult,
    ScanStatus,
    SpenderCategory,
)


def generate_timestamp() -> str:
    """
    Generate a timestamp string for filenames.

    Returns:
        Timestamp in YYYYMMDD_HHMMSS format
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def generate_filenames(base_path: str, timestamp: Optional[str] = None) -> Tuple[str, str]:
    """
    Generate timestamped filenames for the approval and token CSV files.

    Args:
        base_path: Base output path (e.g., "approvals.csv")
        timestamp: Optional timestamp to use (generates new one if not provided)

    Returns:
        Tuple of (approvals_file_path, tokens_file_path)

    Examples:
        generate_filenames("approvals.csv", "20241214_153022")
        -> ("approvals_20241214_153022.csv", "approvals_20241214_153022_tokens.csv")
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    path = Path(base_path)
    stem = path.stem
    suffix = path.suffix or ".csv"
    parent = path.parent

    approvals_file = parent / f"{stem}_{timestamp}{suffix}"
    tokens_file = parent / f"{stem}_{timestamp}_tokens{suffix}"

    return str(approvals_file), str(tokens_file)


def write_approvals_to_stream(approvals: List[Approval], stream: TextIO) -> None:
    writer = csv.writer(stream)
    writer.writerow(APPROVAL_CSV_COLUMNS)
    for approval in approvals:
        writer.writerow(approval.to_csv_row())


def write_tokens_to_stream(tokens: List[OwnedToken], stream: TextIO) -> None:
    writer = csv.writer(stream)
    writer.writerow(TOKEN_CSV_COLUMNS)
    for token in tokens:
        writer.writerow(token.to_csv_row())


def write_report(
    approvals: List[Approval],
    tokens: List[OwnedToken],
    output_path: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Write the approval report to CSV files or stdout.

    Args:
        approvals: Approvals to report
        tokens: Owned tokens, written to a companion file
        output_path: Base output path. If None, writes approvals to stdout.

    Returns:
        Tuple of (approvals_file_path, tokens_file_path) if output_path provided,
        otherwise (None, None).
    """
    if output_path is None:
        write_approvals_to_stream(approvals, sys.stdout)
        return None, None

    timestamp = generate_timestamp()
    approvals_file, tokens_file = generate_filenames(output_path, timestamp)

    with open(approvals_file, "w", newline="", encoding="utf-8") as f:
        write_approvals_to_stream(approvals, f)

    # Only written if there are any
    if tokens:
        with open(tokens_file, "w", newline="", encoding="utf-8") as f:
            write_tokens_to_stream(tokens, f)
        return approvals_file, tokens_file

    return approvals_file, None


def format_summary(result: ScanResult) -> List[str]:
    """
    Human-readable summary lines for a scan result.

    A failed scan, a secure scan (no approvals) and a timed-out scan each
    get a distinct headline.
    """
    if result.status is ScanStatus.FAILED:
        return [f"SCAN FAILED: {result.error}"]

    stats = result.statistics
    lines = []
    if result.is_secure:
        lines.append("SECURE: no active approvals found")
    else:
        lines.append(f"Found {stats.approvals_found} active approvals")
    if result.status is ScanStatus.TIMED_OUT:
        lines.append(
            f"TIMED OUT: only {stats.combinations_checked} of "
            f"{stats.total_combinations} combinations checked; results are partial"
        )

    lines.append(
        f"Tokens checked: {stats.total_tokens_checked} "
        f"({stats.tokens_with_balance} with balance, {stats.native_tokens} native, "
        f"{stats.bridged_tokens} bridged)"
    )
    lines.append(
        "Risk: "
        + ", ".join(f"{level.value} {stats.risk_distribution[level]}" for level in reversed(list(RiskLevel)))
    )
    categories = [
        f"{category.value} {stats.category_distribution[category]}"
        for category in SpenderCategory
        if stats.category_distribution[category]
    ]
    if categories:
        lines.append("Categories: " + ", ".join(categories))
    lines.append(f"Unlimited approvals: {stats.unlimited_approvals}")
    lines.append(
        f"Unique tokens: {stats.unique_tokens}, unique protocols: {stats.unique_protocols}"
    )
    lines.append(f"Estimated value at risk: {format(stats.total_value_at_risk, 'f')}")
    for error in result.discovery_errors:
        lines.append(f"Warning: token discovery degraded ({error})")
    return lines
