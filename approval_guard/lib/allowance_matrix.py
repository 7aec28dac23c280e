"""
Token x spender allowance query matrix.

The matrix pairs every owned token with every catalog spender, token-major.
Entry i of the matrix corresponds to call i of the batched read and to
result i of its response; nothing else correlates them.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .batch_reader import BatchCall
from .models import OwnedToken, SpenderDescriptor


@dataclass(frozen=True)
class MatrixEntry:
    token: OwnedToken
    spender: SpenderDescriptor
    call: BatchCall


@dataclass
class AllowanceMatrix:
    """Ordered (token, spender, call) triples."""

    owner: str
    entries: List[MatrixEntry] = field(default_factory=list)

    @property
    def calls(self) -> List[BatchCall]:
        return [entry.call for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def chunks(self, size: int) -> List[List[MatrixEntry]]:
        """Split entries into consecutive slices of at most size entries."""
        if size <= 0:
            raise ValueError("chunk size must be positive")
        return [self.entries[i:i + size] for i in range(0, len(self.entries), size)]


def build_allowance_matrix(
    owner: str,
    owned_tokens: List[OwnedToken],
    spenders: List[SpenderDescriptor],
) -> AllowanceMatrix:
    """
    Build the allowance query matrix for owned tokens.

    Tokens without a balance are skipped and duplicate token or spender
    addresses are dropped, so every (token, spender) pair appears once.

    Args:
        owner: Account whose allowances are read
        owned_tokens: Tokens with settled balances
        spenders: Spender catalog

    Returns:
        AllowanceMatrix in token-major order

    Raises:
        ValueError: If any token's balance has not been settled yet
    """
    unique_tokens: Dict[str, OwnedToken] = {}
    for token in owned_tokens:
        if not token.settled:
            raise ValueError(f"Balance of {token.address} is not settled")
        if token.has_balance:
            unique_tokens.setdefault(token.key, token)

    unique_spenders: Dict[str, SpenderDescriptor] = {}
    for spender in spenders:
        unique_spenders.setdefault(spender.key, spender)

    matrix = AllowanceMatrix(owner=owner)
    for token in unique_tokens.values():
        for spender in unique_spenders.values():
            matrix.entries.append(
                MatrixEntry(
                    token=token,
                    spender=spender,
                    call=BatchCall(token.address, "allowance", (owner, spender.address)),
                )
            )
    return matrix
