"""
Batched read-only contract calls.

A batch reader takes an ordered list of (contract, function, args) calls and
returns an ordered list of per-call results. One failing call never fails
the batch; only transport-level problems do.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from eth_abi.exceptions import EncodingError

from .abi import (
    MULTICALL3_ADDRESS,
    DecodeError,
    bytes_to_hex,
    checksum,
    decode_aggregate3,
    decode_result,
    encode_aggregate3,
    encode_call,
    hex_to_bytes,
)
from .http_client import APIError, RequestTimeoutError
from .rpc_client import JsonRpcClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 500


@dataclass(frozen=True)
class BatchCall:
    """One read-only call in a batch."""

    contract_address: str
    function: str  # Name from abi.ERC20_FUNCTIONS
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class CallResult:
    """Per-call outcome: a decoded value or a failure marker."""

    success: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "CallResult":
        return cls(success=True, value=value)

    @classmethod
    def failed(cls, error: str) -> "CallResult":
        return cls(success=False, error=error)


class BatchReadError(Exception):
    """Raised when a whole batch could not be read."""

    pass


class BatchReadTimeout(BatchReadError):
    """Raised when a batch read exceeds its time bound."""

    pass


class BaseBatchReader(ABC):
    """
    Abstract batched-read capability.

    Implementations must return exactly one result per call, in call order.
    """

    @abstractmethod
    def read(self, calls: List[BatchCall], timeout: Optional[float] = None) -> List[CallResult]:
        """
        Execute calls and return their results in order.

        Args:
            calls: Ordered calls
            timeout: Upper bound in seconds for the whole read

        Returns:
            One CallResult per call, aligned by index

        Raises:
            BatchReadError: If the batch as a whole failed
            BatchReadTimeout: If the time bound was exceeded
        """
        pass


class MulticallReader(BaseBatchReader):
    """
    Batched reader backed by Multicall3.aggregate3.

    Large call lists are split into several eth_calls of at most
    max_batch_size calls each; results are concatenated in order.
    """

    def __init__(
        self,
        client: JsonRpcClient,
        multicall_address: str = MULTICALL3_ADDRESS,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        clock=time.monotonic,
    ):
        if max_batch_size <= 0:
            raise ValueError("max_batch_size must be positive")
        self.client = client
        self.multicall_address = multicall_address
        self.max_batch_size = max_batch_size
        self.clock = clock

    def read(self, calls: List[BatchCall], timeout: Optional[float] = None) -> List[CallResult]:
        results: List[Optional[CallResult]] = [None] * len(calls)
        encoded: List[Tuple[int, str, bytes]] = []

        for index, call in enumerate(calls):
            try:
                target = checksum(call.contract_address)
                data = encode_call(call.function, call.args)
            except (KeyError, ValueError, TypeError, EncodingError) as e:
                logger.debug("Cannot encode %s on %s: %s", call.function, call.contract_address, e)
                results[index] = CallResult.failed(f"encode error: {e}")
                continue
            encoded.append((index, target, data))

        deadline = None if timeout is None else self.clock() + timeout
        for start in range(0, len(encoded), self.max_batch_size):
            chunk = encoded[start:start + self.max_batch_size]
            remaining = None
            if deadline is not None:
                remaining = deadline - self.clock()
                if remaining <= 0:
                    raise BatchReadTimeout("Batched read deadline exceeded")

            raw = self._aggregate(chunk, remaining)
            for (index, _, _), (success, return_data) in zip(chunk, raw):
                results[index] = self._decode(calls[index], success, return_data)

        return [r if r is not None else CallResult.failed("missing result") for r in results]

    def _aggregate(
        self, chunk: List[Tuple[int, str, bytes]], timeout: Optional[float]
    ) -> List[Tuple[bool, bytes]]:
        call_data = encode_aggregate3([(target, data) for _, target, data in chunk])
        try:
            raw_hex = self.client.eth_call(
                self.multicall_address, bytes_to_hex(call_data), timeout=timeout
            )
            decoded = decode_aggregate3(hex_to_bytes(raw_hex or "0x"))
        except RequestTimeoutError as e:
            raise BatchReadTimeout(str(e)) from e
        except (APIError, DecodeError, ValueError) as e:
            logger.error("Batched read of %d calls failed: %s", len(chunk), e)
            raise BatchReadError(f"Batched read failed: {e}") from e

        if len(decoded) != len(chunk):
            raise BatchReadError(
                f"Batched read returned {len(decoded)} results for {len(chunk)} calls"
            )
        return decoded

    def _decode(self, call: BatchCall, success: bool, return_data: bytes) -> CallResult:
        if not success:
            return CallResult.failed("call reverted")
        try:
            return CallResult.ok(decode_result(call.function, return_data))
        except DecodeError as e:
            return CallResult.failed(str(e))
