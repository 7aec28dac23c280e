"""
ABI encoding for the ERC-20 functions and the Multicall3 aggregate3 call.

Function selectors are derived from their canonical signatures at import
time. Call data is returned as bytes; callers hex-encode at the RPC edge.
"""

from typing import Any, Dict, List, NamedTuple, Sequence, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

# Multicall3 is deployed at the same address on every major EVM chain
MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

MAX_UINT256 = 2**256 - 1


class FunctionAbi(NamedTuple):
    signature: str
    input_types: Tuple[str, ...]
    output_type: str


ERC20_FUNCTIONS: Dict[str, FunctionAbi] = {
    "balanceOf": FunctionAbi("balanceOf(address)", ("address",), "uint256"),
    "allowance": FunctionAbi("allowance(address,address)", ("address", "address"), "uint256"),
    "decimals": FunctionAbi("decimals()", (), "uint8"),
    "approve": FunctionAbi("approve(address,uint256)", ("address", "uint256"), "bool"),
}

SELECTORS: Dict[str, bytes] = {
    name: function_signature_to_4byte_selector(fn_abi.signature)
    for name, fn_abi in ERC20_FUNCTIONS.items()
}

AGGREGATE3_SELECTOR = function_signature_to_4byte_selector("aggregate3((address,bool,bytes)[])")


class DecodeError(ValueError):
    """Raised when return data does not match the expected output type."""

    pass


def checksum(address: str) -> str:
    """Checksum an address regardless of its input casing."""
    return to_checksum_address(address.lower())


def _normalize_arg(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return checksum(value)
    return value


def encode_call(function: str, args: Sequence[Any]) -> bytes:
    """
    Encode call data for a known ERC-20 function.

    Args:
        function: Function name, e.g. "allowance"
        args: Positional arguments matching the function's inputs

    Returns:
        Selector followed by the ABI-encoded arguments

    Raises:
        KeyError: If the function is unknown
        ValueError: If the argument count does not match
    """
    fn_abi = ERC20_FUNCTIONS[function]
    if len(args) != len(fn_abi.input_types):
        raise ValueError(
            f"{fn_abi.signature} expects {len(fn_abi.input_types)} args, got {len(args)}"
        )
    values = [_normalize_arg(t, v) for t, v in zip(fn_abi.input_types, args)]
    return SELECTORS[function] + encode(list(fn_abi.input_types), values)


def decode_result(function: str, data: bytes) -> Any:
    """
    Decode the return data of a known ERC-20 function.

    Raises:
        DecodeError: If the data is empty or malformed
    """
    fn_abi = ERC20_FUNCTIONS[function]
    if len(data) < 32:
        raise DecodeError(f"{fn_abi.signature} returned {len(data)} bytes")
    try:
        (value,) = decode([fn_abi.output_type], data[:32])
    except DecodingError as e:
        raise DecodeError(f"Cannot decode {fn_abi.signature} result: {e}") from e
    return value


def encode_aggregate3(calls: Sequence[Tuple[str, bytes]]) -> bytes:
    """
    Encode a Multicall3 aggregate3 call with allowFailure set on every call.

    Args:
        calls: (target address, call data) pairs, in order

    Returns:
        Call data for Multicall3.aggregate3
    """
    payload = [(checksum(target), True, data) for target, data in calls]
    return AGGREGATE3_SELECTOR + encode(["(address,bool,bytes)[]"], [payload])


def decode_aggregate3(data: bytes) -> List[Tuple[bool, bytes]]:
    """
    Decode the (success, returnData)[] result of aggregate3.

    Raises:
        DecodeError: If the data is malformed
    """
    try:
        (results,) = decode(["(bool,bytes)[]"], data)
    except DecodingError as e:
        raise DecodeError(f"Cannot decode aggregate3 result: {e}") from e
    return [(bool(success), bytes(ret)) for success, ret in results]


def hex_to_bytes(value: str) -> bytes:
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def bytes_to_hex(value: bytes) -> str:
    return "0x" + value.hex()
