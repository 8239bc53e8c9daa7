"""
abi.py - Instruction and result encoding

Instruction data layout:

    selector (8 bytes) || arg_0 || arg_1 || ...

The selector is the first 8 bytes of sha256("global:" + name). Address
arguments are 32 raw bytes; amounts are u64 little-endian. Read operations
return a single u64 little-endian value; writes return empty data.
"""

from __future__ import annotations
import hashlib
import struct
from typing import Any, Dict, List, Sequence, Tuple

from .core import (
    ADDRESS_LENGTH, MAX_AMOUNT,
    Address, InvalidInstruction, Operation,
)


SELECTOR_LENGTH = 8

ADDRESS = "address"
U64 = "u64"

_U64 = struct.Struct("<Q")

# Positional argument types per operation.
SIGNATURES: Dict[Operation, Tuple[str, ...]] = {
    Operation.SET_MINT: (ADDRESS,),
    Operation.TOTAL_SUPPLY: (),
    Operation.GET_BALANCE: (ADDRESS,),
    Operation.MINT_TO: (ADDRESS, ADDRESS, U64),
    Operation.TRANSFER: (ADDRESS, ADDRESS, ADDRESS, U64),
    Operation.BURN: (ADDRESS, ADDRESS, U64),
}


def selector(operation: Operation) -> bytes:
    return hashlib.sha256(f"global:{operation.value}".encode()).digest()[:SELECTOR_LENGTH]


_BY_SELECTOR: Dict[bytes, Operation] = {selector(op): op for op in Operation}


def encode_u64(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInstruction(f"u64 argument must be int, got {type(value).__name__}")
    if value < 0 or value > MAX_AMOUNT:
        raise InvalidInstruction(f"u64 argument out of range: {value}")
    return _U64.pack(value)


def decode_u64(data: bytes) -> int:
    if len(data) != _U64.size:
        raise InvalidInstruction(f"expected {_U64.size} bytes of u64 data, got {len(data)}")
    return _U64.unpack(data)[0]


def encode_call(operation: Operation, args: Sequence[Any]) -> bytes:
    """
    Encode an operation and its positional arguments.

    Addresses may be given as Address, raw bytes or hex text.

    Raises:
        InvalidInstruction: On wrong arity or an unencodable argument
    """
    types = SIGNATURES[operation]
    if len(args) != len(types):
        raise InvalidInstruction(
            f"{operation.value} takes {len(types)} arguments, got {len(args)}"
        )
    parts = [selector(operation)]
    for kind, value in zip(types, args):
        if kind == ADDRESS:
            try:
                parts.append(Address.coerce(value).raw)
            except (TypeError, ValueError) as e:
                raise InvalidInstruction(f"{operation.value}: {e}") from None
        else:
            parts.append(encode_u64(value))
    return b"".join(parts)


def decode_call(data: bytes) -> Tuple[Operation, List[Any]]:
    """
    Decode instruction data into (operation, args).

    Raises:
        InvalidInstruction: On an unknown selector or a length mismatch
    """
    head = bytes(data[:SELECTOR_LENGTH])
    operation = _BY_SELECTOR.get(head)
    if operation is None:
        raise InvalidInstruction(f"unknown selector: {head.hex()}")

    types = SIGNATURES[operation]
    expected = SELECTOR_LENGTH + sum(
        ADDRESS_LENGTH if kind == ADDRESS else _U64.size for kind in types
    )
    if len(data) != expected:
        raise InvalidInstruction(
            f"{operation.value}: expected {expected} bytes, got {len(data)}"
        )

    args: List[Any] = []
    offset = SELECTOR_LENGTH
    for kind in types:
        if kind == ADDRESS:
            args.append(Address(bytes(data[offset:offset + ADDRESS_LENGTH])))
            offset += ADDRESS_LENGTH
        else:
            args.append(decode_u64(bytes(data[offset:offset + _U64.size])))
            offset += _U64.size
    return operation, args


def encode_result(operation: Operation, value: Any) -> bytes:
    """Encode a return value: u64 for reads, empty for writes."""
    if operation.is_read_only:
        return encode_u64(value)
    return b""


def decode_result(operation: Operation, data: bytes) -> Any:
    if operation.is_read_only:
        return decode_u64(data)
    if data:
        raise InvalidInstruction(f"{operation.value} returns no data, got {len(data)} bytes")
    return None
