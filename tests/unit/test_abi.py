"""
test_abi.py - Unit tests for instruction and result encoding
"""

import hashlib
import struct

import pytest

from token_ledger import (
    Address, Operation, InvalidInstruction, MAX_AMOUNT,
    selector, encode_call, decode_call, encode_result, decode_result,
)


A = Address.derive("a")
B = Address.derive("b")


class TestSelector:

    def test_selector_is_hash_prefix(self):
        expected = hashlib.sha256(b"global:transfer").digest()[:8]
        assert selector(Operation.TRANSFER) == expected

    def test_selectors_are_distinct(self):
        assert len({selector(op) for op in Operation}) == len(Operation)


class TestEncodeCall:

    def test_layout(self):
        data = encode_call(Operation.MINT_TO, [A, B, 100000])
        assert data[:8] == selector(Operation.MINT_TO)
        assert data[8:40] == A.raw
        assert data[40:72] == B.raw
        assert data[72:] == struct.pack("<Q", 100000)

    def test_hex_addresses_accepted(self):
        assert encode_call(Operation.GET_BALANCE, [A.hex()]) == encode_call(Operation.GET_BALANCE, [A])

    def test_decode_recovers_arguments(self):
        op, args = decode_call(encode_call(Operation.TRANSFER, [A, B, A, 70000]))
        assert op is Operation.TRANSFER
        assert args == [A, B, A, 70000]

    def test_no_argument_call(self):
        data = encode_call(Operation.TOTAL_SUPPLY, [])
        assert data == selector(Operation.TOTAL_SUPPLY)
        assert decode_call(data) == (Operation.TOTAL_SUPPLY, [])

    def test_wrong_arity(self):
        with pytest.raises(InvalidInstruction, match="takes 3 arguments"):
            encode_call(Operation.BURN, [A, B])

    @pytest.mark.parametrize("amount", [-1, MAX_AMOUNT + 1])
    def test_amount_out_of_range(self, amount):
        with pytest.raises(InvalidInstruction, match="out of range"):
            encode_call(Operation.BURN, [A, B, amount])

    def test_amount_must_be_int(self):
        with pytest.raises(InvalidInstruction, match="must be int"):
            encode_call(Operation.BURN, [A, B, 1.0])

    def test_bad_address(self):
        with pytest.raises(InvalidInstruction):
            encode_call(Operation.GET_BALANCE, ["0x1234"])

    def test_max_amount_encodes(self):
        _, args = decode_call(encode_call(Operation.BURN, [A, B, MAX_AMOUNT]))
        assert args[2] == MAX_AMOUNT


class TestDecodeCall:

    def test_unknown_selector(self):
        with pytest.raises(InvalidInstruction, match="unknown selector"):
            decode_call(b"\x00" * 8)

    def test_truncated(self):
        data = encode_call(Operation.GET_BALANCE, [A])
        with pytest.raises(InvalidInstruction, match="expected 40 bytes"):
            decode_call(data[:-1])

    def test_trailing_bytes(self):
        data = encode_call(Operation.TOTAL_SUPPLY, [])
        with pytest.raises(InvalidInstruction):
            decode_call(data + b"\x00")


class TestResults:

    def test_read_result(self):
        data = encode_result(Operation.TOTAL_SUPPLY, 80000)
        assert data == struct.pack("<Q", 80000)
        assert decode_result(Operation.TOTAL_SUPPLY, data) == 80000

    def test_write_result_is_empty(self):
        assert encode_result(Operation.TRANSFER, None) == b""
        assert decode_result(Operation.TRANSFER, b"") is None

    def test_write_result_with_data_rejected(self):
        with pytest.raises(InvalidInstruction):
            decode_result(Operation.BURN, b"\x01")

    def test_short_read_result(self):
        with pytest.raises(InvalidInstruction):
            decode_result(Operation.GET_BALANCE, b"\x01\x02")
