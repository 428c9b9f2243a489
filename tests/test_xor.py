#!/usr/bin/env python3
"""
Tests for the XOR combinator, repeating-key XOR and Hamming distance
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from xorxploit import (
    XorStream, xor_bytes, repeating_key_xor, hamming_distance, UnevenLength
)

BURNING = b"Burning 'em, if you ain't quick and nimble\nI go crazy when I hear a cymbal"
BURNING_ICE_HEX = (
    "0b3637272a2b2e63622c2e69692a23693a2a3c6324202d623d63343c2a26226324272765272a282b2f20"
    "430a652e2c652a3124333a653e2b2027630c692b20283165286326302e27282f"
)

def test_fixed_xor():
    """Two equal-length buffers combine byte by byte"""
    print("Testing fixed XOR...")

    a = bytes.fromhex("1c0111001f010100061a024b53535009181c")
    b = bytes.fromhex("686974207468652062756c6c277320657965")
    assert xor_bytes(a, b).hex() == "746865206b696420646f6e277420706c6179"

    print("✅ Fixed XOR test passed")

def test_xor_is_an_involution():
    print("Testing XOR involution...")

    samples = [
        (b"", b""),
        (b"attack at dawn", b"0123456789abcd"),
        (bytes(range(256)), bytes(reversed(range(256)))),
        ("こんにちは".encode(), "こんこんこ".encode()),
    ]
    for p, k in samples:
        assert xor_bytes(xor_bytes(p, k), k) == p

    print("✅ XOR involution test passed")

def test_uneven_length():
    """Mismatched inputs fail without producing a partial result"""
    print("Testing uneven lengths...")

    with pytest.raises(UnevenLength):
        xor_bytes(b"\xf0", b"\x0f\xff")
    with pytest.raises(UnevenLength):
        xor_bytes(b"abc", b"")

    # sized inputs are rejected before the first byte is emitted
    stream = XorStream(b"ab", b"a")
    with pytest.raises(UnevenLength):
        next(stream)

    # unsized sources fail once one of them runs dry
    with pytest.raises(UnevenLength):
        list(XorStream(iter(b"abc"), iter(b"ab")))

    print("✅ Uneven length tests passed")

def test_stream_is_lazy_and_single_pass():
    print("Testing lazy stream...")

    stream = XorStream(iter([1, 2, 3]), iter([1, 1, 1]))
    assert next(stream) == 0
    assert list(stream) == [3, 2]
    assert list(stream) == []

    print("✅ Lazy stream test passed")

def test_repeating_key_xor():
    print("Testing repeating-key XOR...")

    assert repeating_key_xor(BURNING, b"ICE").hex() == BURNING_ICE_HEX
    assert repeating_key_xor(bytes.fromhex(BURNING_ICE_HEX), b"ICE") == BURNING
    assert repeating_key_xor(b"", b"ICE") == b""
    with pytest.raises(ValueError):
        repeating_key_xor(b"data", b"")

    print("✅ Repeating-key XOR tests passed")

def test_hamming_distance():
    print("Testing Hamming distance...")

    assert hamming_distance(b"this is a test", b"wokka wokka!!!") == 37
    assert hamming_distance(b"", b"") == 0
    assert hamming_distance(b"\x00", b"\xff") == 8
    assert hamming_distance(b"HELLO", b"JELLO") == 1
    with pytest.raises(UnevenLength):
        hamming_distance(b"abc", b"ab")

    print("✅ Hamming distance tests passed")

def run_all_tests():
    print("🧪 Running XOR tests...")
    print("=" * 50)

    try:
        test_fixed_xor()
        test_xor_is_an_involution()
        test_uneven_length()
        test_stream_is_lazy_and_single_pass()
        test_repeating_key_xor()
        test_hamming_distance()

        print("=" * 50)
        print("🎉 All XOR tests passed!")
        return True

    except AssertionError as e:
        print(f"❌ Test failed: {e}")
        return False

if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
