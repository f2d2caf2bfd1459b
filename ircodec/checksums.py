"""
IR Remote Codec - Checksum Algorithms

Each protocol family uses its own checksum and they are not
interchangeable: picking the wrong one silently fails validation.
"""

from typing import Iterable


def complement_ok(value: int, inverted: int) -> bool:
    """NEC-style check: ``inverted`` is the bitwise complement of ``value``."""
    return (value ^ inverted) & 0xFF == 0xFF


def nibble_sum(data: Iterable[int]) -> int:
    """Sum of all high and low nibbles, mod 16 (Carrier, LG)."""
    total = 0
    for byte in data:
        total += (byte & 0x0F) + ((byte >> 4) & 0x0F)
    return total & 0x0F


def byte_sum(data: Iterable[int]) -> int:
    """Sum of bytes mod 256 (Daikin, Hitachi, Mitsubishi)."""
    return sum(data) & 0xFF


def xor_bytes(data: Iterable[int]) -> int:
    """XOR of all bytes (Haier, Samsung48, Panasonic)."""
    result = 0
    for byte in data:
        result ^= byte
    return result & 0xFF


def twos_complement(data: Iterable[int]) -> int:
    """Two's complement of the byte sum (Fujitsu): frame bytes sum to 0."""
    return (0x100 - sum(data)) & 0xFF


def lg_checksum(address: int, command: int) -> int:
    """LG 4-bit checksum over the address byte and the 16-bit command."""
    return nibble_sum((address & 0xFF, command & 0xFF, (command >> 8) & 0xFF))


def lego_checksum(data: int) -> int:
    """Lego Power Functions LRC nibble: 0xF ^ n1 ^ n2 ^ n3."""
    return 0xF ^ ((data >> 12) & 0xF) ^ ((data >> 8) & 0xF) ^ ((data >> 4) & 0xF)


def midea_ok(data: bytes) -> bool:
    """Midea frames repeat bytes 0..2 inverted in bytes 3..5."""
    return all(complement_ok(data[i], data[i + 3]) for i in range(3))
