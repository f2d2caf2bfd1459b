"""
IR Remote Codec - Protocol Constants

This module contains the protocol identifiers and the per-protocol timing
table shared by the decoders and encoders.

Timing fields are in microseconds. For pulse-width protocols the
``one_space`` field holds the mark duration of a "1" bit and
``zero_space`` the constant space between bits.
"""

from enum import IntEnum, IntFlag
from typing import Dict, NamedTuple, Optional


class ProtocolId(IntEnum):
    """Protocol identifiers (values are stable, used in stored codes)."""
    UNKNOWN = 0
    NEC = 1
    SAMSUNG = 2
    SONY = 3
    JVC = 4
    RC5 = 5
    RC6 = 6
    LG = 7
    DENON = 8
    SHARP = 9
    PANASONIC = 10
    KASEIKYO = 11
    APPLE = 12
    ONKYO = 13
    SAMSUNG48 = 14
    SAMSUNGLG = 15
    LG2 = 16
    MITSUBISHI = 17
    DAIKIN = 18
    FUJITSU = 19
    HAIER = 20
    MIDEA = 21
    CARRIER = 22
    HITACHI = 23
    WHYNTER = 24
    LEGO_PF = 25
    MAGIQUEST = 26
    BOSEWAVE = 27
    BANG_OLUFSEN = 28
    FAST = 29
    PULSE_DISTANCE = 30
    PULSE_WIDTH = 31
    RAW = 32


class Encoding(IntFlag):
    """Encoding flags of a protocol table entry."""
    LSB_FIRST = 0x00
    PULSE_DISTANCE = 0x00
    HAS_STOP_BIT = 0x00
    PULSE_WIDTH = 0x10
    NO_STOP_BIT = 0x20
    BIPHASE = 0x40
    MSB_FIRST = 0x80


class ProtocolConstants(NamedTuple):
    """Timing and framing metadata for one protocol."""
    protocol: ProtocolId
    carrier_khz: int
    header_mark: int
    header_space: int
    bit_mark: int
    one_space: int
    zero_space: int
    flags: Encoding
    repeat_period_ms: int
    bits: int               # 0 = variable length

    @property
    def msb_first(self) -> bool:
        return bool(self.flags & Encoding.MSB_FIRST)

    @property
    def pulse_width(self) -> bool:
        return bool(self.flags & Encoding.PULSE_WIDTH)

    @property
    def biphase(self) -> bool:
        return bool(self.flags & Encoding.BIPHASE)

    @property
    def has_stop_bit(self) -> bool:
        return not (self.flags & (Encoding.NO_STOP_BIT | Encoding.BIPHASE))

    @property
    def has_header(self) -> bool:
        return self.header_mark > 0


# Carrier defaults
DEFAULT_CARRIER_HZ = 38000
DEFAULT_DUTY_CYCLE = 33    # percent

_LSB = Encoding.LSB_FIRST | Encoding.PULSE_DISTANCE
_MSB = Encoding.MSB_FIRST | Encoding.PULSE_DISTANCE

# Inter-frame gap between the two Daikin frames
DAIKIN_GAP_US = 29000


def _entry(protocol, carrier_khz, header_mark, header_space, bit_mark,
           one_space, zero_space, flags, repeat_period_ms, bits):
    return ProtocolConstants(protocol, carrier_khz, header_mark, header_space,
                             bit_mark, one_space, zero_space, Encoding(flags),
                             repeat_period_ms, bits)


# Protocol timing table, keyed by ProtocolId
PROTOCOL_TABLE: Dict[ProtocolId, ProtocolConstants] = {c.protocol: c for c in (
    # Consumer protocols
    _entry(ProtocolId.NEC, 38, 9000, 4500, 560, 1690, 560, _LSB, 110, 32),
    _entry(ProtocolId.SAMSUNG, 38, 4500, 4500, 560, 1690, 560, _LSB, 108, 32),
    _entry(ProtocolId.SONY, 40, 2400, 600, 600, 1200, 600,
           Encoding.PULSE_WIDTH | Encoding.NO_STOP_BIT, 45, 0),
    _entry(ProtocolId.JVC, 38, 8400, 4200, 525, 1575, 525, _LSB, 60, 16),
    _entry(ProtocolId.LG, 38, 9000, 4500, 560, 1690, 560, _LSB, 110, 28),
    _entry(ProtocolId.RC5, 36, 0, 0, 889, 889, 889,
           Encoding.MSB_FIRST | Encoding.BIPHASE, 114, 14),
    _entry(ProtocolId.RC6, 36, 2666, 889, 444, 444, 444,
           Encoding.MSB_FIRST | Encoding.BIPHASE, 114, 20),
    _entry(ProtocolId.DENON, 38, 275, 775, 275, 1900, 775, _LSB, 45, 15),
    _entry(ProtocolId.SHARP, 38, 275, 775, 275, 1900, 775, _LSB, 45, 15),
    _entry(ProtocolId.PANASONIC, 37, 3456, 1728, 432, 1296, 432, _LSB, 130, 48),
    _entry(ProtocolId.KASEIKYO, 37, 3456, 1728, 432, 1296, 432, _LSB, 130, 48),
    _entry(ProtocolId.APPLE, 38, 9000, 4500, 560, 1690, 560, _LSB, 110, 32),
    _entry(ProtocolId.ONKYO, 38, 9000, 4500, 560, 1690, 560, _LSB, 110, 32),
    _entry(ProtocolId.SAMSUNG48, 38, 4500, 4500, 560, 1690, 560, _LSB, 108, 48),
    _entry(ProtocolId.LG2, 38, 3200, 9900, 560, 1690, 560, _LSB, 110, 28),

    # Air conditioner protocols (byte frames, LSB first in each byte)
    _entry(ProtocolId.MITSUBISHI, 38, 3400, 1750, 450, 1300, 420, _LSB, 0, 152),
    _entry(ProtocolId.DAIKIN, 38, 3650, 1623, 428, 1280, 428, _LSB, 0, 216),
    _entry(ProtocolId.FUJITSU, 38, 3300, 1650, 420, 1280, 420, _LSB, 0, 0),
    _entry(ProtocolId.HAIER, 38, 3000, 3000, 520, 1650, 650, _LSB, 0, 104),
    _entry(ProtocolId.MIDEA, 38, 4500, 4500, 560, 1680, 560, _LSB, 0, 48),
    _entry(ProtocolId.CARRIER, 38, 8820, 4410, 420, 1260, 420, _LSB, 0, 128),
    _entry(ProtocolId.HITACHI, 38, 3300, 1700, 370, 1260, 370, _LSB, 0, 0),

    # Exotic protocols
    _entry(ProtocolId.WHYNTER, 38, 2850, 2850, 750, 2150, 750, _MSB, 100, 32),
    _entry(ProtocolId.LEGO_PF, 38, 158, 1026, 158, 553, 263, _MSB, 0, 16),
    _entry(ProtocolId.MAGIQUEST, 38, 0, 0, 288, 864, 576, _MSB, 0, 56),
    _entry(ProtocolId.BOSEWAVE, 38, 1014, 1468, 428, 896, 1492, _MSB, 50, 16),
    _entry(ProtocolId.BANG_OLUFSEN, 455, 3125, 3125, 625, 1250, 625,
           Encoding.MSB_FIRST | Encoding.PULSE_WIDTH, 100, 16),
    _entry(ProtocolId.FAST, 38, 0, 0, 320, 640, 320, _LSB, 0, 8),
)}

# Protocols whose last NEC-style decode can be repeated by a repeat frame
NEC_FAMILY = frozenset({ProtocolId.NEC, ProtocolId.APPLE, ProtocolId.ONKYO})

# Protocols carrying a toggle bit instead of repeat frames
BIPHASE_PROTOCOLS = frozenset({ProtocolId.RC5, ProtocolId.RC6})


def get_protocol_constants(protocol: ProtocolId) -> Optional[ProtocolConstants]:
    """
    Get the timing table entry for a protocol.

    Args:
        protocol: Protocol identifier

    Returns:
        ProtocolConstants, or None for protocols without fixed timing
        (UNKNOWN, RAW, generic pulse results)
    """
    return PROTOCOL_TABLE.get(protocol)


def get_carrier_hz(protocol: ProtocolId) -> int:
    """
    Get the carrier frequency for a protocol.

    Returns:
        Frequency in Hz, or DEFAULT_CARRIER_HZ if the protocol has no entry
    """
    constants = PROTOCOL_TABLE.get(protocol)
    return constants.carrier_khz * 1000 if constants else DEFAULT_CARRIER_HZ


def protocol_name(protocol: int) -> str:
    """Display name of a protocol ("NEC", "LEGO_PF", ...) or "INVALID"."""
    try:
        return ProtocolId(protocol).name
    except ValueError:
        return "INVALID"


def parse_protocol(name: str) -> ProtocolId:
    """
    Look up a protocol by name (case-insensitive, '-' accepted for '_').

    Raises:
        ValueError: If the name is not a known protocol
    """
    key = name.strip().upper().replace("-", "_")
    try:
        return ProtocolId[key]
    except KeyError:
        raise ValueError(f"Unknown protocol: {name}") from None
