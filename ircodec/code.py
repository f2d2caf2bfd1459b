"""
IR Remote Codec - Decoded Code Record

DecodedCode is what a decoder produces and what encoders, storage and the
AC state codec consume.
"""

from dataclasses import dataclass, replace
from enum import IntFlag
from typing import NamedTuple, Optional, Tuple

from .protocol import (
    ProtocolId,
    DEFAULT_DUTY_CYCLE,
    get_carrier_hz,
    get_protocol_constants,
    protocol_name,
)
from .timing import TimingSymbol


class CodeFlag(IntFlag):
    """Status flags of a decoded code."""
    NONE = 0x00
    REPEAT = 0x01           # Frame is a repeat of the previous code
    AUTO_REPEAT = 0x02      # Protocol has a mandatory repeat frame
    PARITY_FAILED = 0x04    # Checksum/parity validation failed
    TOGGLE_BIT = 0x08       # RC5/RC6 toggle bit is set
    EXTRA_INFO = 0x10       # Extra info available (e.g. vendor id)
    EXTENDED = 0x20         # NEC extended addressing (16-bit address)
    WAS_OVERFLOW = 0x40     # Capture buffer overflowed
    MSB_FIRST = 0x80        # Data transmitted MSB first


class ValidationStatus(IntFlag):
    """Multi-frame verification and conditioning status."""
    NONE = 0x00
    SINGLE_FRAME = 0x01
    TWO_FRAMES = 0x02
    THREE_FRAMES = 0x03
    NOISE_FILTERED = 0x10
    GAP_TRIMMED = 0x20
    CARRIER_DETECTED = 0x40

    @property
    def frame_count(self) -> int:
        return int(self) & 0x03


FRAME_STATUS = {
    1: ValidationStatus.SINGLE_FRAME,
    2: ValidationStatus.TWO_FRAMES,
    3: ValidationStatus.THREE_FRAMES,
}


class DistanceWidthTiming(NamedTuple):
    """Measured timing of a protocol decoded by the universal decoder."""
    header_mark: int
    header_space: int
    one_mark: int
    one_space: int
    zero_mark: int
    zero_space: int


@dataclass(frozen=True)
class DecodedCode:
    """
    A decoded (or to-be-encoded) IR command.

    ``data`` holds the protocol's bit word as transmitted, ``address`` and
    ``command`` the fields extracted from it. ``raw`` is only set for RAW
    codes, ``payload`` for byte-frame (AC) protocols.
    """
    protocol: ProtocolId
    data: int = 0
    bits: int = 0
    address: int = 0
    command: int = 0
    flags: CodeFlag = CodeFlag.NONE
    carrier_hz: int = 0
    duty_cycle: int = DEFAULT_DUTY_CYCLE
    validation: ValidationStatus = ValidationStatus.NONE
    repeat_count: int = 0
    repeat_period_ms: int = 0
    raw: Tuple[TimingSymbol, ...] = ()
    payload: bytes = b""
    checksums: Tuple[bool, ...] = ()
    timing: Optional[DistanceWidthTiming] = None

    def __post_init__(self):
        if not self.carrier_hz:
            object.__setattr__(self, "carrier_hz", get_carrier_hz(self.protocol))
        if not self.repeat_period_ms:
            constants = get_protocol_constants(self.protocol)
            if constants:
                object.__setattr__(self, "repeat_period_ms", constants.repeat_period_ms)

    @property
    def name(self) -> str:
        return protocol_name(self.protocol)

    @property
    def is_repeat(self) -> bool:
        return bool(self.flags & CodeFlag.REPEAT)

    @property
    def parity_ok(self) -> bool:
        return not self.flags & CodeFlag.PARITY_FAILED

    def with_flags(self, flags: CodeFlag) -> "DecodedCode":
        """Copy of this code with extra flags set."""
        return replace(self, flags=self.flags | flags)


def make_code(protocol: ProtocolId, data: int, bits: int, **fields) -> DecodedCode:
    """Build a DecodedCode, setting MSB_FIRST from the protocol table."""
    constants = get_protocol_constants(protocol)
    flags = CodeFlag(fields.pop("flags", CodeFlag.NONE))
    if constants and constants.msb_first:
        flags |= CodeFlag.MSB_FIRST
    return DecodedCode(protocol=protocol, data=data, bits=bits, flags=flags, **fields)


def bytes_to_word(data: bytes, count: int = 8) -> int:
    """Little-endian word of the first ``count`` bytes."""
    return int.from_bytes(bytes(data[:count]), "little")
