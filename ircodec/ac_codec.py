"""
IR Remote Codec - AC State Codec

Turns an AcState into a protocol frame and back.

Each protocol has a layout table: a template frame carrying the fixed
signature bytes, the position of every state field and the checksum
rule. Encoding always starts from the template and writes every field,
so a frame never depends on a previous one.

A field is a bit mask over the frame bytes, read little-endian from
``offset`` (a mask wider than 0xFF spans the following bytes):

    Field(13, 0x70, MODES)   bits 4..6 of byte 13, values from MODES
    Field(14, 0xFF, scale=2) byte 14 holds temperature * 2
"""

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Callable, Dict, List, NamedTuple, Optional

from .ac_state import (
    AC_PROTOCOLS,
    AcMode,
    AcState,
    FanSpeed,
    Swing,
    default_state,
    is_configured,
    set_protocol,
    validate_state,
)
from .checksums import byte_sum, lg_checksum, nibble_sum, twos_complement, xor_bytes
from .code import DecodedCode
from .encoders import encode_ac_frame, encode_protocol
from .errors import AcStateError, EncodeError
from .protocol import ProtocolId, get_carrier_hz, protocol_name
from .timing import TimingSymbol

log = logging.getLogger(__name__)


class Field(NamedTuple):
    """Position of one state field in a frame."""
    offset: int
    mask: int
    values: Optional[Dict] = None   # state value -> code; None = numeric
    base: int = 0                   # numeric: code = (value - base) * scale
    scale: int = 1

    @property
    def shift(self) -> int:
        return (self.mask & -self.mask).bit_length() - 1

    @property
    def size(self) -> int:
        return (self.mask.bit_length() + 7) // 8

    def write(self, frame: bytearray, value):
        if self.values is not None:
            code = self.values[value]
        else:
            code = (int(value) - self.base) * self.scale
        end = self.offset + self.size
        word = int.from_bytes(frame[self.offset:end], "little")
        word = (word & ~self.mask) | ((code << self.shift) & self.mask)
        frame[self.offset:end] = word.to_bytes(self.size, "little")

    def read(self, frame: bytes):
        """Field value, or None if the code has no state value."""
        word = int.from_bytes(frame[self.offset:self.offset + self.size], "little")
        code = (word & self.mask) >> self.shift
        if self.values is None:
            return code // self.scale + self.base
        for value, value_code in self.values.items():
            if value_code == code:
                return value
        return None


@dataclass(frozen=True)
class AcLayout:
    """Frame layout of one AC protocol."""
    protocol: ProtocolId
    template: bytes
    mode: Field
    temperature: Field
    fan: Field
    swing: Field
    checksum: Callable[[bytearray], None]
    power: Optional[Field] = None
    features: Dict[str, Field] = field(default_factory=dict)
    off_frame: Optional[bytes] = None   # sent instead of the state when powered off
    temp_range: tuple = (16, 30)
    send_as: Optional[ProtocolId] = None


class EncodedFrame(NamedTuple):
    """An encoded AC state, ready to transmit."""
    protocol: ProtocolId
    frame: bytes
    symbols: List[TimingSymbol]
    carrier_hz: int


# ---------- Checksums ----------

def _sum_last(frame: bytearray):
    frame[-1] = byte_sum(frame[:-1])


def _daikin_checksum(frame: bytearray):
    frame[7] = byte_sum(frame[0:7])
    frame[26] = byte_sum(frame[8:26])


def _carrier_checksum(frame: bytearray):
    frame[15] = (frame[15] & 0xF0) | nibble_sum(frame[:15])


def _fujitsu_checksum(frame: bytearray):
    frame[-1] = twos_complement(frame[:-1])


def _xor_last(frame: bytearray):
    frame[-1] = xor_bytes(frame[:-1])


def _midea_checksum(frame: bytearray):
    for i in range(3):
        frame[i + 3] = ~frame[i] & 0xFF


def _samsung48_checksum(frame: bytearray):
    frame[5] = xor_bytes(frame[:5])


def _panasonic_checksum(frame: bytearray):
    frame[3] = xor_bytes(frame[:3])


def _lg2_checksum(frame: bytearray):
    frame[3] = lg_checksum(frame[0], frame[1] | (frame[2] << 8))


# ---------- Layout tables ----------

# Midea R05D temperature is Gray coded, 17C = 0
_GRAY = (0x0, 0x1, 0x3, 0x2, 0x6, 0x7, 0x5, 0x4, 0xC, 0xD, 0x9, 0x8, 0xA, 0xB)
_MIDEA_TEMPS = {17 + i: code for i, code in enumerate(_GRAY)}
_MIDEA_TEMPS[16] = _GRAY[0]

_SWING_PLAIN = {Swing.OFF: 0, Swing.VERTICAL: 1, Swing.HORIZONTAL: 2, Swing.BOTH: 3, Swing.AUTO: 4}

LAYOUTS: Dict[ProtocolId, AcLayout] = {layout.protocol: layout for layout in (
    # 8 byte preamble frame + 19 byte state frame
    AcLayout(
        protocol=ProtocolId.DAIKIN,
        template=bytes([0x11, 0xDA, 0x27, 0x00, 0xC5, 0x00, 0x00, 0x00,
                        0x11, 0xDA, 0x27, 0x00, 0x00, 0x08, 0x30, 0x00, 0xA0, 0x00,
                        0x00, 0x06, 0x60, 0x00, 0x00, 0xC1, 0x00, 0x00, 0x00]),
        power=Field(13, 0x01),
        mode=Field(13, 0x70, {AcMode.AUTO: 0, AcMode.DRY: 2, AcMode.COOL: 3, AcMode.HEAT: 4,
                              AcMode.FAN: 6, AcMode.OFF: 0}),
        temperature=Field(14, 0xFF, scale=2),
        fan=Field(16, 0xF0, {FanSpeed.AUTO: 0xA, FanSpeed.LOW: 3, FanSpeed.MEDIUM: 5,
                             FanSpeed.HIGH: 7, FanSpeed.QUIET: 0xB, FanSpeed.TURBO: 7}),
        # Vertical swing: low nibble of byte 16, horizontal: low nibble of byte 17
        swing=Field(16, 0x0F0F, {Swing.OFF: 0x000, Swing.VERTICAL: 0x00F, Swing.HORIZONTAL: 0xF00,
                                 Swing.BOTH: 0xF0F, Swing.AUTO: 0xF0F}),
        features={
            "comfort_mode": Field(6, 0x10),
            "turbo": Field(21, 0x01),
            "quiet": Field(21, 0x20),
            "econo": Field(24, 0x04),
        },
        checksum=_daikin_checksum,
        temp_range=(10, 32),
    ),
    AcLayout(
        protocol=ProtocolId.MITSUBISHI,
        template=bytes([0x23, 0xCB, 0x26, 0x01, 0x00, 0x00, 0x20, 0x00, 0x00, 0x00,
                        0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00]),
        power=Field(5, 0x20),
        mode=Field(6, 0x38, {AcMode.AUTO: 4, AcMode.COOL: 3, AcMode.DRY: 2, AcMode.HEAT: 1,
                             AcMode.FAN: 7, AcMode.OFF: 4}),
        temperature=Field(7, 0x0F, base=16),
        fan=Field(9, 0x07, {FanSpeed.AUTO: 0, FanSpeed.LOW: 1, FanSpeed.MEDIUM: 2,
                            FanSpeed.HIGH: 3, FanSpeed.TURBO: 4, FanSpeed.QUIET: 5}),
        # Wide vane: high nibble of byte 8, vane: bits 3..5 of byte 9
        swing=Field(8, 0x38F0, {Swing.OFF: 0x000, Swing.VERTICAL: 0x380, Swing.HORIZONTAL: 0x00C,
                                Swing.BOTH: 0x38C, Swing.AUTO: 0x008}),
        features={
            "econo": Field(14, 0x10),
            "clean": Field(15, 0x04),
        },
        checksum=_sum_last,
    ),
    # Carrier / Voltas, including the features of Indian market models
    AcLayout(
        protocol=ProtocolId.CARRIER,
        template=bytes([0x4D] + [0x00] * 15),
        power=Field(1, 0x80),
        mode=Field(1, 0x07, {AcMode.AUTO: 0, AcMode.COOL: 1, AcMode.DRY: 2, AcMode.FAN: 3,
                             AcMode.HEAT: 4, AcMode.OFF: 0}),
        temperature=Field(2, 0x0F, base=16),
        fan=Field(2, 0x70, {FanSpeed.AUTO: 0, FanSpeed.LOW: 1, FanSpeed.MEDIUM: 2,
                            FanSpeed.HIGH: 3, FanSpeed.QUIET: 4, FanSpeed.TURBO: 5}),
        swing=Field(3, 0x07, _SWING_PLAIN),
        features={
            "turbo": Field(4, 0x01),
            "sleep": Field(4, 0x02),
            "display": Field(4, 0x04),
            "econo": Field(4, 0x08),
            "clean": Field(4, 0x10),
            "anti_fungal": Field(4, 0x20),
            "auto_clean": Field(4, 0x40),
            "light": Field(5, 0x01),
            "beep": Field(5, 0x02),
            "filter": Field(5, 0x04),
            "sleep_timer": Field(6, 0xFF),
            "comfort_mode": Field(7, 0x03),
        },
        checksum=_carrier_checksum,
    ),
    AcLayout(
        protocol=ProtocolId.HITACHI,
        template=bytes([0x01, 0x10, 0x00, 0x40, 0xBF, 0xFF, 0x00, 0xCC, 0x33]
                       + [0x00] * 24),
        power=Field(17, 0x08),
        mode=Field(11, 0x0F, {AcMode.AUTO: 7, AcMode.COOL: 3, AcMode.HEAT: 6, AcMode.DRY: 5,
                              AcMode.FAN: 1, AcMode.OFF: 7}),
        temperature=Field(13, 0xFC),
        fan=Field(11, 0xF0, {FanSpeed.AUTO: 5, FanSpeed.LOW: 2, FanSpeed.MEDIUM: 3,
                             FanSpeed.HIGH: 4, FanSpeed.QUIET: 1, FanSpeed.TURBO: 6}),
        swing=Field(15, 0x07, _SWING_PLAIN),
        features={
            "turbo": Field(19, 0x02),
            "quiet": Field(19, 0x04),
            "econo": Field(19, 0x08),
            "sleep": Field(21, 0x01),
        },
        checksum=_sum_last,
    ),
    AcLayout(
        protocol=ProtocolId.FUJITSU,
        template=bytes([0x14, 0x63, 0x00, 0x10, 0x10, 0xFE, 0x09, 0x30,
                        0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x20, 0x00]),
        power=Field(8, 0x01),
        temperature=Field(8, 0xF0, base=16),
        mode=Field(9, 0x07, {AcMode.AUTO: 0, AcMode.COOL: 1, AcMode.DRY: 2, AcMode.FAN: 3,
                             AcMode.HEAT: 4, AcMode.OFF: 0}),
        fan=Field(10, 0x07, {FanSpeed.AUTO: 0, FanSpeed.HIGH: 1, FanSpeed.MEDIUM: 2,
                             FanSpeed.LOW: 3, FanSpeed.QUIET: 4, FanSpeed.TURBO: 5}),
        swing=Field(10, 0x70, _SWING_PLAIN),
        features={
            "econo": Field(14, 0x02),
            "clean": Field(14, 0x08),
        },
        checksum=_fujitsu_checksum,
    ),
    AcLayout(
        protocol=ProtocolId.HAIER,
        template=bytes([0xA6, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x05,
                        0x00, 0x00, 0x00]),
        power=Field(4, 0x40),
        temperature=Field(1, 0xF0, base=16),
        swing=Field(1, 0x0F, {Swing.OFF: 0, Swing.VERTICAL: 1, Swing.HORIZONTAL: 2,
                              Swing.BOTH: 3, Swing.AUTO: 0xC}),
        fan=Field(5, 0xE0, {FanSpeed.AUTO: 5, FanSpeed.LOW: 3, FanSpeed.MEDIUM: 2,
                            FanSpeed.HIGH: 1, FanSpeed.QUIET: 4, FanSpeed.TURBO: 6}),
        mode=Field(7, 0xE0, {AcMode.AUTO: 0, AcMode.COOL: 1, AcMode.DRY: 2, AcMode.HEAT: 4,
                             AcMode.FAN: 6, AcMode.OFF: 0}),
        features={
            "turbo": Field(6, 0x40),
            "quiet": Field(6, 0x80),
            "sleep": Field(8, 0x80),
            "display": Field(8, 0x01),
        },
        checksum=_xor_last,
    ),
    # Midea R05D: A B C ~A ~B ~C
    AcLayout(
        protocol=ProtocolId.MIDEA,
        template=bytes([0xB2, 0x1F, 0x00, 0x00, 0x00, 0x00]),
        fan=Field(1, 0xE0, {FanSpeed.AUTO: 0b101, FanSpeed.LOW: 0b100, FanSpeed.MEDIUM: 0b010,
                            FanSpeed.HIGH: 0b001, FanSpeed.QUIET: 0b000, FanSpeed.TURBO: 0b011}),
        temperature=Field(2, 0xF0, _MIDEA_TEMPS),
        mode=Field(2, 0x0C, {AcMode.AUTO: 0b10, AcMode.COOL: 0b00, AcMode.DRY: 0b01,
                             AcMode.HEAT: 0b11, AcMode.FAN: 0b01, AcMode.OFF: 0b10}),
        swing=Field(1, 0x01, {Swing.OFF: 1, Swing.VERTICAL: 0, Swing.HORIZONTAL: 0,
                              Swing.BOTH: 0, Swing.AUTO: 0}),
        off_frame=bytes([0xB2, 0x7B, 0xE0, 0x00, 0x00, 0x00]),
        checksum=_midea_checksum,
        temp_range=(17, 30),
    ),
    # Byte 3 is fixed so frames never carry the Midea complement signature
    AcLayout(
        protocol=ProtocolId.SAMSUNG48,
        template=bytes([0x02, 0x00, 0x00, 0x30, 0x00, 0x00]),
        power=Field(1, 0x01),
        mode=Field(1, 0x70, {AcMode.AUTO: 0, AcMode.COOL: 1, AcMode.DRY: 2, AcMode.FAN: 3,
                             AcMode.HEAT: 4, AcMode.OFF: 0}),
        temperature=Field(2, 0x0F, base=16),
        fan=Field(2, 0x70, {FanSpeed.AUTO: 0, FanSpeed.QUIET: 1, FanSpeed.LOW: 2,
                            FanSpeed.MEDIUM: 4, FanSpeed.HIGH: 5, FanSpeed.TURBO: 7}),
        swing=Field(4, 0x07, _SWING_PLAIN),
        features={
            "turbo": Field(4, 0x10),
            "quiet": Field(4, 0x20),
            "econo": Field(4, 0x40),
            "display": Field(4, 0x80),
        },
        checksum=_samsung48_checksum,
    ),
    # Kaseikyo: state in the command bytes, Panasonic vendor id 0x4004 in the address
    AcLayout(
        protocol=ProtocolId.PANASONIC,
        template=bytes([0x00, 0x00, 0x00, 0x00, 0x04, 0x40]),
        power=Field(0, 0x01),
        mode=Field(0, 0x70, {AcMode.AUTO: 0, AcMode.DRY: 2, AcMode.COOL: 3, AcMode.HEAT: 4,
                             AcMode.FAN: 6, AcMode.OFF: 0}),
        temperature=Field(1, 0x3E),
        fan=Field(2, 0xF0, {FanSpeed.AUTO: 0xA, FanSpeed.LOW: 3, FanSpeed.MEDIUM: 5,
                            FanSpeed.HIGH: 7, FanSpeed.QUIET: 0xB, FanSpeed.TURBO: 0xC}),
        swing=Field(2, 0x0F, {Swing.OFF: 1, Swing.VERTICAL: 0xF, Swing.HORIZONTAL: 0xD,
                              Swing.BOTH: 0xE, Swing.AUTO: 0xC}),
        features={
            "turbo": Field(0, 0x80),
            "quiet": Field(1, 0x80),
            "econo": Field(1, 0x40),
        },
        checksum=_panasonic_checksum,
    ),
    # 28-bit word: address 0x88, 16-bit command, checksum nibble
    AcLayout(
        protocol=ProtocolId.LG2,
        template=bytes([0x88, 0x00, 0x00, 0x00]),
        fan=Field(1, 0x0F, {FanSpeed.AUTO: 5, FanSpeed.LOW: 0, FanSpeed.MEDIUM: 2,
                            FanSpeed.HIGH: 4, FanSpeed.QUIET: 1, FanSpeed.TURBO: 6}),
        temperature=Field(1, 0xF0, base=15),
        mode=Field(2, 0x07, {AcMode.COOL: 0, AcMode.DRY: 1, AcMode.FAN: 2, AcMode.AUTO: 3,
                             AcMode.HEAT: 4, AcMode.OFF: 3}),
        swing=Field(2, 0x08, {Swing.OFF: 0, Swing.VERTICAL: 1, Swing.HORIZONTAL: 0,
                              Swing.BOTH: 1, Swing.AUTO: 1}),
        off_frame=bytes([0x88, 0x05, 0xC0, 0x00]),
        checksum=_lg2_checksum,
    ),
)}
LAYOUTS[ProtocolId.KASEIKYO] = replace(LAYOUTS[ProtocolId.PANASONIC], protocol=ProtocolId.KASEIKYO,
                                       send_as=ProtocolId.PANASONIC)

# Layout of frames as they decode (Kaseikyo frames decode as Panasonic)
_DECODED_LAYOUTS = {p: l for p, l in LAYOUTS.items() if l.send_as is None}

# Data bits of AC protocols sent as a single data word
_WORD_BITS = {ProtocolId.SAMSUNG48: 48, ProtocolId.PANASONIC: 48, ProtocolId.LG2: 28}


# ---------- Encoding ----------

def build_frame(state: AcState, layout: AcLayout) -> bytes:
    """Write every field of ``state`` into a copy of the layout template."""
    powered = state.power and state.mode != AcMode.OFF
    if not powered and layout.off_frame is not None:
        frame = bytearray(layout.off_frame)
        layout.checksum(frame)
        return bytes(frame)

    frame = bytearray(layout.template)
    low, high = layout.temp_range
    temperature = min(max(state.temperature, low), high)

    if layout.power is not None:
        layout.power.write(frame, powered)
    layout.mode.write(frame, AcMode(state.mode))
    layout.temperature.write(frame, temperature)
    layout.fan.write(frame, FanSpeed(state.fan_speed))
    layout.swing.write(frame, Swing(state.swing))
    for name, feature in layout.features.items():
        value = getattr(state, name)
        if feature.mask >> feature.shift == 1:
            value = int(bool(value))
        feature.write(frame, value)

    layout.checksum(frame)
    return bytes(frame)


def frame_symbols(protocol: ProtocolId, frame: bytes) -> List[TimingSymbol]:
    """Timing symbols of an AC frame for the protocol it is sent as."""
    if protocol in _WORD_BITS:
        return encode_protocol(protocol, int.from_bytes(frame, "little"), _WORD_BITS[protocol])
    return encode_ac_frame(protocol, frame)


def encode_ac_state(state: AcState) -> EncodedFrame:
    """
    Encode a full AC state.

    Args:
        state: Configured AC state

    Returns:
        EncodedFrame with the frame bytes and timing symbols

    Raises:
        AcStateError: If the state is not configured or invalid
        EncodeError: If the protocol has no layout
    """
    if not is_configured(state):
        raise AcStateError("AC protocol not configured")
    validate_state(state)

    layout = LAYOUTS.get(state.protocol)
    if layout is None:
        raise EncodeError(f"No AC layout for {protocol_name(state.protocol)}")

    frame = build_frame(state, layout)
    protocol = layout.send_as or layout.protocol
    symbols = frame_symbols(protocol, frame)
    log.info("Encoded %s AC state: %s", protocol.name, frame.hex().upper())
    return EncodedFrame(protocol, frame, symbols, get_carrier_hz(protocol))


# ---------- Decoding ----------

def _frame_bytes(code: DecodedCode) -> bytes:
    if code.payload:
        return code.payload
    bits = _WORD_BITS.get(code.protocol, code.bits)
    return code.data.to_bytes((bits + 7) // 8, "little")


def decode_ac_state(code: DecodedCode) -> AcState:
    """
    Best-effort conversion of a decoded AC frame into a state.

    Protocols with a layout are read back field by field; fields whose
    code is unknown keep their default. Anything else gives the default
    state powered on. Never raises.

    Args:
        code: Decoded code of any protocol

    Returns:
        AcState with ``protocol`` set to the code's protocol
    """
    state = default_state()
    state.power = True
    state.protocol = ProtocolId(code.protocol)
    state.is_learned = code.protocol in AC_PROTOCOLS

    layout = _DECODED_LAYOUTS.get(code.protocol)
    frame = _frame_bytes(code)
    if layout is None or len(frame) < len(layout.template):
        log.debug("No AC layout for %s, using defaults", code.name)
        return state

    if layout.off_frame is not None and frame[:3] == layout.off_frame[:3]:
        state.power = False
        return state
    if layout.power is not None:
        state.power = bool(layout.power.read(frame))

    for name, layout_field, kind in (("mode", layout.mode, AcMode),
                                     ("temperature", layout.temperature, int),
                                     ("fan_speed", layout.fan, FanSpeed),
                                     ("swing", layout.swing, Swing)):
        value = layout_field.read(frame)
        if value is not None:
            setattr(state, name, kind(value))

    for name, feature in layout.features.items():
        default = getattr(state, name)
        value = feature.read(frame)
        setattr(state, name, bool(value) if isinstance(default, bool) else value)

    state.temperature = min(max(state.temperature, 16), 30)
    return state


# ---------- Remote ----------

class AcRemote:
    """
    Holds the state of one air conditioner.

    Every setter validates the change, applies it and returns a fresh
    encode of the whole state. ``on_encode`` (e.g. a transmitter) is
    called with each EncodedFrame.

    Example:
        >>> remote = AcRemote(protocol=ProtocolId.DAIKIN)
        >>> frame = remote.set_temperature(22)
        >>> frame.protocol.name
        'DAIKIN'
    """

    def __init__(self, state: Optional[AcState] = None,
                 protocol: Optional[ProtocolId] = None,
                 on_encode: Optional[Callable[[EncodedFrame], None]] = None):
        self.state = state.copy() if state else default_state()
        self.on_encode = on_encode
        if protocol is not None:
            self.set_protocol(protocol)

    def set_protocol(self, protocol: ProtocolId, variant: int = 0):
        self.state = set_protocol(self.state, protocol, variant)

    def is_configured(self) -> bool:
        return is_configured(self.state)

    def encode(self) -> EncodedFrame:
        encoded = encode_ac_state(self.state)
        if self.on_encode:
            self.on_encode(encoded)
        return encoded

    def update(self, **changes) -> EncodedFrame:
        """
        Apply changes to any AcState fields and encode.

        The state is left untouched if the result is invalid.
        """
        names = {f.name for f in fields(AcState)}
        unknown = set(changes) - names
        if unknown:
            raise AcStateError(f"Unknown AC state fields: {', '.join(sorted(unknown))}")
        candidate = self.state.copy(**changes)
        validate_state(candidate)
        self.state = candidate
        return self.encode()

    def set_power(self, power: bool) -> EncodedFrame:
        return self.update(power=bool(power))

    def set_mode(self, mode: AcMode) -> EncodedFrame:
        return self.update(mode=mode)

    def set_temperature(self, temperature: int) -> EncodedFrame:
        return self.update(temperature=temperature)

    def set_fan_speed(self, fan_speed: FanSpeed) -> EncodedFrame:
        return self.update(fan_speed=fan_speed)

    def set_swing(self, swing: Swing) -> EncodedFrame:
        return self.update(swing=swing)
