"""
IR Remote Codec - Protocol Encoders

The inverse of the decoders: every function returns a new list of
TimingSymbols that the matching decoder accepts.

Frame layout of pulse-distance protocols (NEC shown):
- 9ms mark + 4.5ms space (header)
- one symbol per bit: 560us mark + 560us (0) or 1690us (1) space
- 560us mark (stop bit), space 0 = end of frame

Sony and the bi-phase protocols (RC5, RC6) have no stop bit; their last
symbol ends with a zero space.

Example:
    >>> symbols = encode_nec(0x00, 0x0C)
    >>> len(symbols)
    34
"""

from typing import List, Sequence

from .checksums import lego_checksum, lg_checksum, xor_bytes
from .code import DecodedCode, CodeFlag, DistanceWidthTiming
from .decoders.ac import (
    CarrierDecoder,
    FujitsuDecoder,
    HaierDecoder,
    HitachiDecoder,
    MideaDecoder,
    MitsubishiDecoder,
    DAIKIN_FRAME1_BYTES,
    DAIKIN_FRAME2_BYTES,
)
from .decoders.biphase import rc5_slots, rc6_slots
from .decoders.consumer import APPLE_ADDRESS, NEC_REPEAT_MARK, NEC_REPEAT_SPACE, SONY_VARIANTS
from .errors import EncodeError
from .protocol import DAIKIN_GAP_US, ProtocolId, ProtocolConstants, get_protocol_constants
from .timing import TimingSymbol

# Byte frame lengths (min, max) of AC protocols
AC_FRAME_BYTES = {cls.protocol: (cls.min_bytes, cls.max_bytes) for cls in (
    MitsubishiDecoder, CarrierDecoder, HaierDecoder, MideaDecoder, FujitsuDecoder, HitachiDecoder)}
AC_FRAME_BYTES[ProtocolId.DAIKIN] = (DAIKIN_FRAME1_BYTES + DAIKIN_FRAME2_BYTES,) * 2


def _check_range(name: str, value: int, bits: int):
    if value < 0 or value >> bits:
        raise EncodeError(f"{name} 0x{value:X} does not fit in {bits} bits")


# ---------- Generic pulse encoders ----------

def encode_pulses(
    data: int,
    bits: int,
    timing: DistanceWidthTiming,
    msb_first: bool = False,
    stop_mark: int = 0
) -> List[TimingSymbol]:
    """
    Encode a pulse-distance or pulse-width frame from explicit timing.

    Args:
        data: Data word
        bits: Number of bits to send
        timing: Header and per-bit mark/space durations (header_mark 0 =
            no header)
        msb_first: Send the most significant bit first
        stop_mark: Stop bit mark duration, 0 for no stop bit

    Returns:
        List of TimingSymbols; the last one has a zero space
    """
    symbols = []
    if timing.header_mark:
        symbols.append(TimingSymbol(timing.header_mark, timing.header_space))

    for i in range(bits):
        shift = bits - 1 - i if msb_first else i
        if (data >> shift) & 1:
            symbols.append(TimingSymbol(timing.one_mark, timing.one_space))
        else:
            symbols.append(TimingSymbol(timing.zero_mark, timing.zero_space))

    if stop_mark:
        symbols.append(TimingSymbol(stop_mark, 0))
    elif symbols:
        symbols[-1] = TimingSymbol(symbols[-1].mark, 0)
    return symbols


def protocol_timing(c: ProtocolConstants, header: bool = True) -> DistanceWidthTiming:
    """Per-bit timing of a table entry (pulse width swaps marks and spaces)."""
    header_mark = c.header_mark if header else 0
    if c.pulse_width:
        return DistanceWidthTiming(header_mark, c.header_space,
                                   c.one_space, c.zero_space, c.bit_mark, c.zero_space)
    return DistanceWidthTiming(header_mark, c.header_space,
                               c.bit_mark, c.one_space, c.bit_mark, c.zero_space)


def encode_protocol(protocol: ProtocolId, data: int, bits: int = 0, header: bool = True) -> List[TimingSymbol]:
    """
    Encode a data word with the timing of a protocol table entry.

    Args:
        protocol: Pulse-distance or pulse-width protocol
        data: Data word as the decoder reports it
        bits: Bit count (default: the table's fixed bit count)
        header: Send the header symbol

    Raises:
        EncodeError: If the protocol has no table entry, is bi-phase, or
            the data does not fit
    """
    c = get_protocol_constants(protocol)
    if c is None or c.biphase:
        raise EncodeError(f"No pulse encoder for {ProtocolId(protocol).name}")
    bits = bits or c.bits
    if not bits:
        raise EncodeError(f"{c.protocol.name} has no fixed bit count")
    _check_range("data", data, bits)

    stop_mark = c.bit_mark if c.has_stop_bit else 0
    return encode_pulses(data, bits, protocol_timing(c, header), c.msb_first, stop_mark)


# ---------- NEC family ----------

def encode_nec(address: int, command: int) -> List[TimingSymbol]:
    """
    Encode a standard NEC frame.

    The inverted bytes are calculated automatically.

    Args:
        address: 8-bit address
        command: 8-bit command

    Example:
        >>> encode_nec(0x00, 0xFF)[0]
        TimingSymbol(mark=9000, space=4500)
    """
    _check_range("address", address, 8)
    _check_range("command", command, 8)
    # [address] [~address] [command] [~command]
    word = address | ((~address & 0xFF) << 8) | (command << 16) | ((~command & 0xFF) << 24)
    return encode_nec_word(word)


def encode_nec_extended(address: int, command: int) -> List[TimingSymbol]:
    """
    Encode NEC with extended (16-bit) address.

    For devices that use the full 16 bits for address (no inversion).
    """
    _check_range("address", address, 16)
    _check_range("command", command, 8)
    return encode_nec_word(address | (command << 16) | ((~command & 0xFF) << 24))


def encode_nec_word(word: int) -> List[TimingSymbol]:
    """Encode a raw 32-bit NEC word (sent LSB first)."""
    return encode_protocol(ProtocolId.NEC, word)


def encode_nec_repeat() -> List[TimingSymbol]:
    """
    Encode the NEC repeat frame sent while a button is held.

    Format: 9ms burst, 2.25ms space, 560us burst
    """
    c = get_protocol_constants(ProtocolId.NEC)
    return [TimingSymbol(NEC_REPEAT_MARK, NEC_REPEAT_SPACE), TimingSymbol(c.bit_mark, 0)]


def encode_apple(command: int, device_id: int = 0) -> List[TimingSymbol]:
    """Encode an Apple remote frame (NEC timing, address 0x77E1)."""
    _check_range("command", command, 8)
    _check_range("device id", device_id, 8)
    return encode_protocol(ProtocolId.APPLE, APPLE_ADDRESS | (command << 16) | (device_id << 24))


# ---------- Other consumer protocols ----------

def encode_samsung(address: int, command: int) -> List[TimingSymbol]:
    """Encode Samsung 32-bit: 16-bit address, command, ~command."""
    _check_range("address", address, 16)
    _check_range("command", command, 8)
    return encode_protocol(ProtocolId.SAMSUNG, address | (command << 16) | ((~command & 0xFF) << 24))


def encode_sony(address: int, command: int, bits: int = 12) -> List[TimingSymbol]:
    """
    Encode Sony SIRC.

    Args:
        address: Device address (5, 8 or 13 bits depending on ``bits``)
        command: 7-bit command
        bits: 12, 15 or 20
    """
    if bits not in SONY_VARIANTS.values():
        raise EncodeError(f"Sony frames have 12, 15 or 20 bits, not {bits}")
    _check_range("command", command, 7)
    _check_range("address", address, bits - 7)
    return encode_protocol(ProtocolId.SONY, command | (address << 7), bits)


def encode_jvc(address: int, command: int, header: bool = True) -> List[TimingSymbol]:
    """Encode JVC; repeat frames are sent without header."""
    _check_range("address", address, 8)
    _check_range("command", command, 8)
    return encode_protocol(ProtocolId.JVC, address | (command << 8), header=header)


def encode_lg(address: int, command: int, protocol: ProtocolId = ProtocolId.LG) -> List[TimingSymbol]:
    """Encode LG (or LG2): address, 16-bit command, 4-bit checksum."""
    _check_range("address", address, 8)
    _check_range("command", command, 16)
    word = address | (command << 8) | (lg_checksum(address, command) << 24)
    return encode_protocol(protocol, word)


def encode_denon(address: int, command: int) -> List[TimingSymbol]:
    """Encode Denon: 5-bit address, 8-bit command."""
    _check_range("address", address, 5)
    _check_range("command", command, 8)
    return encode_protocol(ProtocolId.DENON, address | (command << 5))


def encode_panasonic(address: int, command: int, extra: int = 0) -> List[TimingSymbol]:
    """
    Encode Panasonic/Kaseikyo 48-bit.

    Args:
        address: 16-bit vendor address (bits 32..47)
        command: 16-bit command (bits 0..15)
        extra: Bits 16..23; bits 24..31 are the XOR checksum
    """
    _check_range("address", address, 16)
    _check_range("command", command, 16)
    _check_range("extra", extra, 8)
    low = command | (extra << 16)
    checksum = xor_bytes(low.to_bytes(3, "little"))
    return encode_protocol(ProtocolId.PANASONIC, low | (checksum << 24) | (address << 32))


def encode_samsung48(data: int) -> List[TimingSymbol]:
    """Encode a Samsung 48-bit word."""
    return encode_protocol(ProtocolId.SAMSUNG48, data)


# ---------- Bi-phase ----------

def _levels_to_symbols(levels: Sequence[int], durations: Sequence[int]) -> List[TimingSymbol]:
    runs = []
    for level, duration in zip(levels, durations):
        if runs and runs[-1][0] == level:
            runs[-1][1] += duration
        else:
            runs.append([level, duration])
    while runs and runs[0][0] == 0:
        runs.pop(0)

    symbols = []
    for i in range(0, len(runs), 2):
        space = runs[i + 1][1] if i + 1 < len(runs) else 0
        symbols.append(TimingSymbol(runs[i][1], space))
    symbols[-1] = TimingSymbol(symbols[-1].mark, 0)
    return symbols


def _biphase_levels(value: int, bits: int, one: Sequence[int]) -> List[int]:
    levels = []
    for i in range(bits - 1, -1, -1):
        if (value >> i) & 1:
            levels.extend(one)
        else:
            levels.extend(reversed(one))
    return levels


def encode_rc5_word(value: int) -> List[TimingSymbol]:
    """Encode a 14-bit RC5 word (first start bit must be set)."""
    _check_range("RC5 word", value, 14)
    if not value >> 13:
        raise EncodeError("RC5 first start bit must be 1")
    # "1" = space then mark
    return _levels_to_symbols(_biphase_levels(value, 14, (0, 1)), rc5_slots())


def encode_rc5(address: int, command: int, toggle: int = 0) -> List[TimingSymbol]:
    """
    Encode Philips RC5.

    Commands 64..127 are sent as RC5X (second start bit cleared).
    """
    _check_range("address", address, 5)
    _check_range("command", command, 7)
    field = 0 if command & 0x40 else 1
    value = (1 << 13) | (field << 12) | ((toggle & 1) << 11) | (address << 6) | (command & 0x3F)
    return encode_rc5_word(value)


def encode_rc6(address: int, command: int, toggle: int = 0, mode: int = 0) -> List[TimingSymbol]:
    """
    Encode Philips RC6.

    Leader, start bit, 3 mode bits, double-length toggle bit, address,
    command.
    """
    _check_range("address", address, 8)
    _check_range("command", command, 8)
    _check_range("mode", mode, 3)
    c = get_protocol_constants(ProtocolId.RC6)
    # "1" = mark then space
    levels = (_biphase_levels(1, 1, (1, 0))
              + _biphase_levels(mode, 3, (1, 0))
              + _biphase_levels(toggle & 1, 1, (1, 0))
              + _biphase_levels((address << 8) | command, 16, (1, 0)))
    return [TimingSymbol(c.header_mark, c.header_space)] + _levels_to_symbols(levels, rc6_slots())


# ---------- Exotic ----------

def encode_whynter(data: int) -> List[TimingSymbol]:
    return encode_protocol(ProtocolId.WHYNTER, data)


def encode_lego(value: int) -> List[TimingSymbol]:
    """Encode Lego Power Functions from the 12 bits before the LRC nibble."""
    _check_range("value", value, 12)
    data = value << 4
    return encode_protocol(ProtocolId.LEGO_PF, data | lego_checksum(data))


def encode_magiquest(wand_id: int, magnitude: int) -> List[TimingSymbol]:
    """Encode a MagiQuest wand frame: 32-bit wand id, 16-bit magnitude."""
    _check_range("wand id", wand_id, 32)
    _check_range("magnitude", magnitude, 16)
    return encode_protocol(ProtocolId.MAGIQUEST, (wand_id << 16) | magnitude)


def encode_bosewave(command: int) -> List[TimingSymbol]:
    _check_range("command", command, 8)
    return encode_protocol(ProtocolId.BOSEWAVE, (command << 8) | (~command & 0xFF))


def encode_fast(command: int) -> List[TimingSymbol]:
    return encode_protocol(ProtocolId.FAST, command, 8)


# ---------- AC byte frames ----------

def _encode_bytes(protocol: ProtocolId, data: bytes, stop_space: int = 0) -> List[TimingSymbol]:
    c = get_protocol_constants(protocol)
    symbols = encode_pulses(int.from_bytes(data, "little"), len(data) * 8,
                            protocol_timing(c), stop_mark=c.bit_mark)
    symbols[-1] = TimingSymbol(c.bit_mark, stop_space)
    return symbols


def encode_ac_frame(protocol: ProtocolId, payload: bytes) -> List[TimingSymbol]:
    """
    Encode an AC byte frame (each byte LSB first).

    Daikin payloads hold both frames; they are sent with the inter-frame
    gap between them.

    Raises:
        EncodeError: If the protocol has no byte frame or the payload
            length is not valid for it
    """
    protocol = ProtocolId(protocol)
    if protocol not in AC_FRAME_BYTES:
        raise EncodeError(f"{protocol.name} is not a byte frame protocol")
    low, high = AC_FRAME_BYTES[protocol]
    if not low <= len(payload) <= high:
        raise EncodeError(f"{protocol.name} frames have {low}..{high} bytes, got {len(payload)}")

    if protocol == ProtocolId.DAIKIN:
        return (_encode_bytes(protocol, payload[:DAIKIN_FRAME1_BYTES], DAIKIN_GAP_US)
                + _encode_bytes(protocol, payload[DAIKIN_FRAME1_BYTES:]))
    return _encode_bytes(protocol, payload)


# ---------- Dispatch ----------

def encode_code(code: DecodedCode) -> List[TimingSymbol]:
    """
    Encode a decoded or stored code back into symbols.

    Args:
        code: Any DecodedCode (RAW codes replay their symbols)

    Returns:
        New list of TimingSymbols

    Raises:
        EncodeError: If the protocol cannot be encoded
    """
    protocol = code.protocol

    if protocol == ProtocolId.RAW:
        if not code.raw:
            raise EncodeError("RAW code has no symbols")
        return list(code.raw)

    if protocol in (ProtocolId.PULSE_DISTANCE, ProtocolId.PULSE_WIDTH):
        if code.timing is None:
            raise EncodeError(f"{code.name} code has no timing")
        _check_range("data", code.data, code.bits)
        stop_mark = code.timing.zero_mark if protocol == ProtocolId.PULSE_DISTANCE else 0
        return encode_pulses(code.data, code.bits, code.timing, stop_mark=stop_mark)

    if protocol in AC_FRAME_BYTES:
        if not code.payload:
            raise EncodeError(f"{code.name} code has no payload")
        return encode_ac_frame(protocol, code.payload)

    if protocol == ProtocolId.RC5:
        return encode_rc5_word(code.data)
    if protocol == ProtocolId.RC6:
        return encode_rc6((code.data >> 8) & 0xFF, code.data & 0xFF,
                          toggle=(code.data >> 16) & 1, mode=(code.data >> 17) & 0x07)
    if protocol == ProtocolId.SONY:
        return encode_protocol(protocol, code.data, code.bits)
    if protocol == ProtocolId.JVC:
        return encode_protocol(protocol, code.data, header=not code.flags & CodeFlag.REPEAT)

    c = get_protocol_constants(protocol)
    if c is None:
        raise EncodeError(f"Cannot encode {code.name}")
    return encode_protocol(protocol, code.data, code.bits or c.bits)


def format_code(code: DecodedCode) -> str:
    """
    Format a code for display.

    Returns:
        One line like "NEC Addr: 0x00, Cmd: 0x0C (data: 0xF30CFF00, 32 bits)"
    """
    if code.protocol == ProtocolId.RAW:
        text = f"RAW {len(code.raw)} symbols @ {code.carrier_hz // 1000}kHz"
    else:
        text = (f"{code.name} Addr: 0x{code.address:02X}, Cmd: 0x{code.command:02X} "
                f"(data: 0x{code.data:0{min(16, max(1, (code.bits + 3) // 4))}X}, {code.bits} bits)")
        if code.payload:
            text += f" payload: {code.payload.hex().upper()}"

    flags = [flag.name for flag in CodeFlag if flag and code.flags & flag and flag != CodeFlag.MSB_FIRST]
    if flags:
        text += " [" + ", ".join(flags) + "]"
    return text
