"""
IR Remote Codec - Air Conditioner Decoders

AC remotes send their whole state as a byte frame on every key press.
Each byte is transmitted LSB first with pulse-distance timing and the
frame ends with a checksum byte. A failed checksum is reported through
PARITY_FAILED, the frame is still returned.

Frame layouts:
- Mitsubishi: 19 bytes, byte sum
- Carrier:    16 bytes, nibble sum in the low nibble of the last byte
- Haier:      13 bytes, XOR
- Midea:      6 bytes, bytes 3..5 complement bytes 0..2
- Fujitsu:    8..16 bytes, two's complement
- Hitachi:    33..43 bytes, byte sum
- Daikin:     8 byte frame + ~29ms gap + 19 byte frame, byte sum each
"""

import logging
from typing import Optional, Sequence, Tuple

from .base import Decoder
from ..checksums import byte_sum, midea_ok, nibble_sum, twos_complement, xor_bytes
from ..code import CodeFlag, DecodedCode, bytes_to_word
from ..errors import TooFewSymbols
from ..protocol import DAIKIN_GAP_US, ProtocolId
from ..timing import TimingSymbol, match_space

log = logging.getLogger(__name__)

DAIKIN_FRAME1_BYTES = 8
DAIKIN_FRAME2_BYTES = 19
DAIKIN_ADDRESS = 0x11
# Gap between Daikin frames is matched tighter than the bits
DAIKIN_GAP_TOLERANCE_PCT = 10
# Header + frame 1 + frame 2 header + frame 2; the gap symbol is optional
DAIKIN_MIN_SYMBOLS = 1 + DAIKIN_FRAME1_BYTES * 8 + 1 + DAIKIN_FRAME2_BYTES * 8


class ByteFrameDecoder(Decoder):
    """
    Base class of single-frame AC decoders.

    Subclasses set the frame length (``min_bytes``/``max_bytes``; equal for
    fixed frames), the manufacturer ``address`` (None = first byte), the
    ``command_byte`` index and implement ``checksums``.
    """

    min_bytes = 0
    max_bytes = 0
    address: Optional[int] = None
    command_byte = 1

    def decode(self, symbols):
        count = self.frame_bytes(symbols)
        self.check_header(symbols[0])
        payload = self.read_bytes(symbols, 1, count)
        return self.build(payload, self.checksums(payload))

    def frame_bytes(self, symbols: Sequence[TimingSymbol]) -> int:
        """Number of bytes to read, checking the capture length."""
        if self.min_bytes == self.max_bytes:
            self.require_length(symbols, 1 + self.min_bytes * 8)
            return self.min_bytes

        self.require(symbols, 1 + self.min_bytes * 8)
        count = (len(symbols) - 1) // 8
        if count > self.max_bytes:
            log.debug("%s: %d bytes captured, reading %d", self.name, count, self.max_bytes)
            count = self.max_bytes
        return count

    def checksums(self, payload: bytes) -> Tuple[bool, ...]:
        raise NotImplementedError

    def build(self, payload: bytes, checksums: Tuple[bool, ...], frame: bytes = None) -> DecodedCode:
        frame = payload if frame is None else frame
        flags = CodeFlag.NONE
        if not all(checksums):
            log.warning("%s: checksum failed (%s)", self.name, payload.hex())
            flags |= CodeFlag.PARITY_FAILED

        address = frame[0] if self.address is None else self.address
        command = frame[self.command_byte]
        log.info("Decoded %s AC: %d bytes, Cmd=0x%02X, Checksum=%s", self.name, len(payload),
                 command, "OK" if all(checksums) else "FAIL")
        return self.code(bytes_to_word(frame), len(payload) * 8, address=address,
                         command=command, flags=flags, payload=payload, checksums=checksums)


class MitsubishiDecoder(ByteFrameDecoder):
    protocol = ProtocolId.MITSUBISHI
    min_bytes = max_bytes = 19
    address = 0x23
    command_byte = 5

    def checksums(self, payload):
        return (byte_sum(payload[:-1]) == payload[-1],)


class CarrierDecoder(ByteFrameDecoder):
    protocol = ProtocolId.CARRIER
    min_bytes = max_bytes = 16

    def checksums(self, payload):
        return (nibble_sum(payload[:-1]) == payload[-1] & 0x0F,)


class HaierDecoder(ByteFrameDecoder):
    protocol = ProtocolId.HAIER
    min_bytes = max_bytes = 13
    address = 0xA0
    command_byte = 9

    def checksums(self, payload):
        return (xor_bytes(payload[:-1]) == payload[-1],)


class MideaDecoder(ByteFrameDecoder):
    """Midea: three bytes followed by their complements."""

    protocol = ProtocolId.MIDEA
    min_bytes = max_bytes = 6

    def checksums(self, payload):
        return (midea_ok(payload),)


class FujitsuDecoder(ByteFrameDecoder):
    """Fujitsu: frame length depends on the remote model (8..16 bytes)."""

    protocol = ProtocolId.FUJITSU
    min_bytes = 8
    max_bytes = 16
    address = 0x14
    command_byte = 5

    def checksums(self, payload):
        return (twos_complement(payload[:-1]) == payload[-1],)


class HitachiDecoder(ByteFrameDecoder):
    """Hitachi: 33 to 43 byte frames."""

    protocol = ProtocolId.HITACHI
    min_bytes = 33
    max_bytes = 43
    command_byte = 11

    def checksums(self, payload):
        return (byte_sum(payload[:-1]) == payload[-1],)


class DaikinDecoder(ByteFrameDecoder):
    """
    Daikin two-frame protocol.

    Frame 1 (8 bytes) is a fixed preamble, frame 2 (19 bytes) carries the
    state. Both start with the same header; the ~29ms gap after frame 1 is
    optional in captures that split on it. ``payload`` holds both frames,
    ``checksums`` one result per frame.
    """

    protocol = ProtocolId.DAIKIN
    address = DAIKIN_ADDRESS
    command_byte = 5

    def decode(self, symbols):
        self.require(symbols, DAIKIN_MIN_SYMBOLS)

        self.check_header(symbols[0])
        frame1 = self.read_bytes(symbols, 1, DAIKIN_FRAME1_BYTES)
        index = 1 + DAIKIN_FRAME1_BYTES * 8

        if match_space(symbols[index], DAIKIN_GAP_US, DAIKIN_GAP_TOLERANCE_PCT):
            index += 1
        if len(symbols) < index + 1 + DAIKIN_FRAME2_BYTES * 8:
            raise TooFewSymbols(f"{self.name}: frame 2 truncated",
                                count=len(symbols), needed=index + 1 + DAIKIN_FRAME2_BYTES * 8)
        self.check_header(symbols[index])
        frame2 = self.read_bytes(symbols, index + 1, DAIKIN_FRAME2_BYTES)

        checksums = (byte_sum(frame1[:-1]) == frame1[-1],
                     byte_sum(frame2[:-1]) == frame2[-1])
        return self.build(frame1 + frame2, checksums, frame=frame2)
