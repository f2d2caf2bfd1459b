"""
IR Remote Codec - Consumer Protocol Decoders

NEC family, Samsung, Sony SIRC, JVC, LG, Denon, Panasonic and Apple.

NEC Protocol Format:
- 9ms AGC burst + 4.5ms space (leader)
- 8-bit address + 8-bit inverted address
- 8-bit command + 8-bit inverted command
- 562.5us burst (stop bit)
- A held button sends 9ms + 2.25ms + stop bit repeat frames every ~110ms
"""

import logging
from typing import Sequence

from .base import Decoder
from ..checksums import complement_ok, lg_checksum, midea_ok, xor_bytes
from ..code import CodeFlag
from ..errors import RepeatFrame, TimingMismatch
from ..protocol import ProtocolId, get_protocol_constants
from ..timing import TimingSymbol, match_mark, match_space, matches

log = logging.getLogger(__name__)

# NEC repeat frame leader
NEC_REPEAT_MARK = 9000
NEC_REPEAT_SPACE = 2250

# Apple remotes use NEC timing with this fixed 16-bit address
APPLE_ADDRESS = 0x77E1

# Sony symbol count -> data bits (no stop bit)
SONY_VARIANTS = {13: 12, 16: 15, 21: 20}


def is_nec_repeat(symbols: Sequence[TimingSymbol]) -> bool:
    """True for a short NEC repeat frame (leader with 2.25ms space)."""
    return (0 < len(symbols) <= 2
            and match_mark(symbols[0], NEC_REPEAT_MARK)
            and match_space(symbols[0], NEC_REPEAT_SPACE))


class NecDecoder(Decoder):
    """
    NEC and NEC Extended.

    A frame whose address fails its complement check while the command
    passes is NEC Extended: the 16-bit address is kept as-is.
    """

    protocol = ProtocolId.NEC

    def decode(self, symbols):
        if is_nec_repeat(symbols):
            raise RepeatFrame("NEC: repeat frame", protocol=self.protocol)

        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)

        address = data & 0xFF
        address_inv = (data >> 8) & 0xFF
        command = (data >> 16) & 0xFF
        command_inv = (data >> 24) & 0xFF

        if not complement_ok(command, command_inv):
            raise TimingMismatch(f"NEC: command 0x{command:02X}/0x{command_inv:02X} not complemented")

        flags = CodeFlag.NONE
        if not complement_ok(address, address_inv):
            address = data & 0xFFFF
            if address == APPLE_ADDRESS:
                raise TimingMismatch("NEC: Apple address")
            flags |= CodeFlag.EXTENDED

        log.info("Decoded NEC%s: Addr=0x%02X, Cmd=0x%02X",
                 " extended" if flags else "", address, command)
        return self.code(data, c.bits, address=address, command=command, flags=flags)


class AppleDecoder(Decoder):
    """Apple remotes: NEC timing, address 0x77E1."""

    protocol = ProtocolId.APPLE

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)

        address = data & 0xFFFF
        if address != APPLE_ADDRESS:
            raise TimingMismatch(f"Apple: address 0x{address:04X}")
        return self.code(data, c.bits, address=address, command=(data >> 16) & 0xFF)


class SamsungDecoder(Decoder):
    """Samsung 32-bit: 16-bit address, command, inverted command."""

    protocol = ProtocolId.SAMSUNG

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)

        command = (data >> 16) & 0xFF
        flags = CodeFlag.NONE
        if not complement_ok(command, (data >> 24) & 0xFF):
            log.warning("Samsung: command parity failed (data=0x%08X)", data)
            flags |= CodeFlag.PARITY_FAILED
        return self.code(data, c.bits, address=data & 0xFFFF, command=command, flags=flags)


class SonyDecoder(Decoder):
    """
    Sony SIRC, pulse width encoded.

    The variant (12, 15 or 20 bits) follows from the symbol count alone
    since SIRC frames have no stop bit.
    """

    protocol = ProtocolId.SONY

    def decode(self, symbols):
        self.require(symbols, min(SONY_VARIANTS))
        bits = SONY_VARIANTS.get(len(symbols))
        if bits is None:
            raise TimingMismatch(f"Sony: {len(symbols)} symbols is not a SIRC length")
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, bits)
        return self.code(data, bits, address=data >> 7, command=data & 0x7F)


class JvcDecoder(Decoder):
    """
    JVC 16-bit.

    Repeat frames carry no header at all, so both forms are accepted.
    JVC's leader also falls inside NEC's tolerance window, so captures
    with an NEC-shaped leader and NEC length are refused.
    """

    protocol = ProtocolId.JVC

    def decode(self, symbols):
        c = self.constants
        self.require(symbols, c.bits)

        nec = get_protocol_constants(ProtocolId.NEC)
        first = symbols[0]
        if (matches(first.mark, nec.header_mark) and matches(first.space, nec.header_space)
                and len(symbols) > 1 + c.bits + 1):
            raise TimingMismatch("JVC: NEC header envelope")

        has_header = match_mark(first, c.header_mark) and match_space(first, c.header_space)
        start = 1 if has_header else 0
        self.require_length(symbols, start + c.bits)
        data = self.read_bits(symbols, start, c.bits)

        flags = CodeFlag.NONE if has_header else CodeFlag.REPEAT
        return self.code(data, c.bits, address=data & 0xFF, command=(data >> 8) & 0xFF,
                         flags=flags)


class LgDecoder(Decoder):
    """LG 28-bit: address, 16-bit command, 4-bit nibble-sum checksum."""

    protocol = ProtocolId.LG

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)

        address = data & 0xFF
        command = (data >> 8) & 0xFFFF
        received = (data >> 24) & 0x0F
        expected = lg_checksum(address, command)

        flags = CodeFlag.NONE
        if received != expected:
            log.warning("%s: checksum 0x%X, expected 0x%X", self.name, received, expected)
            flags |= CodeFlag.PARITY_FAILED
        return self.code(data, c.bits, address=address, command=command, flags=flags)


class Lg2Decoder(LgDecoder):
    """LG2 (air conditioners): LG layout behind a 3.2ms/9.9ms leader."""

    protocol = ProtocolId.LG2


class DenonDecoder(Decoder):
    """Denon/Sharp 15-bit: 5-bit address, 8-bit command, 2 extra bits."""

    protocol = ProtocolId.DENON

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)
        return self.code(data, c.bits, address=data & 0x1F, command=(data >> 5) & 0xFF)


class PanasonicDecoder(Decoder):
    """
    Panasonic/Kaseikyo 48-bit: command in the low 16 bits, address in the top 16.

    Byte 3 is the XOR of bytes 0..2.
    """

    protocol = ProtocolId.PANASONIC
    checksum_byte = 3

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)
        payload = data.to_bytes(6, "little")

        received = payload[self.checksum_byte]
        expected = xor_bytes(payload[:self.checksum_byte])
        flags = CodeFlag.NONE
        if received != expected:
            log.warning("%s: checksum 0x%02X, expected 0x%02X", self.name, received, expected)
            flags |= CodeFlag.PARITY_FAILED
        return self.code(data, c.bits, address=(data >> 32) & 0xFFFF, command=data & 0xFFFF,
                         flags=flags, payload=payload, checksums=(received == expected,))


class Samsung48Decoder(PanasonicDecoder):
    """
    Samsung 48-bit, byte 5 is the XOR of bytes 0..4.

    Midea AC frames share its leader, bit timing and length; they are
    recognised by their complemented second half and left to the Midea
    decoder. A Midea frame with a broken complement therefore decodes as
    Samsung48 (usually with PARITY_FAILED), never as Midea with
    PARITY_FAILED.
    """

    protocol = ProtocolId.SAMSUNG48
    checksum_byte = 5

    def decode(self, symbols):
        code = super().decode(symbols)
        if midea_ok(code.payload):
            raise TimingMismatch("Samsung48: Midea complement signature")
        return code

