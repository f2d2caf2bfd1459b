"""
IR Remote Codec - Exotic Protocol Decoders

Whynter, Lego Power Functions, MagiQuest, Bose Wave and FAST.
All are pulse-distance encoded; MagiQuest and FAST have no header.
"""

import logging

from .base import Decoder
from ..checksums import complement_ok, lego_checksum
from ..code import CodeFlag
from ..protocol import ProtocolId

log = logging.getLogger(__name__)


class WhynterDecoder(Decoder):
    """Whynter portable AC remotes: 32 bits MSB first."""

    protocol = ProtocolId.WHYNTER

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)
        return self.code(data, c.bits, address=data >> 16, command=data & 0xFFFF)


class LegoDecoder(Decoder):
    """
    Lego Power Functions: 16 bits MSB first.

    Nibbles: toggle/escape/channel, address/mode, data, LRC checksum.
    """

    protocol = ProtocolId.LEGO_PF

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)

        flags = CodeFlag.NONE
        if data & 0x0F != lego_checksum(data):
            log.warning("Lego PF: LRC 0x%X, expected 0x%X", data & 0x0F, lego_checksum(data))
            flags |= CodeFlag.PARITY_FAILED
        return self.code(data, c.bits, address=(data >> 12) & 0x0F,
                         command=(data >> 4) & 0xFF, flags=flags)


class MagiQuestDecoder(Decoder):
    """MagiQuest wands: 56 bits, 32-bit wand id then 16-bit magnitude."""

    protocol = ProtocolId.MAGIQUEST

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, c.bits)
        data = self.read_bits(symbols, 0, c.bits)
        return self.code(data, c.bits, address=(data >> 16) & 0xFFFFFFFF, command=data & 0xFFFF)


class BoseWaveDecoder(Decoder):
    """Bose Wave radios: command byte followed by its complement."""

    protocol = ProtocolId.BOSEWAVE

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, 1 + c.bits)
        self.check_header(symbols[0])
        data = self.read_bits(symbols, 1, c.bits)

        command = data >> 8
        flags = CodeFlag.NONE
        if not complement_ok(command, data & 0xFF):
            log.warning("BoseWave: command 0x%02X not complemented", command)
            flags |= CodeFlag.PARITY_FAILED
        return self.code(data, c.bits, command=command, flags=flags)


class FastDecoder(Decoder):
    """FAST: 8 bits LSB first, no header."""

    protocol = ProtocolId.FAST

    def decode(self, symbols):
        c = self.constants
        self.require_length(symbols, c.bits)
        data = self.read_bits(symbols, 0, c.bits)
        return self.code(data, c.bits, command=data)
