"""
IR Remote Codec - Decoder Base Classes

A decoder consumes a capture (sequence of TimingSymbols) and returns a
DecodedCode, or raises a DecodeError subclass saying why the capture is
not of its protocol.
"""

import logging
from typing import Sequence

from ..code import DecodedCode, make_code
from ..errors import TooFewSymbols, TimingMismatch
from ..protocol import ProtocolId, ProtocolConstants, get_protocol_constants
from ..timing import TimingSymbol, match_mark, match_space

log = logging.getLogger(__name__)


class Decoder:
    """
    Base class of all protocol decoders.

    Subclasses set ``protocol`` and implement ``decode``.
    """

    protocol = ProtocolId.UNKNOWN

    @property
    def name(self) -> str:
        return self.protocol.name

    @property
    def constants(self) -> ProtocolConstants:
        return get_protocol_constants(self.protocol)

    def decode(self, symbols: Sequence[TimingSymbol]) -> DecodedCode:
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"

    # ---------- Helpers ----------

    def require(self, symbols: Sequence[TimingSymbol], needed: int):
        """Raise TooFewSymbols unless the capture holds ``needed`` symbols."""
        if len(symbols) < needed:
            raise TooFewSymbols(
                f"{self.name}: {len(symbols)} symbols, need {needed}",
                count=len(symbols), needed=needed)

    def require_length(self, symbols: Sequence[TimingSymbol], frame_symbols: int):
        """
        Check a fixed-length frame: ``frame_symbols`` plus an optional stop bit.

        Longer captures belong to another protocol sharing the same timing.
        """
        self.require(symbols, frame_symbols)
        if len(symbols) > frame_symbols + 1:
            raise TimingMismatch(
                f"{self.name}: {len(symbols)} symbols, frame has {frame_symbols}")

    def check_header(self, symbol: TimingSymbol, constants: ProtocolConstants = None):
        c = constants or self.constants
        if not match_mark(symbol, c.header_mark) or not match_space(symbol, c.header_space):
            raise TimingMismatch(
                f"{self.name}: header {symbol.mark}/{symbol.space} "
                f"is not {c.header_mark}/{c.header_space}")

    def read_bits(
        self,
        symbols: Sequence[TimingSymbol],
        start: int,
        count: int,
        constants: ProtocolConstants = None
    ) -> int:
        """
        Decode ``count`` pulse-distance or pulse-width bits.

        Bit order follows the protocol table (LSB first unless MSB_FIRST).

        Raises:
            TimingMismatch: If a mark or space matches neither bit value
        """
        c = constants or self.constants
        value = 0
        for i in range(count):
            symbol = symbols[start + i]
            if c.pulse_width:
                bit = self._width_bit(symbol, c, i)
            else:
                bit = self._distance_bit(symbol, c, i)
            if c.msb_first:
                value = (value << 1) | bit
            else:
                value |= bit << i
        return value

    def read_bytes(
        self,
        symbols: Sequence[TimingSymbol],
        start: int,
        count: int,
        constants: ProtocolConstants = None
    ) -> bytes:
        """Decode ``count`` bytes, each transmitted LSB first."""
        c = constants or self.constants
        return bytes(self.read_bits(symbols, start + 8 * i, 8, c) for i in range(count))

    def code(self, data: int, bits: int, **fields) -> DecodedCode:
        code = make_code(self.protocol, data, bits, **fields)
        log.debug("%s: data=0x%X bits=%d addr=0x%X cmd=0x%X",
                  self.name, code.data, code.bits, code.address, code.command)
        return code

    def _distance_bit(self, symbol: TimingSymbol, c: ProtocolConstants, index: int) -> int:
        if not match_mark(symbol, c.bit_mark):
            raise TimingMismatch(f"{self.name}: bit {index} mark {symbol.mark}us")
        if match_space(symbol, c.one_space):
            return 1
        if match_space(symbol, c.zero_space):
            return 0
        raise TimingMismatch(f"{self.name}: bit {index} space {symbol.space}us")

    def _width_bit(self, symbol: TimingSymbol, c: ProtocolConstants, index: int) -> int:
        if not match_space(symbol, c.zero_space) and symbol.space != 0:
            raise TimingMismatch(f"{self.name}: bit {index} space {symbol.space}us")
        if match_mark(symbol, c.one_space):
            return 1
        if match_mark(symbol, c.bit_mark):
            return 0
        raise TimingMismatch(f"{self.name}: bit {index} mark {symbol.mark}us")
