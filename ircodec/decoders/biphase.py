"""
IR Remote Codec - Bi-phase (Manchester) Decoders

RC5 and RC6 carry each bit as a transition in the middle of a fixed
window: which half is mark and which is space decides the bit, not the
durations. A capture is therefore cut into half-bit "slots":

    RC5 "1" = space, mark      RC5 "0" = mark, space
    RC6 "1" = mark, space      RC6 "0" = space, mark

Consecutive equal halves of adjacent bits merge into one mark or space
of double length, so each measured duration covers one or two slots.
"""

import logging
from typing import List, Sequence, Tuple

from .base import Decoder
from ..code import CodeFlag
from ..errors import TimingMismatch
from ..protocol import ProtocolId
from ..timing import TimingSymbol, matches

log = logging.getLogger(__name__)

RC5_UNIT = 889
RC6_UNIT = 444

# RC6 trailer (toggle) bit halves are two units long and get their own tolerance
RC6_TRAILER_TOLERANCE_PCT = 30
BIPHASE_TOLERANCE_PCT = 25


def rc5_slots() -> List[int]:
    """Half-bit slot durations of a 14-bit RC5 frame."""
    return [RC5_UNIT] * 28


def rc6_slots() -> List[int]:
    """Half-bit slot durations of an RC6 mode 0 frame after the leader."""
    return ([RC6_UNIT] * 2           # start bit
            + [RC6_UNIT] * 6         # mode
            + [RC6_UNIT * 2] * 2     # trailer (toggle)
            + [RC6_UNIT] * 32)       # address + command


def runs(symbols: Sequence[TimingSymbol]) -> List[Tuple[int, int]]:
    """Split symbols into alternating (level, duration) runs, mark first."""
    result = []
    for mark, space in symbols:
        result.append((1, mark))
        result.append((0, space))
    return result


def fill_slots(
    symbols: Sequence[TimingSymbol],
    slots: Sequence[int],
    first_slot: int = 0,
    wide_tolerance_slots: Tuple[int, ...] = ()
) -> List[int]:
    """
    Assign a level to every half-bit slot from the measured runs.

    Args:
        symbols: Capture without the protocol leader
        slots: Nominal duration of each slot
        first_slot: Slots before this one are implied spaces
        wide_tolerance_slots: Slots matched with the trailer tolerance

    Returns:
        One level (1 = mark, 0 = space) per slot

    Raises:
        TimingMismatch: If a run does not cover a whole number of slots,
            or the capture runs past the last slot
    """
    levels = [0] * len(slots)
    pos = first_slot
    measured = runs(symbols)
    for index, (level, duration) in enumerate(measured):
        last = index == len(measured) - 1
        if pos >= len(slots):
            if level == 0 and last:
                break
            raise TimingMismatch(f"bi-phase: capture longer than {len(slots)} half bits")
        if last and level == 0:
            # Trailing space merges into the idle gap
            break
        width = _run_width(duration, slots, pos, wide_tolerance_slots)
        if width == 0:
            raise TimingMismatch(f"bi-phase: {duration}us at half bit {pos}")
        for i in range(pos, pos + width):
            levels[i] = level
        pos += width
    return levels


def _run_width(duration: int, slots: Sequence[int], pos: int, wide: Tuple[int, ...]) -> int:
    """Number of slots a run covers, 0 if none fits.

    Next to the RC6 trailer the one and two slot windows overlap; the
    closest nominal duration wins.
    """
    best, best_error = 0, None
    for width in (1, 2):
        if pos + width > len(slots):
            break
        covered = range(pos, pos + width)
        expected = sum(slots[i] for i in covered)
        pct = RC6_TRAILER_TOLERANCE_PCT if any(i in wide for i in covered) else BIPHASE_TOLERANCE_PCT
        if not matches(duration, expected, pct):
            continue
        error = abs(duration - expected) / expected
        if best_error is None or error < best_error:
            best, best_error = width, error
    return best


def read_biphase_bits(levels: Sequence[int], start: int, count: int, one_first_level: int) -> int:
    """
    Read ``count`` bits MSB first from slot pairs starting at slot ``start``.

    ``one_first_level`` is the level of the first half of a "1" bit.
    """
    value = 0
    for i in range(count):
        first, second = levels[start + 2 * i], levels[start + 2 * i + 1]
        if first == second:
            raise TimingMismatch(f"bi-phase: no transition in bit at half {start + 2 * i}")
        value = (value << 1) | (1 if first == one_first_level else 0)
    return value


class Rc5Decoder(Decoder):
    """
    Philips RC5: 14 bits, SS T AAAAA CCCCCC, MSB first.

    The first half of the first start bit is a space and never appears in
    a capture. A cleared second start bit is RC5X (command bit 6 set).
    """

    protocol = ProtocolId.RC5

    def decode(self, symbols):
        self.require(symbols, 7)
        slots = rc5_slots()
        levels = fill_slots(symbols, slots, first_slot=1)
        value = read_biphase_bits(levels, 0, 14, one_first_level=0)

        toggle = (value >> 11) & 0x01
        address = (value >> 6) & 0x1F
        command = value & 0x3F
        if not (value >> 12) & 0x01:
            command |= 0x40

        flags = CodeFlag.TOGGLE_BIT if toggle else CodeFlag.NONE
        log.info("Decoded RC5: Addr=0x%02X, Cmd=0x%02X, Toggle=%d", address, command, toggle)
        return self.code(value, 14, address=address, command=command, flags=flags)


class Rc6Decoder(Decoder):
    """
    Philips RC6 mode 0.

    Leader, start bit (always 1), 3 mode bits, a double-length trailer bit
    carrying the toggle, 8 address bits, 8 command bits.
    """

    protocol = ProtocolId.RC6

    def decode(self, symbols):
        self.require(symbols, 10)
        self.check_header(symbols[0])

        slots = rc6_slots()
        levels = fill_slots(symbols[1:], slots, wide_tolerance_slots=(8, 9))
        start = read_biphase_bits(levels, 0, 1, one_first_level=1)
        if start != 1:
            raise TimingMismatch("RC6: start bit is 0")
        mode = read_biphase_bits(levels, 2, 3, one_first_level=1)
        toggle = read_biphase_bits(levels, 8, 1, one_first_level=1)
        address = read_biphase_bits(levels, 10, 8, one_first_level=1)
        command = read_biphase_bits(levels, 26, 8, one_first_level=1)

        data = (mode << 17) | (toggle << 16) | (address << 8) | command
        flags = CodeFlag.TOGGLE_BIT if toggle else CodeFlag.NONE
        log.info("Decoded RC6: Mode=%d, Addr=0x%02X, Cmd=0x%02X, Toggle=%d",
                 mode, address, command, toggle)
        return self.code(data, 20, address=address, command=command, flags=flags)
