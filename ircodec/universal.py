"""
IR Remote Codec - Universal Pulse Decoder

Last resort before a capture is kept as RAW: learns the two mark and the
two space durations of an unknown pulse-distance or pulse-width protocol
from histograms and decodes the bits against their midpoint.

Algorithm:
1. Histogram marks and spaces (50us bins, up to 10ms) of every symbol
   except the header (first) and the stop bit (last)
2. Aggregate each histogram into at most two clusters
3. Two mark clusters and one space cluster -> pulse width;
   two space clusters -> pulse distance (also when marks vary too)
4. Decode bits LSB first against the midpoint of the clusters
"""

import logging
from typing import List, Sequence

from .code import DistanceWidthTiming, make_code
from .decoders.base import Decoder
from .errors import TimingMismatch
from .protocol import ProtocolId
from .timing import TimingSymbol

log = logging.getLogger(__name__)

BIN_SIZE_US = 50
BIN_COUNT = 200             # 0..10ms
MIN_BITS = 7
MIN_SYMBOLS = 2 * MIN_BITS + 4
MAX_BITS = 64


def histogram(durations: Sequence[int]) -> List[int]:
    """
    Count durations into 50us bins.

    Raises:
        TimingMismatch: If a duration is 10ms or longer
    """
    bins = [0] * BIN_COUNT
    for duration in durations:
        index = duration // BIN_SIZE_US
        if index >= BIN_COUNT:
            raise TimingMismatch(f"universal: {duration}us exceeds histogram range")
        bins[index] += 1
    return bins


def aggregate(bins: Sequence[int]) -> List[int]:
    """
    Merge neighbouring histogram bins into clusters.

    Runs of non-empty bins separated by at most one empty bin form one
    cluster, whose center is the count-weighted average bin (rounded).

    Returns:
        Cluster centers in microseconds, shortest first (one or two items)

    Raises:
        TimingMismatch: If a third cluster is found
    """
    short = None
    long = None
    total = 0
    weighted = 0
    gap = 0
    last = max((i for i, count in enumerate(bins) if count), default=0)
    for index in range(last + 1):
        count = bins[index]
        if count:
            total += count
            weighted += count * index
            gap = 0
        else:
            gap += 1

        if total and (index == last or gap > 1):
            center = (weighted + total // 2) // total
            if short is None:
                short = center
            elif long is None:
                long = center
            else:
                raise TimingMismatch("universal: three or more distinct durations")
            total = 0
            weighted = 0

    return [c * BIN_SIZE_US for c in (short, long) if c is not None]


def _average(values: Sequence[int]) -> int:
    return (sum(values) + len(values) // 2) // len(values) if values else 0


class UniversalDecoder(Decoder):
    """
    Histogram decoder for unknown pulse-distance / pulse-width protocols.

    Results are tagged PULSE_DISTANCE or PULSE_WIDTH, carry no address or
    command, and keep the measured timing so they can be re-sent.
    """

    protocol = ProtocolId.PULSE_DISTANCE

    @property
    def name(self) -> str:
        return "UNIVERSAL"

    def decode(self, symbols):
        self.require(symbols, MIN_SYMBOLS)

        body = symbols[1:-1]
        marks = aggregate(histogram([s.mark for s in body]))
        spaces = aggregate(histogram([s.space for s in body]))
        log.debug("universal: marks=%s spaces=%s", marks, spaces)

        if len(marks) < 2 and len(spaces) < 2:
            raise TimingMismatch("universal: no timing variation")

        pulse_width = len(marks) == 2 and len(spaces) == 1
        if pulse_width:
            bit_symbols = symbols[1:]
            threshold = (marks[0] + marks[1]) // 2
        else:
            # Pulse distance; also pulse-distance-width, which decodes the same way
            bit_symbols = symbols[1:-1]
            threshold = (spaces[0] + spaces[1]) // 2

        bits = len(bit_symbols)
        if bits == 0 or bits > MAX_BITS:
            raise TimingMismatch(f"universal: {bits} bits")

        data = 0
        ones: List[TimingSymbol] = []
        zeros: List[TimingSymbol] = []
        for i, symbol in enumerate(bit_symbols):
            duration = symbol.mark if pulse_width else symbol.space
            if duration >= threshold:
                data |= 1 << i
                ones.append(symbol)
            else:
                zeros.append(symbol)

        timing = DistanceWidthTiming(
            header_mark=symbols[0].mark,
            header_space=symbols[0].space,
            one_mark=_average([s.mark for s in ones]),
            one_space=_average([s.space for s in ones if s.space]),
            zero_mark=_average([s.mark for s in zeros]),
            zero_space=_average([s.space for s in zeros if s.space]),
        )
        protocol = ProtocolId.PULSE_WIDTH if pulse_width else ProtocolId.PULSE_DISTANCE
        log.info("Decoded %s: %d bits, data=0x%X", protocol.name, bits, data)
        return make_code(protocol, data, bits, timing=timing)
