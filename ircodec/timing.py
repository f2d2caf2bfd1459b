"""
IR Remote Codec - Timing Primitives

A capture is an ordered sequence of (mark, space) pairs measured in
microseconds: how long the IR LED was on, then how long it was off.

Every decoder compares measured durations against nominal protocol
timings with a percentage tolerance. The tolerance is computed with
integer arithmetic so decoding is reproducible bit-for-bit:

    tol = expected * tolerance_pct // 100
    expected - tol <= measured <= expected + tol
"""

from typing import NamedTuple, Iterable, List, Sequence, Tuple

# Remote controls drift by up to ~20% between units, 25% covers them
DEFAULT_TOLERANCE_PCT = 25


class TimingSymbol(NamedTuple):
    """One mark/space pair of a capture (durations in microseconds)."""
    mark: int
    space: int


def matches(measured: int, expected: int, tolerance_pct: int = DEFAULT_TOLERANCE_PCT) -> bool:
    """
    Check whether a measured duration is within tolerance of the expected one.

    Args:
        measured: Measured duration in microseconds
        expected: Nominal duration in microseconds
        tolerance_pct: Allowed deviation in percent of ``expected``

    Returns:
        True if ``measured`` lies within the tolerance window (inclusive)

    Example:
        >>> matches(1100, 1000)
        True
        >>> matches(2000, 1000)
        False
    """
    if measured == 0 and expected == 0:
        return False
    tolerance = expected * tolerance_pct // 100
    return expected - tolerance <= measured <= expected + tolerance


def match_mark(symbol: TimingSymbol, expected: int, tolerance_pct: int = 0) -> bool:
    """Match the mark half of a symbol (tolerance 0 means the default)."""
    return matches(symbol.mark, expected, tolerance_pct or DEFAULT_TOLERANCE_PCT)


def match_space(symbol: TimingSymbol, expected: int, tolerance_pct: int = 0) -> bool:
    """Match the space half of a symbol (tolerance 0 means the default)."""
    return matches(symbol.space, expected, tolerance_pct or DEFAULT_TOLERANCE_PCT)


def to_symbols(pairs: Iterable[Sequence[int]]) -> List[TimingSymbol]:
    """
    Convert (mark, space) pairs into TimingSymbols.

    Args:
        pairs: Iterable of 2-item sequences of integer durations

    Returns:
        List of TimingSymbol

    Raises:
        ValueError: If a pair does not hold two non-negative integers
    """
    symbols = []
    for pair in pairs:
        if len(pair) != 2:
            raise ValueError(f"Expected (mark, space) pair, got {pair!r}")
        mark, space = int(pair[0]), int(pair[1])
        if mark < 0 or space < 0:
            raise ValueError(f"Negative duration in {pair!r}")
        symbols.append(TimingSymbol(mark, space))
    return symbols


def flatten(symbols: Iterable[TimingSymbol]) -> List[int]:
    """Flatten symbols into an alternating [mark, space, mark, ...] list."""
    durations = []
    for mark, space in symbols:
        durations.extend((mark, space))
    return durations


def from_durations(durations: Sequence[int]) -> List[TimingSymbol]:
    """
    Group an alternating mark/space duration list into symbols.

    An odd-length list (capture ending on a mark) gets a zero final space.
    """
    pairs: List[Tuple[int, int]] = []
    for i in range(0, len(durations), 2):
        mark = durations[i]
        space = durations[i + 1] if i + 1 < len(durations) else 0
        pairs.append((mark, space))
    return to_symbols(pairs)
