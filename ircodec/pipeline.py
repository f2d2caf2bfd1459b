"""
IR Remote Codec - Decode Pipeline

Turns one capture into a DecodedCode:

1. Noise filter - drop glitches shorter than the noise threshold
2. Gap trim - cut idle time before and after the frame
3. Dispatch - try each decoder in order, first success wins
4. NEC repeat frames resolve to the last NEC code seen shortly before
5. RAW fallback - keep undecodable captures as timing sequences

In learning mode each decoded frame is also checked against the previous
ones and a code is only accepted after 2 or 3 matching frames.

Example:
    >>> pipeline = DecodePipeline()
    >>> code = pipeline.decode(encode_nec(0x00, 0x0C))
    >>> code.name, code.command
    ('NEC', 12)
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .code import CodeFlag, DecodedCode, FRAME_STATUS, ValidationStatus
from .config import PipelineConfig
from .decoders import Decoder, default_decoders
from .errors import DecodeError, IRCodecError, NotSupported, RepeatFrame, TooFewSymbols
from .protocol import BIPHASE_PROTOCOLS, NEC_FAMILY, ProtocolId
from .timing import TimingSymbol, matches
from .universal import UniversalDecoder

log = logging.getLogger(__name__)

# Toggle bit position in the data word of bi-phase codes
TOGGLE_DATA_MASK = {
    ProtocolId.RC5: 1 << 11,
    ProtocolId.RC6: 1 << 16,
}


# ---------- Signal conditioning ----------

def filter_noise(
    symbols: Sequence[TimingSymbol],
    threshold_us: int
) -> Tuple[List[TimingSymbol], bool]:
    """
    Remove glitches from a capture.

    A symbol with both halves under the threshold is dropped. A symbol with
    one noisy half is dropped too, but its valid half is added to the same
    half of the following symbol. A zero space on the last symbol marks the
    end of the capture and is not noise.

    Returns:
        (filtered symbols, True if anything changed)
    """
    result = []
    changed = False
    carry_mark = 0
    carry_space = 0
    last = len(symbols) - 1

    for i, (mark, space) in enumerate(symbols):
        mark += carry_mark
        space += carry_space
        carry_mark = carry_space = 0

        mark_noisy = mark < threshold_us
        space_noisy = space < threshold_us and not (i == last and space == 0)

        if mark_noisy and space_noisy:
            changed = True
        elif mark_noisy:
            carry_space = space
            changed = True
        elif space_noisy:
            carry_mark = mark
            changed = True
        else:
            result.append(TimingSymbol(mark, space))

    return result, changed


def trim_gaps(
    symbols: Sequence[TimingSymbol],
    max_gap_us: int
) -> Tuple[List[TimingSymbol], bool]:
    """
    Cut idle time around a frame.

    Leading symbols with either half at or over ``max_gap_us`` and trailing
    symbols with such a mark are discarded; a trailing idle space is set
    to 0.

    Returns:
        (trimmed symbols, True if anything changed)
    """
    start = 0
    end = len(symbols)
    while start < end and (symbols[start].mark >= max_gap_us or symbols[start].space >= max_gap_us):
        start += 1
    while end > start and symbols[end - 1].mark >= max_gap_us:
        end -= 1

    result = list(symbols[start:end])
    changed = start > 0 or end < len(symbols)
    if result and result[-1].space >= max_gap_us:
        result[-1] = TimingSymbol(result[-1].mark, 0)
        changed = True
    return result, changed


# ---------- Verification ----------

def _close(measured: int, expected: int, tolerance_pct: int) -> bool:
    return measured == expected or matches(measured, expected, tolerance_pct)


def frames_match(first: DecodedCode, second: DecodedCode, raw_tolerance_pct: int = 10) -> bool:
    """
    Check whether two frames carry the same code.

    The toggle bit of bi-phase protocols and the REPEAT flag are ignored.
    RAW codes match when every duration is within ``raw_tolerance_pct``.
    """
    if first.protocol != second.protocol:
        return False

    if first.protocol == ProtocolId.RAW:
        return len(first.raw) == len(second.raw) and all(
            _close(b.mark, a.mark, raw_tolerance_pct) and _close(b.space, a.space, raw_tolerance_pct)
            for a, b in zip(first.raw, second.raw))

    flag_mask = CodeFlag.REPEAT
    data_mask = 0
    if first.protocol in BIPHASE_PROTOCOLS:
        flag_mask |= CodeFlag.TOGGLE_BIT
        data_mask = TOGGLE_DATA_MASK[first.protocol]

    def key(code):
        return (code.data & ~data_mask, code.bits, code.address, code.command,
                code.payload, code.flags & ~flag_mask)

    return key(first) == key(second)


# ---------- Pipeline ----------

class DecodePipeline:
    """
    Decoder chain with the state needed across captures.

    Holds the last NEC-family code (for repeat frames) and the learning
    buffer; both are guarded by a lock so captures may be fed from another
    thread.

    Args:
        decoders: Decoders in dispatch order (default: all protocols,
            then the universal decoder)
        config: Pipeline settings
    """

    def __init__(self, decoders: Optional[Iterable[Decoder]] = None,
                 config: Optional[PipelineConfig] = None):
        if decoders is None:
            decoders = default_decoders() + [UniversalDecoder()]
        self.decoders = list(decoders)
        self.config = config or PipelineConfig()
        self.lock = threading.Lock()

        self._last_nec: Optional[DecodedCode] = None
        self._last_nec_time = 0
        self._learning = False
        self._frames: List[DecodedCode] = []
        self._frame_time = 0

    def decode(self, symbols: Sequence[TimingSymbol], timestamp_ms: Optional[int] = None) -> DecodedCode:
        """
        Decode one capture.

        Args:
            symbols: Capture as (mark, space) pairs in microseconds
            timestamp_ms: Capture time (default: monotonic clock)

        Returns:
            DecodedCode with validation status SINGLE_FRAME

        Raises:
            NotSupported: Repeat frame with no recent NEC code
            TooFewSymbols: Nothing decoded and the capture is outside the
                RAW symbol range
        """
        now = self._now(timestamp_ms)
        symbols = [TimingSymbol(*s) for s in symbols]
        status = ValidationStatus.SINGLE_FRAME

        symbols, changed = filter_noise(symbols, self.config.noise_threshold_us)
        if changed:
            status |= ValidationStatus.NOISE_FILTERED
        symbols, changed = trim_gaps(symbols, self.config.max_gap_us)
        if changed:
            status |= ValidationStatus.GAP_TRIMMED

        code = self._dispatch(symbols, now)
        return replace(code, validation=code.validation | status, repeat_count=1)

    def _dispatch(self, symbols: List[TimingSymbol], now: int) -> DecodedCode:
        for decoder in self.decoders:
            try:
                code = decoder.decode(symbols)
            except RepeatFrame:
                return self._resolve_repeat(now)
            except NotSupported:
                raise
            except DecodeError as e:
                log.debug("%s: %s", decoder.name, e)
                continue

            if code.protocol in NEC_FAMILY and not code.is_repeat:
                with self.lock:
                    self._last_nec = code
                    self._last_nec_time = now
            return code

        return self._raw(symbols)

    def _resolve_repeat(self, now: int) -> DecodedCode:
        with self.lock:
            last = self._last_nec
            elapsed = now - self._last_nec_time
            if last is None or elapsed > self.config.nec_repeat_window_ms:
                raise NotSupported(
                    "Repeat frame without a NEC code in the last "
                    f"{self.config.nec_repeat_window_ms}ms")
            # Held buttons send a stream of repeats, each one extends the window
            self._last_nec_time = now

        log.debug("Repeat frame -> %s 0x%X (%dms)", last.name, last.data, elapsed)
        return last.with_flags(CodeFlag.REPEAT)

    def _raw(self, symbols: List[TimingSymbol]) -> DecodedCode:
        count = len(symbols)
        low, high = self.config.raw_min_symbols, self.config.raw_max_symbols
        if count < low or count > high:
            raise TooFewSymbols(
                f"Capture of {count} symbols is outside the RAW range {low}..{high}",
                count=count, needed=low, too_many=count > high)

        log.info("Unknown protocol, keeping %d symbols as RAW", count)
        return DecodedCode(protocol=ProtocolId.RAW, raw=tuple(symbols))

    # ---------- Learning ----------

    def start_learning(self):
        """Start a learning session with an empty verification buffer."""
        with self.lock:
            self._learning = True
            self._frames = []
        log.info("Learning started (%d frames required)", self.config.required_frames)

    def stop_learning(self):
        """Stop learning and drop buffered frames."""
        with self.lock:
            self._learning = False
            self._frames = []
        log.info("Learning stopped")

    def is_learning(self) -> bool:
        with self.lock:
            return self._learning

    def learn(self, symbols: Sequence[TimingSymbol], timestamp_ms: Optional[int] = None) -> Optional[DecodedCode]:
        """
        Feed one capture to the learning session.

        Frames are buffered until ``required_frames`` consecutive frames
        match, each within the verification window of the previous one. A
        mismatching or late frame restarts the buffer with itself.

        Returns:
            The accepted code (validation TWO_FRAMES/THREE_FRAMES), which
            also ends the session, or None while more frames are needed

        Raises:
            IRCodecError: If no learning session is active
            DecodeError: If the capture itself cannot be decoded
        """
        now = self._now(timestamp_ms)
        if not self.is_learning():
            raise IRCodecError("Learning mode is not active")

        code = self.decode(symbols, now)

        with self.lock:
            if (self._frames and now - self._frame_time <= self.config.verify_window_ms
                    and frames_match(self._frames[0], code, self.config.raw_tolerance_pct)):
                self._frames.append(code)
            else:
                if self._frames:
                    log.warning("Frame %s does not confirm buffered %s, restarting verification",
                                code.name, self._frames[0].name)
                self._frames = [code]
            self._frame_time = now

            count = len(self._frames)
            if count < self.config.required_frames:
                log.debug("Learning: %d/%d frames", count, self.config.required_frames)
                return None

            first = self._frames[0]
            self._frames = []
            self._learning = False

        status = ValidationStatus(first.validation & ~ValidationStatus.THREE_FRAMES) | FRAME_STATUS[count]
        log.info("Learned %s code 0x%X (%d frames)", first.name, first.data, count)
        return replace(first, validation=status, repeat_count=count,
                       flags=first.flags & ~CodeFlag.REPEAT)

    @staticmethod
    def _now(timestamp_ms: Optional[int]) -> int:
        if timestamp_ms is None:
            return int(time.monotonic() * 1000)
        return int(timestamp_ms)
