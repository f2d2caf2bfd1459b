"""
IR Remote Codec - Exceptions

Decoders raise a DecodeError subclass to say why a capture is not theirs.
A failed checksum is never an exception: the code is returned with the
PARITY_FAILED flag set.
"""

from typing import Optional


class IRCodecError(Exception):
    """Base class for all codec errors."""


class DecodeError(IRCodecError):
    """A capture could not be decoded by a decoder."""


class TooFewSymbols(DecodeError):
    """
    Structural failure: the capture cannot hold a frame of this shape.

    Retrying with another tolerance will not help.
    """

    def __init__(self, message: str, count: int = 0, needed: int = 0, too_many: bool = False):
        super().__init__(message)
        self.count = count
        self.needed = needed
        self.too_many = too_many


class TimingMismatch(DecodeError):
    """Durations are outside tolerance for this protocol; try the next decoder."""


class NotSupported(DecodeError):
    """A valid frame that cannot be interpreted without context."""


class RepeatFrame(NotSupported):
    """A repeat frame; only meaningful with a recently decoded code."""

    def __init__(self, message: str, protocol: Optional[int] = None):
        super().__init__(message)
        self.protocol = protocol


class EncodeError(IRCodecError):
    """A code or state cannot be encoded."""


class AcStateError(IRCodecError, ValueError):
    """An air conditioner state is invalid or not configured."""
