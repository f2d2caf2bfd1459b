"""
IR Remote Codec - Protocol Decoders

Decoders are tried in tiers, most common protocols first. The order
matters where protocols share timing: fixed-length decoders refuse
captures of the wrong length, and Hitachi/Mitsubishi must run before
Fujitsu, which truncates long frames.
"""

from typing import List

from .base import Decoder
from .consumer import (
    NecDecoder,
    AppleDecoder,
    SamsungDecoder,
    SonyDecoder,
    JvcDecoder,
    LgDecoder,
    Lg2Decoder,
    DenonDecoder,
    PanasonicDecoder,
    Samsung48Decoder,
    is_nec_repeat,
)
from .biphase import Rc5Decoder, Rc6Decoder
from .ac import (
    DaikinDecoder,
    MitsubishiDecoder,
    HitachiDecoder,
    FujitsuDecoder,
    HaierDecoder,
    MideaDecoder,
    CarrierDecoder,
)
from .exotic import (
    WhynterDecoder,
    LegoDecoder,
    MagiQuestDecoder,
    BoseWaveDecoder,
    FastDecoder,
)

# Tier 1: most common consumer protocols
TIER1 = (NecDecoder, SamsungDecoder, SonyDecoder, JvcDecoder, LgDecoder)
# Tier 2: other consumer protocols
TIER2 = (DenonDecoder, Rc5Decoder, Rc6Decoder, PanasonicDecoder, Samsung48Decoder, AppleDecoder)
# Tier 3: air conditioners
TIER3 = (DaikinDecoder, MitsubishiDecoder, HitachiDecoder, FujitsuDecoder, HaierDecoder,
         MideaDecoder, CarrierDecoder, Lg2Decoder)
# Tier 4: exotic
TIER4 = (WhynterDecoder, LegoDecoder, MagiQuestDecoder, BoseWaveDecoder, FastDecoder)


def default_decoders() -> List[Decoder]:
    """
    Build the default decoder chain (without the universal decoder).

    Returns:
        New list of decoder instances in dispatch order
    """
    return [cls() for tier in (TIER1, TIER2, TIER3, TIER4) for cls in tier]


__all__ = [
    "Decoder",
    "default_decoders",
    "is_nec_repeat",
    "TIER1",
    "TIER2",
    "TIER3",
    "TIER4",

    # Consumer
    "NecDecoder",
    "AppleDecoder",
    "SamsungDecoder",
    "SonyDecoder",
    "JvcDecoder",
    "LgDecoder",
    "Lg2Decoder",
    "DenonDecoder",
    "PanasonicDecoder",
    "Samsung48Decoder",
    "Rc5Decoder",
    "Rc6Decoder",

    # Air conditioners
    "DaikinDecoder",
    "MitsubishiDecoder",
    "HitachiDecoder",
    "FujitsuDecoder",
    "HaierDecoder",
    "MideaDecoder",
    "CarrierDecoder",

    # Exotic
    "WhynterDecoder",
    "LegoDecoder",
    "MagiQuestDecoder",
    "BoseWaveDecoder",
    "FastDecoder",
]
