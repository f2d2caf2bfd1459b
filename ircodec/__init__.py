"""
IR Remote Codec - Python Library

Decoding and encoding of consumer infrared remote protocols from raw
mark/space timing captures.

Features:
    - Decoders for 25+ protocols (NEC, Sony, RC5/RC6, Samsung, ...)
    - Air conditioner byte frames (Daikin, Mitsubishi, Midea, ...)
    - Universal pulse-distance/pulse-width decoder for unknown remotes
    - Decode pipeline with noise filter, NEC repeat resolution and
      multi-frame learning verification
    - Encoders for every decodable protocol
    - AC state model with full-state encode and best-effort decode
    - IR code storage (JSON format)

Requirements:
    - PyYAML >= 6.0 (pipeline settings files)

Quick Start:
    >>> from ircodec import DecodePipeline, encode_nec
    >>> pipeline = DecodePipeline()
    >>> code = pipeline.decode(encode_nec(0x00, 0x0C))
    >>> print(format_code(code))
    NEC Addr: 0x00, Cmd: 0x0C (data: 0xF30CFF00, 32 bits)

    # Air conditioners:
    >>> remote = AcRemote(protocol=ProtocolId.DAIKIN)
    >>> frame = remote.set_temperature(22)

License: MIT
"""

__version__ = "1.0.0"
__author__ = "ircodec contributors"

# Timing
from .timing import (
    DEFAULT_TOLERANCE_PCT,
    TimingSymbol,
    matches,
    match_mark,
    match_space,
    to_symbols,
    flatten,
    from_durations,
)

# Protocol constants
from .protocol import (
    ProtocolId,
    Encoding,
    ProtocolConstants,
    PROTOCOL_TABLE,
    DEFAULT_CARRIER_HZ,
    get_protocol_constants,
    get_carrier_hz,
    protocol_name,
    parse_protocol,
)

# Codes and errors
from .code import CodeFlag, ValidationStatus, DistanceWidthTiming, DecodedCode
from .errors import (
    IRCodecError,
    DecodeError,
    TooFewSymbols,
    TimingMismatch,
    NotSupported,
    RepeatFrame,
    EncodeError,
    AcStateError,
)

# Decoding
from .decoders import Decoder, default_decoders
from .universal import UniversalDecoder
from .config import PipelineConfig, load_config
from .pipeline import DecodePipeline, filter_noise, trim_gaps, frames_match

# Encoding
from .encoders import (
    encode_pulses,
    encode_protocol,
    encode_nec,
    encode_nec_extended,
    encode_nec_word,
    encode_nec_repeat,
    encode_apple,
    encode_samsung,
    encode_sony,
    encode_jvc,
    encode_lg,
    encode_denon,
    encode_panasonic,
    encode_samsung48,
    encode_rc5,
    encode_rc6,
    encode_whynter,
    encode_lego,
    encode_magiquest,
    encode_bosewave,
    encode_fast,
    encode_ac_frame,
    encode_code,
    format_code,
)

# Air conditioners
from .ac_state import (
    AC_PROTOCOLS,
    AcMode,
    FanSpeed,
    Swing,
    AcState,
    default_state,
    is_configured,
    validate_state,
    set_protocol,
    mode_name,
    fan_speed_name,
    swing_name,
    format_state,
)
from .ac_codec import EncodedFrame, AcRemote, encode_ac_state, decode_ac_state

# Storage utilities
from .storage import (
    code_to_record,
    code_from_record,
    save_ir_code,
    load_ir_code,
    load_ir_code_full,
    list_ir_codes,
    delete_ir_code,
    export_codes,
    import_codes,
    save_ac_state,
    load_ac_state,
)

__all__ = [
    # Version
    "__version__",

    # Timing
    "DEFAULT_TOLERANCE_PCT",
    "TimingSymbol",
    "matches",
    "match_mark",
    "match_space",
    "to_symbols",
    "flatten",
    "from_durations",

    # Protocol
    "ProtocolId",
    "Encoding",
    "ProtocolConstants",
    "PROTOCOL_TABLE",
    "DEFAULT_CARRIER_HZ",
    "get_protocol_constants",
    "get_carrier_hz",
    "protocol_name",
    "parse_protocol",

    # Codes and errors
    "CodeFlag",
    "ValidationStatus",
    "DistanceWidthTiming",
    "DecodedCode",
    "IRCodecError",
    "DecodeError",
    "TooFewSymbols",
    "TimingMismatch",
    "NotSupported",
    "RepeatFrame",
    "EncodeError",
    "AcStateError",

    # Decoding
    "Decoder",
    "default_decoders",
    "UniversalDecoder",
    "PipelineConfig",
    "load_config",
    "DecodePipeline",
    "filter_noise",
    "trim_gaps",
    "frames_match",

    # Encoding
    "encode_pulses",
    "encode_protocol",
    "encode_nec",
    "encode_nec_extended",
    "encode_nec_word",
    "encode_nec_repeat",
    "encode_apple",
    "encode_samsung",
    "encode_sony",
    "encode_jvc",
    "encode_lg",
    "encode_denon",
    "encode_panasonic",
    "encode_samsung48",
    "encode_rc5",
    "encode_rc6",
    "encode_whynter",
    "encode_lego",
    "encode_magiquest",
    "encode_bosewave",
    "encode_fast",
    "encode_ac_frame",
    "encode_code",
    "format_code",

    # Air conditioners
    "AC_PROTOCOLS",
    "AcMode",
    "FanSpeed",
    "Swing",
    "AcState",
    "default_state",
    "is_configured",
    "validate_state",
    "set_protocol",
    "mode_name",
    "fan_speed_name",
    "swing_name",
    "format_state",
    "EncodedFrame",
    "AcRemote",
    "encode_ac_state",
    "decode_ac_state",

    # Storage
    "code_to_record",
    "code_from_record",
    "save_ir_code",
    "load_ir_code",
    "load_ir_code_full",
    "list_ir_codes",
    "delete_ir_code",
    "export_codes",
    "import_codes",
    "save_ac_state",
    "load_ac_state",
]
