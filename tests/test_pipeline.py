import pytest

from conftest import jitter
from ircodec import (
    CodeFlag,
    DecodePipeline,
    IRCodecError,
    NotSupported,
    PipelineConfig,
    ProtocolId,
    TimingSymbol,
    TooFewSymbols,
    ValidationStatus,
    encode_nec,
    encode_nec_repeat,
    encode_rc5,
    encode_sony,
    filter_noise,
    frames_match,
    trim_gaps,
)
from ircodec.decoders import NecDecoder


# ---------- Signal conditioning ----------

def test_filter_noise_drops_glitches():
    symbols = [TimingSymbol(9000, 4500), TimingSymbol(40, 30), TimingSymbol(560, 560)]
    filtered, changed = filter_noise(symbols, 100)
    assert filtered == [TimingSymbol(9000, 4500), TimingSymbol(560, 560)]
    assert changed


def test_filter_noise_carries_valid_half():
    symbols = [TimingSymbol(560, 50), TimingSymbol(500, 560)]
    filtered, changed = filter_noise(symbols, 100)
    assert filtered == [TimingSymbol(1060, 560)]
    assert changed


def test_filter_noise_keeps_final_zero_space():
    symbols = encode_nec(0, 0)
    filtered, changed = filter_noise(symbols, 100)
    assert filtered == symbols
    assert not changed


def test_trim_gaps():
    symbols = [TimingSymbol(100000, 2000), TimingSymbol(9000, 4500), TimingSymbol(560, 80000)]
    trimmed, changed = trim_gaps(symbols, 50000)
    assert trimmed == [TimingSymbol(9000, 4500), TimingSymbol(560, 0)]
    assert changed

    trimmed, changed = trim_gaps(encode_nec(0, 0), 50000)
    assert not changed


def test_decode_reports_conditioning(pipeline):
    symbols = [TimingSymbol(200, 60000)] + encode_nec(0x10, 0x20)
    symbols[-1] = TimingSymbol(560, 90000)
    code = pipeline.decode(symbols)
    assert code.protocol == ProtocolId.NEC
    assert code.validation & ValidationStatus.GAP_TRIMMED
    assert not code.validation & ValidationStatus.NOISE_FILTERED
    assert code.validation.frame_count == 1
    assert code.repeat_count == 1


def test_decode_with_glitch(pipeline):
    symbols = encode_nec(0x10, 0x20)
    symbols.insert(5, TimingSymbol(30, 20))
    code = pipeline.decode(symbols)
    assert (code.protocol, code.address, code.command) == (ProtocolId.NEC, 0x10, 0x20)
    assert code.validation & ValidationStatus.NOISE_FILTERED


# ---------- NEC repeat ----------

def test_repeat_within_window(pipeline):
    pipeline.decode(encode_nec(0x00, 0x0C), timestamp_ms=1000)
    code = pipeline.decode(encode_nec_repeat(), timestamp_ms=1150)
    assert code.protocol == ProtocolId.NEC
    assert (code.address, code.command) == (0x00, 0x0C)
    assert code.is_repeat


def test_repeat_after_window(pipeline):
    pipeline.decode(encode_nec(0x00, 0x0C), timestamp_ms=1000)
    with pytest.raises(NotSupported):
        pipeline.decode(encode_nec_repeat(), timestamp_ms=1250)


def test_repeat_without_code(pipeline):
    with pytest.raises(NotSupported):
        pipeline.decode(encode_nec_repeat(), timestamp_ms=0)


def test_held_button_extends_window(pipeline):
    pipeline.decode(encode_nec(0x00, 0x0C), timestamp_ms=0)
    for t in (110, 220, 330, 440):
        assert pipeline.decode(encode_nec_repeat(), timestamp_ms=t).is_repeat


def test_repeat_window_is_configurable():
    pipeline = DecodePipeline(config=PipelineConfig(nec_repeat_window_ms=300))
    pipeline.decode(encode_nec(0x00, 0x0C), timestamp_ms=0)
    assert pipeline.decode(encode_nec_repeat(), timestamp_ms=250).is_repeat


# ---------- Raw fallback ----------

def test_raw_fallback(pipeline):
    symbols = [TimingSymbol(300 + 97 * i, 400 + 211 * (i % 5)) for i in range(12)]
    code = pipeline.decode(symbols)
    assert code.protocol == ProtocolId.RAW
    assert list(code.raw) == symbols


def test_raw_limits(pipeline):
    with pytest.raises(TooFewSymbols) as info:
        pipeline.decode([TimingSymbol(300, 300)] * 4)
    assert not info.value.too_many

    with pytest.raises(TooFewSymbols) as info:
        pipeline.decode([TimingSymbol(300, 300)] * 300)
    assert info.value.too_many


def test_custom_decoder_chain():
    pipeline = DecodePipeline(decoders=[NecDecoder()])
    code = pipeline.decode(encode_sony(1, 0x15))
    assert code.protocol == ProtocolId.RAW
    assert len(code.raw) == 13


# ---------- Verification ----------

def test_three_frame_learning(pipeline):
    pipeline.start_learning()
    assert pipeline.is_learning()

    assert pipeline.learn(jitter(encode_nec(0x00, 0x0C), seed=1), timestamp_ms=0) is None
    assert pipeline.learn(jitter(encode_nec(0x00, 0x0C), seed=2), timestamp_ms=110) is None
    code = pipeline.learn(jitter(encode_nec(0x00, 0x0C), seed=3), timestamp_ms=220)

    assert code is not None
    assert (code.protocol, code.address, code.command) == (ProtocolId.NEC, 0x00, 0x0C)
    assert code.validation.frame_count == 3
    assert code.validation & ValidationStatus.THREE_FRAMES == ValidationStatus.THREE_FRAMES
    assert code.repeat_count == 3
    assert not pipeline.is_learning()


def test_two_frames_then_mismatch(pipeline):
    pipeline.start_learning()
    assert pipeline.learn(encode_nec(0x00, 0x0C), timestamp_ms=0) is None
    assert pipeline.learn(encode_nec(0x00, 0x0C), timestamp_ms=100) is None
    # A different button restarts verification with itself
    assert pipeline.learn(encode_nec(0x00, 0x0D), timestamp_ms=200) is None
    assert pipeline.learn(encode_nec(0x00, 0x0D), timestamp_ms=300) is None
    code = pipeline.learn(encode_nec(0x00, 0x0D), timestamp_ms=400)
    assert code.command == 0x0D


def test_late_frame_restarts(pipeline):
    pipeline.start_learning()
    pipeline.learn(encode_nec(1, 2), timestamp_ms=0)
    pipeline.learn(encode_nec(1, 2), timestamp_ms=100)
    assert pipeline.learn(encode_nec(1, 2), timestamp_ms=700) is None
    assert pipeline.learn(encode_nec(1, 2), timestamp_ms=800) is None
    assert pipeline.learn(encode_nec(1, 2), timestamp_ms=900) is not None


def test_two_frame_learning(two_frame_pipeline):
    two_frame_pipeline.start_learning()
    assert two_frame_pipeline.learn(encode_nec(1, 2), timestamp_ms=0) is None
    code = two_frame_pipeline.learn(encode_nec(1, 2), timestamp_ms=100)
    assert code.validation.frame_count == 2
    assert code.repeat_count == 2


def test_learning_accepts_repeat_frames(two_frame_pipeline):
    two_frame_pipeline.start_learning()
    two_frame_pipeline.learn(encode_nec(1, 2), timestamp_ms=0)
    code = two_frame_pipeline.learn(encode_nec_repeat(), timestamp_ms=110)
    assert code.command == 2
    assert not code.is_repeat


def test_rc5_toggle_ignored_by_verification(two_frame_pipeline):
    two_frame_pipeline.start_learning()
    two_frame_pipeline.learn(encode_rc5(5, 0x35, toggle=0), timestamp_ms=0)
    code = two_frame_pipeline.learn(encode_rc5(5, 0x35, toggle=1), timestamp_ms=120)
    assert code is not None
    assert code.protocol == ProtocolId.RC5


def test_learn_requires_session(pipeline):
    with pytest.raises(IRCodecError):
        pipeline.learn(encode_nec(1, 2))


def test_stop_learning_clears_buffer(pipeline):
    pipeline.start_learning()
    pipeline.learn(encode_nec(1, 2), timestamp_ms=0)
    pipeline.learn(encode_nec(1, 2), timestamp_ms=100)
    pipeline.stop_learning()
    pipeline.start_learning()
    assert pipeline.learn(encode_nec(1, 2), timestamp_ms=200) is None


def test_frames_match_raw_tolerance():
    pipeline = DecodePipeline()
    symbols = [TimingSymbol(300 + 97 * i, 400 + 211 * (i % 5)) for i in range(12)]
    first = pipeline.decode(symbols)
    close = pipeline.decode([TimingSymbol(m * 105 // 100, s * 95 // 100) for m, s in symbols])
    far = pipeline.decode([TimingSymbol(m * 120 // 100, s) for m, s in symbols])
    assert frames_match(first, close)
    assert not frames_match(first, far)
    assert not frames_match(first, pipeline.decode(symbols[:11]))


def test_frames_match_ignores_repeat_flag(pipeline):
    code = pipeline.decode(encode_nec(1, 2))
    assert frames_match(code, code.with_flags(CodeFlag.REPEAT))
    assert not frames_match(code, pipeline.decode(encode_nec(1, 3)))
