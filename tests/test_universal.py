import pytest

from ircodec import (
    DecodePipeline,
    DistanceWidthTiming,
    ProtocolId,
    TimingMismatch,
    TimingSymbol,
    TooFewSymbols,
    UniversalDecoder,
    encode_code,
    encode_nec,
    encode_pulses,
    encode_sony,
)
from ircodec.universal import aggregate, histogram


def test_histogram_bins():
    bins = histogram([0, 49, 50, 560, 575])
    assert bins[0] == 2
    assert bins[1] == 1
    assert bins[11] == 2


def test_histogram_range():
    with pytest.raises(TimingMismatch):
        histogram([10000])


def test_aggregate_clusters():
    bins = histogram([560] * 10 + [600] * 5 + [1690] * 8)
    assert aggregate(bins) == [550, 1650]


def test_aggregate_bridges_single_empty_bin():
    # bins 10 and 12 are one cluster, bin 30 another
    bins = histogram([500, 600, 1500])
    assert len(aggregate(bins)) == 2


def test_aggregate_rejects_three_clusters():
    with pytest.raises(TimingMismatch):
        aggregate(histogram([500, 1500, 3000]))


def test_nec_parity():
    symbols = encode_nec(0x00, 0x0C)
    code = UniversalDecoder().decode(symbols)
    assert code.protocol == ProtocolId.PULSE_DISTANCE
    assert code.data == 0xF30CFF00
    assert code.bits == 32
    assert code.timing.header_mark == 9000
    assert code.timing.one_space == 1690
    assert code.timing.zero_space == 560


def test_pulse_width():
    symbols = encode_sony(0x1ABC, 0x15, bits=20)
    code = UniversalDecoder().decode(symbols)
    assert code.protocol == ProtocolId.PULSE_WIDTH
    assert code.bits == 20
    assert code.data == 0x15 | (0x1ABC << 7)
    assert code.timing.one_mark == 1200
    assert code.timing.zero_mark == 600


def test_unknown_remote_through_pipeline():
    timing = DistanceWidthTiming(6000, 3000, 500, 1500, 500, 500)
    symbols = encode_pulses(0xBEEF5, 20, timing, stop_mark=500)
    code = DecodePipeline().decode(symbols)
    assert code.protocol == ProtocolId.PULSE_DISTANCE
    assert (code.data, code.bits) == (0xBEEF5, 20)
    assert encode_code(code) == symbols


def test_too_short():
    with pytest.raises(TooFewSymbols):
        UniversalDecoder().decode(encode_nec(0, 0)[:10])


def test_constant_timing_is_not_a_protocol():
    symbols = [TimingSymbol(9000, 4500)] + [TimingSymbol(560, 560)] * 20 + [TimingSymbol(560, 0)]
    with pytest.raises(TimingMismatch):
        UniversalDecoder().decode(symbols)
