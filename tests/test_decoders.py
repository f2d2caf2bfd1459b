import pytest

from conftest import jitter
from ircodec import (
    CodeFlag,
    DecodeError,
    NotSupported,
    ProtocolId,
    RepeatFrame,
    TimingMismatch,
    TimingSymbol,
    TooFewSymbols,
    encode_apple,
    encode_bosewave,
    encode_denon,
    encode_fast,
    encode_jvc,
    encode_lego,
    encode_lg,
    encode_magiquest,
    encode_nec,
    encode_nec_extended,
    encode_nec_repeat,
    encode_panasonic,
    encode_protocol,
    encode_rc5,
    encode_rc6,
    encode_samsung,
    encode_samsung48,
    encode_sony,
    encode_whynter,
)
from ircodec.decoders import JvcDecoder, NecDecoder, Rc5Decoder, Rc6Decoder, SonyDecoder, default_decoders
from ircodec.decoders.ac import DaikinDecoder, FujitsuDecoder, HitachiDecoder
from ircodec.encoders import encode_ac_frame


# ---------- NEC family ----------

def test_nec_scenario(pipeline):
    code = pipeline.decode(encode_nec(0x00, 0x0C))
    assert code.protocol == ProtocolId.NEC
    assert code.address == 0x00
    assert code.command == 0x0C
    assert code.data == 0xF30CFF00
    assert code.bits == 32
    assert not code.flags & CodeFlag.EXTENDED
    assert code.carrier_hz == 38000


def test_nec_with_jitter(pipeline):
    code = pipeline.decode(jitter(encode_nec(0x5A, 0xA5), pct=15))
    assert (code.protocol, code.address, code.command) == (ProtocolId.NEC, 0x5A, 0xA5)


def test_nec_extended(pipeline):
    code = pipeline.decode(encode_nec_extended(0x1234, 0x56))
    assert code.protocol == ProtocolId.NEC
    assert code.address == 0x1234
    assert code.command == 0x56
    assert code.flags & CodeFlag.EXTENDED


def test_nec_command_complement_failure_is_not_nec():
    word = 0x00 | (0xFF << 8) | (0x0C << 16) | (0x00 << 24)
    with pytest.raises(TimingMismatch):
        NecDecoder().decode(encode_protocol(ProtocolId.NEC, word))


def test_nec_repeat_frame_needs_context():
    with pytest.raises(RepeatFrame) as info:
        NecDecoder().decode(encode_nec_repeat())
    assert isinstance(info.value, NotSupported)


def test_apple_is_not_nec_extended(pipeline):
    code = pipeline.decode(encode_apple(0xFF))
    assert code.protocol == ProtocolId.APPLE
    assert code.address == 0x77E1
    assert code.command == 0xFF


def test_nec_frame_too_short():
    with pytest.raises(TooFewSymbols) as info:
        NecDecoder().decode(encode_nec(1, 2)[:20])
    assert info.value.count == 20
    assert info.value.needed == 33


# ---------- Other consumer protocols ----------

def test_samsung(pipeline):
    code = pipeline.decode(encode_samsung(0x0707, 0x02))
    assert (code.protocol, code.address, code.command) == (ProtocolId.SAMSUNG, 0x0707, 0x02)
    assert code.parity_ok


@pytest.mark.parametrize("bits, address", [(12, 0x01), (15, 0x9A), (20, 0x1ABC)])
def test_sony_lengths(pipeline, bits, address):
    symbols = encode_sony(address, 0x15, bits=bits)
    assert len(symbols) == bits + 1
    assert symbols[-1].space == 0
    code = pipeline.decode(symbols)
    assert code.protocol == ProtocolId.SONY
    assert (code.bits, code.address, code.command) == (bits, address, 0x15)


def test_sony_rejects_odd_length():
    with pytest.raises(TimingMismatch):
        SonyDecoder().decode(encode_sony(1, 2)[:12] + [TimingSymbol(600, 600)] * 2)


def test_jvc_with_and_without_header(pipeline):
    code = pipeline.decode(encode_jvc(0x03, 0x17))
    assert (code.protocol, code.address, code.command) == (ProtocolId.JVC, 0x03, 0x17)
    assert not code.is_repeat

    repeat = pipeline.decode(encode_jvc(0x03, 0x17, header=False))
    assert repeat.protocol == ProtocolId.JVC
    assert repeat.command == 0x17
    assert repeat.is_repeat


def test_jvc_refuses_nec_envelope():
    with pytest.raises(TimingMismatch):
        JvcDecoder().decode(encode_nec(0x00, 0x0C))


def test_lg_and_lg2(pipeline):
    code = pipeline.decode(encode_lg(0x88, 0x0C06))
    assert (code.protocol, code.address, code.command) == (ProtocolId.LG, 0x88, 0x0C06)
    assert code.parity_ok

    code = pipeline.decode(encode_lg(0x88, 0x0C06, protocol=ProtocolId.LG2))
    assert code.protocol == ProtocolId.LG2


def test_lg_bad_checksum_sets_parity_flag(pipeline):
    word = 0x88 | (0x0C06 << 8) | (0x0 << 24)
    code = pipeline.decode(encode_protocol(ProtocolId.LG, word))
    assert code.protocol == ProtocolId.LG
    assert code.flags & CodeFlag.PARITY_FAILED


def test_denon(pipeline):
    code = pipeline.decode(encode_denon(0x08, 0x9B))
    assert (code.protocol, code.address, code.command) == (ProtocolId.DENON, 0x08, 0x9B)


def test_panasonic(pipeline):
    code = pipeline.decode(encode_panasonic(0x4004, 0x0100, extra=0x0D))
    assert code.protocol == ProtocolId.PANASONIC
    assert (code.address, code.command) == (0x4004, 0x0100)
    assert len(code.payload) == 6
    assert code.payload[3] == 0x01 ^ 0x0D
    assert code.parity_ok
    assert code.checksums == (True,)


def test_panasonic_bad_checksum(pipeline):
    word = 0x4004_0D_0D_0100
    code = pipeline.decode(encode_protocol(ProtocolId.PANASONIC, word))
    assert code.protocol == ProtocolId.PANASONIC
    assert code.data == word
    assert code.flags & CodeFlag.PARITY_FAILED
    assert code.checksums == (False,)


def test_samsung48(pipeline):
    frame = bytes([0x02, 0x92, 0x16, 0x30, 0x01])
    frame += bytes([frame[0] ^ frame[1] ^ frame[2] ^ frame[3] ^ frame[4]])
    data = int.from_bytes(frame, "little")
    code = pipeline.decode(encode_samsung48(data))
    assert code.protocol == ProtocolId.SAMSUNG48
    assert code.data == data
    assert code.parity_ok


def test_samsung48_bad_checksum(pipeline):
    code = pipeline.decode(encode_samsung48(0x123456789ABC))
    assert code.protocol == ProtocolId.SAMSUNG48
    assert code.data == 0x123456789ABC
    assert code.flags & CodeFlag.PARITY_FAILED


def test_samsung48_leaves_midea_frames(pipeline):
    frame = bytes([0xB2, 0xBF, 0x40, 0x4D, 0x40, 0xBF])
    code = pipeline.decode(encode_ac_frame(ProtocolId.MIDEA, frame))
    assert code.protocol == ProtocolId.MIDEA
    assert code.parity_ok


# ---------- Bi-phase ----------

@pytest.mark.parametrize("address, command", [(0x05, 0x35), (0x00, 0x00), (0x1F, 0x3F), (0x14, 0x01)])
def test_rc5(pipeline, address, command):
    code = pipeline.decode(encode_rc5(address, command))
    assert code.protocol == ProtocolId.RC5
    assert (code.address, code.command) == (address, command)
    assert code.bits == 14


def test_rc5_toggle_and_rc5x():
    code = Rc5Decoder().decode(encode_rc5(0x05, 0x35, toggle=1))
    assert code.flags & CodeFlag.TOGGLE_BIT
    assert code.command == 0x35

    code = Rc5Decoder().decode(encode_rc5(0x05, 0x75))
    assert code.command == 0x75
    assert not code.flags & CodeFlag.TOGGLE_BIT


def test_rc5_with_jitter():
    code = Rc5Decoder().decode(jitter(encode_rc5(0x0A, 0x2B), pct=15))
    assert (code.address, code.command) == (0x0A, 0x2B)


@pytest.mark.parametrize("address, command", [(0x00, 0x0C), (0xFF, 0xFF), (0x04, 0x10), (0x80, 0x01)])
def test_rc6(pipeline, address, command):
    code = pipeline.decode(encode_rc6(address, command))
    assert code.protocol == ProtocolId.RC6
    assert (code.address, code.command) == (address, command)
    assert code.bits == 20


def test_rc6_toggle_and_mode():
    code = Rc6Decoder().decode(encode_rc6(0x04, 0x10, toggle=1, mode=6))
    assert code.flags & CodeFlag.TOGGLE_BIT
    assert code.data >> 17 == 6
    assert code.data & (1 << 16)


def test_rc6_with_jitter():
    code = Rc6Decoder().decode(jitter(encode_rc6(0x21, 0x43, toggle=1), pct=10))
    assert (code.address, code.command) == (0x21, 0x43)
    assert code.flags & CodeFlag.TOGGLE_BIT


def test_rc6_short_run_next_to_trailer():
    symbols = encode_rc6(0x00, 0x0C, toggle=1)
    # trailer space merged with the first address half bit: 1332us nominal
    index = next(i for i, s in enumerate(symbols) if s.space == 1332)
    symbols[index] = TimingSymbol(symbols[index].mark, 1100)
    code = Rc6Decoder().decode(symbols)
    assert (code.address, code.command) == (0x00, 0x0C)
    assert code.flags & CodeFlag.TOGGLE_BIT


def test_rc6_with_heavy_jitter(pipeline):
    code = pipeline.decode(jitter(encode_rc6(0x00, 0x0C, toggle=1), pct=15, seed=2))
    assert code.protocol == ProtocolId.RC6
    assert (code.address, code.command) == (0x00, 0x0C)


def test_rc6_too_slow():
    symbols = encode_rc6(0x00, 0x0C, toggle=1)
    # 28% slower than nominal is outside the 25% window
    stretched = [TimingSymbol(s.mark * 128 // 100, s.space * 128 // 100) for s in symbols]
    with pytest.raises(TimingMismatch):
        Rc6Decoder().decode(stretched)


def test_rc6_needs_leader():
    with pytest.raises(DecodeError):
        Rc6Decoder().decode(encode_rc5(0x05, 0x35))


# ---------- Air conditioners ----------

def _daikin_payload():
    frame1 = bytearray([0x11, 0xDA, 0x27, 0x00, 0xC5, 0x00, 0x00, 0x00])
    frame1[7] = sum(frame1[:7]) & 0xFF
    frame2 = bytearray([0x11, 0xDA, 0x27, 0x00, 0x00, 0x39, 0x2C, 0x00, 0xA0, 0x00,
                        0x00, 0x06, 0x60, 0x00, 0x00, 0xC1, 0x00, 0x00, 0x00])
    frame2[18] = sum(frame2[:18]) & 0xFF
    return bytes(frame1 + frame2)


def test_daikin_with_gap(pipeline):
    payload = _daikin_payload()
    code = pipeline.decode(encode_ac_frame(ProtocolId.DAIKIN, payload))
    assert code.protocol == ProtocolId.DAIKIN
    assert code.payload == payload
    assert code.checksums == (True, True)
    assert code.address == 0x11
    assert code.command == 0x39


def test_daikin_without_gap():
    payload = _daikin_payload()
    symbols = encode_ac_frame(ProtocolId.DAIKIN, payload)
    # Capture split on the gap: drop frame 1's stop bit
    symbols = symbols[:65] + symbols[66:]
    code = DaikinDecoder().decode(symbols)
    assert code.payload == payload


def test_daikin_bad_checksum(pipeline):
    payload = bytearray(_daikin_payload())
    payload[-1] ^= 0x01
    code = pipeline.decode(encode_ac_frame(ProtocolId.DAIKIN, bytes(payload)))
    assert code.protocol == ProtocolId.DAIKIN
    assert code.checksums == (True, False)
    assert code.flags & CodeFlag.PARITY_FAILED


def _sum_frame(head, length):
    frame = bytearray(head) + bytearray(length - len(head))
    frame[-1] = sum(frame[:-1]) & 0xFF
    return bytes(frame)


@pytest.mark.parametrize("protocol, frame", [
    (ProtocolId.MITSUBISHI, _sum_frame([0x23, 0xCB, 0x26, 0x01, 0x00, 0x20, 0x18, 0x06], 19)),
    (ProtocolId.HITACHI, _sum_frame([0x01, 0x10, 0x00, 0x40, 0xBF, 0xFF, 0x00, 0xCC, 0x33], 33)),
    (ProtocolId.HITACHI, _sum_frame([0x01, 0x10, 0x00, 0x40, 0xBF, 0xFF, 0x00, 0xCC, 0x33], 43)),
])
def test_byte_sum_frames(pipeline, protocol, frame):
    code = pipeline.decode(encode_ac_frame(protocol, frame))
    assert code.protocol == protocol
    assert code.payload == frame
    assert code.parity_ok
    assert code.bits == len(frame) * 8


@pytest.mark.parametrize("length", [8, 12, 16])
def test_fujitsu_lengths(pipeline, length):
    frame = bytearray([0x14, 0x63, 0x00, 0x10, 0x10]) + bytearray(length - 5)
    frame[-1] = (0x100 - sum(frame[:-1])) & 0xFF
    code = pipeline.decode(encode_ac_frame(ProtocolId.FUJITSU, bytes(frame)))
    assert code.protocol == ProtocolId.FUJITSU
    assert len(code.payload) == length
    assert code.parity_ok
    assert code.address == 0x14


def test_fujitsu_truncates_long_captures():
    frame = bytearray([0x14, 0x63]) + bytearray(14)
    frame[-1] = (0x100 - sum(frame[:-1])) & 0xFF
    symbols = encode_ac_frame(ProtocolId.FUJITSU, bytes(frame))
    code = FujitsuDecoder().decode(symbols[:-1] + symbols[1:9] + [symbols[-1]])
    assert len(code.payload) == 16


def test_hitachi_is_not_daikin():
    frame = _sum_frame([0x01, 0x10, 0x00, 0x40], 33)
    symbols = encode_ac_frame(ProtocolId.HITACHI, frame)
    with pytest.raises(TimingMismatch):
        DaikinDecoder().decode(symbols)
    assert HitachiDecoder().decode(symbols).payload == frame


def test_haier(pipeline):
    frame = bytearray([0xA6, 0x60, 0x00, 0x00, 0x40, 0x20, 0x00, 0x20, 0x00, 0x05, 0x00, 0x00, 0x00])
    frame[-1] = 0
    for byte in frame[:-1]:
        frame[-1] ^= byte
    code = pipeline.decode(encode_ac_frame(ProtocolId.HAIER, bytes(frame)))
    assert code.protocol == ProtocolId.HAIER
    assert code.command == 0x05
    assert code.parity_ok


def test_carrier(pipeline):
    frame = bytearray([0x4D, 0x81, 0x06, 0x00]) + bytearray(12)
    frame[15] = sum((b & 0x0F) + (b >> 4) for b in frame[:15]) & 0x0F
    code = pipeline.decode(encode_ac_frame(ProtocolId.CARRIER, bytes(frame)))
    assert code.protocol == ProtocolId.CARRIER
    assert code.parity_ok


def test_midea_bad_complement_is_samsung48(pipeline):
    frame = bytes([0xB2, 0xBF, 0x40, 0x4D, 0x40, 0xBE])
    code = pipeline.decode(encode_ac_frame(ProtocolId.MIDEA, frame))
    assert code.protocol == ProtocolId.SAMSUNG48
    assert code.flags & CodeFlag.PARITY_FAILED


# ---------- Exotic ----------

def test_whynter(pipeline):
    code = pipeline.decode(encode_whynter(0x12345678))
    assert code.protocol == ProtocolId.WHYNTER
    assert (code.address, code.command) == (0x1234, 0x5678)


def test_lego(pipeline):
    code = pipeline.decode(encode_lego(0x147))
    assert code.protocol == ProtocolId.LEGO_PF
    assert code.parity_ok
    assert code.address == 0x1
    assert code.command == 0x47


def test_lego_bad_lrc(pipeline):
    code = pipeline.decode(encode_protocol(ProtocolId.LEGO_PF, 0x1470))
    assert code.protocol == ProtocolId.LEGO_PF
    assert code.flags & CodeFlag.PARITY_FAILED


def test_magiquest(pipeline):
    code = pipeline.decode(encode_magiquest(0x0ABCDEF1, 0x0123))
    assert code.protocol == ProtocolId.MAGIQUEST
    assert (code.address, code.command) == (0x0ABCDEF1, 0x0123)
    assert code.flags & CodeFlag.MSB_FIRST


def test_bosewave(pipeline):
    code = pipeline.decode(encode_bosewave(0x55))
    assert code.protocol == ProtocolId.BOSEWAVE
    assert code.command == 0x55
    assert code.parity_ok


def test_fast(pipeline):
    code = pipeline.decode(encode_fast(0xA3))
    assert code.protocol == ProtocolId.FAST
    assert code.command == 0xA3


def test_default_chain_order():
    names = [d.name for d in default_decoders()]
    assert names[:5] == ["NEC", "SAMSUNG", "SONY", "JVC", "LG"]
    assert names.index("DAIKIN") < names.index("FUJITSU")
    assert names.index("HITACHI") < names.index("FUJITSU")
    assert names.index("MITSUBISHI") < names.index("FUJITSU")
    assert names[-1] == "FAST"
