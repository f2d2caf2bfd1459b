import pytest

from ircodec import (
    AC_PROTOCOLS,
    AcMode,
    AcRemote,
    AcState,
    AcStateError,
    CodeFlag,
    EncodeError,
    FanSpeed,
    ProtocolId,
    Swing,
    decode_ac_state,
    default_state,
    encode_ac_state,
    encode_nec,
    format_state,
    get_carrier_hz,
    mode_name,
    set_protocol,
)
from ircodec.ac_codec import LAYOUTS, frame_symbols

# Frame byte holding the temperature, and the bytes its checksum covers
TEMPERATURE_BYTES = {
    ProtocolId.DAIKIN: (14, {7, 26}),
    ProtocolId.MITSUBISHI: (7, {18}),
    ProtocolId.CARRIER: (2, {15}),
    ProtocolId.HITACHI: (13, {32}),
    ProtocolId.FUJITSU: (8, {15}),
    ProtocolId.HAIER: (1, {12}),
    ProtocolId.MIDEA: (2, {3, 4, 5}),
    ProtocolId.SAMSUNG48: (2, {5}),
    ProtocolId.PANASONIC: (1, {3}),
    ProtocolId.KASEIKYO: (1, {3}),
    ProtocolId.LG2: (1, {3}),
}


def make_state(protocol, **changes):
    state = AcState(power=True, mode=AcMode.COOL, temperature=22, fan_speed=FanSpeed.LOW,
                    swing=Swing.VERTICAL)
    return set_protocol(state, protocol).copy(**changes)


def test_every_ac_protocol_has_a_layout():
    assert set(LAYOUTS) == set(AC_PROTOCOLS)


@pytest.mark.parametrize("protocol", sorted(LAYOUTS))
def test_state_round_trip(pipeline, protocol):
    state = make_state(protocol)
    encoded = encode_ac_state(state)
    code = pipeline.decode(encoded.symbols)

    expected = ProtocolId.PANASONIC if protocol == ProtocolId.KASEIKYO else protocol
    assert code.protocol == expected
    assert encoded.protocol == expected
    assert encoded.carrier_hz == get_carrier_hz(expected)

    decoded = decode_ac_state(code)
    assert decoded.protocol == expected
    assert decoded.is_learned
    assert (decoded.power, decoded.mode, decoded.temperature, decoded.fan_speed, decoded.swing) == \
        (True, AcMode.COOL, 22, FanSpeed.LOW, Swing.VERTICAL)


@pytest.mark.parametrize("protocol", sorted(TEMPERATURE_BYTES))
def test_temperature_change_touches_only_its_byte(protocol):
    before = encode_ac_state(make_state(protocol)).frame
    after = encode_ac_state(make_state(protocol, temperature=23)).frame
    temperature_byte, checksum_bytes = TEMPERATURE_BYTES[protocol]

    changed = {i for i, (a, b) in enumerate(zip(before, after)) if a != b}
    assert temperature_byte in changed
    assert changed <= {temperature_byte} | checksum_bytes


def test_encoding_is_stateless():
    first = encode_ac_state(make_state(ProtocolId.DAIKIN))
    encode_ac_state(make_state(ProtocolId.DAIKIN, temperature=28, fan_speed=FanSpeed.HIGH))
    assert encode_ac_state(make_state(ProtocolId.DAIKIN)) == first


def test_daikin_frame(pipeline):
    encoded = encode_ac_state(make_state(ProtocolId.DAIKIN))
    assert len(encoded.frame) == 27
    assert encoded.frame[14] == 44
    code = pipeline.decode(encoded.symbols)
    assert code.payload == encoded.frame
    assert all(code.checksums)


def test_power_off_round_trip(pipeline):
    for protocol in (ProtocolId.DAIKIN, ProtocolId.MIDEA, ProtocolId.LG2, ProtocolId.CARRIER):
        encoded = encode_ac_state(make_state(protocol, power=False))
        assert decode_ac_state(pipeline.decode(encoded.symbols)).power is False


def test_midea_off_frame():
    encoded = encode_ac_state(make_state(ProtocolId.MIDEA, mode=AcMode.OFF))
    assert encoded.frame == bytes([0xB2, 0x7B, 0xE0, 0x4D, 0x84, 0x1F])


def test_midea_fan_mode_reads_back_as_dry(pipeline):
    encoded = encode_ac_state(make_state(ProtocolId.MIDEA, mode=AcMode.FAN))
    assert decode_ac_state(pipeline.decode(encoded.symbols)).mode == AcMode.DRY


def test_temperature_clamped_to_protocol_range(pipeline):
    encoded = encode_ac_state(make_state(ProtocolId.MIDEA, temperature=16))
    assert decode_ac_state(pipeline.decode(encoded.symbols)).temperature == 17


def test_carrier_features_round_trip(pipeline):
    state = make_state(ProtocolId.CARRIER, turbo=True, sleep_timer=30, comfort_mode=2,
                       beep=False, anti_fungal=True)
    decoded = decode_ac_state(pipeline.decode(encode_ac_state(state).symbols))
    assert decoded.turbo and decoded.anti_fungal
    assert not decoded.beep
    assert (decoded.sleep_timer, decoded.comfort_mode) == (30, 2)


@pytest.mark.parametrize("protocol, checksum_byte", [
    (ProtocolId.SAMSUNG48, 5),
    (ProtocolId.PANASONIC, 3),
])
def test_corrupted_checksum_is_flagged(pipeline, protocol, checksum_byte):
    frame = bytearray(encode_ac_state(make_state(protocol)).frame)
    frame[checksum_byte] ^= 0x01
    code = pipeline.decode(frame_symbols(protocol, bytes(frame)))

    assert code.protocol == protocol
    assert code.flags & CodeFlag.PARITY_FAILED
    assert code.checksums == (False,)
    # The state is still read back
    assert decode_ac_state(code).temperature == 22


def test_unconfigured_state_is_rejected():
    with pytest.raises(AcStateError):
        encode_ac_state(default_state())


def test_non_ac_protocol_has_no_layout():
    with pytest.raises(EncodeError):
        encode_ac_state(AcState(protocol=ProtocolId.NEC, is_learned=True))


@pytest.mark.parametrize("changes", [
    {"temperature": 31},
    {"temperature": 15},
    {"sleep_timer": 256},
    {"comfort_mode": 4},
    {"brand": "x" * 16},
    {"mode": 9},
])
def test_invalid_state(changes):
    with pytest.raises(AcStateError):
        encode_ac_state(make_state(ProtocolId.DAIKIN, **changes))


def test_ac_state_error_is_value_error():
    with pytest.raises(ValueError):
        encode_ac_state(make_state(ProtocolId.DAIKIN, temperature=40))


def test_set_protocol_rejects_non_ac():
    with pytest.raises(AcStateError):
        set_protocol(default_state(), ProtocolId.NEC)


def test_decode_non_ac_code(pipeline):
    state = decode_ac_state(pipeline.decode(encode_nec(1, 2)))
    assert state.protocol == ProtocolId.NEC
    assert state.power
    assert not state.is_learned
    assert state.temperature == 24


# ---------- Remote ----------

def test_remote_encodes_every_change():
    sent = []
    remote = AcRemote(protocol=ProtocolId.DAIKIN, on_encode=sent.append)
    assert remote.is_configured()

    remote.set_power(True)
    frame = remote.set_temperature(26)
    assert sent[-1] == frame
    assert remote.state.temperature == 26

    remote.set_mode(AcMode.HEAT)
    remote.set_fan_speed(FanSpeed.HIGH)
    remote.set_swing(Swing.BOTH)
    assert len(sent) == 5
    assert (remote.state.mode, remote.state.fan_speed, remote.state.swing) == \
        (AcMode.HEAT, FanSpeed.HIGH, Swing.BOTH)


def test_remote_keeps_state_on_invalid_change():
    sent = []
    remote = AcRemote(protocol=ProtocolId.CARRIER, on_encode=sent.append)
    remote.set_temperature(22)
    with pytest.raises(AcStateError):
        remote.set_temperature(31)
    assert remote.state.temperature == 22
    assert len(sent) == 1


def test_remote_update():
    remote = AcRemote(protocol=ProtocolId.HAIER)
    remote.update(power=True, turbo=True)
    assert remote.state.turbo
    with pytest.raises(AcStateError):
        remote.update(colour="red")


def test_unconfigured_remote():
    remote = AcRemote()
    assert not remote.is_configured()
    with pytest.raises(AcStateError):
        remote.encode()


def test_remote_copies_initial_state():
    state = make_state(ProtocolId.FUJITSU)
    remote = AcRemote(state)
    remote.set_temperature(18)
    assert state.temperature == 22


def test_display_names():
    assert mode_name(AcMode.COOL) == "Cool"
    assert mode_name(99) == "Unknown"
    assert format_state(make_state(ProtocolId.DAIKIN)) == "DAIKIN ON Cool 22C fan Low swing Vertical"
    assert format_state(default_state()).startswith("Not configured OFF")
