import json

import pytest

import ircodec_cli
from ircodec import TimingSymbol, encode_nec, flatten


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    # Codes are stored in ./ir_codes
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_capture(path, symbols):
    path.write_text(json.dumps([[s.mark, s.space] for s in symbols]))
    return str(path)


def test_decode(workdir, capsys):
    capture = write_capture(workdir / "power.json", encode_nec(0x00, 0x0C))
    assert ircodec_cli.main(["decode", capture]) == 0
    out = capsys.readouterr().out
    assert "Capture: 34 symbols" in out
    assert "Decoded: NEC Addr: 0x00, Cmd: 0x0C" in out


def test_decode_plain_durations(workdir, capsys):
    capture = workdir / "power.txt"
    capture.write_text(" ".join(str(d) for d in flatten(encode_nec(0x04, 0x08))[:-1]))
    assert ircodec_cli.main(["decode", str(capture)]) == 0
    assert "Addr: 0x04, Cmd: 0x08" in capsys.readouterr().out


def test_decode_with_config(workdir, capsys):
    config = workdir / "ir.yaml"
    config.write_text("pipeline:\n  raw_min_symbols: 20\n")
    capture = write_capture(workdir / "odd.json",
                            [TimingSymbol(300 + 97 * i, 400 + 211 * (i % 5)) for i in range(12)])
    assert ircodec_cli.main(["decode", capture, "--config", str(config)]) == 1
    assert "Error:" in capsys.readouterr().out


def test_decode_save_show_list_delete(workdir, capsys):
    capture = write_capture(workdir / "power.json", encode_nec(0x00, 0x0C))
    assert ircodec_cli.main(["decode", capture, "-s", "power", "--source", "TV"]) == 0
    assert (workdir / "ir_codes" / "power.ir").exists()

    assert ircodec_cli.main(["show", "power"]) == 0
    out = capsys.readouterr().out
    assert "Learned from: TV" in out
    assert "34 symbols @ 38000Hz" in out

    assert ircodec_cli.main(["list"]) == 0
    assert "  - power: NEC" in capsys.readouterr().out

    assert ircodec_cli.main(["delete", "power"]) == 0
    assert ircodec_cli.main(["delete", "power"]) == 1
    assert ircodec_cli.main(["show", "power"]) == 1


def test_list_empty(capsys):
    assert ircodec_cli.main(["list"]) == 0
    assert "No IR codes saved yet" in capsys.readouterr().out


def test_encode_address_command(capsys):
    assert ircodec_cli.main(["encode", "nec", "-a", "0x00", "-c", "0x0C"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "NEC: 34 symbols"
    assert [TimingSymbol(*pair) for pair in json.loads(lines[1])] == encode_nec(0x00, 0x0C)


def test_encode_and_save(workdir, capsys):
    assert ircodec_cli.main(["encode", "rc5", "-a", "5", "-c", "0x35", "-s", "tv_mute"]) == 0
    assert (workdir / "ir_codes" / "tv_mute.ir").exists()


def test_encode_needs_data(capsys):
    assert ircodec_cli.main(["encode", "whynter"]) == 1
    assert "needs --data or --payload" in capsys.readouterr().out


def test_unknown_protocol(capsys):
    assert ircodec_cli.main(["encode", "telefunken"]) == 1
    assert "Error: Unknown protocol: telefunken" in capsys.readouterr().out


def test_export_import(workdir, capsys):
    capture = write_capture(workdir / "power.json", encode_nec(0x00, 0x0C))
    ircodec_cli.main(["decode", capture, "-s", "power"])
    assert ircodec_cli.main(["export", "remote.json"]) == 0
    assert "Exported 1 codes" in capsys.readouterr().out

    assert ircodec_cli.main(["import", "remote.json"]) == 0
    assert "Imported 0 codes" in capsys.readouterr().out
    assert ircodec_cli.main(["import", "remote.json", "--overwrite"]) == 0
    assert "Imported 1 codes" in capsys.readouterr().out


def test_protocols_table(capsys):
    assert ircodec_cli.main(["protocols"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Protocol")
    assert "DAIKIN" in out


def test_ac(workdir, capsys):
    assert ircodec_cli.main(["ac", "daikin", "-m", "heat", "-t", "21", "--feature", "turbo",
                             "-s", "lounge"]) == 0
    out = capsys.readouterr().out
    assert "DAIKIN ON Heat 21C fan Auto swing Off" in out
    assert "Frame (DAIKIN, 27 bytes)" in out
    assert (workdir / "ir_codes" / "lounge.ac").exists()


@pytest.mark.parametrize("argv", [
    ["ac", "nec"],
    ["ac", "daikin", "-t", "40"],
])
def test_ac_errors(argv, capsys):
    assert ircodec_cli.main(argv) == 1
    assert "Error:" in capsys.readouterr().out


def test_no_command(capsys):
    assert ircodec_cli.main([]) == 0
    assert "usage:" in capsys.readouterr().out
