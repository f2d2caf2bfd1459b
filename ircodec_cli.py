#!/usr/bin/env python3
"""
IR Remote Codec - Command Line Interface

A CLI tool for decoding captures, encoding and storing IR codes.

Usage:
    python ircodec_cli.py decode <file>          Decode a capture file
    python ircodec_cli.py encode <protocol> ...  Encode a code into timing symbols
    python ircodec_cli.py show <name>            Show a saved code and its symbols
    python ircodec_cli.py list                   List saved IR codes
    python ircodec_cli.py delete <name>          Delete a saved IR code
    python ircodec_cli.py export <file>          Export saved codes to one file
    python ircodec_cli.py import <file>          Import codes from an export file
    python ircodec_cli.py protocols              Show the protocol timing table
    python ircodec_cli.py ac <protocol> ...      Encode an air conditioner state

Capture files hold either a JSON list of [mark, space] pairs or
alternating mark/space durations in microseconds (JSON list or
whitespace separated).
"""

import sys
import json
import logging
import argparse
from pathlib import Path

from ircodec import (
    AcMode,
    AcState,
    DecodedCode,
    DecodePipeline,
    FanSpeed,
    IRCodecError,
    PROTOCOL_TABLE,
    ProtocolId,
    Swing,
    delete_ir_code,
    encode_ac_frame,
    encode_ac_state,
    encode_apple,
    encode_code,
    encode_denon,
    encode_jvc,
    encode_lg,
    encode_nec,
    encode_panasonic,
    encode_rc5,
    encode_rc6,
    encode_samsung,
    encode_sony,
    export_codes,
    format_code,
    format_state,
    from_durations,
    import_codes,
    list_ir_codes,
    load_config,
    load_ir_code,
    load_ir_code_full,
    parse_protocol,
    save_ac_state,
    save_ir_code,
    set_protocol,
    to_symbols,
    __version__,
)

# Protocols encoded from an address and a command
ADDRESS_COMMAND_ENCODERS = {
    ProtocolId.NEC: encode_nec,
    ProtocolId.SAMSUNG: encode_samsung,
    ProtocolId.SONY: encode_sony,
    ProtocolId.JVC: encode_jvc,
    ProtocolId.LG: encode_lg,
    ProtocolId.LG2: lambda address, command: encode_lg(address, command, ProtocolId.LG2),
    ProtocolId.DENON: encode_denon,
    ProtocolId.PANASONIC: encode_panasonic,
    ProtocolId.APPLE: lambda address, command: encode_apple(command, device_id=address),
    ProtocolId.RC5: encode_rc5,
    ProtocolId.RC6: encode_rc6,
}


def read_capture(path):
    """Read a capture file into TimingSymbols."""
    text = Path(path).read_text().strip()
    if text.startswith("["):
        values = json.loads(text)
        if values and isinstance(values[0], list):
            return to_symbols(values)
        return from_durations([int(v) for v in values])
    return from_durations([int(v) for v in text.replace(",", " ").split()])


def format_symbols(symbols):
    return json.dumps([[s.mark, s.space] for s in symbols])


def cmd_decode(args):
    """Decode a capture file."""
    config = load_config(args.config) if args.config else None
    pipeline = DecodePipeline(config=config)

    symbols = read_capture(args.file)
    print(f"Capture: {len(symbols)} symbols")

    code = pipeline.decode(symbols)
    print(f"Decoded: {format_code(code)}")
    if not code.parity_ok:
        print("Warning: checksum failed")

    if args.save:
        filepath = save_ir_code(args.save, code, learned_from=args.source, notes=args.notes)
        print(f"Saved to: {filepath}")
    return 0


def cmd_encode(args):
    """Encode a code into timing symbols."""
    protocol = parse_protocol(args.protocol)

    if args.payload:
        symbols = encode_ac_frame(protocol, bytes.fromhex(args.payload))
        code = None
    elif args.data is not None:
        code = DecodedCode(protocol=protocol, data=int(args.data, 0), bits=args.bits)
        symbols = encode_code(code)
    else:
        encoder = ADDRESS_COMMAND_ENCODERS.get(protocol)
        if encoder is None:
            print(f"{protocol.name} needs --data or --payload")
            return 1
        symbols = encoder(int(args.address, 0), int(args.cmd, 0))
        code = None

    print(f"{protocol.name}: {len(symbols)} symbols")
    print(format_symbols(symbols))

    if args.save:
        if code is None:
            code = DecodePipeline().decode(symbols)
        filepath = save_ir_code(args.save, code)
        print(f"Saved to: {filepath}")
    return 0


def cmd_show(args):
    """Show a saved code and the symbols it encodes to."""
    code = load_ir_code(args.name)
    if code is None:
        print(f"IR code '{args.name}' not found")
        print("Use 'ircodec_cli.py list' to see available codes")
        return 1

    print(format_code(code))
    data = load_ir_code_full(args.name)
    if data.get("learned_from"):
        print(f"Learned from: {data['learned_from']}")
    if data.get("notes"):
        print(f"Notes: {data['notes']}")

    symbols = encode_code(code)
    print(f"{len(symbols)} symbols @ {code.carrier_hz}Hz")
    print(format_symbols(symbols))
    return 0


def cmd_list(args):
    """List saved IR codes."""
    codes = list_ir_codes()

    if not codes:
        print("No IR codes saved yet")
        print("Use 'ircodec_cli.py decode <file> --save <name>' to add one")
        return 0

    print(f"Saved IR codes ({len(codes)}):")
    for name in codes:
        print(f"  - {name}: {format_code(load_ir_code(name))}")

    return 0


def cmd_delete(args):
    """Delete a saved IR code."""
    name = args.name

    if delete_ir_code(name):
        print(f"Deleted: {name}")
        return 0
    else:
        print(f"IR code '{name}' not found")
        return 1


def cmd_export(args):
    """Export saved codes to one file."""
    count = export_codes(Path(args.file), names=args.names or None)
    print(f"Exported {count} codes to {args.file}")
    return 0


def cmd_import(args):
    """Import codes from an export file."""
    count = import_codes(Path(args.file), overwrite=args.overwrite)
    print(f"Imported {count} codes")
    return 0


def cmd_protocols(args):
    """Show the protocol timing table."""
    print(f"{'Protocol':<14}{'kHz':>5}{'Header':>13}{'Mark':>6}{'One':>6}{'Zero':>6}{'Bits':>6}")
    for c in PROTOCOL_TABLE.values():
        header = f"{c.header_mark}/{c.header_space}" if c.has_header else "-"
        bits = c.bits or "var"
        print(f"{c.protocol.name:<14}{c.carrier_khz:>5}{header:>13}{c.bit_mark:>6}"
              f"{c.one_space:>6}{c.zero_space:>6}{bits:>6}")
    return 0


def cmd_ac(args):
    """Encode an air conditioner state."""
    state = set_protocol(AcState(), parse_protocol(args.protocol))
    state.power = not args.off
    state.mode = AcMode[args.mode.upper()]
    state.temperature = args.temp
    state.fan_speed = FanSpeed[args.fan.upper()]
    state.swing = Swing[args.swing.upper()]
    for feature in args.feature or []:
        setattr(state, feature, True)

    encoded = encode_ac_state(state)
    print(format_state(state))
    print(f"Frame ({encoded.protocol.name}, {len(encoded.frame)} bytes): {encoded.frame.hex().upper()}")
    print(f"{len(encoded.symbols)} symbols @ {encoded.carrier_hz}Hz")
    print(format_symbols(encoded.symbols))

    if args.save:
        filepath = save_ac_state(args.save, state)
        print(f"Saved to: {filepath}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="IR Remote Codec - Command Line Interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s decode capture.json            Decode a capture
  %(prog)s decode capture.json -s power   Decode and save as 'power'
  %(prog)s encode nec -a 0x00 -c 0x0C     Encode NEC address 0x00, command 0x0C
  %(prog)s encode sony --data 0x95 --bits 12
  %(prog)s show power                     Show the saved 'power' code
  %(prog)s ac daikin --mode cool -t 22    Encode a Daikin AC state
"""
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # decode
    decode_parser = subparsers.add_parser('decode', help='Decode a capture file')
    decode_parser.add_argument('file', help='Capture file')
    decode_parser.add_argument('--config', help='YAML pipeline settings')
    decode_parser.add_argument('-s', '--save', metavar='NAME', help='Save the decoded code')
    decode_parser.add_argument('--source', help='Source description (e.g., "Samsung TV Remote")')
    decode_parser.add_argument('-n', '--notes', help='Notes about this code')
    decode_parser.set_defaults(func=cmd_decode)

    # encode
    encode_parser = subparsers.add_parser('encode', help='Encode a code into timing symbols')
    encode_parser.add_argument('protocol', help='Protocol name (e.g. NEC, RC5, SONY)')
    encode_parser.add_argument('-a', '--address', default='0', help='Address (default: 0)')
    encode_parser.add_argument('-c', '--command', dest='cmd', default='0', help='Command (default: 0)')
    encode_parser.add_argument('--data', help='Full data word instead of address/command')
    encode_parser.add_argument('--bits', type=int, default=0, help='Bit count for --data')
    encode_parser.add_argument('--payload', help='AC frame bytes in hex')
    encode_parser.add_argument('-s', '--save', metavar='NAME', help='Save the encoded code')
    encode_parser.set_defaults(func=cmd_encode)

    # show
    show_parser = subparsers.add_parser('show', help='Show a saved code and its symbols')
    show_parser.add_argument('name', help='Name of the IR code')
    show_parser.set_defaults(func=cmd_show)

    # list
    list_parser = subparsers.add_parser('list', help='List saved IR codes')
    list_parser.set_defaults(func=cmd_list)

    # delete
    delete_parser = subparsers.add_parser('delete', help='Delete a saved IR code')
    delete_parser.add_argument('name', help='Name of the IR code to delete')
    delete_parser.set_defaults(func=cmd_delete)

    # export
    export_parser = subparsers.add_parser('export', help='Export saved codes to one file')
    export_parser.add_argument('file', help='Output file')
    export_parser.add_argument('names', nargs='*', help='Codes to export (default: all)')
    export_parser.set_defaults(func=cmd_export)

    # import
    import_parser = subparsers.add_parser('import', help='Import codes from an export file')
    import_parser.add_argument('file', help='Export file')
    import_parser.add_argument('--overwrite', action='store_true', help='Replace existing codes')
    import_parser.set_defaults(func=cmd_import)

    # protocols
    protocols_parser = subparsers.add_parser('protocols', help='Show the protocol timing table')
    protocols_parser.set_defaults(func=cmd_protocols)

    # ac
    ac_parser = subparsers.add_parser('ac', help='Encode an air conditioner state')
    ac_parser.add_argument('protocol', help='AC protocol (e.g. DAIKIN, MIDEA)')
    ac_parser.add_argument('--off', action='store_true', help='Power off')
    ac_parser.add_argument('-m', '--mode', default='cool',
                           choices=[m.name.lower() for m in AcMode], help='Mode (default: cool)')
    ac_parser.add_argument('-t', '--temp', type=int, default=24,
                           help='Temperature in C (default: 24)')
    ac_parser.add_argument('-f', '--fan', default='auto',
                           choices=[f.name.lower() for f in FanSpeed], help='Fan speed (default: auto)')
    ac_parser.add_argument('--swing', default='off',
                           choices=[s.name.lower() for s in Swing], help='Swing (default: off)')
    ac_parser.add_argument('--feature', action='append',
                           choices=['turbo', 'quiet', 'econo', 'clean', 'sleep'],
                           help='Enable a feature (repeatable)')
    ac_parser.add_argument('-s', '--save', metavar='NAME', help='Save the AC state')
    ac_parser.set_defaults(func=cmd_ac)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (IRCodecError, ValueError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
