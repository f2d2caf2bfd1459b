#!/usr/bin/env python3
"""
Learn Code Example

Demonstrates how to learn an IR code from repeated captures of a remote
button. The captures here are generated with the NEC encoder and a little
jitter; in practice they come from an IR receiver.
"""

import random

from ircodec import DecodePipeline, TimingSymbol, encode_nec, format_code, save_ir_code


def jitter(symbols, pct=8):
    """Add receiver-like timing noise to a capture."""
    def shake(value):
        return value + random.randint(-value * pct // 100, value * pct // 100) if value else 0
    return [TimingSymbol(shake(s.mark), shake(s.space)) for s in symbols]


def main():
    pipeline = DecodePipeline()
    pipeline.start_learning()

    print("Learning IR code...")
    print("Press the same button three times.")
    print()

    code = None
    timestamp = 0
    while code is None:
        capture = jitter(encode_nec(0x04, 0x08))
        timestamp += 110
        code = pipeline.learn(capture, timestamp_ms=timestamp)
        print(f"  Frame at {timestamp}ms {'accepted' if code else 'buffered'}")

    print(f"\nLearned: {format_code(code)} ({code.repeat_count} frames)")

    name = input("\nEnter a name for this code (or press Enter to skip): ").strip()
    if name:
        filepath = save_ir_code(name, code)
        print(f"Saved to: {filepath}")
    else:
        print("Code not saved")


if __name__ == "__main__":
    main()
