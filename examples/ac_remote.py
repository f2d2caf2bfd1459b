#!/usr/bin/env python3
"""
AC Remote Example

Demonstrates driving an air conditioner: every change sends the full
state frame.
"""

from ircodec import AcMode, AcRemote, FanSpeed, ProtocolId, format_state


def transmit(encoded):
    """Stand-in for an IR transmitter."""
    print(f"  -> {encoded.protocol.name} {encoded.frame.hex().upper()} "
          f"({len(encoded.symbols)} symbols @ {encoded.carrier_hz}Hz)")


def main():
    remote = AcRemote(protocol=ProtocolId.DAIKIN, on_encode=transmit)

    print("Power on")
    remote.set_power(True)

    print("Cool to 22C")
    remote.set_mode(AcMode.COOL)
    remote.set_temperature(22)

    print("Fan high")
    remote.set_fan_speed(FanSpeed.HIGH)

    print(f"\nState: {format_state(remote.state)}")


if __name__ == "__main__":
    main()
