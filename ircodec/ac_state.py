"""
IR Remote Codec - Air Conditioner State

The canonical, protocol independent state of an air conditioner. AC
remotes always send the full state, so this record is what gets encoded
on every change.
"""

from dataclasses import dataclass, replace
from enum import IntEnum

from .errors import AcStateError
from .protocol import ProtocolId, protocol_name

# Temperature range (degrees C)
AC_TEMP_MIN = 16
AC_TEMP_MAX = 30
AC_TEMP_DEFAULT = 24

# Limits of the free-form fields
SLEEP_TIMER_MAX = 255       # minutes
COMFORT_MODE_MAX = 3
NAME_MAX_LENGTH = 15

# Protocols with an AC state layout
AC_PROTOCOLS = frozenset({
    ProtocolId.DAIKIN,
    ProtocolId.CARRIER,
    ProtocolId.HITACHI,
    ProtocolId.MITSUBISHI,
    ProtocolId.FUJITSU,
    ProtocolId.HAIER,
    ProtocolId.MIDEA,
    ProtocolId.SAMSUNG48,
    ProtocolId.PANASONIC,
    ProtocolId.KASEIKYO,
    ProtocolId.LG2,
})


class AcMode(IntEnum):
    OFF = 0
    AUTO = 1
    COOL = 2
    HEAT = 3
    DRY = 4
    FAN = 5


class FanSpeed(IntEnum):
    AUTO = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    QUIET = 4
    TURBO = 5


class Swing(IntEnum):
    OFF = 0
    VERTICAL = 1
    HORIZONTAL = 2
    BOTH = 3
    AUTO = 4


@dataclass
class AcState:
    """Full air conditioner state."""
    # Core state
    power: bool = False
    mode: AcMode = AcMode.COOL
    temperature: int = AC_TEMP_DEFAULT
    fan_speed: FanSpeed = FanSpeed.AUTO
    swing: Swing = Swing.OFF

    # Extended features (protocol dependent)
    turbo: bool = False
    quiet: bool = False
    econo: bool = False
    clean: bool = False
    sleep: bool = False
    sleep_timer: int = 0            # minutes, 0 = disabled
    display: bool = True
    beep: bool = True
    filter: bool = False
    light: bool = True
    anti_fungal: bool = False
    auto_clean: bool = False
    comfort_mode: int = 0           # 0 = off, 1..3 = preset

    # Protocol identification
    protocol: ProtocolId = ProtocolId.UNKNOWN
    protocol_variant: int = 0

    # Metadata
    is_learned: bool = False
    brand: str = "Unknown"
    model: str = ""

    def copy(self, **changes) -> "AcState":
        return replace(self, **changes)


def default_state() -> AcState:
    """Power off, COOL, 24C, fan auto, swing off, no protocol."""
    return AcState()


def is_configured(state: AcState) -> bool:
    """True once a protocol has been learned or set."""
    return state.is_learned and state.protocol != ProtocolId.UNKNOWN


def validate_state(state: AcState):
    """
    Check an AC state.

    Raises:
        AcStateError: If any field is out of range
    """
    try:
        AcMode(state.mode)
        FanSpeed(state.fan_speed)
        Swing(state.swing)
    except ValueError as e:
        raise AcStateError(str(e)) from None

    if not AC_TEMP_MIN <= state.temperature <= AC_TEMP_MAX:
        raise AcStateError(
            f"Temperature {state.temperature} outside {AC_TEMP_MIN}..{AC_TEMP_MAX}")
    if not 0 <= state.sleep_timer <= SLEEP_TIMER_MAX:
        raise AcStateError(f"Sleep timer {state.sleep_timer} outside 0..{SLEEP_TIMER_MAX}")
    if not 0 <= state.comfort_mode <= COMFORT_MODE_MAX:
        raise AcStateError(f"Comfort mode {state.comfort_mode} outside 0..{COMFORT_MODE_MAX}")
    if len(state.brand) > NAME_MAX_LENGTH or len(state.model) > NAME_MAX_LENGTH:
        raise AcStateError(f"Brand and model are limited to {NAME_MAX_LENGTH} characters")


def set_protocol(state: AcState, protocol: ProtocolId, variant: int = 0) -> AcState:
    """
    Configure the protocol used to encode a state.

    Returns:
        Copy of ``state`` with the protocol set and ``is_learned`` True

    Raises:
        AcStateError: If the protocol is not an AC protocol
    """
    if protocol not in AC_PROTOCOLS:
        raise AcStateError(f"{protocol_name(protocol)} is not an AC protocol")
    return replace(state, protocol=ProtocolId(protocol), protocol_variant=variant, is_learned=True)


# ---------- Display names ----------

def mode_name(mode: int) -> str:
    """Display name of a mode ("Cool") or "Unknown"."""
    try:
        return AcMode(mode).name.capitalize()
    except ValueError:
        return "Unknown"


def fan_speed_name(fan_speed: int) -> str:
    try:
        return FanSpeed(fan_speed).name.capitalize()
    except ValueError:
        return "Unknown"


def swing_name(swing: int) -> str:
    try:
        return Swing(swing).name.capitalize()
    except ValueError:
        return "Unknown"


def format_state(state: AcState) -> str:
    """One-line summary like "DAIKIN ON Cool 24C fan Auto swing Off"."""
    return (f"{protocol_name(state.protocol) if is_configured(state) else 'Not configured'} "
            f"{'ON' if state.power else 'OFF'} {mode_name(state.mode)} {state.temperature}C "
            f"fan {fan_speed_name(state.fan_speed)} swing {swing_name(state.swing)}")
