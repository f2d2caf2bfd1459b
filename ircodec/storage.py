"""
IR Remote Codec - IR Code Storage

This module handles saving and loading decoded IR codes and AC states
to/from JSON files.

A stored code is the record of a DecodedCode, e.g.:

    {
      "name": "power",
      "protocol": "NEC",
      "data": 4077715200,
      "bits": 32,
      "address": 0,
      "command": 12,
      ...
    }

RAW codes additionally carry their symbols as [mark, space] pairs.
"""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .ac_state import AcMode, AcState, FanSpeed, Swing
from .code import CodeFlag, DecodedCode, DistanceWidthTiming, ValidationStatus
from .protocol import ProtocolId, parse_protocol
from .timing import TimingSymbol

log = logging.getLogger(__name__)

# Default codes directory (relative to CWD)
DEFAULT_CODES_DIR = Path("ir_codes")

CODE_SUFFIX = ".ir"
AC_SUFFIX = ".ac"
EXPORT_VERSION = 1


def get_codes_dir(codes_dir: Optional[Path] = None) -> Path:
    """
    Get the IR codes directory, creating it if necessary.

    Args:
        codes_dir: Optional custom directory path

    Returns:
        Path to the codes directory
    """
    path = Path(codes_dir) if codes_dir else DEFAULT_CODES_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------- Records ----------

def code_to_record(code: DecodedCode) -> Dict[str, Any]:
    """
    Convert a code to a JSON-compatible dict.

    Raw symbols are only stored for RAW codes.
    """
    record: Dict[str, Any] = {
        "protocol": code.name,
        "data": code.data,
        "bits": code.bits,
        "address": code.address,
        "command": code.command,
        "flags": int(code.flags),
        "carrier_hz": code.carrier_hz,
        "duty_cycle": code.duty_cycle,
        "validation": int(code.validation),
        "repeat_count": code.repeat_count,
        "repeat_period_ms": code.repeat_period_ms,
    }
    if code.payload:
        record["payload"] = code.payload.hex()
    if code.checksums:
        record["checksums"] = list(code.checksums)
    if code.timing is not None:
        record["timing"] = code.timing._asdict()
    if code.protocol == ProtocolId.RAW:
        record["raw"] = [[s.mark, s.space] for s in code.raw]
    return record


def code_from_record(record: Dict[str, Any]) -> DecodedCode:
    """
    Rebuild a code from its record.

    Raises:
        ValueError: If the protocol name is unknown
        KeyError: If the record has no protocol
    """
    timing = record.get("timing")
    return DecodedCode(
        protocol=parse_protocol(record["protocol"]),
        data=record.get("data", 0),
        bits=record.get("bits", 0),
        address=record.get("address", 0),
        command=record.get("command", 0),
        flags=CodeFlag(record.get("flags", 0)),
        carrier_hz=record.get("carrier_hz", 0),
        duty_cycle=record.get("duty_cycle", 33),
        validation=ValidationStatus(record.get("validation", 0)),
        repeat_count=record.get("repeat_count", 0),
        repeat_period_ms=record.get("repeat_period_ms", 0),
        raw=tuple(TimingSymbol(mark, space) for mark, space in record.get("raw", [])),
        payload=bytes.fromhex(record.get("payload", "")),
        checksums=tuple(record.get("checksums", ())),
        timing=DistanceWidthTiming(**timing) if timing else None,
    )


# ---------- IR codes ----------

def save_ir_code(
    name: str,
    code: DecodedCode,
    codes_dir: Optional[Path] = None,
    learned_from: Optional[str] = None,
    notes: Optional[str] = None
) -> Path:
    """
    Save an IR code to a JSON file.

    Args:
        name: Code name (used as filename)
        code: Decoded code
        codes_dir: Optional custom directory
        learned_from: Optional source description (e.g., "Samsung TV Remote")
        notes: Optional notes about the code

    Returns:
        Path to the saved file

    Example:
        >>> path = save_ir_code("power", code, learned_from="My TV Remote")
    """
    directory = get_codes_dir(codes_dir)
    filepath = directory / f"{name}{CODE_SUFFIX}"

    data: Dict[str, Any] = {"name": name}
    data.update(code_to_record(code))

    if learned_from:
        data["learned_from"] = learned_from

    if notes:
        data["notes"] = notes

    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2)

    log.info("Saved %s code '%s' to %s", code.name, name, filepath)
    return filepath


def load_ir_code_full(
    name: str,
    codes_dir: Optional[Path] = None
) -> Optional[Dict[str, Any]]:
    """
    Load the stored record including metadata.

    Args:
        name: Code name
        codes_dir: Optional custom directory

    Returns:
        Dictionary with all stored fields, or None if not found
    """
    directory = get_codes_dir(codes_dir)
    filepath = directory / f"{name}{CODE_SUFFIX}"

    if not filepath.exists():
        return None

    with open(filepath, 'r') as f:
        return json.load(f)


def load_ir_code(
    name: str,
    codes_dir: Optional[Path] = None
) -> Optional[DecodedCode]:
    """
    Load an IR code from file.

    Args:
        name: Code name (filename without extension)
        codes_dir: Optional custom directory

    Returns:
        DecodedCode, or None if not found

    Example:
        >>> code = load_ir_code("power")
        >>> if code:
        ...     print(format_code(code))
    """
    data = load_ir_code_full(name, codes_dir)
    if data is None:
        return None
    return code_from_record(data)


def list_ir_codes(codes_dir: Optional[Path] = None) -> List[str]:
    """
    List all saved IR code names.

    Args:
        codes_dir: Optional custom directory

    Returns:
        List of code names (without .ir extension)
    """
    directory = get_codes_dir(codes_dir)
    return sorted(f.stem for f in directory.glob(f"*{CODE_SUFFIX}"))


def delete_ir_code(name: str, codes_dir: Optional[Path] = None) -> bool:
    """
    Delete a saved IR code.

    Returns:
        True if deleted, False if not found
    """
    directory = get_codes_dir(codes_dir)
    filepath = directory / f"{name}{CODE_SUFFIX}"

    if filepath.exists():
        filepath.unlink()
        log.info("Deleted code '%s'", name)
        return True
    return False


def export_codes(
    output_file: Path,
    codes_dir: Optional[Path] = None,
    names: Optional[List[str]] = None
) -> int:
    """
    Export multiple IR codes to a single JSON file.

    Args:
        output_file: Output file path
        codes_dir: Optional codes directory
        names: Optional list of specific codes to export (all if None)

    Returns:
        Number of codes exported
    """
    if names is None:
        names = list_ir_codes(codes_dir)

    codes = {}
    for name in names:
        data = load_ir_code_full(name, codes_dir)
        if data is not None:
            codes[name] = data

    with open(output_file, 'w') as f:
        json.dump({"ir_codes": codes, "version": EXPORT_VERSION}, f, indent=2)

    log.info("Exported %d codes to %s", len(codes), output_file)
    return len(codes)


def import_codes(
    input_file: Path,
    codes_dir: Optional[Path] = None,
    overwrite: bool = False
) -> int:
    """
    Import IR codes from an export file.

    Args:
        input_file: Input file path
        codes_dir: Optional codes directory
        overwrite: Whether to overwrite existing codes

    Returns:
        Number of codes imported

    Raises:
        ValueError: If a record cannot be read as a code
    """
    directory = get_codes_dir(codes_dir)

    with open(input_file, 'r') as f:
        data = json.load(f)

    codes = data.get("ir_codes", data)  # Bare {name: record} mapping
    if not isinstance(codes, dict):
        return 0

    imported = 0
    for name, record in codes.items():
        filepath = directory / f"{name}{CODE_SUFFIX}"
        if filepath.exists() and not overwrite:
            log.debug("Skipping existing code '%s'", name)
            continue

        # Reject broken records before writing anything
        code_from_record(record)
        with open(filepath, 'w') as f:
            json.dump(record, f, indent=2)
        imported += 1

    log.info("Imported %d codes from %s", imported, input_file)
    return imported


# ---------- AC states ----------

_ENUM_FIELDS = {"mode": AcMode, "fan_speed": FanSpeed, "swing": Swing, "protocol": ProtocolId}


def save_ac_state(name: str, state: AcState, codes_dir: Optional[Path] = None) -> Path:
    """Save an AC state as ``<name>.ac``; enums are stored by name."""
    directory = get_codes_dir(codes_dir)
    filepath = directory / f"{name}{AC_SUFFIX}"

    data = asdict(state)
    for key, enum in _ENUM_FIELDS.items():
        data[key] = enum(data[key]).name

    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2)
    return filepath


def load_ac_state(name: str, codes_dir: Optional[Path] = None) -> Optional[AcState]:
    """
    Load an AC state saved with save_ac_state.

    Returns:
        AcState, or None if not found. Unknown keys are ignored.
    """
    directory = get_codes_dir(codes_dir)
    filepath = directory / f"{name}{AC_SUFFIX}"

    if not filepath.exists():
        return None

    with open(filepath, 'r') as f:
        data = json.load(f)

    known = {f.name for f in fields(AcState)}
    values = {key: value for key, value in data.items() if key in known}
    for key, enum in _ENUM_FIELDS.items():
        if key in values:
            values[key] = enum[values[key]]
    return AcState(**values)
