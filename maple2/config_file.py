"""User settings stored as JSON in the configuration directory."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import platformdirs

from maple2.constants import DEFAULT_DISKS_DIRECTORIES, DEFAULT_MAGNIFICATION, DEFAULT_SPEED_HZ

log = logging.getLogger(__name__)

CONFIG_DIR = "maple2"
CONFIG_FILE = "config.json"
DEFAULT_ROM_TYPE = "Apple2Enhanced"

_HEX_ADDRESS = re.compile(r"\+?[0-9A-Fa-f]+")


def default_config_path() -> Optional[Path]:
    """Path of the settings file, or None if there is no configuration directory."""
    base = platformdirs.user_config_path()
    if not base.exists():
        return None
    config_dir = base / CONFIG_DIR
    try:
        config_dir.mkdir(exist_ok=True)
    except OSError:
        pass
    return config_dir / CONFIG_FILE


def _get(data: dict[str, Any], key: str, kind: type, *, optional: bool = False,
         default: Any = None, required: bool = True) -> Any:
    if key not in data:
        if required and not optional:
            raise ValueError(f"missing field `{key}`")
        return default
    value = data[key]
    if value is None and optional:
        return None
    if kind is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise ValueError(f"field `{key}` must be an integer")
    if kind is not int and not isinstance(value, kind):
        raise ValueError(f"field `{key}` must be of type {kind.__name__}")
    return value


@dataclass
class Breakpoint:
    """A CPU breakpoint at an address."""

    address: int
    enabled: bool = True

    @classmethod
    def _from_dict(cls, data: Any) -> Breakpoint:
        if not isinstance(data, dict):
            raise ValueError("breakpoint must be an object")
        address = _get(data, "address", int)
        if not 0 <= address <= 0xFFFF:
            raise ValueError(f"breakpoint address {address} out of range")
        enabled = _get(data, "enabled", bool, required=False, default=True)
        return cls(address, enabled)

    def _to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "enabled": self.enabled}


@dataclass
class ConfigFile:
    """Persistent user settings; every change is saved straight away."""

    emulator_speed_hz: int = DEFAULT_SPEED_HZ
    disk_directories: list[str] = field(default_factory=list)
    drive_1: Optional[str] = None
    drive_2: Optional[str] = None
    hard_drive_1: Optional[str] = None
    hard_drive_2: Optional[str] = None
    tab: int = 0
    magnification: Optional[int] = DEFAULT_MAGNIFICATION
    breakpoints: list[Breakpoint] = field(default_factory=list)
    rom_type: Optional[str] = DEFAULT_ROM_TYPE
    show_hard_drive: bool = False
    path: Optional[Path] = field(default=None, compare=False)

    @property
    def breakpoint_addresses(self) -> set[int]:
        """Addresses of all the breakpoints."""
        return {bp.address for bp in self.breakpoints}

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> ConfigFile:
        """Read the settings at ``path``, creating the file with defaults if it is missing."""
        if path is None:
            path = default_config_path()
        if path is None:
            log.info("Config directory doesn't seem to exist, not saving settings")
            return cls()
        path = Path(path)
        if not path.exists():
            existing = [d for d in DEFAULT_DISKS_DIRECTORIES if Path(d).exists()]
            cls(disk_directories=existing, path=path).save()

        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            return cls(path=path)

        try:
            result = cls.from_dict(json.loads(text))
            log.info("Found config file at %s", path)
        except ValueError as err:
            log.info("Couldn't parse settings: %s", err)
            result = cls()
        result.path = path
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ConfigFile:
        """Build settings from their JSON form; raise ValueError if it is malformed."""
        if not isinstance(data, dict):
            raise ValueError("settings must be a JSON object")
        directories = _get(data, "disk_directories", list)
        if not all(isinstance(d, str) for d in directories):
            raise ValueError("field `disk_directories` must hold strings")
        breakpoints = _get(data, "breakpoints", list, required=False, default=[])
        return cls(
            emulator_speed_hz=_get(data, "emulator_speed_hz", int),
            disk_directories=list(directories),
            drive_1=_get(data, "drive_1", str, optional=True),
            drive_2=_get(data, "drive_2", str, optional=True),
            hard_drive_1=_get(data, "hard_drive_1", str, optional=True),
            hard_drive_2=_get(data, "hard_drive_2", str, optional=True),
            tab=_get(data, "tab", int),
            magnification=_get(data, "magnification", int, optional=True),
            breakpoints=[Breakpoint._from_dict(bp) for bp in breakpoints],
            rom_type=_get(data, "rom_type", str, optional=True),
            show_hard_drive=_get(data, "show_hard_drive", bool),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the settings."""
        return {
            "emulator_speed_hz": self.emulator_speed_hz,
            "disk_directories": list(self.disk_directories),
            "drive_1": self.drive_1,
            "drive_2": self.drive_2,
            "hard_drive_1": self.hard_drive_1,
            "hard_drive_2": self.hard_drive_2,
            "tab": self.tab,
            "magnification": self.magnification,
            "breakpoints": [bp._to_dict() for bp in self.breakpoints],
            "rom_type": self.rom_type,
            "show_hard_drive": self.show_hard_drive,
        }

    def save(self) -> None:
        """Write the settings to their file, if they have one."""
        if self.path is None:
            log.info("Couldn't find config file, not saving")
            return
        try:
            Path(self.path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
            log.info("Saved %s", self.path)
        except OSError as err:
            log.info("Couldn't create config file %s: %s", self.path, err)

    def add_breakpoint(self, bp: str) -> None:
        """Add a breakpoint at the hexadecimal address ``bp``; invalid input is ignored."""
        if _HEX_ADDRESS.fullmatch(bp) is None or int(bp, 16) > 0xFFFF:
            log.info("Couldn't add breakpoint %s", bp)
            return
        self.breakpoints.append(Breakpoint(int(bp, 16)))
        self.save()

    def delete_breakpoint(self, address: int) -> None:
        """Remove the first breakpoint at ``address``."""
        for index, bp in enumerate(self.breakpoints):
            if bp.address == address:
                del self.breakpoints[index]
                break
        self.save()

    def set_drive(self, is_hard_drive: bool, drive_number: int, path: Optional[str]) -> None:
        """Record the image inserted in a floppy or hard drive (0 or 1)."""
        if path is not None and path.endswith("hdv") and not is_hard_drive:
            log.warning("Hard drive image %s set on a floppy drive", path)
        attribute = {
            (True, 0): "hard_drive_1",
            (True, 1): "hard_drive_2",
            (False, 0): "drive_1",
            (False, 1): "drive_2",
        }.get((bool(is_hard_drive), drive_number))
        if attribute is None:
            raise ValueError(f"invalid drive number {drive_number}")
        setattr(self, attribute, path)
        self.save()

    def set_tab(self, tab_index: int) -> None:
        """Record the tab to start in."""
        self.tab = tab_index
        self.save()

    def set_disk_directories(self, directories: list[str]) -> None:
        """Record the directories searched for disk images."""
        self.disk_directories = list(directories)
        self.save()

    def set_show_hard_drive(self, value: bool) -> None:
        """Record whether hard drives rather than floppy drives are shown."""
        self.show_hard_drive = value
        self.save()