"""Tracks which sector passes under the head by watching address fields go by."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class SectorState(Enum):
    """Position within an address field."""

    START = auto()
    D5 = auto()
    D5AA = auto()
    VOLUME0 = auto()
    VOLUME1 = auto()
    TRACK0 = auto()
    TRACK1 = auto()
    SECTOR0 = auto()
    SECTOR1 = auto()
    CHECKSUM0 = auto()


SectorListener = Callable[[int, int], None]


def _pair(b0: int, b1: int) -> int:
    return (((b0 << 1) | 1) & b1) & 0xFF


@dataclass
class SectorRead:
    """Decodes volume, track and sector from the address fields of the nibbles read."""

    state: SectorState = SectorState.START
    current_byte: int = 0
    volume: int = 0
    track: int = 0
    sector: int = 0
    on_sector: Optional[SectorListener] = None

    def read_byte(self, drive_index: int, byte: int) -> Optional[int]:
        """Feed one nibble; return the sector number when an address field completes."""
        s = SectorState
        if byte == 0xD5 and self.state is s.START:
            self.state = s.D5
        elif byte == 0xAA and self.state is s.D5:
            self.state = s.D5AA
        elif byte == 0x96 and self.state is s.D5AA:
            self.state = s.VOLUME0
        elif self.state is s.VOLUME0:
            self.current_byte = byte
            self.state = s.VOLUME1
        elif self.state is s.VOLUME1:
            self.volume = _pair(self.current_byte, byte)
            self.state = s.TRACK0
        elif self.state is s.TRACK0:
            self.current_byte = byte
            self.state = s.TRACK1
        elif self.state is s.TRACK1:
            self.track = _pair(self.current_byte, byte)
            self.state = s.SECTOR0
        elif self.state is s.SECTOR0:
            self.current_byte = byte
            self.state = s.SECTOR1
        elif self.state is s.SECTOR1:
            self.sector = _pair(self.current_byte, byte)
            self.state = s.START
            if self.on_sector is not None:
                self.on_sector(drive_index, self.sector)
            return self.sector
        else:
            self.state = s.START
        return None