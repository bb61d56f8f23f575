"""Bit-level representation of disk tracks and their nibble analysis."""

from __future__ import annotations

import dataclasses
import random as _random
from dataclasses import dataclass, field
from enum import Enum

from maple2.constants import MAX_PHASE
from maple2.debug import hex_dump
from maple2.disk_info import DiskInfo

# Length reported for a random (unformatted) track.
RANDOM_TRACK_LENGTH = 51_200


class AreaType(Enum):
    """Part of a sector a nibble belongs to."""

    ADDRESS_PROLOGUE = "address_prologue"
    ADDRESS_CONTENT = "address_content"
    ADDRESS_EPILOGUE = "address_epilogue"
    DATA_PROLOGUE = "data_prologue"
    DATA_CONTENT = "data_content"
    DATA_EPILOGUE = "data_epilogue"
    UNKNOWN = "unknown"


class TrackType(Enum):
    """Overall classification of a track."""

    STANDARD = "standard"
    NONSTANDARD = "nonstandard"
    EMPTY = "empty"


@dataclass(frozen=True)
class Nibble:
    """A disk byte (high bit set) followed by a number of sync bits."""

    value: int
    sync_bits: int = 0
    area_type: AreaType = AreaType.UNKNOWN

    def _with_area(self, area_type: AreaType) -> Nibble:
        return dataclasses.replace(self, area_type=area_type)

    def to_bits(self) -> list[int]:
        """The eight bits of the value, most significant first, then any sync zeros."""
        bits = [(self.value >> (7 - i)) & 1 for i in range(8)]
        if self.sync_bits >= 2:
            bits.extend([0] * self.sync_bits)
        return bits

    def __str__(self) -> str:
        sync = f"^{self.sync_bits:02}" if self.sync_bits > 0 else "   "
        return f"{self.value:02X}{sync}"


@dataclass
class AnalyzedTrack:
    """Nibbles of a track with their areas, and the track's classification."""

    nibbles: list[Nibble]
    track_type: TrackType


@dataclass
class BitStream:
    """A stream of bits holding the content of one track."""

    bits: bytearray = field(default_factory=bytearray)
    random: bool = False

    def __post_init__(self) -> None:
        self.bits = bytearray(self.bits)

    @classmethod
    def random_stream(cls) -> BitStream:
        """A track with no content, which reads as random bits."""
        return cls(bytearray([0]), random=True)

    def __len__(self) -> int:
        # A random track pretends to have the regular track length.
        if len(self.bits) == 1:
            return RANDOM_TRACK_LENGTH
        return len(self.bits)

    def analyze_track(self) -> AnalyzedTrack:
        """Classify the track as standard, nonstandard or empty."""
        nibbles = self.find_nibble_areas()
        if self.random:
            return AnalyzedTrack(nibbles, TrackType.EMPTY)

        address_prologues = address_epilogues = 0
        data_prologues = data_epilogues = 0
        for nibble in nibbles:
            area = nibble.area_type
            if area is AreaType.ADDRESS_PROLOGUE and nibble.value == 0xD5:
                address_prologues += 1
            elif area is AreaType.ADDRESS_EPILOGUE and nibble.value == 0xDE:
                address_epilogues += 1
            elif area is AreaType.DATA_PROLOGUE and nibble.value == 0xD5:
                data_prologues += 1
            elif area is AreaType.DATA_EPILOGUE and nibble.value == 0xDE:
                data_epilogues += 1

        counts = (address_prologues, address_epilogues, data_prologues, data_epilogues)
        track_type = TrackType.STANDARD if all(c == 16 for c in counts) else TrackType.NONSTANDARD
        return AnalyzedTrack(nibbles, track_type)

    def to_nibbles(self) -> list[Nibble]:
        """Split the bits into nibbles, counting the sync bits after each."""
        bits = self.bits
        length = len(bits)
        result: list[Nibble] = []
        i = 0
        while i < length:
            value = 0
            while i < length and not value & 0x80:
                value = ((value << 1) | bits[i]) & 0xFF
                i += 1
            sync_bits = 0
            if i < length and bits[i] == 0 and bits[(i + 1) % len(self)] == 0:
                while i < length and bits[i] == 0:
                    sync_bits += 1
                    i += 1
            result.append(Nibble(value, sync_bits))
        return result

    def find_nibble_areas(self) -> list[Nibble]:
        """Return the nibbles of the track, each tagged with its area when recognisable."""
        nibbles = self.to_nibbles()
        result: list[Nibble] = []
        count = len(nibbles)
        if count < 3:
            return result

        def values_at(i: int, *expected: int) -> bool:
            return all(nibbles[i + k].value == v for k, v in enumerate(expected))

        pending: list[Nibble] = []
        current = AreaType.UNKNOWN

        def flush() -> None:
            result.extend(n._with_area(current) for n in pending)
            pending.clear()

        i = 0
        while i < count:
            if i < count - 3 and values_at(i, 0xD5, 0xAA, 0x96):
                flush()
                result.extend(n._with_area(AreaType.ADDRESS_PROLOGUE) for n in nibbles[i:i + 3])
                i += 3
                current = AreaType.ADDRESS_CONTENT
            elif i < count - 3 and values_at(i, 0xD5, 0xAA, 0xAD):
                flush()
                result.extend(n._with_area(AreaType.DATA_PROLOGUE) for n in nibbles[i:i + 3])
                i += 3
                current = AreaType.DATA_CONTENT
            elif i < count - 2 and values_at(i, 0xDE, 0xAA):
                epilogue = (
                    AreaType.ADDRESS_EPILOGUE
                    if current is AreaType.ADDRESS_CONTENT
                    else AreaType.DATA_EPILOGUE
                )
                flush()
                result.extend(n._with_area(epilogue) for n in nibbles[i:i + 2])
                i += 2
                current = AreaType.UNKNOWN
            else:
                pending.append(nibbles[i])
                i += 1
        flush()
        return result

    def copy(self) -> BitStream:
        """An independent copy of this stream."""
        return BitStream(bytearray(self.bits), self.random)

    def next_bit(self, bit_index: int) -> int:
        """The bit at ``bit_index``; a random track yields a 1 about 30% of the time."""
        if self.random:
            return 1 if _random.random() < 0.3 else 0
        return self.bits[bit_index]

    def set_bit(self, bit_index: int, value: int) -> None:
        """Overwrite the bit at ``bit_index``."""
        self.bits[bit_index] = value

    def next_byte(self, bit_index: int) -> int:
        """The eight bits starting at ``bit_index``, wrapping around the track."""
        result = 0
        address = bit_index
        length = len(self)
        for _ in range(8):
            result = ((result << 1) | self.next_bit(address)) & 0xFF
            address = 0 if address + 1 >= length else address + 1
        return result

    def next_nibble(self, bit_index: int) -> tuple[int, int]:
        """Return (bits consumed, nibble) for the next value with its high bit set."""
        result = 0
        count = 0
        address = bit_index
        length = len(self)
        while not result & 0x80:
            result = ((result << 1) | self.next_bit(address)) & 0xFF
            count += 1
            address = 0 if bit_index + count >= length else bit_index + count
        return count, result


def _default_tmap() -> list[int]:
    return [0] * MAX_PHASE


def _default_disk_info() -> DiskInfo:
    return DiskInfo(path="")


@dataclass
class BitStreams:
    """The content of a whole disk: one bit stream per phase, and the track map."""

    bit_streams: list[BitStream] = field(default_factory=list)
    tmap: list[int] = field(default_factory=_default_tmap)
    disk_info: DiskInfo = field(default_factory=_default_disk_info)

    def copy(self) -> BitStreams:
        """An independent copy of all the streams."""
        info = dataclasses.replace(self.disk_info, metadata=dict(self.disk_info.metadata))
        return BitStreams([bs.copy() for bs in self.bit_streams], list(self.tmap), info)

    def get_stream(self, phase: int) -> BitStream:
        """The stream for ``phase`` (0 to 159)."""
        if not 0 <= phase < MAX_PHASE:
            raise IndexError(f"phase {phase} out of range 0..{MAX_PHASE}")
        return self.bit_streams[phase]

    def set_bit(self, phase_160: int, bit_position: int, bit: int) -> None:
        """Write ``bit`` in the track mapped to ``phase_160``."""
        self.bit_streams[self.tmap[phase_160]].set_bit(bit_position, bit)

    def stream_len(self, phase: int) -> int:
        """Length in bits of the stream for ``phase``."""
        return len(self.get_stream(phase))

    def dump(self, phase_160: int) -> None:
        """Print the nibbles of the stream for ``phase_160``."""
        print(f"Dumping phase {phase_160}")
        hex_dump(self.get_stream(phase_160).to_nibbles(), str)