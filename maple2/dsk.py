"""Reading and writing of .dsk images: 35 tracks of 16 sectors in DOS 3.3 order."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from maple2.bit_stream import AreaType, BitStream, BitStreams
from maple2.constants import (
    DATA_FIELD_SIZE,
    DSK_SIZE_BYTES,
    LOGICAL_SECTORS,
    MAX_PHASE,
    MAX_TRACK_DSK,
    SECTOR_SIZE_BYTES,
    TRACK_SIZE_BYTES,
)
from maple2.disk_info import DiskInfo, WozVersion

log = logging.getLogger(__name__)

# Maps six-bit values to valid disk nibbles.
WRITE_TABLE: tuple[int, ...] = (
    0x96, 0x97, 0x9A, 0x9B, 0x9D, 0x9E, 0x9F, 0xA6,
    0xA7, 0xAB, 0xAC, 0xAD, 0xAE, 0xAF, 0xB2, 0xB3,
    0xB4, 0xB5, 0xB6, 0xB7, 0xB9, 0xBA, 0xBB, 0xBC,
    0xBD, 0xBE, 0xBF, 0xCB, 0xCD, 0xCE, 0xCF, 0xD3,
    0xD6, 0xD7, 0xD9, 0xDA, 0xDB, 0xDC, 0xDD, 0xDE,
    0xDF, 0xE5, 0xE6, 0xE7, 0xE9, 0xEA, 0xEB, 0xEC,
    0xED, 0xEE, 0xEF, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6,
    0xF7, 0xF9, 0xFA, 0xFB, 0xFC, 0xFD, 0xFE, 0xFF,
)

_READ_TABLE = bytearray(256)
for _index, _nibble in enumerate(WRITE_TABLE):
    _READ_TABLE[_nibble] = _index

_BIT_REVERSE = (0, 2, 1, 3)
_AUX_SIZE = 86
_RAW_SIZE = DATA_FIELD_SIZE - 1
_NO_TRACK = 0xFF
_VOLUME = 0xFE


def decode_4_and_4(a: int, b: int) -> int:
    """Combine a 4-and-4 encoded pair of nibbles back into a byte."""
    return ((a << 1) | 0x55) & (b | 0xAA) & 0xFF


def encode_4_and_4(value: int) -> tuple[int, int]:
    """Split ``value`` into the two nibbles of its 4-and-4 encoding."""
    return ((value >> 1) | 0xAA) & 0xFF, (value | 0xAA) & 0xFF


def encode_6_and_2(values: Sequence[int]) -> bytes:
    """Encode a 256-byte sector into the 343 nibbles of a data field."""
    if len(values) != SECTOR_SIZE_BYTES:
        raise ValueError(f"a sector holds {SECTOR_SIZE_BYTES} bytes, got {len(values)}")
    rev = _BIT_REVERSE
    result = [0] * DATA_FIELD_SIZE
    for c in range(84):
        result[c] = (
            rev[values[c] & 3]
            | rev[values[c + 86] & 3] << 2
            | rev[values[c + 172] & 3] << 4
        )
    result[84] = rev[values[84] & 3] | rev[values[170] & 3] << 2
    result[85] = rev[values[85] & 3] | rev[values[171] & 3] << 2
    result[_AUX_SIZE:_RAW_SIZE] = [(v & 0xFF) >> 2 for v in values]

    # Exclusive-or each value with the one before it; the last one is the checksum.
    result[_RAW_SIZE] = result[_RAW_SIZE - 1]
    for location in range(_RAW_SIZE - 1, 0, -1):
        result[location] ^= result[location - 1]
    return bytes(WRITE_TABLE[r] for r in result)


def decode_6_and_2(source: Sequence[int]) -> bytes:
    """Decode the 343 nibbles of a data field into 256 bytes."""
    if len(source) != DATA_FIELD_SIZE:
        raise ValueError(f"a data field holds {DATA_FIELD_SIZE} nibbles, got {len(source)}")
    temp = [0] * _RAW_SIZE
    order = [*range(_RAW_SIZE - 1, SECTOR_SIZE_BYTES - 1, -1), *range(SECTOR_SIZE_BYTES)]
    last = 0
    for index, nibble in zip(order, source):
        t = _READ_TABLE[nibble]
        temp[index] = t ^ last
        last ^= t

    result = bytearray(SECTOR_SIZE_BYTES)
    for i in range(SECTOR_SIZE_BYTES):
        p = _RAW_SIZE - 1 - i % _AUX_SIZE
        low = ((temp[p] & 1) << 1) + ((temp[p] & 2) >> 1)
        result[i] = ((temp[i] << 2) & 0xFF) + low
        temp[p] >>= 2
    return bytes(result)


def byte_bits(values: Iterable[int]) -> list[int]:
    """The bits of each byte in ``values``, most significant first."""
    return [(value >> (7 - i)) & 1 for value in values for i in range(8)]


def sync_bits(count: int) -> list[int]:
    """``count`` self-sync nibbles: $FF followed by two zero bits each."""
    return (byte_bits([0xFF]) + [0, 0]) * count


def _four_and_four_bits(value: int) -> list[int]:
    return byte_bits(encode_4_and_4(value))


def encode_track(data: Sequence[int], track: int) -> list[int]:
    """Encode the 16 sectors of a track (4096 bytes in DOS order) into bits."""
    if len(data) < TRACK_SIZE_BYTES:
        raise ValueError(f"a track holds {TRACK_SIZE_BYTES} bytes, got {len(data)}")
    result = sync_bits(16)
    for sector in range(16):
        result += byte_bits([0xD5, 0xAA, 0x96])
        result += _four_and_four_bits(_VOLUME)
        result += _four_and_four_bits(track)
        result += _four_and_four_bits(sector)
        result += _four_and_four_bits(_VOLUME ^ track ^ sector)
        result += byte_bits([0xDE, 0xAA, 0xEB])
        result += sync_bits(7)

        result += byte_bits([0xD5, 0xAA, 0xAD])
        start = LOGICAL_SECTORS[sector] * SECTOR_SIZE_BYTES
        result += byte_bits(encode_6_and_2(data[start:start + SECTOR_SIZE_BYTES]))
        result += byte_bits([0xDE, 0xAA, 0xEB])
        result += sync_bits(16)
    return result


def bit_streams_to_dsk(bit_streams: BitStreams) -> bytes:
    """Decode the sectors found on the 35 tracks into the bytes of a .dsk image."""
    buffer = bytearray(DSK_SIZE_BYTES)
    track = 0
    sector = 0
    for t in range(MAX_TRACK_DSK):
        nibbles = bit_streams.get_stream(t * 4).analyze_track().nibbles
        i = 0
        while i < len(nibbles):
            area = nibbles[i].area_type
            if area is AreaType.ADDRESS_CONTENT:
                track = decode_4_and_4(nibbles[i + 2].value, nibbles[i + 3].value)
                sector = decode_4_and_4(nibbles[i + 4].value, nibbles[i + 5].value)
                i += 10
            elif area is AreaType.DATA_CONTENT:
                values = [n.value for n in nibbles[i:i + DATA_FIELD_SIZE]]
                decoded = decode_6_and_2(values)
                offset = (track * 16 + LOGICAL_SECTORS[sector]) * SECTOR_SIZE_BYTES
                buffer[offset:offset + SECTOR_SIZE_BYTES] = decoded
                log.debug("Storing %d/%d at %02X", track, sector, offset)
                i += DATA_FIELD_SIZE
            i += 1
    return bytes(buffer)


def _dsk_tmap() -> list[int]:
    """Track map matching default WOZ disks: [0, 0, ff, 1, 1, 1, ff, 2, 2, 2, ...]."""
    tmap = [_NO_TRACK] * MAX_PHASE
    tmap[0] = 0
    tmap[1] = 0
    for track, phase in enumerate(range(4, MAX_PHASE - 20, 4), start=1):
        tmap[phase - 1] = track
        tmap[phase] = track
        if phase + 1 < MAX_PHASE - 1:
            tmap[phase + 1] = track
    return tmap


@dataclass
class Dsk:
    """A .dsk disk image held as bit streams."""

    disk_info: DiskInfo
    bit_streams: BitStreams = field(default_factory=BitStreams)

    @classmethod
    def from_file(cls, filename: str, quick: bool = False) -> Dsk:
        """Open the image at ``filename``; when ``quick``, the file is not read."""
        if quick:
            return cls(DiskInfo.from_path(filename))
        data = Path(filename).read_bytes()
        return cls.from_bytes(filename, data)

    @classmethod
    def from_bytes(cls, filename: str, data: bytes) -> Dsk:
        """Build the bit streams of every phase from the bytes of a .dsk image."""
        if len(data) < DSK_SIZE_BYTES:
            raise ValueError(f"a .dsk image holds {DSK_SIZE_BYTES} bytes, got {len(data)}")
        tracks = [
            BitStream(encode_track(data[t * TRACK_SIZE_BYTES:(t + 1) * TRACK_SIZE_BYTES], t))
            for t in range(MAX_TRACK_DSK)
        ]
        tmap = _dsk_tmap()
        streams = [
            tracks[t].copy() if t != _NO_TRACK else BitStream.random_stream() for t in tmap
        ]
        disk_info = DiskInfo.from_path(filename)
        disk_info.woz_version = WozVersion.DSK
        return cls(disk_info, BitStreams(streams, tmap, DiskInfo(path="")))

    def save(self, path: Optional[Union[str, Path]] = None) -> None:
        """Write the decoded sectors as a .dsk image to ``path`` (default: the image's own)."""
        target = Path(path if path is not None else self.disk_info.path)
        log.info("Dsk saving %s", target)
        data = bit_streams_to_dsk(self.bit_streams)
        try:
            target.write_bytes(data)
            log.info("Saved %s", target)
        except OSError as err:
            log.info("Error saving %s: %s", target, err)