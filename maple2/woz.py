"""Reading and writing of .woz disk images (versions 1 and 2)."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

from maple2.bit_stream import BitStream, BitStreams
from maple2.constants import MAX_PHASE
from maple2.crc import crc32
from maple2.disk_info import DiskInfo, WozVersion

log = logging.getLogger(__name__)

_SIGNATURES = (b"WOZ1", b"WOZ2")
_HEADER_SIZE = 12
_INFO_SIZE = 60
# The INFO chunk written by encode_info() ends at this offset.
_INFO_END = _HEADER_SIZE + 8 + _INFO_SIZE
_TRACK_SIZE_V1 = 6646
_BLOCK_SIZE = 512
# Offset of the first track's bits in a WOZ2 file.
_TRKS_DATA_OFFSET = 0x600
_NO_TRACK = 0xFF
_CREATOR = "Maple-2"


class WozError(ValueError):
    """Raised when a .woz image cannot be read."""


class DiskType(Enum):
    """Physical format of the disk."""

    FIVE_AND_A_QUARTER = "5.25"
    THREE_POINT_FIVE = "3.5"


@dataclass
class InfoChunk:
    """The fields of the INFO chunk that matter to the emulator."""

    version: int = 0
    disk_type: DiskType = DiskType.FIVE_AND_A_QUARTER
    write_protected: bool = False


@dataclass
class _TrackV1:
    file_offset: int
    byte_stream: bytes
    bytes_used: int
    bit_count: int
    splice_point: int
    splice_nibble: int
    splice_bit_count: int


@dataclass
class _TrackV2:
    starting_block: int
    block_count: int
    bit_count: int


_Track = Union[_TrackV1, _TrackV2]


class _Reader:
    """Sequential little-endian reader over the bytes of a file."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self.data):
            raise WozError(f"Unexpected end of file at offset {self.pos}")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u16(self) -> int:
        return int.from_bytes(self.take(2), "little")

    def u32(self) -> int:
        return int.from_bytes(self.take(4), "little")


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "little")


def _u32(value: int) -> bytes:
    return (value & 0xFFFFFFFF).to_bytes(4, "little")


def _read_info(reader: _Reader) -> InfoChunk:
    version = reader.u8()
    disk_type = (
        DiskType.FIVE_AND_A_QUARTER if reader.u8() == 1 else DiskType.THREE_POINT_FIVE
    )
    write_protected = reader.u8() == 1
    # synchronized, cleaned, creator, sides, boot sector format, bit timing,
    # compatible hardware, required RAM, largest track, flux block,
    # largest flux track, and the reserved bytes.
    reader.take(_INFO_SIZE - 3)
    return InfoChunk(version, disk_type, write_protected)


def _parse_meta(raw: bytes) -> dict[str, str]:
    result: dict[str, str] = {}
    for line in raw.decode("latin-1").split("\n"):
        parts = line.split("\t")
        if len(parts) >= 2:
            result[parts[0]] = parts[1]
    return result


def _bytes_to_bits(source: bytes, bit_count: int) -> bytearray:
    needed = (bit_count + 7) // 8
    if needed > len(source):
        raise WozError(f"Track needs {bit_count} bits but only {len(source) * 8} are present")
    bits = bytearray((byte >> (7 - i)) & 1 for byte in source[:needed] for i in range(8))
    del bits[bit_count:]
    return bits


def _pack_bits(bits: Sequence[int]) -> bytes:
    out = bytearray()
    for start in range(0, len(bits), 8):
        chunk = bits[start:start + 8]
        value = 0
        for bit in chunk:
            value = (value << 1) | bit
        out.append((value << (8 - len(chunk))) & 0xFF)
    return bytes(out)


def encode_info() -> bytes:
    """The file header and INFO chunk of a write-protected WOZ2 image."""
    buf = bytearray(b"WOZ2\xff\n\r\n")
    buf += bytes(4)  # checksum, left empty
    buf += b"INFO" + _u32(_INFO_SIZE)
    buf += bytes([2, 1, 1, 0, 1])  # version, 5.25, write protected, not synchronized, cleaned
    buf += _CREATOR.ljust(32).encode("ascii")
    buf += bytes([1, 1, 32])  # sides, boot sector format, ideal bit rate
    buf += _u16(0)  # compatible with all hardware
    buf += _u16(0)  # required RAM
    buf += _u16(0xD)  # largest track in blocks
    buf += _u16(0)  # flux block
    buf += _u16(0)  # largest flux track
    buf += bytes(10)
    return bytes(buf)


def encode_tracks(bit_streams: BitStreams) -> bytes:
    """The TMAP and TRKS chunks, laid out to follow the output of encode_info()."""
    streams = bit_streams.bit_streams
    if len(streams) > MAX_PHASE:
        raise ValueError(f"at most {MAX_PHASE} tracks can be stored, got {len(streams)}")

    buf = bytearray(b"TMAP") + _u32(MAX_PHASE) + bytes(bit_streams.tmap)
    buf += b"TRKS"
    size_index = len(buf)
    buf += _u32(0)  # chunk size, set once known

    block = _TRKS_DATA_OFFSET // _BLOCK_SIZE
    for stream in streams:
        length = len(stream)
        block_count = length // _BLOCK_SIZE // 8 + 1
        buf += _u16(block) + _u16(block_count) + _u32(length)
        block += block_count

    buf += bytes(_TRKS_DATA_OFFSET - _INFO_END - len(buf))

    for stream in streams:
        if stream.random:
            bits: Sequence[int] = [stream.next_bit(i) for i in range(len(stream))]
        else:
            bits = stream.bits
        buf += _pack_bits(bits)
        buf += bytes(-(_INFO_END + len(buf)) % _BLOCK_SIZE)

    struct.pack_into("<I", buf, size_index, len(buf) - size_index - 4)
    return bytes(buf)


@dataclass
class Woz:
    """A .woz disk image held as bit streams."""

    disk_info: DiskInfo = field(default_factory=lambda: DiskInfo(path=""))
    tmap: list[int] = field(default_factory=lambda: [0] * MAX_PHASE)
    bit_streams: BitStreams = field(default_factory=BitStreams)
    meta: dict[str, str] = field(default_factory=dict)
    info_chunk: InfoChunk = field(default_factory=InfoChunk)
    _tracks: Optional[list[_Track]] = field(default=None, init=False, repr=False)

    def title(self) -> Optional[str]:
        """The title recorded in the META chunk, if any."""
        return self.meta.get("title")

    def version(self) -> int:
        """1 or 2, or 0 when the file had no INFO chunk."""
        return self.info_chunk.version

    def is_write_protected(self) -> bool:
        """Whether the INFO chunk marks the disk as write protected."""
        return self.info_chunk.write_protected

    @classmethod
    def from_file(cls, filename: str, quick: bool = False) -> Woz:
        """Open the image at ``filename``; when ``quick``, only the INFO chunk is decoded."""
        try:
            data = Path(filename).read_bytes()
        except OSError as err:
            raise WozError(str(err)) from err
        return cls.from_bytes(data, filename, quick)

    @classmethod
    def from_bytes(cls, data: bytes, filename: str, quick: bool = False) -> Woz:
        """Decode the bytes of a .woz image; when ``quick``, stop after the INFO chunk."""
        if len(data) < _HEADER_SIZE or data[:4] not in _SIGNATURES:
            raise WozError("Not a valid .woz file")
        if data[4] != 0xFF:
            raise WozError("Expected $FF")

        reader = _Reader(data)
        reader.pos = 8
        checksum = reader.u32()
        if checksum != 0 and checksum != crc32(0, data[_HEADER_SIZE:]):
            log.debug("Checksum %08X does not match the content of %s", checksum, filename)

        woz = cls()
        while reader.pos < len(data):
            name = reader.take(4).decode("latin-1")
            size = reader.u32()
            start = reader.pos
            if name == "INFO":
                woz.info_chunk = _read_info(reader)
                if quick:
                    break
            elif name == "TMAP":
                woz.tmap = list(reader.take(MAX_PHASE))
            elif name == "TRKS":
                if size == 0:
                    raise WozError("Empty TRKS chunk")
                woz._tracks = woz._read_tracks(reader)
            elif name == "META":
                woz.meta = _parse_meta(reader.take(size))
            reader.pos = start + size

        if woz.info_chunk.disk_type is DiskType.THREE_POINT_FIVE:
            raise WozError("3.5 disk not supported")

        woz_version = WozVersion.WOZ1 if woz.info_chunk.version == 1 else WozVersion.WOZ2
        if quick:
            woz.disk_info = DiskInfo.from_path(filename)
            woz.disk_info.woz_version = woz_version
            return woz

        woz.disk_info = DiskInfo(
            path=filename,
            name=woz.meta.get("title"),
            woz_version=woz_version,
            metadata=dict(woz.meta),
            is_write_protected=woz.is_write_protected(),
        )
        woz.bit_streams = woz._build_bit_streams(data)
        return woz

    def _read_tracks(self, reader: _Reader) -> list[_Track]:
        tracks: list[_Track] = []
        if self.info_chunk.version == 1:
            max_track = max((t for t in self.tmap if t != _NO_TRACK), default=0)
            for _ in range(max_track + 1):
                offset = reader.pos
                byte_stream = reader.take(_TRACK_SIZE_V1)
                bytes_used = reader.u16()
                bit_count = reader.u16()
                splice_point = reader.u16()
                splice_nibble = reader.u8()
                splice_bit_count = reader.u8()
                reader.u16()  # reserved
                tracks.append(_TrackV1(offset, byte_stream, bytes_used, bit_count,
                                       splice_point, splice_nibble, splice_bit_count))
        else:
            for _ in range(MAX_PHASE):
                starting_block = reader.u16()
                block_count = reader.u16()
                bit_count = reader.u32()
                tracks.append(_TrackV2(starting_block, block_count, bit_count))
        return tracks

    def _build_bit_streams(self, data: bytes) -> BitStreams:
        if self._tracks is None:
            raise WozError("Couldn't parse this WOZ file")
        streams = [BitStream.random_stream() for _ in range(MAX_PHASE)]
        for phase, index in enumerate(self.tmap):
            if index == _NO_TRACK:
                continue
            if index >= len(self._tracks):
                raise WozError(f"Phase {phase} maps to missing track {index}")
            track = self._tracks[index]
            if isinstance(track, _TrackV1):
                source = track.byte_stream
            else:
                start = track.starting_block * _BLOCK_SIZE
                source = data[start:len(data) - 1]
            streams[phase] = BitStream(_bytes_to_bits(source, track.bit_count))
        return BitStreams(streams, list(self.tmap), self.disk_info)

    def save(self) -> None:
        """Write the image as a WOZ2 file at its own path."""
        path = self.disk_info.path
        log.info("Woz saving %s", path)
        data = encode_info() + encode_tracks(self.bit_streams)
        try:
            Path(path).write_bytes(data)
            log.info("Saved %s", path)
        except OSError as err:
            log.info("Error saving %s: %s", path, err)