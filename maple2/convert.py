"""Conversion between .dsk images and .woz images."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from maple2.bit_stream import BitStream
from maple2.constants import (
    DATA_FIELD_SIZE,
    DSK_SIZE_BYTES,
    LOGICAL_SECTORS,
    MAX_PHASE,
    MAX_TRACK_DSK,
    SECTOR_SIZE_BYTES,
    TRACK_SIZE_BYTES,
)
from maple2.crc import crc32
from maple2.dsk import decode_4_and_4, decode_6_and_2, encode_track
from maple2.woz import Woz, encode_info

_ADDRESS_PROLOGUE = (0xD5, 0xAA, 0x96)
_DATA_PROLOGUE = (0xD5, 0xAA, 0xAD)
_DATA_EPILOGUE = (0xDE, 0xAA)
_BLOCK_SIZE = 512
_BLOCKS_PER_TRACK = 13
_FIRST_BLOCK = 3
_NO_TRACK = 0xFF
_NO_SECTOR = 0xFF
_SECTORS_PER_TRACK = 16


@dataclass
class Sector:
    """The decoded content of one sector."""

    sector_number: int
    data: bytes


def _starts_with(track: Sequence[int], i: int, pattern: tuple[int, ...]) -> bool:
    return tuple(track[i:i + len(pattern)]) == pattern


def decode_track(track: Sequence[int]) -> list[Sector]:
    """Decode the sectors found in a track of nibbles (FF FF D5 AA 96 ...).

    Each data field gets the sector number of the address field before it.
    Raises ValueError on a bad address checksum or a damaged data field.
    """
    sectors: list[Sector] = []
    if len(track) <= 10:
        return sectors
    sector_number = _NO_SECTOR
    i = 0
    while i < len(track):
        if _starts_with(track, i, _ADDRESS_PROLOGUE):
            fields = track[i + 3:i + 11]
            if len(fields) < 8:
                raise ValueError("Truncated address field")
            volume, track_number, sector_number, checksum = (
                decode_4_and_4(fields[k], fields[k + 1]) for k in range(0, 8, 2)
            )
            if volume ^ track_number ^ sector_number != checksum:
                raise ValueError("Checksums do not match!")
            i += 15

        if _starts_with(track, i, _DATA_PROLOGUE):
            start = i + 3
            end = start + DATA_FIELD_SIZE
            if len(track) < end + len(_DATA_EPILOGUE):
                raise ValueError("Truncated data field")
            data = decode_6_and_2(track[start:end])
            if tuple(track[end:end + 2]) != _DATA_EPILOGUE:
                raise ValueError("Missing data field epilogue")
            sectors.append(Sector(sector_number, data))
        i += 1
    return sectors


def _track_nibbles(stream: BitStream) -> list[int]:
    nibbles: list[int] = []
    index = 0
    length = len(stream)
    while index < length:
        consumed, nibble = stream.next_nibble(index)
        nibbles.append(nibble)
        index += consumed
    return nibbles


def woz_to_dsk(path: str) -> bytes:
    """Decode the sectors of the .woz image at ``path`` into the bytes of a .dsk image."""
    woz = Woz.from_file(path)
    buffer = bytearray(DSK_SIZE_BYTES)
    streams = woz.bit_streams.bit_streams
    for phase in range(0, MAX_PHASE, 4):
        stream = streams[phase]
        if stream.random:
            continue
        sectors = decode_track(_track_nibbles(stream))
        track = phase // 4
        if track >= MAX_TRACK_DSK:
            continue
        for sector in sectors:
            if sector.sector_number >= _SECTORS_PER_TRACK:
                continue
            logical = LOGICAL_SECTORS[sector.sector_number]
            offset = (track * _SECTORS_PER_TRACK + logical) * SECTOR_SIZE_BYTES
            buffer[offset:offset + SECTOR_SIZE_BYTES] = sector.data
    return bytes(buffer)


def _dsk_tmap() -> list[int]:
    tmap = [_NO_TRACK] * MAX_PHASE
    tmap[0] = 0
    tmap[1] = 0
    for track, phase in enumerate(range(4, MAX_PHASE - 20, 4), start=1):
        tmap[phase - 1] = track
        tmap[phase] = track
        if phase + 1 < MAX_PHASE - 1:
            tmap[phase + 1] = track
    return tmap


def _pack_bits(bits: Sequence[int]) -> bytes:
    if len(bits) % 8:
        raise ValueError("Ending on a non byte boundary")
    return bytes(
        int("".join(str(b) for b in bits[k:k + 8]), 2) for k in range(0, len(bits), 8)
    )


def dsk_to_woz(path: str, output: Optional[Union[str, Path]] = None) -> str:
    """Write the .dsk image at ``path`` as a WOZ2 file and return the file written.

    The output defaults to the input path with a .woz suffix.
    """
    data = Path(path).read_bytes()
    if len(data) < DSK_SIZE_BYTES:
        raise ValueError(f"a .dsk image holds {DSK_SIZE_BYTES} bytes, got {len(data)}")

    tracks = [
        encode_track(data[t * TRACK_SIZE_BYTES:(t + 1) * TRACK_SIZE_BYTES], t)
        for t in range(MAX_TRACK_DSK)
    ]

    buffer = bytearray(encode_info())
    buffer += b"TMAP" + struct.pack("<I", MAX_PHASE) + bytes(_dsk_tmap())
    buffer += b"TRKS"
    size_index = len(buffer)
    buffer += bytes(4)  # chunk size, set once known

    block = _FIRST_BLOCK
    for bits in tracks:
        buffer += struct.pack("<HHI", block, _BLOCKS_PER_TRACK, len(bits))
        block += _BLOCKS_PER_TRACK
    buffer += bytes(8 * (MAX_PHASE - len(tracks)))

    track_bytes = _BLOCKS_PER_TRACK * _BLOCK_SIZE
    for bits in tracks:
        packed = _pack_bits(bits)
        if len(packed) > track_bytes:
            raise ValueError(f"Encoded track of {len(packed)} bytes does not fit in its blocks")
        buffer += packed + bytes(track_bytes - len(packed))

    struct.pack_into("<I", buffer, size_index, len(buffer) - size_index - 4)
    struct.pack_into("<I", buffer, 8, crc32(0, bytes(buffer[12:])))

    target = Path(output) if output is not None else Path(path).with_suffix(".woz")
    target.write_bytes(bytes(buffer))
    return str(target)