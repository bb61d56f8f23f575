"""CRC-32 checksum as used by the WOZ file format."""

import zlib


def crc32(crc: int, data: bytes) -> int:
    """Continue the CRC-32 ``crc`` over ``data`` (start with 0)."""
    return zlib.crc32(bytes(data), crc & 0xFFFFFFFF)