import random

import pytest

from maple2.bit_stream import BitStream, TrackType
from maple2.constants import DATA_FIELD_SIZE, DSK_SIZE_BYTES, MAX_PHASE, TRACK_SIZE_BYTES
from maple2.disk_info import WozVersion
from maple2.dsk import (
    WRITE_TABLE,
    Dsk,
    bit_streams_to_dsk,
    byte_bits,
    decode_4_and_4,
    decode_6_and_2,
    encode_4_and_4,
    encode_6_and_2,
    encode_track,
    sync_bits,
)


@pytest.fixture(scope="module")
def image_data():
    return random.Random(1234).randbytes(DSK_SIZE_BYTES)


@pytest.fixture(scope="module")
def dsk(image_data):
    return Dsk.from_bytes("disk.dsk", image_data)


def test_4_and_4_round_trip():
    for value in range(256):
        a, b = encode_4_and_4(value)
        assert a & 0x80 and b & 0x80
        assert decode_4_and_4(a, b) == value


@pytest.mark.parametrize(
    "sector",
    [bytes(256), bytes(range(256)), bytes([0xFF] * 256), random.Random(7).randbytes(256)],
)
def test_6_and_2_round_trip(sector):
    encoded = encode_6_and_2(sector)
    assert len(encoded) == DATA_FIELD_SIZE
    assert all(n in WRITE_TABLE for n in encoded)
    assert decode_6_and_2(encoded) == sector


def test_6_and_2_rejects_wrong_sizes():
    with pytest.raises(ValueError):
        encode_6_and_2(bytes(255))
    with pytest.raises(ValueError):
        decode_6_and_2(bytes(342))


def test_byte_bits_msb_first():
    assert byte_bits([0xD5]) == [1, 1, 0, 1, 0, 1, 0, 1]
    assert len(byte_bits(b"abc")) == 24


def test_sync_bits_are_ff_then_two_zeros():
    bits = sync_bits(3)
    assert bits == (byte_bits([0xFF]) + [0, 0]) * 3
    assert sync_bits(0) == []


def test_encoded_track_is_standard():
    data = random.Random(3).randbytes(TRACK_SIZE_BYTES)
    analyzed = BitStream(encode_track(data, 5)).analyze_track()
    assert analyzed.track_type is TrackType.STANDARD


def test_encode_track_rejects_short_data():
    with pytest.raises(ValueError):
        encode_track(bytes(TRACK_SIZE_BYTES - 1), 0)


def test_from_bytes_metadata(dsk):
    assert dsk.disk_info.path == "disk.dsk"
    assert dsk.disk_info.woz_version is WozVersion.DSK
    assert len(dsk.bit_streams.bit_streams) == MAX_PHASE


def test_from_bytes_track_map(dsk):
    tmap = dsk.bit_streams.tmap
    assert tmap[0] == tmap[1] == 0
    assert tmap[2] == 0xFF
    assert tmap[3] == tmap[4] == tmap[5] == 1
    assert all(t == 0xFF for t in tmap[MAX_PHASE - 20:])
    assert dsk.bit_streams.get_stream(MAX_PHASE - 1).random
    assert not dsk.bit_streams.get_stream(4).random


def test_phases_of_one_track_are_independent_copies(dsk):
    streams = dsk.bit_streams
    assert streams.get_stream(3).bits == streams.get_stream(4).bits
    assert streams.get_stream(3) is not streams.get_stream(4)


def test_round_trip_through_bit_streams(dsk, image_data):
    assert bit_streams_to_dsk(dsk.bit_streams) == image_data


def test_save_writes_image(dsk, image_data, tmp_path):
    target = tmp_path / "out.dsk"
    dsk.save(target)
    assert target.read_bytes() == image_data


def test_from_bytes_rejects_short_image():
    with pytest.raises(ValueError):
        Dsk.from_bytes("short.dsk", bytes(DSK_SIZE_BYTES - 1))


def test_quick_open_does_not_read(tmp_path):
    path = str(tmp_path / "missing.dsk")
    dsk = Dsk.from_file(path, quick=True)
    assert dsk.disk_info.path == path
    assert dsk.bit_streams.bit_streams == []


def test_from_file_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Dsk.from_file(str(tmp_path / "missing.dsk"), quick=False)


def test_from_file_reads_image(tmp_path, image_data):
    path = tmp_path / "image.dsk"
    path.write_bytes(image_data)
    dsk = Dsk.from_file(str(path), quick=False)
    assert bit_streams_to_dsk(dsk.bit_streams)[:TRACK_SIZE_BYTES] == image_data[:TRACK_SIZE_BYTES]