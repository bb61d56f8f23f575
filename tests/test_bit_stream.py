import pytest

from maple2.bit_stream import (
    AreaType,
    BitStream,
    BitStreams,
    Nibble,
    TrackType,
)
from maple2.constants import MAX_PHASE


def stream_of(nibbles):
    bits = []
    for n in nibbles:
        bits.extend(n.to_bits())
    return BitStream(bits)


def stream_of_bytes(values):
    return stream_of([Nibble(v) for v in values])


def sector(sync=2):
    return [
        Nibble(0xFF, sync),
        Nibble(0xD5), Nibble(0xAA), Nibble(0x96),
        Nibble(0xAB),
        Nibble(0xDE), Nibble(0xAA),
        Nibble(0xFF, sync),
        Nibble(0xD5), Nibble(0xAA), Nibble(0xAD),
        Nibble(0x96),
        Nibble(0xDE), Nibble(0xAA),
        Nibble(0xFF, sync),
    ]


def test_nibble_to_bits_without_sync():
    assert Nibble(0xD5, 0).to_bits() == [1, 1, 0, 1, 0, 1, 0, 1]


def test_nibble_to_bits_single_sync_bit_ignored():
    assert len(Nibble(0xFF, 1).to_bits()) == 8


def test_nibble_to_bits_with_sync():
    bits = Nibble(0xFF, 2).to_bits()
    assert bits == [1] * 8 + [0, 0]


def test_nibble_str():
    assert str(Nibble(0xFF, 2)) == "FF^02"
    assert str(Nibble(0xD5, 0)) == "D5   "


def test_to_nibbles_round_trip():
    nibbles = [Nibble(0xFF, 2), Nibble(0xD5), Nibble(0xAA), Nibble(0xFF, 3), Nibble(0x96)]
    result = stream_of(nibbles).to_nibbles()
    assert [(n.value, n.sync_bits) for n in result] == [
        (n.value, n.sync_bits) for n in nibbles
    ]
    assert all(n.area_type is AreaType.UNKNOWN for n in result)


def test_find_nibble_areas():
    nibbles = [
        Nibble(0xFF, 2),
        Nibble(0xD5), Nibble(0xAA), Nibble(0x96),
        Nibble(0xAB), Nibble(0xAB),
        Nibble(0xDE), Nibble(0xAA),
        Nibble(0xEB),
        Nibble(0xD5), Nibble(0xAA), Nibble(0xAD),
        Nibble(0x96),
        Nibble(0xDE), Nibble(0xAA),
        Nibble(0xEB), Nibble(0xFF),
    ]
    areas = [n.area_type for n in stream_of(nibbles).find_nibble_areas()]
    assert areas == [
        AreaType.UNKNOWN,
        AreaType.ADDRESS_PROLOGUE, AreaType.ADDRESS_PROLOGUE, AreaType.ADDRESS_PROLOGUE,
        AreaType.ADDRESS_CONTENT, AreaType.ADDRESS_CONTENT,
        AreaType.ADDRESS_EPILOGUE, AreaType.ADDRESS_EPILOGUE,
        AreaType.UNKNOWN,
        AreaType.DATA_PROLOGUE, AreaType.DATA_PROLOGUE, AreaType.DATA_PROLOGUE,
        AreaType.DATA_CONTENT,
        AreaType.DATA_EPILOGUE, AreaType.DATA_EPILOGUE,
        AreaType.UNKNOWN, AreaType.UNKNOWN,
    ]


def test_find_nibble_areas_short_stream_is_empty():
    assert stream_of_bytes([0xD5, 0xAA]).find_nibble_areas() == []


def test_analyze_standard_track():
    nibbles = [n for _ in range(16) for n in sector()]
    analyzed = stream_of(nibbles).analyze_track()
    assert analyzed.track_type is TrackType.STANDARD
    assert len(analyzed.nibbles) == len(nibbles)


def test_analyze_nonstandard_track():
    nibbles = [n for _ in range(15) for n in sector()]
    assert stream_of(nibbles).analyze_track().track_type is TrackType.NONSTANDARD


def test_analyze_random_track_is_empty():
    assert BitStream.random_stream().analyze_track().track_type is TrackType.EMPTY


def test_random_stream_length_and_bits():
    stream = BitStream.random_stream()
    assert len(stream) == 51_200
    assert {stream.next_bit(0) for _ in range(200)} <= {0, 1}


def test_next_byte_reads_bytes():
    values = [0xD5, 0xAA, 0x96, 0xFF]
    stream = stream_of_bytes(values)
    assert [stream.next_byte(8 * k) for k in range(len(values))] == values


def test_next_byte_wraps():
    stream = stream_of_bytes([0xAB, 0xCD])
    assert stream.next_byte(12) == 0xDA


def test_next_nibble_skips_leading_zeros():
    stream = stream_of_bytes([0x00, 0x00, 0xD5])
    assert stream.next_nibble(0) == (24, 0xD5)
    assert stream.next_nibble(16) == (8, 0xD5)


def test_set_bit_and_copy_independent():
    stream = stream_of_bytes([0x00, 0x00])
    clone = stream.copy()
    stream.set_bit(0, 1)
    assert stream.next_bit(0) == 1
    assert clone.next_bit(0) == 0
    assert clone.bits == bytearray(16)


def test_bit_streams_defaults():
    streams = BitStreams()
    assert streams.tmap == [0] * MAX_PHASE
    assert streams.bit_streams == []


def test_bit_streams_get_stream_out_of_range():
    streams = BitStreams([stream_of_bytes([0xFF])] * MAX_PHASE)
    with pytest.raises(IndexError):
        streams.get_stream(MAX_PHASE)
    with pytest.raises(IndexError):
        streams.get_stream(-1)


def test_bit_streams_set_bit_uses_tmap():
    tracks = [stream_of_bytes([0x00]), stream_of_bytes([0x00])]
    tmap = [1] * MAX_PHASE
    streams = BitStreams(tracks, tmap)
    streams.set_bit(5, 3, 1)
    assert tracks[1].next_bit(3) == 1
    assert tracks[0].next_bit(3) == 0


def test_bit_streams_stream_len_and_copy():
    tracks = [stream_of_bytes([0xFF, 0xD5]) for _ in range(MAX_PHASE)]
    streams = BitStreams(tracks)
    assert streams.stream_len(7) == 16
    clone = streams.copy()
    streams.get_stream(0).set_bit(0, 0)
    assert clone.get_stream(0).next_bit(0) == 1
    assert clone.tmap == streams.tmap


def test_bit_streams_dump(capsys):
    tracks = [stream_of_bytes([0xD5, 0xAA]) for _ in range(MAX_PHASE)]
    BitStreams(tracks).dump(3)
    out = capsys.readouterr().out
    assert "Dumping phase 3" in out
    assert "D5" in out and "AA" in out