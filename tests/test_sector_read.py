from maple2.bit_stream import BitStream
from maple2.constants import TRACK_SIZE_BYTES
from maple2.dsk import encode_4_and_4, encode_track
from maple2.sector_read import SectorRead, SectorState


def _address_field(volume, track, sector):
    return [0xD5, 0xAA, 0x96, *encode_4_and_4(volume), *encode_4_and_4(track),
            *encode_4_and_4(sector)]


def _feed(reader, nibbles, drive_index=0):
    return [reader.read_byte(drive_index, n) for n in nibbles]


def test_decodes_address_field():
    reader = SectorRead()
    results = _feed(reader, _address_field(0xFE, 17, 9))
    assert results[-1] == 9
    assert all(r is None for r in results[:-1])
    assert reader.volume == 0xFE
    assert reader.track == 17
    assert reader.sector == 9
    assert reader.state is SectorState.START


def test_prologue_interrupted_resets():
    reader = SectorRead()
    _feed(reader, [0xD5, 0x00])
    assert reader.state is SectorState.START
    _feed(reader, [0xD5, 0xAA, 0xAD])
    assert reader.state is SectorState.START


def test_data_prologue_yields_nothing():
    reader = SectorRead()
    assert _feed(reader, [0xD5, 0xAA, 0xAD, 0x96, 0x97]) == [None] * 5


def test_listener_receives_drive_and_sector():
    seen = []
    reader = SectorRead(on_sector=lambda drive, sector: seen.append((drive, sector)))
    _feed(reader, _address_field(0xFE, 3, 12), drive_index=1)
    assert seen == [(1, 12)]


def test_whole_track_yields_every_sector_in_order():
    data = bytes(i % 251 for i in range(TRACK_SIZE_BYTES))
    nibbles = [n.value for n in BitStream(encode_track(data, 5)).to_nibbles()]
    reader = SectorRead()
    sectors = [s for s in _feed(reader, nibbles) if s is not None]
    assert sectors == list(range(16))
    assert reader.track == 5
    assert reader.volume == 0xFE