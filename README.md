# maple2

A library for the floppy disk side of an Apple II emulator. It reads and writes
`.woz` and `.dsk` disk images, holds their tracks as bit streams, and provides
the nibble encodings (4-and-4, 6-and-2) used by Disk II formatted disks.

## Installation

```
pip install maple2
```

For development, with the test dependencies:

```
pip install -e ".[test]"
pytest
```

## Modules

- `maple2.woz`: reads WOZ 1 and WOZ 2 images with `Woz.from_file` and
  `Woz.from_bytes` (with `quick=True` only the INFO chunk is decoded). A loaded
  image offers `title()`, `version()` and `is_write_protected()`, and `Woz.save`
  writes it back out as a WOZ 2 file at its own path. `encode_info` and
  `encode_tracks` build the header, INFO, TMAP and TRKS chunks. Unreadable
  images raise `WozError`; 3.5" disks are rejected.
- `maple2.dsk`: `Dsk.from_file` and `Dsk.from_bytes` turn a 35-track `.dsk`
  image into bit streams for all 160 phases. `Dsk.save` decodes the sectors
  back and writes a `.dsk` file. The module also has the codecs
  `encode_4_and_4`, `decode_4_and_4`, `encode_6_and_2`, `decode_6_and_2`,
  the bit helpers `byte_bits` and `sync_bits`, whole-track encoding with
  `encode_track`, and `bit_streams_to_dsk`.
- `maple2.bit_stream`: `BitStream` holds the bits of one track and can split
  them into `Nibble`s (`to_nibbles`), tag each with its `AreaType`
  (`find_nibble_areas`) and classify the track as a `TrackType`
  (`analyze_track`). A track with no content (`BitStream.random_stream()`) reads
  as random bits. `BitStreams` holds the streams of a whole disk and its track
  map.
- `maple2.convert`: `dsk_to_woz(path, output=None)` writes a `.dsk` image as a
  WOZ 2 file and returns the path written (by default the input path with a
  `.woz` suffix). `woz_to_dsk(path)` returns the bytes of a `.dsk` image decoded
  from a `.woz` file. `decode_track` decodes the `Sector`s in a list of nibbles.
- `maple2.sector_read`: `SectorRead` watches nibbles go by and reports the
  sector number each time an address field completes.
- `maple2.disk_info`: `DiskInfo` describes an image (path, name, `WozVersion`,
  metadata, write protection).
- `maple2.cycle_actions`: a queue of actions deferred by a number of cycles
  (`Actions`, `UpdatePhaseAction`, `MotorOffAction`).
- `maple2.config_file`: `ConfigFile` holds the user settings (drives,
  breakpoints, speed, tab, magnification) as JSON. `ConfigFile.load()` reads
  the file at `default_config_path()`, creating it with defaults when missing;
  each setter saves straight away.
- `maple2.keyboard`: `key_to_char(key, modifiers)` maps a `Key` with
  `Modifiers` to an Apple II keyboard code.
- `maple2.crc`: the CRC-32 used by WOZ files.
- `maple2.debug`: `format_hex_dump` and `hex_dump`.
- `maple2.constants`: screen, timing and disk geometry constants.

## Example

```python
from maple2.woz import Woz

woz = Woz.from_file("game.woz")
print(woz.title(), woz.version(), woz.is_write_protected())

stream = woz.bit_streams.get_stream(0)
print(hex(stream.next_byte(0)))
print(stream.analyze_track().track_type)
```

Converting between formats:

```python
from pathlib import Path
from maple2.convert import dsk_to_woz, woz_to_dsk

dsk_to_woz("dos33.dsk", "dos33.woz")
Path("copy.dsk").write_bytes(woz_to_dsk("dos33.woz"))
```

## What it does not do

This package works on disk images and their encodings only. It does not
emulate the Disk II controller card, its logic state sequencer or the drive
motors and stepper, so it cannot be used to run a disk as an Apple II would
read it. There is no CPU, no display, no sound, and no command-line program.