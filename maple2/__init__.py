"""Apple II floppy disk images: WOZ and DSK reading and writing, nibble codecs and track analysis."""

__version__ = "0.1.0"