"""Emulator-wide constants: screen geometry, timing, and disk layout."""

# How often (in ms) the CPU state is published to the UI.
CPU_REFRESH_MS = 40

# Screen sizes
TEXT_WIDTH = 40
TEXT_HEIGHT = 24

HIRES_WIDTH = 280
HIRES_HEIGHT_MIXED = 160
HIRES_HEIGHT = 192

FRAMES_PER_SECOND = 50
CYCLES_PER_LINE = 65
CYCLES_PER_FRAME = 20280

# Font sizes
FONT_WIDTH = 8
FONT_HEIGHT = 7

# Start address of each line in text mode.
TEXT_MODE_ADDRESSES: tuple[int, ...] = (
    0x400, 0x480, 0x500, 0x580, 0x600, 0x680, 0x700, 0x780,
    0x428, 0x4A8, 0x528, 0x5A8, 0x628, 0x6A8, 0x728, 0x7A8,
    0x450, 0x4D0, 0x550, 0x5D0, 0x650, 0x6D0, 0x750, 0x7D0,
)

# Frequency of the text FLASH mode in Hz. Even number.
FLASH_FREQUENCY_HZ = 4

# Magnification of the screen
DEFAULT_MAGNIFICATION = 4

# Emulator speed
DEFAULT_SPEED_HZ = 1_740_000
DIVIDER = 1.7

# Sound
SAMPLE_RATE = 48_000

# Cycles between the motor being turned off and actually stopping.
SPINNING_DOWN_CYCLES = 1_200_000

# Disks that are known not to boot or not to work properly.
BUGGY_DISKS: tuple[str, ...] = (
    "Stargate",
    "DOS 3.2",
    "Akalabeth",
    "Batman",
    "Algernon",
    "Micro invaders",
    "Bug Attack",
    "Seafox",
    "Micro Invaders",
    "Newsroom",
    "Pest Patrol",
)

DEFAULT_DISKS_DIRECTORIES: tuple[str, ...] = ()

DISKS_SUFFIXES: tuple[str, ...] = ("woz", "dsk", "hdv")

# Disk geometry. Divide a phase by 2 to get the half track, by 4 to get the track.
MAX_PHASE = 160
MAX_TRACK = MAX_PHASE // 4
# A .dsk only has 35 tracks, not 40.
MAX_TRACK_DSK = MAX_TRACK - 5

SECTOR_SIZE_BYTES = 256
TRACK_SIZE_BYTES = 16 * SECTOR_SIZE_BYTES
DSK_SIZE_BYTES = TRACK_SIZE_BYTES * MAX_TRACK_DSK
# Size of the data field following D5 AA AD.
DATA_FIELD_SIZE = 343

LOGICAL_SECTORS: tuple[int, ...] = (0, 7, 14, 6, 13, 5, 12, 4, 11, 3, 10, 2, 9, 1, 8, 15)
LOGICAL_SECTORS_WRITE: tuple[int, ...] = (
    0, 0xD, 0xB, 9, 7, 5, 3, 1, 0xE, 0xC, 0xA, 8, 6, 4, 2, 0xF,
)