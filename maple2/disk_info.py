"""Description of a disk image: its name, path, format and metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath


class WozVersion(Enum):
    """Format of a disk image."""

    UNKNOWN = "unknown"
    DSK = "dsk"
    WOZ1 = "woz1"
    WOZ2 = "woz2"


@dataclass
class DiskInfo:
    """Name, location and metadata of a disk image."""

    path: str
    name: str | None = None
    woz_version: WozVersion = WozVersion.UNKNOWN
    metadata: dict[str, str] = field(default_factory=dict)
    is_write_protected: bool = True

    @classmethod
    def from_path(cls, path: str) -> DiskInfo:
        """Create an unnamed, write-protected description of the image at ``path``."""
        return cls(path=path)

    def display_name(self) -> str:
        """The explicit name, else the title from the metadata, else the file name."""
        if self.name is not None:
            return self.name
        if "title" in self.metadata:
            return self.metadata["title"]
        parts = PurePath(self.path).parts
        return parts[-1] if parts else ""

    def side(self) -> str | None:
        """The disk side recorded in the metadata, if any."""
        return self.metadata.get("side")

    def __str__(self) -> str:
        prefix = "(no name)" if self.name is None else "name:"
        return f"{prefix} {self.display_name()}"