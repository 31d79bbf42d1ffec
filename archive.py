"""
Shared data contract for the image archive: configuration, the MediaRecord
type written to archive-data.json, and the display formatting rules.
"""

import re
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

ARCHIVE_BASE = Path("img/Archive")
ARCHIVE_URL_PREFIX = "img/Archive"
OUTPUT_FILE = Path("data/archive-data.json")
YEARS = ("2022", "2023", "2024")

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

ALL = "all"         # wildcard filter value
LAZY_MARGIN = 50    # start loading images this far before they scroll in

RECORD_FIELDS = (
    "id", "year", "artist", "artistDisplay", "sequence",
    "medium", "filename", "path", "extension",
)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def _capitalize(words: list[str]) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in words)


def format_artist_name(slug: str) -> str:
    """Convert "alban_ovanessian" to "Alban Ovanessian"."""
    return _capitalize(slug.split("_"))


def format_medium(medium: str) -> str:
    """Convert "behind-the-scenes" (or "behind_the_scenes") to "Behind The Scenes"."""
    return _capitalize(re.split(r"[-_]", medium))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MediaRecord:
    """One image file in the archive."""

    id: str
    year: str
    artist_slug: str
    sequence: str
    medium: str
    filename: str
    relative_path: str
    extension: str

    @property
    def artist_display(self) -> str:
        return format_artist_name(self.artist_slug)

    @property
    def medium_display(self) -> str:
        return format_medium(self.medium)

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.artist_slug, self.sequence)

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "year": self.year,
            "artist": self.artist_slug,
            "artistDisplay": self.artist_display,
            "sequence": self.sequence,
            "medium": self.medium,
            "filename": self.filename,
            "path": self.relative_path,
            "extension": self.extension,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MediaRecord":
        # artistDisplay is derived from the slug, so the stored copy is ignored
        return cls(
            id=str(data["id"]),
            year=str(data["year"]),
            artist_slug=str(data["artist"]),
            sequence=str(data["sequence"]),
            medium=str(data["medium"]),
            filename=str(data["filename"]),
            relative_path=str(data["path"]),
            extension=str(data["extension"]),
        )
