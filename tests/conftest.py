import json
from pathlib import Path

import pytest
from PIL import Image

from archive import MediaRecord


def make_archive(root: Path, files: dict[str, list[str]], real_images: bool = False) -> Path:
    """Create root/<year>/<filename> for every file listed per year."""
    for year, names in files.items():
        year_dir = root / year
        year_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            if real_images:
                Image.new("RGB", (64, 40), (200, 80, 40)).save(year_dir / name, "PNG")
            else:
                (year_dir / name).write_bytes(b"")
    return root


def record(year: str, artist: str, sequence: str, medium: str, ext: str = "jpg") -> MediaRecord:
    filename = f"{year}-{artist}-{sequence}-{medium}.{ext}"
    return MediaRecord(
        id=f"{year}-{artist}-{sequence}",
        year=year,
        artist_slug=artist,
        sequence=sequence,
        medium=medium,
        filename=filename,
        relative_path=f"img/Archive/{year}/{filename}",
        extension=ext,
    )


@pytest.fixture
def sample_records() -> dict[str, list[MediaRecord]]:
    return {
        "2022": [
            record("2022", "alban_ovanessian", "01", "bts", "jpeg"),
            record("2022", "alban_ovanessian", "02", "final", "png"),
            record("2022", "mira_kovac", "01", "final"),
        ],
        "2023": [],
        "2024": [
            record("2024", "mira_kovac", "01", "behind-the-scenes"),
        ],
    }


@pytest.fixture
def archive_json(tmp_path: Path, sample_records) -> Path:
    path = tmp_path / "data" / "archive-data.json"
    path.parent.mkdir(parents=True)
    data = {year: [r.to_dict() for r in records] for year, records in sample_records.items()}
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
