# /// script
# dependencies = []
# ///
"""
Scan the img/Archive year folders and generate data/archive-data.json.

Usage:
    python scan_archive.py
    python scan_archive.py --root img/Archive --output data/archive-data.json

Filenames look like YEAR-artist_slug-SEQUENCE-MEDIUM.ext, for example
2022-alban_ovanessian-01-bts.jpeg. The medium may itself contain dashes.
"""

import argparse
import json
from pathlib import Path

from archive import (
    ARCHIVE_BASE,
    ARCHIVE_URL_PREFIX,
    IMAGE_EXTENSIONS,
    OUTPUT_FILE,
    YEARS,
    MediaRecord,
)


class FilenameError(ValueError):
    """A filename that does not split into year, artist, sequence and medium."""


# ---------------------------------------------------------------------------
# Step 1: Parse filenames
# ---------------------------------------------------------------------------

def parse_filename(filename: str, year: str, url_prefix: str = ARCHIVE_URL_PREFIX) -> MediaRecord | None:
    """Parse one filename found in the folder for `year`.

    Returns None for files that are not images. Raises FilenameError when the
    stem has fewer than four dash-separated parts. The folder year always wins
    over the year embedded in the filename; a mismatch is only reported.
    """
    stem, dot, ext = filename.rpartition(".")
    if not dot or f".{ext.lower()}" not in IMAGE_EXTENSIONS:
        return None

    parts = stem.split("-")
    if len(parts) < 4:
        raise FilenameError(f"expected YEAR-ARTIST-SEQUENCE-MEDIUM, got {len(parts)} part(s)")

    file_year, artist, sequence = parts[:3]
    medium = "-".join(parts[3:])

    if file_year != year:
        print(f"  Year mismatch in {filename}: expected {year}, got {file_year}")

    return MediaRecord(
        id=f"{year}-{artist}-{sequence}",
        year=year,
        artist_slug=artist,
        sequence=sequence,
        medium=medium,
        filename=filename,
        relative_path=f"{url_prefix}/{year}/{filename}",
        extension=ext.lower(),
    )


# ---------------------------------------------------------------------------
# Step 2: Scan year folders
# ---------------------------------------------------------------------------

def scan_year(year_dir: Path, year: str, url_prefix: str = ARCHIVE_URL_PREFIX) -> list[MediaRecord]:
    """Parse every image in one year folder, sorted by artist then sequence."""
    records = []
    for f in sorted(year_dir.iterdir()):
        if not f.is_file():
            continue
        try:
            f.name.encode("utf-8")
        except UnicodeEncodeError:
            print(f"  Skipping filename that is not UTF-8: {f.name!r}")
            continue
        try:
            record = parse_filename(f.name, year, url_prefix)
        except FilenameError:
            print(f"  Could not parse: {f.name}")
            continue
        if record is not None:
            records.append(record)

    # Plain string order on both keys: sequence "10" sorts before "2"
    records.sort(key=lambda r: r.sort_key)
    return records


def scan_archive(
    root: Path = ARCHIVE_BASE,
    years=YEARS,
    url_prefix: str = ARCHIVE_URL_PREFIX,
) -> dict[str, list[MediaRecord]]:
    """Build the year -> records mapping. Missing year folders give empty lists."""
    archive: dict[str, list[MediaRecord]] = {}
    seen_ids: set[str] = set()

    for year in years:
        year_dir = Path(root) / year
        if not year_dir.is_dir():
            print(f"  Folder not found: {year_dir}")
            archive[year] = []
            continue

        records = scan_year(year_dir, year, url_prefix)
        for r in records:
            if r.id in seen_ids:
                print(f"  Duplicate id {r.id}: keeping {r.filename} as a separate entry")
            seen_ids.add(r.id)

        archive[year] = records
        print(f"  {year}: found {len(records)} files")

    return archive


# ---------------------------------------------------------------------------
# Step 3: Write JSON and report
# ---------------------------------------------------------------------------

def archive_to_json(archive: dict[str, list[MediaRecord]]) -> dict[str, list[dict[str, str]]]:
    return {year: [r.to_dict() for r in records] for year, records in archive.items()}


def save_archive_data(archive: dict[str, list[MediaRecord]], output: Path = OUTPUT_FILE) -> Path:
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(archive_to_json(archive), indent=2) + "\n", encoding="utf-8")
    print(f"  Archive data saved to: {output}")
    return output


def print_summary(archive: dict[str, list[MediaRecord]]):
    print("\nSummary:")
    for year, records in archive.items():
        # dict.fromkeys keeps first-seen order while deduplicating
        artists = list(dict.fromkeys(r.artist_display for r in records))
        media = list(dict.fromkeys(r.medium for r in records))
        print(f"\n{year}:")
        print(f"  - {len(records)} files")
        print(f"  - {len(artists)} artists: {', '.join(artists)}")
        print(f"  - Media types: {', '.join(media)}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate archive-data.json from the year folders.")
    parser.add_argument("--root", default=str(ARCHIVE_BASE), type=Path, help="Folder containing one subfolder per year")
    parser.add_argument("--output", default=str(OUTPUT_FILE), type=Path, help="Where to write the JSON index")
    parser.add_argument("--years", nargs="+", default=list(YEARS), help="Years to scan, in output order")
    parser.add_argument("--url-prefix", default=ARCHIVE_URL_PREFIX, help="Prefix for each record's path")
    args = parser.parse_args(argv)

    print("Step 1: Scanning archive folders...")
    archive = scan_archive(args.root, args.years, args.url_prefix)

    print("Step 2: Writing archive data...")
    save_archive_data(archive, args.output)
    print_summary(archive)

    print("\nDone! Build the browser with: python build_site.py")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
