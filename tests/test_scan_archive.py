import json
import os
import sys
from pathlib import Path

import pytest

from scan_archive import FilenameError, main, parse_filename, save_archive_data, scan_archive

from conftest import make_archive


def test_parse_filename_builds_full_record() -> None:
    r = parse_filename("2022-alban_ovanessian-01-bts.jpeg", "2022")
    assert r is not None
    assert r.id == "2022-alban_ovanessian-01"
    assert r.year == "2022"
    assert r.artist_slug == "alban_ovanessian"
    assert r.artist_display == "Alban Ovanessian"
    assert r.sequence == "01"
    assert r.medium == "bts"
    assert r.filename == "2022-alban_ovanessian-01-bts.jpeg"
    assert r.relative_path == "img/Archive/2022/2022-alban_ovanessian-01-bts.jpeg"
    assert r.extension == "jpeg"


def test_parse_filename_is_deterministic() -> None:
    name = "2022-alban_ovanessian-01-bts.jpeg"
    assert parse_filename(name, "2022") == parse_filename(name, "2022")


def test_parse_filename_keeps_dashes_in_medium() -> None:
    r = parse_filename("2024-mira_kovac-03-behind-the-scenes.png", "2024")
    assert r.medium == "behind-the-scenes"
    assert r.medium_display == "Behind The Scenes"


def test_parse_filename_lowercases_extension() -> None:
    r = parse_filename("2022-mira-01-final.JPG", "2022")
    assert r.extension == "jpg"
    assert r.filename == "2022-mira-01-final.JPG"


@pytest.mark.parametrize("name", ["notes.txt", "2022-mira-01-final.webp", "README", "2022-mira-01-final"])
def test_parse_filename_skips_non_images(name: str) -> None:
    assert parse_filename(name, "2022") is None


@pytest.mark.parametrize("name", ["2022-mira-01.jpg", "2022-mira.png", "cover.gif", ".jpg"])
def test_parse_filename_rejects_short_stems(name: str) -> None:
    with pytest.raises(FilenameError):
        parse_filename(name, "2022")


def test_year_mismatch_warns_and_folder_year_wins(capsys) -> None:
    r = parse_filename("2021-mira-01-final.jpg", "2022")
    assert r.year == "2022"
    assert r.id == "2022-mira-01"
    assert r.relative_path == "img/Archive/2022/2021-mira-01-final.jpg"
    assert "Year mismatch in 2021-mira-01-final.jpg: expected 2022, got 2021" in capsys.readouterr().out


def test_scan_sorts_by_artist_then_sequence_as_strings(tmp_path: Path) -> None:
    make_archive(tmp_path, {"2022": [
        "2022-bravo-01-final.jpg",
        "2022-alpha-2-final.jpg",
        "2022-alpha-10-final.jpg",
        "2022-alpha-01-bts.jpg",
    ]})
    archive = scan_archive(tmp_path, ["2022"])
    assert [(r.artist_slug, r.sequence) for r in archive["2022"]] == [
        ("alpha", "01"),
        ("alpha", "10"),
        ("alpha", "2"),
        ("bravo", "01"),
    ]


def test_scan_excludes_unparseable_and_ignores_other_files(tmp_path: Path, capsys) -> None:
    make_archive(tmp_path, {"2022": [
        "2022-mira-01-final.jpg",
        "2022-mira-02.jpg",
        "notes.txt",
    ]})
    (tmp_path / "2022" / "nested.jpg").mkdir()

    archive = scan_archive(tmp_path, ["2022"])
    assert [r.filename for r in archive["2022"]] == ["2022-mira-01-final.jpg"]

    out = capsys.readouterr().out
    assert "Could not parse: 2022-mira-02.jpg" in out
    assert "notes.txt" not in out
    assert "2022: found 1 files" in out


def test_scan_missing_year_folder_gives_empty_list(tmp_path: Path, capsys) -> None:
    make_archive(tmp_path, {
        "2022": ["2022-mira-01-final.jpg"],
        "2024": ["2024-mira-01-final.jpg"],
    })
    archive = scan_archive(tmp_path, ["2022", "2023", "2024"])
    assert list(archive) == ["2022", "2023", "2024"]
    assert archive["2023"] == []
    assert len(archive["2022"]) == 1
    assert len(archive["2024"]) == 1
    assert "Folder not found" in capsys.readouterr().out


def test_scan_keeps_duplicate_ids_and_reports_them(tmp_path: Path, capsys) -> None:
    make_archive(tmp_path, {"2022": ["2022-mira-01-final.jpg", "2022-mira-01-bts.png"]})
    records = scan_archive(tmp_path, ["2022"])["2022"]
    assert [r.id for r in records] == ["2022-mira-01", "2022-mira-01"]
    assert "Duplicate id 2022-mira-01" in capsys.readouterr().out


def test_end_to_end_two_files(tmp_path: Path) -> None:
    root = make_archive(tmp_path / "img" / "Archive", {"2022": [
        "2022-alban_ovanessian-02-final.png",
        "2022-alban_ovanessian-01-bts.jpeg",
    ]})
    output = tmp_path / "data" / "archive-data.json"
    save_archive_data(scan_archive(root, ["2022"]), output)

    data = json.loads(output.read_text(encoding="utf-8"))
    entries = data["2022"]
    assert len(entries) == 2
    assert [e["artistDisplay"] for e in entries] == ["Alban Ovanessian", "Alban Ovanessian"]
    assert [e["sequence"] for e in entries] == ["01", "02"]
    assert [e["medium"] for e in entries] == ["bts", "final"]


def test_main_writes_all_year_keys_even_when_folders_are_missing(tmp_path: Path, capsys) -> None:
    root = make_archive(tmp_path / "archive", {"2022": ["2022-mira-01-final.jpg"]})
    output = tmp_path / "out" / "nested" / "index.json"

    assert main(["--root", str(root), "--output", str(output)]) == 0

    data = json.loads(output.read_text(encoding="utf-8"))
    assert list(data) == ["2022", "2023", "2024"]
    assert data["2023"] == [] and data["2024"] == []
    assert data["2022"][0]["path"] == "img/Archive/2022/2022-mira-01-final.jpg"

    out = capsys.readouterr().out
    assert "Summary:" in out
    assert "1 artists: Mira" in out
    assert "Media types: final" in out


def test_main_custom_years_and_prefix(tmp_path: Path) -> None:
    root = make_archive(tmp_path, {"2019": ["2019-mira-01-final.gif"]})
    output = tmp_path / "index.json"
    main(["--root", str(root), "--output", str(output), "--years", "2019", "--url-prefix", "media"])

    data = json.loads(output.read_text(encoding="utf-8"))
    assert list(data) == ["2019"]
    assert data["2019"][0]["path"] == "media/2019/2019-mira-01-final.gif"


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts non-UTF-8 names")
def test_main_skips_non_utf8_filenames_and_still_writes_index(tmp_path: Path, capsys) -> None:
    year_dir = tmp_path / "archive" / "2022"
    year_dir.mkdir(parents=True)
    (year_dir / os.fsdecode(b"2022-caf\xe9-01-final.jpg")).write_bytes(b"")
    (year_dir / "2022-mira-01-final.jpg").write_bytes(b"")
    output = tmp_path / "index.json"

    assert main(["--root", str(tmp_path / "archive"), "--output", str(output), "--years", "2022"]) == 0

    data = json.loads(output.read_text(encoding="utf-8"))
    assert [e["artist"] for e in data["2022"]] == ["mira"]
    assert "Skipping filename that is not UTF-8: '2022-caf\\udce9-01-final.jpg'" in capsys.readouterr().out
