# /// script
# dependencies = ["httpx"]
# ///
"""
Archive browser: load archive-data.json, filter it by year/medium/artist and
describe the resulting image grid.

The same pipeline runs client-side in the generated site (see build_site.py).
Here it is kept free of any page so it can be driven from the terminal:

    python browser.py data/archive-data.json --medium bts
    python browser.py http://localhost:8000/data/archive-data.json --year 2022
"""

import argparse
import itertools
import json
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Protocol

import httpx

from archive import ALL, LAZY_MARGIN, OUTPUT_FILE, YEARS, MediaRecord, format_medium

FILTER_FIELDS = ("year", "medium", "artist")

LOAD_ERROR_MESSAGE = "Failed to load archive data. Make sure archive-data.json exists in the data/ folder."
EMPTY_MESSAGE = "No media found for selected filters"


class ArchiveLoadError(Exception):
    """The archive index could not be fetched or parsed."""


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

def _fetch(url: str, client: httpx.Client | None) -> str:
    try:
        if client is not None:
            resp = client.get(url, follow_redirects=True)
        else:
            resp = httpx.get(url, follow_redirects=True, timeout=30)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise ArchiveLoadError(f"could not fetch {url}: {e}") from e
    return resp.text


def load_archive(source, client: httpx.Client | None = None) -> dict[str, list[MediaRecord]]:
    """Read the year -> records mapping from a path or an http(s) URL."""
    source = str(source)
    if source.startswith(("http://", "https://")):
        text = _fetch(source, client)
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise ArchiveLoadError(f"archive data not found: {source}") from e
        except UnicodeDecodeError as e:
            raise ArchiveLoadError(f"archive data is not UTF-8: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArchiveLoadError(f"archive data is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ArchiveLoadError("archive data must map years to lists of records")
    archive = {}
    for year, items in data.items():
        if not isinstance(items, list):
            raise ArchiveLoadError(f"year {year} does not hold a list of records")
        try:
            archive[year] = [MediaRecord.from_dict(item) for item in items]
        except (KeyError, TypeError) as e:
            raise ArchiveLoadError(f"malformed record in year {year}: {e}") from e
    return archive


def flatten(archive: dict[str, list[MediaRecord]]) -> list[MediaRecord]:
    """All records, year bucket by year bucket in the document's order."""
    return list(itertools.chain.from_iterable(archive.values()))


# ---------------------------------------------------------------------------
# Filter vocabularies and controls
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Vocabularies:
    years: tuple[str, ...]
    media: tuple[str, ...]
    artists: tuple[str, ...]


def derive_vocabularies(media: list[MediaRecord]) -> Vocabularies:
    return Vocabularies(
        years=tuple(sorted({r.year for r in media})),
        media=tuple(sorted({r.medium for r in media})),
        artists=tuple(sorted({r.artist_display for r in media})),
    )


@dataclass(frozen=True)
class Option:
    value: str
    label: str
    active: bool = False


@dataclass(frozen=True)
class Controls:
    years: tuple[Option, ...]
    media: tuple[Option, ...]
    artists: tuple[Option, ...]


def _options(values, current: str, label=str, all_label: str = "All") -> tuple[Option, ...]:
    opts = [Option(ALL, all_label, current == ALL)]
    opts.extend(Option(v, label(v), current == v) for v in values)
    return tuple(opts)


def build_controls(vocab: Vocabularies, state: "FilterState", years=YEARS) -> Controls:
    """Year buttons come from the configured years, the rest from the data."""
    return Controls(
        years=_options(years, state.year, all_label="All Years"),
        media=_options(vocab.media, state.medium, label=format_medium, all_label="All Media"),
        artists=_options(vocab.artists, state.artist, all_label="All Artists"),
    )


# ---------------------------------------------------------------------------
# Filter state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterState:
    year: str = ALL
    medium: str = ALL
    artist: str = ALL

    def matches(self, record: MediaRecord) -> bool:
        return (
            (self.year == ALL or record.year == self.year)
            and (self.medium == ALL or record.medium == self.medium)
            and (self.artist == ALL or record.artist_display == self.artist)
        )


@dataclass(frozen=True)
class FilterChanged:
    """A filter control was clicked or selected."""

    field: str
    value: str


def reduce(state: FilterState, event: FilterChanged) -> FilterState:
    if event.field not in FILTER_FIELDS:
        raise ValueError(f"unknown filter {event.field!r}, expected one of {FILTER_FIELDS}")
    return replace(state, **{event.field: event.value})


def apply_filters(state: FilterState, media: list[MediaRecord]) -> list[MediaRecord]:
    return [r for r in media if state.matches(r)]


# ---------------------------------------------------------------------------
# Render
# ---------------------------------------------------------------------------

def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


@dataclass(frozen=True)
class FilterStats:
    total: int
    years: int
    artists: int
    media: int

    @classmethod
    def of(cls, records: list[MediaRecord]) -> "FilterStats":
        return cls(
            total=len(records),
            years=len({r.year for r in records}),
            artists=len({r.artist_display for r in records}),
            media=len({r.medium for r in records}),
        )

    def summary(self) -> str:
        return " · ".join([
            f"Showing {_plural(self.total, 'work')}",
            _plural(self.years, "year"),
            _plural(self.artists, "artist"),
            _plural(self.media, "medium"),
        ])


@dataclass(frozen=True)
class ImageRef:
    """Deferred image: holds a source but nothing fetches it until it is visible."""

    src: str
    alt: str


@dataclass(frozen=True)
class Cell:
    record_id: str
    image: ImageRef
    href: str
    artist: str
    medium: str
    caption: str


@dataclass(frozen=True)
class GridView:
    status: str
    cells: tuple[Cell, ...]


@dataclass(frozen=True)
class EmptyView:
    status: str
    message: str = EMPTY_MESSAGE


@dataclass(frozen=True)
class ErrorView:
    message: str


def make_cell(record: MediaRecord, thumb: Callable[[MediaRecord], str] | None = None) -> Cell:
    return Cell(
        record_id=record.id,
        image=ImageRef(
            src=thumb(record) if thumb else record.relative_path,
            alt=f"{record.artist_display} - {record.medium}",
        ),
        href=record.relative_path,
        artist=record.artist_display,
        medium=record.medium_display,
        caption=f"{record.year} · {record.filename}",
    )


def render(state: FilterState, media: list[MediaRecord], thumb=None) -> GridView | EmptyView:
    """Describe the grid for `state`. Cells follow the flattened order."""
    filtered = apply_filters(state, media)
    status = FilterStats.of(filtered).summary()
    if not filtered:
        return EmptyView(status)
    return GridView(status, tuple(make_cell(r, thumb) for r in filtered))


# ---------------------------------------------------------------------------
# Lazy loading
# ---------------------------------------------------------------------------

class Placeholder:
    """A mounted image that only gets a live `src` once it has been seen."""

    def __init__(self, ref: ImageRef):
        self.data_src = ref.src
        self.alt = ref.alt
        self.src: str | None = None

    @property
    def loaded(self) -> bool:
        return self.src is not None

    def load(self):
        if self.src is None:
            self.src = self.data_src

    def __repr__(self):
        return f"Placeholder({self.data_src!r}, loaded={self.loaded})"


class Watcher(Protocol):
    def observe(self, element: Placeholder, on_visible: Callable[[Placeholder], None]) -> None: ...


class ImmediateWatcher:
    """Treats everything as visible: fires as soon as an element is observed."""

    def observe(self, element, on_visible):
        on_visible(element)


class ViewportWatcher:
    """A scrolling grid of fixed-height rows.

    Elements are laid out in observation order, `columns` per row. Each one
    fires once when `scroll_to` brings it within `margin` of the viewport and
    is then dropped; nothing ever unloads.
    """

    def __init__(self, viewport_height: int, row_height: int, columns: int = 1, margin: int = LAZY_MARGIN):
        self.viewport_height = viewport_height
        self.row_height = row_height
        self.columns = columns
        self.margin = margin
        self.offset = 0
        self._observed: list[tuple[int, Placeholder, Callable]] = []
        self._count = 0

    def observe(self, element, on_visible):
        top = (self._count // self.columns) * self.row_height
        self._count += 1
        self._observed.append((top, element, on_visible))
        self._check()

    def scroll_to(self, offset: int):
        self.offset = offset
        self._check()

    @property
    def watching(self) -> int:
        return len(self._observed)

    def _check(self):
        lo = self.offset - self.margin
        hi = self.offset + self.viewport_height + self.margin
        pending = []
        for top, element, on_visible in self._observed:
            if top < hi and top + self.row_height > lo:
                on_visible(element)
            else:
                pending.append((top, element, on_visible))
        self._observed = pending


def setup_lazy_loading(watcher: Watcher, placeholders: list[Placeholder]):
    for p in placeholders:
        watcher.observe(p, Placeholder.load)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

@dataclass
class ArchiveBrowser:
    """Owns the loaded collection, the filter state and the mounted grid."""

    source: object = OUTPUT_FILE
    watcher_factory: Callable[[], Watcher] = ImmediateWatcher
    thumb: Callable[[MediaRecord], str] | None = None
    years: tuple[str, ...] = YEARS
    client: httpx.Client | None = None

    archive: dict = field(default_factory=dict)
    media: list = field(default_factory=list)
    state: FilterState = field(default_factory=FilterState)
    vocabularies: Vocabularies | None = None
    controls: Controls | None = None
    view: object = None
    placeholders: list = field(default_factory=list)
    watcher: Watcher | None = None

    def init(self):
        """Load the index, derive vocabularies and controls, then render once."""
        try:
            self.archive = load_archive(self.source, self.client)
        except ArchiveLoadError as e:
            print(f"  {e}", file=sys.stderr)
            self.view = ErrorView(LOAD_ERROR_MESSAGE)
            return self.view

        self.media = flatten(self.archive)
        print(f"  Loaded {len(self.media)} media items")
        self.vocabularies = derive_vocabularies(self.media)
        return self.refresh()

    @property
    def loaded(self) -> bool:
        return self.vocabularies is not None

    def dispatch(self, event: FilterChanged):
        if not self.loaded:
            raise RuntimeError("archive is not loaded")
        self.state = reduce(self.state, event)
        return self.refresh()

    def refresh(self):
        self.controls = build_controls(self.vocabularies, self.state, self.years)
        self.view = render(self.state, self.media, self.thumb)
        # A fresh watcher per render; the old one goes with the old placeholders
        if isinstance(self.view, GridView):
            self.placeholders = [Placeholder(c.image) for c in self.view.cells]
        else:
            self.placeholders = []
        self.watcher = self.watcher_factory()
        setup_lazy_loading(self.watcher, self.placeholders)
        return self.view


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Browse archive-data.json from the terminal.")
    parser.add_argument("source", nargs="?", default=str(OUTPUT_FILE), help="Path or URL of archive-data.json")
    parser.add_argument("--year", default=ALL)
    parser.add_argument("--medium", default=ALL, help="Raw medium value, e.g. bts")
    parser.add_argument("--artist", default=ALL, help="Artist display name, e.g. \"Alban Ovanessian\"")
    args = parser.parse_args(argv)

    browser = ArchiveBrowser(source=args.source)
    view = browser.init()
    if isinstance(view, ErrorView):
        print(view.message, file=sys.stderr)
        return 1

    for name in FILTER_FIELDS:
        value = getattr(args, name)
        if value != ALL:
            view = browser.dispatch(FilterChanged(name, value))

    print(view.status)
    if isinstance(view, EmptyView):
        print(view.message)
        return 0
    for cell in view.cells:
        print(f"  {cell.artist:<24} {cell.medium:<20} {cell.caption}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
