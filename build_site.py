# /// script
# dependencies = ["pillow", "jinja2", "httpx"]
# ///
"""
Build the static archive browser from data/archive-data.json.

Usage:
    python scan_archive.py
    python build_site.py

Expects the index written by scan_archive.py and the img/Archive folders it
was generated from. Outputs a static site to ./public_html/
"""

import argparse
import shutil
import sys
from pathlib import Path

from PIL import Image
from jinja2 import Environment

from archive import LAZY_MARGIN, OUTPUT_FILE, YEARS, MediaRecord
from browser import LOAD_ERROR_MESSAGE, ArchiveBrowser, ErrorView
from scan_archive import save_archive_data

_jinja_env = Environment(autoescape=True)
Template = _jinja_env.from_string

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

SITE_DIR = Path("public_html")
THUMB_SIZE = 320    # square crop (2x for 160px grid cells)
DATA_PATH = "data/archive-data.json"    # where the page fetches the index from


def thumb_path(record: MediaRecord) -> str:
    """Site-relative thumbnail for a record: thumbs/<year>/<filename>.jpg

    The full filename is kept so a.png and a.jpg get separate thumbnails.
    """
    return f"thumbs/{record.year}/{record.filename}.jpg"


def resolve_within(base: Path, relative: str) -> Path | None:
    """`base / relative`, or None if that lands outside `base`."""
    base = Path(base).resolve()
    path = (base / relative).resolve()
    return path if path.is_relative_to(base) else None


# ---------------------------------------------------------------------------
# Step 2: Copy originals and generate thumbnails
# ---------------------------------------------------------------------------

def make_thumbnail(src: Path, dst: Path, size: int = THUMB_SIZE):
    """Create a square center-crop thumbnail."""
    with Image.open(src) as img:
        img = img.convert("RGB")

        w, h = img.size
        side = min(w, h)
        left = (w - side) // 2
        top = (h - side) // 2
        img = img.crop((left, top, left + side, top + side))
        img = img.resize((size, size), Image.LANCZOS)
        dst.parent.mkdir(parents=True, exist_ok=True)
        img.save(dst, "JPEG", quality=80)


def process_media(media: list[MediaRecord], source_root: Path, site_dir: Path, thumbs: bool = True) -> set[str]:
    """Copy originals into the site and make thumbnails.

    Returns the paths of records that ended up with a thumbnail. Records whose
    path would leave the archive root or the site are skipped.
    """
    total = len(media)
    with_thumbs = set()

    for i, record in enumerate(media):
        src = resolve_within(source_root, record.relative_path)
        original_dst = resolve_within(site_dir, record.relative_path)
        thumb_dst = resolve_within(site_dir, thumb_path(record))
        if src is None or original_dst is None or thumb_dst is None:
            print(f"  [{i+1}/{total}] UNSAFE path for {record.id}: {record.relative_path}")
            continue
        if not src.is_file():
            print(f"  [{i+1}/{total}] MISSING file for {record.id}: {record.filename}")
            continue

        if not original_dst.exists():
            original_dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, original_dst)

        if thumbs:
            if not thumb_dst.exists():
                try:
                    make_thumbnail(src, thumb_dst)
                except OSError as e:
                    print(f"  [{i+1}/{total}] Thumb failed for {record.id}: {e}")
                    continue
            with_thumbs.add(record.relative_path)

        if (i + 1) % 100 == 0 or i + 1 == total:
            print(f"  [{i+1}/{total}] processed")

    return with_thumbs


# ---------------------------------------------------------------------------
# Step 3: Generate HTML
# ---------------------------------------------------------------------------

SHARED_CSS = """\
*, *::before, *::after { box-sizing: border-box; }
body {
  margin: 0; padding: 24px;
  font-family: "Inter", system-ui, -apple-system, sans-serif;
  font-size: 15px; line-height: 1.6;
  background: #111; color: #c8c8c8;
}
h1 { font-size: 1.5em; font-weight: 500; margin: 0 0 16px; }
button, select {
  font: inherit; font-size: 0.85em; color: #aaa; cursor: pointer;
  background: #1a1a1a; border: 1px solid #2a2a2a; border-radius: 12px;
  padding: 3px 12px;
}
button:hover, select:hover { color: #ddd; border-color: #3a3a3a; }
button.active { background: #2c4a5e; color: #eee; border-color: #4a7a9a; }

/* ── filters ── */
.filters { display: flex; flex-direction: column; gap: 8px; margin-bottom: 16px; }
.filter-row { display: flex; flex-wrap: wrap; gap: 4px; align-items: center; }
.filter-row .label { font-size: 0.8em; color: #666; width: 64px; }
#stats { font-size: 0.82em; color: #777; margin-bottom: 16px; }

/* ── media grid ── */
.media-grid {
  display: grid;
  grid-template-columns: repeat(auto-fill, minmax(200px, 1fr));
  gap: 12px;
}
.media-item { background: #161616; border-radius: 4px; overflow: hidden; }
.media-item a { display: block; aspect-ratio: 1; background: #1c1c1c; }
.media-item img { width: 100%; height: 100%; object-fit: cover; display: block; }
.media-item img.lazy { opacity: 0; }
.media-info { padding: 8px 10px; }
.media-info h3 { font-size: 0.95em; font-weight: 500; margin: 0; color: #ddd; }
.media-info .medium { font-size: 0.8em; color: #7db8e0; }
.media-info .meta { font-size: 0.75em; color: #555; margin: 2px 0 0; word-break: break-all; }

.empty-state, .error-state { padding: 48px 0; text-align: center; color: #777; }
.error-state { color: #c77; }

@media (max-width: 640px) {
  body { padding: 14px; }
  .media-grid { grid-template-columns: repeat(auto-fill, minmax(140px, 1fr)); gap: 6px; }
}
"""

ARCHIVE_JS = """\
(function() {
  var content = document.getElementById('content');
  var stats = document.getElementById('stats');
  var useThumbs = document.body.dataset.thumbs === '1';
  var allMedia = [];
  var filters = { year: 'all', medium: 'all', artist: 'all' };

  function esc(s) {
    return String(s).replace(/&/g, '&amp;').replace(/</g, '&lt;')
      .replace(/>/g, '&gt;').replace(/"/g, '&quot;');
  }

  function capitalizeWords(str) {
    return str.split(/[-_]/).map(function(w) {
      return w.charAt(0).toUpperCase() + w.slice(1);
    }).join(' ');
  }

  function plural(n, word) { return n + ' ' + word + (n === 1 ? '' : 's'); }

  function distinct(items, key) {
    var seen = {};
    items.forEach(function(i) { seen[i[key]] = true; });
    return Object.keys(seen);
  }

  function thumbFor(item) {
    if (!useThumbs) return item.path;
    return 'thumbs/' + item.year + '/' + item.filename + '.jpg';
  }

  function matches(item) {
    return (filters.year === 'all' || item.year === filters.year) &&
      (filters.medium === 'all' || item.medium === filters.medium) &&
      (filters.artist === 'all' || item.artistDisplay === filters.artist);
  }

  function setupLazyLoading() {
    var observer = new IntersectionObserver(function(entries, obs) {
      entries.forEach(function(entry) {
        if (!entry.isIntersecting) return;
        var img = entry.target;
        var original = img.parentNode.getAttribute('href');
        img.addEventListener('error', function() {
          if (img.getAttribute('src') !== original) img.src = original;
        }, { once: true });
        img.src = img.dataset.src;
        img.classList.remove('lazy');
        obs.unobserve(img);
      });
    }, { rootMargin: '{{ margin }}px' });
    content.querySelectorAll('img.lazy').forEach(function(img) { observer.observe(img); });
  }

  function render() {
    var filtered = allMedia.filter(matches);
    stats.textContent = [
      'Showing ' + plural(filtered.length, 'work'),
      plural(distinct(filtered, 'year').length, 'year'),
      plural(distinct(filtered, 'artistDisplay').length, 'artist'),
      plural(distinct(filtered, 'medium').length, 'medium')
    ].join(' \\u00b7 ');

    if (!filtered.length) {
      content.innerHTML = '<div class="empty-state">No media found for selected filters</div>';
      return;
    }
    var html = '<div class="media-grid">';
    filtered.forEach(function(item) {
      html += '<div class="media-item"><a href="' + esc(item.path) + '">' +
        '<img data-src="' + esc(thumbFor(item)) + '" alt="' + esc(item.artistDisplay + ' - ' + item.medium) + '" class="lazy"></a>' +
        '<div class="media-info"><h3>' + esc(item.artistDisplay) + '</h3>' +
        '<span class="medium">' + esc(capitalizeWords(item.medium)) + '</span>' +
        '<p class="meta">' + esc(item.year) + ' \\u00b7 ' + esc(item.filename) + '</p></div></div>';
    });
    content.innerHTML = html + '</div>';
    setupLazyLoading();
  }

  function wireButtons(selector, key) {
    document.querySelectorAll(selector).forEach(function(btn) {
      btn.addEventListener('click', function() {
        document.querySelectorAll(selector).forEach(function(b) { b.classList.remove('active'); });
        btn.classList.add('active');
        filters[key] = btn.dataset.value;
        render();
      });
    });
  }

  fetch('{{ data_path }}').then(function(resp) {
    if (!resp.ok) throw new Error('Archive data not found');
    return resp.json();
  }).then(function(data) {
    Object.keys(data).forEach(function(year) { allMedia = allMedia.concat(data[year]); });
    wireButtons('.year-filter', 'year');
    wireButtons('.medium-filter', 'medium');
    document.getElementById('artist-select').addEventListener('change', function(e) {
      filters.artist = e.target.value;
      render();
    });
    render();
  }).catch(function(err) {
    document.querySelector('.filters').style.display = 'none';
    stats.textContent = '';
    content.innerHTML = '<div class="error-state">{{ error_message }}</div>';
    console.error(err);
  });
})();
"""

INDEX_TEMPLATE = Template("""\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<link rel="stylesheet" href="assets/style.css">
</head>
<body data-thumbs="{{ '1' if thumbs else '0' }}">
<h1>{{ title }}</h1>
<div class="filters">
  <div class="filter-row"><span class="label">Year</span>
  {% for opt in controls.years %}<button class="year-filter{% if opt.active %} active{% endif %}" data-value="{{ opt.value }}">{{ opt.label }}</button>{% endfor %}
  </div>
  <div class="filter-row" id="medium-buttons"><span class="label">Medium</span>
  {% for opt in controls.media %}<button class="medium-filter{% if opt.active %} active{% endif %}" data-value="{{ opt.value }}">{{ opt.label }}</button>{% endfor %}
  </div>
  <div class="filter-row"><span class="label">Artist</span>
  <select id="artist-select">
  {% for opt in controls.artists %}<option value="{{ opt.value }}"{% if opt.active %} selected{% endif %}>{{ opt.label }}</option>{% endfor %}
  </select>
  </div>
</div>
<div id="stats">{{ view.status }}</div>
<div id="content">
{% if view.cells %}
<div class="media-grid">
{% for cell in view.cells %}<div class="media-item"><a href="{{ cell.href }}"><img data-src="{{ cell.image.src }}" alt="{{ cell.image.alt }}" class="lazy"></a><div class="media-info"><h3>{{ cell.artist }}</h3><span class="medium">{{ cell.medium }}</span><p class="meta">{{ cell.caption }}</p></div></div>
{% endfor %}
</div>
{% else %}
<div class="empty-state">{{ view.message }}</div>
{% endif %}
</div>
<script src="assets/archive.js"></script>
</body>
</html>
""")


def generate_html(browser: ArchiveBrowser, site_dir: Path, title: str, thumbs: bool):
    """Write index.html with the initial grid, plus the shared assets."""
    assets_dir = site_dir / "assets"
    assets_dir.mkdir(parents=True, exist_ok=True)
    (assets_dir / "style.css").write_text(SHARED_CSS, encoding="utf-8")
    # The script is plain JS, only the three settings are templated in
    js = Template(ARCHIVE_JS).render(
        data_path=DATA_PATH,
        margin=LAZY_MARGIN,
        error_message=LOAD_ERROR_MESSAGE,
    )
    (assets_dir / "archive.js").write_text(js, encoding="utf-8")
    print("  Wrote assets/style.css, assets/archive.js")

    index_html = INDEX_TEMPLATE.render(
        title=title,
        controls=browser.controls,
        view=browser.view,
        thumbs=thumbs,
    )
    (site_dir / "index.html").write_text(index_html, encoding="utf-8")
    print(f"  Wrote index.html ({len(browser.media)} works)")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_site(data_file, source_root: Path, site_dir: Path, thumbs: bool = True,
               title: str = "Archive", years=YEARS) -> int:
    site_dir.mkdir(parents=True, exist_ok=True)

    print("Step 1: Loading archive data...")
    browser = ArchiveBrowser(source=data_file, years=tuple(years))
    if isinstance(browser.init(), ErrorView):
        print(f"  Cannot build site: {data_file} could not be loaded", file=sys.stderr)
        return 1

    print("Step 2: Processing media (originals + thumbnails)...")
    with_thumbs = process_media(browser.media, source_root, site_dir, thumbs)
    if thumbs:
        # Fall back to the original where no thumbnail could be made
        browser.thumb = lambda r: thumb_path(r) if r.relative_path in with_thumbs else r.relative_path
        browser.refresh()

    save_archive_data(browser.archive, site_dir / DATA_PATH)

    print("Step 3: Generating HTML...")
    generate_html(browser, site_dir, title, thumbs)

    print(f"\nDone! Site written to {site_dir}/")
    print(f"Run: python3 -m http.server -d {site_dir} 8000")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Build the static archive browser.")
    parser.add_argument("--data", default=str(OUTPUT_FILE), help="Path or URL of archive-data.json")
    parser.add_argument("--root", default=".", type=Path, help="Folder that record paths are relative to")
    parser.add_argument("--site", default=str(SITE_DIR), type=Path, help="Output folder")
    parser.add_argument("--years", nargs="+", default=list(YEARS), help="Years shown as filter buttons")
    parser.add_argument("--title", default="Archive")
    parser.add_argument("--no-thumbs", action="store_true", help="Point the grid at the originals")
    args = parser.parse_args(argv)

    return build_site(args.data, args.root, args.site, thumbs=not args.no_thumbs,
                      title=args.title, years=args.years)


if __name__ == "__main__":
    raise SystemExit(main())
