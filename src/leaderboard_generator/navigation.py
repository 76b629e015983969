"""Keep the navigation menu of every site page in sync with the leaderboards.

Each site page embeds the same ``<nav class="nav">`` fragment. Adding a
leaderboard inserts (or refreshes) one ``<li>`` link in every page so the new
board is reachable from anywhere on the site. Running the sync twice for the
same configuration leaves exactly one link with the leaderboard's title.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from leaderboard_generator.exceptions import NavigationError

logger = logging.getLogger(__name__)

# Overview, Confidence Bounds, Algorithmic Methods, Classical Verification
BASELINE_LINK_COUNT = 4

NAV_PATTERN = re.compile(r'<nav class="nav">[\s\S]*?<ul class="nav-links">([\s\S]*?)</ul>[\s\S]*?</nav>')
LINK_PATTERN = re.compile(r'<li><a href="([^"]*)"([^>]*)>([^<]*)</a></li>')

LINK_INDENT = "\n                "
LIST_CLOSE_INDENT = "\n            "
ACTIVE_ATTRIBUTES = ' class="active"'


@dataclass
class NavLink:
    """One ``<li><a>`` entry of the navigation list."""

    href: str
    attributes: str
    text: str

    def to_html(self) -> str:
        return f'<li><a href="{self.href}"{self.attributes}>{self.text}</a></li>'


@dataclass
class NavigationSyncReport:
    """Outcome of one navigation sync across the site."""

    updated: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        messages = [f"No navigation section found in {path}" for path in self.skipped]
        messages.extend(f"Failed to update navigation in {path}" for path in self.failed)
        return messages

    def summary(self) -> str:
        return (
            f"{len(self.updated)} updated, {len(self.unchanged)} unchanged, "
            f"{len(self.skipped)} skipped, {len(self.failed)} failed"
        )


def insertion_index(config: Mapping[str, Any], link_count: int) -> int:
    """Index at which a new leaderboard link is inserted.

    ``navigation.position`` counts from the first link after the baseline
    site links. Without a position the link is appended.

    >>> insertion_index({"navigation": {"position": 1}}, 5)
    5
    >>> insertion_index({}, 5)
    5
    >>> insertion_index({"navigation": {"position": 0}}, 7)
    4
    """
    position = (config.get("navigation") or {}).get("position")
    if position is None:
        return link_count
    return position + BASELINE_LINK_COUNT


def find_html_files(base_dir: Union[str, Path], leaderboard_dir: str = "leaderboard") -> List[Path]:
    """Site pages to update: root ``*.html`` first, then leaderboard index pages."""
    base = Path(base_dir)
    root_files = sorted(p for p in base.glob("*.html") if p.is_file())
    board_root = base / leaderboard_dir
    board_files = sorted(board_root.glob("**/index.html")) if board_root.is_dir() else []
    return root_files + board_files


def relative_leaderboard_href(
    relative_path: Union[str, Path], leaderboard_id: str, leaderboard_dir: str = "leaderboard"
) -> str:
    """Href from a site page to the leaderboard ``leaderboard_id``.

    Parameters
    ----------
    relative_path : str or Path
        Page location relative to the site root.
    leaderboard_id : str
        Target leaderboard id.
    leaderboard_dir : str, default="leaderboard"
        Directory under the site root holding one folder per leaderboard.

    Examples
    --------
    >>> relative_leaderboard_href("index.html", "qc")
    'leaderboard/qc/'
    >>> relative_leaderboard_href("leaderboard/index.html", "qc")
    'qc/'
    >>> relative_leaderboard_href("leaderboard/peak_circuits/index.html", "qc")
    '../qc/'
    >>> relative_leaderboard_href("boards/a/b/index.html", "qc", "boards")
    '../../qc/'
    """
    parts = Path(relative_path).parts
    board_parts = Path(leaderboard_dir).parts
    if parts[: len(board_parts)] == board_parts and len(parts) > len(board_parts):
        # folders between the leaderboard dir and the page itself
        depth = len(parts) - len(board_parts) - 1
        return "../" * depth + f"{leaderboard_id}/"
    return f"{Path(leaderboard_dir).as_posix()}/{leaderboard_id}/"


def parse_links(nav_links_html: str) -> List[NavLink]:
    return [NavLink(href, attributes, text) for href, attributes, text in LINK_PATTERN.findall(nav_links_html)]


def update_navigation_html(html: str, config: Mapping[str, Any], href: str, active: bool) -> Optional[str]:
    """Return ``html`` with the leaderboard link inserted or refreshed.

    Returns ``None`` when the document has no navigation section. A link
    whose text equals the title is replaced where it stands; otherwise the new
    link goes to :func:`insertion_index`.
    """
    match = NAV_PATTERN.search(html)
    if match is None:
        return None

    links = parse_links(match.group(1))
    new_link = NavLink(href=href, attributes=ACTIVE_ATTRIBUTES if active else "", text=config["title"])

    existing = next((i for i, link in enumerate(links) if link.text == config["title"]), None)
    if existing is not None:
        links[existing] = new_link
    else:
        links.insert(insertion_index(config, len(links)), new_link)

    nav_links = LINK_INDENT + LINK_INDENT.join(link.to_html() for link in links) + LIST_CLOSE_INDENT
    start, end = match.span(1)
    return html[:start] + nav_links + html[end:]


def sync_navigation(
    config: Mapping[str, Any],
    base_dir: Union[str, Path],
    leaderboard_dir: str = "leaderboard",
) -> NavigationSyncReport:
    """Insert or refresh the leaderboard link in every site page.

    Parameters
    ----------
    config : Mapping[str, Any]
        Validated leaderboard configuration.
    base_dir : str or Path
        Site root.
    leaderboard_dir : str, default="leaderboard"
        Directory under the site root holding one folder per leaderboard.

    Returns
    -------
    NavigationSyncReport
        Which files were updated, left unchanged, skipped or failed.

    Raises
    ------
    NavigationError
        If ``base_dir`` does not exist. Failures on individual files are
        logged and recorded in the report instead.
    """
    base = Path(base_dir)
    if not base.is_dir():
        raise NavigationError(f"Site root not found: {base}")

    report = NavigationSyncReport()
    html_files = find_html_files(base, leaderboard_dir)
    logger.info("Updating navigation links in %d HTML files", len(html_files))

    own_page = Path(leaderboard_dir) / config["id"] / "index.html"
    for html_file in html_files:
        relative = html_file.relative_to(base)
        try:
            with open(html_file, "r", encoding="utf-8") as f:
                html = f.read()

            is_own_page = relative == own_page
            href = "./" if is_own_page else relative_leaderboard_href(relative, config["id"], leaderboard_dir)
            updated = update_navigation_html(html, config, href, active=is_own_page)
            if updated is None:
                logger.warning("No navigation section found in %s", relative)
                report.skipped.append(relative)
                continue
            if updated == html:
                report.unchanged.append(relative)
                continue

            with open(html_file, "w", encoding="utf-8") as f:
                f.write(updated)
            logger.info("Updated navigation in: %s", relative)
            report.updated.append(relative)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error updating navigation in %s: %s", relative, e)
            report.failed.append(relative)

    logger.info("Navigation sync finished: %s", report.summary())
    return report
