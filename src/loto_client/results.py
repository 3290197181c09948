from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

from .errors import ExtractionError, SectionNotFoundError
from .models import PAIRED_GAMES, Extraction, Game
from .parsers import class_string, digits_of, is_draw_date, is_spaced_digits, norm_text, parse_int
from .session import BASE_LOTO_URL, SessionManager


logger = logging.getLogger(__name__)


RESULTS_SECTION_CLASS = "vc_custom_1643109784313"
COLUMN_CLASS = "vc_col-sm-4"
HIDDEN_CLASS = "ascuns"

# Logo file name fragments, matched against the lower-cased image URL.
GAME_LOGO_MARKERS: list[tuple[tuple[str, ...], Game]] = [
    (("loto_6_49", "logo649"), Game.LOTO_649),
    (("loto_5_40", "logo540"), Game.LOTO_540),
    (("joker",), Game.JOKER),
]


def identify_game(column: Tag) -> Optional[Game]:
    for img in column.find_all("img"):
        src = (img.get("data-src") or img.get("src") or "").lower()
        for markers, game in GAME_LOGO_MARKERS:
            if any(m in src for m in markers):
                return game
    return None


def is_hidden(table: Tag) -> bool:
    return any(HIDDEN_CLASS in class_string(parent) for parent in table.parents if isinstance(parent, Tag))


def table_cells(table: Tag) -> list[str]:
    body = table.find("tbody")
    cells = (body or table).find_all("td")
    return [norm_text(td.get_text(" ")) for td in cells]


def _top_level_columns(container: Tag) -> list[Tag]:
    cols = container.select(f"div.{COLUMN_CLASS}")
    ids = {id(c) for c in cols}
    return [c for c in cols if not any(id(p) in ids for p in c.parents)]


def parse_column(column: Tag) -> list[Extraction]:
    game = identify_game(column)
    if game is None:
        return []

    numbers: list[int] = []
    date = ""
    spaced = ""
    for table in column.find_all("table"):
        if is_hidden(table):
            continue
        cells = table_cells(table)
        if not cells:
            continue

        if len(cells) == 1:
            val = cells[0]
            if is_draw_date(val):
                date = date or val
            elif is_spaced_digits(val):
                spaced = spaced or val
            continue

        # Only the first visible number row is the main draw.
        if not numbers:
            numbers = [n for n in (parse_int(c) for c in cells) if n is not None]

    out: list[Extraction] = []
    if numbers:
        if game == Game.JOKER and len(numbers) == 6:
            out.append(Extraction(game=game, date=date, numbers=tuple(numbers[:5]), bonus=tuple(numbers[5:])))
        else:
            out.append(Extraction(game=game, date=date, numbers=tuple(numbers)))

    paired = PAIRED_GAMES.get(game)
    if spaced and paired is not None:
        # One ball per digit: "5 3 8" is three balls, not the number 538.
        out.append(Extraction(game=paired, date=date, numbers=tuple(digits_of(spaced))))
    return out


def parse_results_from_html(html: str) -> list[Extraction]:
    """Parse the homepage results row.

    The row holds three columns (6/49 + Noroc, 5/40 + Super Noroc, Joker).
    Each column renders the draw numbers, the draw date and the paired game's
    digits as separate small tables; the previous draw is rendered too but
    wrapped in a hidden container.
    """
    soup = BeautifulSoup(html or "", "lxml")
    container = soup.select_one(f"div[class*='{RESULTS_SECTION_CLASS}']")
    if container is None:
        raise SectionNotFoundError("results section not found on page")

    extractions: list[Extraction] = []
    for column in _top_level_columns(container):
        extractions.extend(parse_column(column))
    return extractions


class ResultsExtractor:
    def __init__(self, session: SessionManager, url: str = BASE_LOTO_URL) -> None:
        self.session = session
        self.url = url

    def get_results(self) -> list[Extraction]:
        page = self.session.get(self.url)
        if not page.ok:
            raise ExtractionError(f"unexpected status code {page.status_code} when fetching results")
        extractions = parse_results_from_html(page.text)
        logger.info("Parsed %d extraction(s) from %s", len(extractions), self.url)
        return extractions
