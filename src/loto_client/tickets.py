from __future__ import annotations

import copy
import logging
import math
import re
import urllib.parse
from dataclasses import replace
from typing import Optional

from bs4 import BeautifulSoup, Tag

from .errors import ExtractionError, LotoClientError, TransportError
from .models import Game, Ticket, TicketStatus
from .parsers import norm_text, tag_text
from .session import BASE_BILETE_URL, SessionManager


logger = logging.getLogger(__name__)


TICKETS_PER_PAGE = 6

# Card rows are identified by their (Romanian) label; first match wins.
TICKET_FIELD_LABELS: list[tuple[str, str]] = [
    ("ID Comandă", "order_id"),
    ("ID Bilet", "ticket_id"),
    ("Tragerea", "draw_date"),
    ("Stare Bilet", "status"),
]

TICKET_STATUS_LABELS: dict[str, TicketStatus] = {
    "Câștigător": TicketStatus.WON,
    "Necâștigător": TicketStatus.LOST,
}

TICKET_GAME_MARKERS: list[tuple[str, Game]] = [
    ("logo49", Game.LOTO_649),
    ("logo40", Game.LOTO_540),
    ("logo45", Game.JOKER),
]

PLAYED_PREFIX = "Jucat "

_TOTAL_RE = re.compile(r"of\s+(\d+)\s+results")


def game_from_image(src: str) -> Optional[Game]:
    for marker, game in TICKET_GAME_MARKERS:
        if marker in (src or ""):
            return game
    return None


def parse_ticket_status(label: str) -> TicketStatus:
    return TICKET_STATUS_LABELS.get(norm_text(label), TicketStatus.PENDING)


def parse_price(price: Optional[Tag]) -> str:
    """Rebuild a price from `24<sup>,50</sup> <em>ron</em>` as "24,50 RON"."""
    if price is None:
        return ""
    decimals = tag_text(price.find("sup"))
    clone = copy.copy(price)
    for child in clone.find_all(["sup", "em"]):
        child.decompose()
    integer = tag_text(clone)
    if not integer:
        return ""
    return f"{integer}{decimals} RON"


def parse_total_count(soup: BeautifulSoup) -> int:
    """Total ticket count from "Showing 1 to 6 of 81 results"; 0 when absent."""
    total = 0
    for p in soup.select("p.small.text-muted"):
        text = tag_text(p)
        if "results" not in text:
            continue
        m = _TOTAL_RE.search(text)
        if m:
            total = int(m.group(1))
    return total


def parse_ticket_card(card: Tag, base_url: str = BASE_BILETE_URL) -> Ticket:
    fields: dict[str, object] = {}

    items = card.select("li.list-group-item")
    if items:
        first = items[0]
        img = first.find("img")
        fields["game"] = game_from_image(img.get("src") or "") if img is not None else None
        fields["price"] = parse_price(first.select_one("span.price"))

    for li in items:
        text = tag_text(li)
        for label, attr in TICKET_FIELD_LABELS:
            if label not in text:
                continue
            if attr == "status":
                fields[attr] = parse_ticket_status(tag_text(li.select_one("span.badge")))
            else:
                fields[attr] = tag_text(li.find("span"))
            break

    link = card.select_one("a[href*='ticket/details']")
    href = (link.get("href") or "").strip() if link is not None else ""
    if href:
        fields["detail_url"] = urllib.parse.urljoin(base_url + "/", href)

    played = tag_text(card.select_one(".card-footer small"))
    if played.startswith(PLAYED_PREFIX):
        played = played[len(PLAYED_PREFIX):]
    fields["played_at"] = played.strip()

    return Ticket(**fields)


def parse_tickets_page(html: str, base_url: str = BASE_BILETE_URL) -> tuple[list[Ticket], int]:
    soup = BeautifulSoup(html or "", "lxml")
    total = parse_total_count(soup)
    tickets = [parse_ticket_card(card, base_url=base_url) for card in soup.select("div.ticket-preview")]
    return tickets, total


def parse_prize_from_html(html: str) -> str:
    """Prize amount from the TOTAL row of the ticket detail table footer."""
    soup = BeautifulSoup(html or "", "lxml")
    for row in soup.select("tfoot tr"):
        if "TOTAL" not in tag_text(row):
            continue
        for cell in row.find_all(["td", "th"]):
            text = tag_text(cell)
            if "RON" in text:
                return text
    return ""


class TicketExtractor:
    """Reads the authenticated ticket history, one page at a time."""

    def __init__(
        self,
        session: SessionManager,
        base_url: str = BASE_BILETE_URL,
        page_size: int = TICKETS_PER_PAGE,
    ) -> None:
        self.session = session
        self.base_url = base_url
        self.page_size = page_size

    def page_url(self, page: int) -> str:
        return f"{self.base_url}/history/ticket?page_no={page}"

    def get_page(self, page: int) -> tuple[list[Ticket], int]:
        url = self.page_url(page)
        resp = self.session.get(url)
        if not resp.ok:
            raise ExtractionError(f"unexpected status code {resp.status_code} when fetching tickets page {page}")
        tickets, total = parse_tickets_page(resp.text, base_url=self.base_url)
        logger.debug("Tickets page %d: %d ticket(s), total=%d", page, len(tickets), total)
        return tickets, total

    def get_all(self) -> list[Ticket]:
        first, total = self.get_page(1)
        tickets = list(first)

        if total > 0 and first:
            page_count = math.ceil(total / self.page_size)
            for page in range(2, page_count + 1):
                batch, _ = self.get_page(page)
                if not batch:
                    # Pagination drifted (e.g. fewer tickets than announced).
                    logger.info("Tickets page %d is empty; stopping at %d ticket(s)", page, len(tickets))
                    break
                tickets.extend(batch)

        logger.info("Fetched %d ticket(s) (announced total %d)", len(tickets), total)
        return self.enrich_prizes(tickets)

    def enrich_prizes(self, tickets: list[Ticket]) -> list[Ticket]:
        out = []
        for t in tickets:
            if t.status == TicketStatus.WON and t.detail_url:
                t = replace(t, prize=self.fetch_prize(t.detail_url))
            out.append(t)
        return out

    def fetch_prize(self, detail_url: str) -> str:
        """Best-effort: any failure leaves the prize empty."""
        try:
            resp = self.session.get(detail_url)
            if not resp.ok:
                raise ExtractionError(f"unexpected status code {resp.status_code}")
            return parse_prize_from_html(resp.text)
        except (TransportError, LotoClientError) as exc:
            logger.warning("Prize lookup failed for %s (%s)", detail_url, exc)
            return ""
