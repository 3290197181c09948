from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence


class Game(str, Enum):
    LOTO_649 = "Loto 6/49"
    LOTO_540 = "Loto 5/40"
    JOKER = "Joker"
    NOROC = "Noroc"
    SUPER_NOROC = "Super Noroc"

    def __str__(self) -> str:
        return self.value


class TicketStatus(str, Enum):
    UNKNOWN = "Unknown"
    PENDING = "Pending"
    WON = "Won"
    LOST = "Lost"

    def __str__(self) -> str:
        return self.value


# Games drawn together with a main game, published as a spaced-digit number.
PAIRED_GAMES: dict[Game, Game] = {
    Game.LOTO_649: Game.NOROC,
    Game.LOTO_540: Game.SUPER_NOROC,
}


@dataclass(frozen=True)
class Extraction:
    game: Game
    date: str
    numbers: Sequence[int] = field(default_factory=tuple)
    bonus: Sequence[int] = field(default_factory=tuple)


@dataclass(frozen=True)
class Ticket:
    order_id: str = ""
    ticket_id: str = ""
    game: Optional[Game] = None
    price: str = ""  # e.g. "24,50 RON"
    draw_date: str = ""  # e.g. "15.02.2026"
    status: TicketStatus = TicketStatus.UNKNOWN
    played_at: str = ""  # e.g. "Jo 12 feb 2026, Ora 18:58"
    detail_url: str = ""
    prize: str = ""
