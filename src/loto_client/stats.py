from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import pandas as pd

from .models import Ticket, TicketStatus
from .parsers import parse_amount, parse_datetime_loose


@dataclass(frozen=True)
class GameStats:
    game: str
    tickets: int
    spent: float
    won: int
    won_amount: float


@dataclass(frozen=True)
class TicketStats:
    total_tickets: int = 0
    total_spent: float = 0.0
    total_won: float = 0.0
    net_result: float = 0.0
    avg_price: float = 0.0
    won_count: int = 0
    lost_count: int = 0
    pending_count: int = 0
    win_rate: float = 0.0  # percent of decided (won + lost) tickets
    first_draw: Optional[str] = None
    last_draw: Optional[str] = None
    by_game: Sequence[GameStats] = field(default_factory=tuple)


def _ticket_row(t: Ticket) -> dict:
    won = t.status == TicketStatus.WON
    return {
        "game": t.game.value if t.game is not None else "Unknown",
        "price": parse_amount(t.price) or 0.0,
        "status": t.status.value,
        "won": won,
        "prize": (parse_amount(t.prize) or 0.0) if won else 0.0,
        "draw_at": parse_datetime_loose(t.draw_date),
        "draw_date": t.draw_date,
    }


def compute_stats(tickets: Iterable[Ticket]) -> TicketStats:
    rows = [_ticket_row(t) for t in tickets]
    if not rows:
        return TicketStats()

    df = pd.DataFrame(rows)
    total = len(df)
    spent = float(df["price"].sum())
    won_amount = float(df["prize"].sum())
    counts = df["status"].value_counts()
    won = int(counts.get(TicketStatus.WON.value, 0))
    lost = int(counts.get(TicketStatus.LOST.value, 0))
    pending = int(counts.get(TicketStatus.PENDING.value, 0))
    decided = won + lost

    first_draw = last_draw = None
    dated = df.dropna(subset=["draw_at"])
    if not dated.empty:
        draw_at = pd.to_datetime(dated["draw_at"])
        first_draw = str(dated.loc[draw_at.idxmin(), "draw_date"])
        last_draw = str(dated.loc[draw_at.idxmax(), "draw_date"])

    grouped = df.groupby("game", sort=False).agg(
        tickets=("price", "size"),
        spent=("price", "sum"),
        won=("won", "sum"),
        won_amount=("prize", "sum"),
    )
    by_game = tuple(
        GameStats(
            game=str(game),
            tickets=int(row["tickets"]),
            spent=float(row["spent"]),
            won=int(row["won"]),
            won_amount=float(row["won_amount"]),
        )
        for game, row in grouped.iterrows()
    )

    return TicketStats(
        total_tickets=total,
        total_spent=spent,
        total_won=won_amount,
        net_result=won_amount - spent,
        avg_price=spent / total,
        won_count=won,
        lost_count=lost,
        pending_count=pending,
        win_rate=(won / decided * 100.0) if decided else 0.0,
        first_draw=first_draw,
        last_draw=last_draw,
        by_game=by_game,
    )
