"""loto.ro client.

Logs in to bilete.loto.ro with a persisted cookie session and scrapes draw
results and ticket history from server-rendered HTML (requests + BS4).
"""

from .client import LotoClient
from .config import Config
from .models import Extraction, Game, Ticket, TicketStatus

__all__ = ["Config", "Extraction", "Game", "LotoClient", "Ticket", "TicketStatus"]
