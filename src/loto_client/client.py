from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from .auth import AuthController
from .config import Config, get_config_dir
from .cookies import COOKIES_FILE_NAME, CookieStore
from .models import Extraction, Ticket
from .results import ResultsExtractor
from .session import SessionManager
from .tickets import TicketExtractor


logger = logging.getLogger(__name__)


class LotoClient:
    """Client for www.loto.ro results and the bilete.loto.ro ticket history.

    All requests are sequential and go through one SessionManager, so the
    instance must not be shared between threads.
    """

    def __init__(
        self,
        config: Config,
        cookies_path: Optional[Path] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = SessionManager(user_agent=config.user_agent, http=http)
        self.cookies = CookieStore(
            path=cookies_path or (get_config_dir() / COOKIES_FILE_NAME),
            session=self.session,
        )
        self.auth = AuthController(self.session, self.cookies, config)
        self.results = ResultsExtractor(self.session)
        self.tickets = TicketExtractor(self.session)

    def login(self) -> None:
        self.auth.login()

    def logout(self) -> None:
        self.auth.logout()

    def is_authenticated(self) -> bool:
        return self.auth.probe()

    def get_results(self) -> list[Extraction]:
        return self.results.get_results()

    def get_tickets(self, page: int) -> tuple[list[Ticket], int]:
        return self.tickets.get_page(page)

    def get_all_tickets(self) -> list[Ticket]:
        return self.tickets.get_all()
