from __future__ import annotations

import requests


# Network/TLS failures are surfaced as the transport raised them.
TransportError = requests.RequestException


class LotoClientError(Exception):
    """Base class for errors raised by this package."""


class BlockedRegionError(LotoClientError):
    def __init__(self, url: str) -> None:
        super().__init__(
            "loto.ro requires a Romanian IP address. Please connect from Romania or use a VPN"
        )
        self.url = url


class ConfigError(LotoClientError):
    pass


class AuthenticationError(LotoClientError):
    pass


class CredentialsMissingError(AuthenticationError):
    def __init__(self, message: str = "credentials missing: please set email and password in config file") -> None:
        super().__init__(message)


class CSRFTokenMissingError(AuthenticationError):
    def __init__(self, message: str = "CSRF token not found on login page") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "login failed: invalid credentials or unexpected response") -> None:
        super().__init__(message)


class ExtractionError(LotoClientError):
    pass


class SectionNotFoundError(ExtractionError):
    pass
