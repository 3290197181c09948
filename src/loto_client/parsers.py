from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from bs4 import Tag
from dateutil import parser as dateparser


_WS = re.compile(r"\s+")
_INT = re.compile(r"[0-9]+")
_DRAW_DATE = re.compile(r"[0-9]{2}[-.][0-9]{2}[-.][0-9]{4}")
_SPACED_DIGITS = re.compile(r"[0-9\s]+")
_CURRENCY = re.compile(r"\s*ron\s*", re.IGNORECASE)


def norm_text(s: str) -> str:
    return _WS.sub(" ", (s or "").strip())


def tag_text(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return norm_text(tag.get_text(" "))


def class_string(tag: Tag) -> str:
    cls = tag.get("class") or []
    if isinstance(cls, str):
        return cls
    return " ".join(cls)


def parse_int(text: str) -> Optional[int]:
    t = (text or "").strip()
    if not _INT.fullmatch(t):
        return None
    return int(t)


def is_draw_date(text: str) -> bool:
    """DD-MM-YYYY or DD.MM.YYYY, exactly 10 characters."""
    return len(text) == 10 and _DRAW_DATE.fullmatch(text) is not None


def is_spaced_digits(text: str) -> bool:
    """Single digits separated by whitespace, e.g. "5 3 8 6 5 3 5"."""
    if len(text) < 3 or not _SPACED_DIGITS.fullmatch(text):
        return False
    return any(ch.isspace() for ch in text)


def digits_of(text: str) -> list[int]:
    return [int(ch) for ch in text if "0" <= ch <= "9"]


def parse_amount(text: Optional[str]) -> Optional[float]:
    """Parse a RON amount such as "1.234,50 RON" into 1234.5."""
    if not text:
        return None
    t = (
        _CURRENCY.sub("", text)
        .replace(" ", "")
        .replace(".", "")
        .replace(",", ".")
        .strip()
    )
    try:
        return float(t)
    except ValueError:
        return None


def parse_datetime_loose(text: str) -> Optional[datetime]:
    if not text:
        return None
    try:
        return dateparser.parse(text, dayfirst=True, fuzzy=True)
    except (ValueError, OverflowError):
        return None
