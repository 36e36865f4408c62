"""Best-effort salary parsing for scraped rate/compensation snippets."""
from __future__ import annotations

import re
from typing import Any

from jobhound.models import Salary

_HOURLY_RE = re.compile(r"([$€£])?\s*([\d,]+(?:\.\d+)?)\s*(k)?\s*/\s*(?:hr|hour)\b", re.IGNORECASE)
_RANGE_RE = re.compile(
    r"([$€£])?\s*([\d,]+(?:\.\d+)?)\s*(k)?\s*[-–—]\s*([$€£])?\s*([\d,]+(?:\.\d+)?)\s*(k)?",
    re.IGNORECASE,
)

_PERIOD_PATTERNS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\b(?:hours?|hourly|hr)\b", re.IGNORECASE), "hourly"),
    (re.compile(r"\b(?:days?|daily)\b", re.IGNORECASE), "daily"),
    (re.compile(r"\b(?:weeks?|weekly)\b", re.IGNORECASE), "weekly"),
    (re.compile(r"\b(?:months?|monthly)\b", re.IGNORECASE), "monthly"),
)


def _amount(digits: str, k_suffix: str | None) -> float:
    value = float(digits.replace(",", ""))
    if k_suffix:
        value *= 1000
    return int(value) if value.is_integer() else value


def _period_of(text: str, default: str) -> str:
    for pattern, period in _PERIOD_PATTERNS:
        if pattern.search(text):
            return period
    return default


def parse_salary(text: str | None) -> Salary | None:
    """Parse "$45/hr", "$80,000 - $95,000" or "$80k-$95k" style snippets.

    Returns ``None`` for empty input and a text-only ``Salary`` when no
    pattern matches.
    """
    if not text or not text.strip():
        return None
    text = " ".join(text.split())

    m = _HOURLY_RE.search(text)
    if m:
        return Salary(
            min=_amount(m.group(2), m.group(3)),
            currency=m.group(1) or "$",
            period="hourly",
            text=text,
        )

    m = _RANGE_RE.search(text)
    if m:
        return Salary(
            min=_amount(m.group(2), m.group(3)),
            max=_amount(m.group(5), m.group(6)),
            currency=m.group(1) or m.group(4) or "$",
            period=_period_of(text, "yearly"),
            text=text,
        )

    return Salary(text=text)


def parse_budget(budget: dict[str, Any] | None, currency_sign: str = "$", hourly: bool = False) -> Salary | None:
    """Salary from a JSON budget block with numeric ``minimum``/``maximum``."""
    budget = budget or {}
    low = budget.get("minimum")
    high = budget.get("maximum")
    low = low if isinstance(low, (int, float)) and not isinstance(low, bool) else None
    high = high if isinstance(high, (int, float)) and not isinstance(high, bool) else None
    if not low and not high:
        return None
    text = " - ".join(f"{currency_sign}{v:,.0f}" for v in (low, high) if v is not None)
    return Salary(
        min=low,
        max=high,
        currency=currency_sign,
        period="hourly" if hourly else None,
        text=text,
    )
