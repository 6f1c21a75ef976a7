"""Deterministic normalization — pure Python, no AI.

Normalizes identity values coming from API bodies and inbound email:
  - Emails: "  Sales@Acme.COM " → "sales@acme.com"
  - Category tags: ["Software", " Software ", "Other"] → ["Software", "Other"]
  - Search terms → escaped SQL LIKE patterns

Return None for values that normalize to nothing.
"""

import re

from ..constants import VENDOR_CATEGORIES

# Dot-separated labels; no nested quantifiers so non-matches fail in linear time
EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,3}$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")


def normalize_email(raw: str | None) -> str | None:
    if raw is None:
        return None
    s = str(raw).strip().lower()
    return s or None


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_RE.match(value))


def normalize_category(raw: str) -> str | None:
    """Return the trimmed tag, or None if it is not a known category."""
    s = str(raw).strip()
    return s if s in VENDOR_CATEGORIES else None


def dedupe(values: list) -> list:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped (escape char '\\')."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
