# mealcart/application/normalize.py
from __future__ import annotations

import re
import unicodedata
from typing import Any, Dict, Tuple

_WS = re.compile(r"\s+")

_UNIT_SYNONYMS: Dict[str, str] = {
    "tablespoons": "tbsp",
    "tablespoon": "tbsp",
    "tbsps": "tbsp",
    "tbs": "tbsp",
    "tsp": "tsp",
    "tsps": "tsp",
    "teaspoons": "tsp",
    "teaspoon": "tsp",
    "ounces": "oz",
    "ounce": "oz",
    "pounds": "lb",
    "pound": "lb",
    "lbs": "lb",
    "grams": "g",
    "gram": "g",
    "cups": "cup",
}


def normalize_unit(unit: Any) -> str:
    """Canonical unit: synonym table, else lowercased text, else "each"."""
    u = str(unit or "").strip().lower()
    if not u:
        return "each"
    return _UNIT_SYNONYMS.get(u, u)


def normalize_name(value: Any) -> str:
    return str(value or "").strip().lower()


def collapse_ws(text: str) -> str:
    return _WS.sub(" ", text or "").strip()


def collation_key(text: str) -> Tuple[str, str]:
    """Case/accent-insensitive sort key with the raw text as a stable tie-break."""
    folded = unicodedata.normalize("NFKD", text or "")
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return folded.casefold(), text or ""
