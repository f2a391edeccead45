# mealcart/application/export_formatter.py
from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional, Sequence

from mealcart.application.normalize import collapse_ws, normalize_name
from mealcart.domain.entities import UNASSIGNED

DEFAULT_CHECKLIST_STORE = "Trader Joe's"


def format_qty(qty: Any) -> str:
    if qty is None or isinstance(qty, bool):
        return ""
    try:
        value = float(qty)
    except (TypeError, ValueError):
        return ""
    if not math.isfinite(value):
        return ""
    # half-up at the cent, like Math.round(qty * 100) / 100
    rounded = math.floor(value * 100 + 0.5) / 100
    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def display_name(name: Any) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in str(name or "").split(" ") if w)


def format_item(item: Any) -> str:
    return collapse_ws(f"{format_qty(item.qty)} {item.unit} {display_name(item.name)}")


def _is_cart_ready(store: str, cart_ready: Optional[Iterable[str]]) -> bool:
    if cart_ready is None:
        return normalize_name(store) != normalize_name(UNASSIGNED)
    return normalize_name(store) in {normalize_name(s) for s in cart_ready}


def build_store_export(
    store: str,
    items: Sequence[Any],
    checklist_store: str = DEFAULT_CHECKLIST_STORE,
    cart_ready: Optional[Iterable[str]] = None,
) -> str:
    """
    Copy/paste text for one store:
      - the in-store checklist store gets "- [ ] " lines
      - cart-ready stores (default: every named store) get "- " lines
      - anything else (Unassigned included) gets a generic list
    Empty item lists render as "".
    """
    if not items:
        return ""

    if normalize_name(store) == normalize_name(checklist_store):
        lines = [f"{store} In-Store Checklist", ""]
        lines.extend(f"- [ ] {format_item(i)}" for i in items)
    elif _is_cart_ready(store, cart_ready):
        lines = [f"{store} Cart-Ready List", ""]
        lines.extend(f"- {format_item(i)}" for i in items)
    else:
        lines = [f"{store} Grocery Items", ""]
        lines.extend(f"- {format_item(i)}" for i in items)
    return "\n".join(lines)


def build_stores_export(
    grouped: Mapping[str, Sequence[Any]],
    stores: Sequence[str],
    checklist_store: str = DEFAULT_CHECKLIST_STORE,
    cart_ready: Optional[Iterable[str]] = None,
) -> str:
    cart_ready = list(cart_ready) if cart_ready is not None else None
    sections = [
        build_store_export(s, grouped.get(s) or [], checklist_store=checklist_store, cart_ready=cart_ready)
        for s in stores
    ]
    return "\n\n".join(s for s in sections if s)


# ----------------------------
# Print document
# ----------------------------
def escape_html(value: Any) -> str:
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


_PRINT_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Meal Planner Checklist</title>
    <style>
      body {{
        font-family: "Manrope", "Avenir Next", "Trebuchet MS", sans-serif;
        margin: 24px;
        color: #17271f;
      }}
      h1 {{ margin: 0 0 12px; font-size: 24px; }}
      h2 {{
        margin: 20px 0 8px;
        font-size: 18px;
        border-bottom: 1px solid #d9d6c9;
        padding-bottom: 4px;
      }}
      ul {{ list-style: none; padding: 0; margin: 0; }}
      li {{ display: grid; grid-template-columns: 22px 1fr; gap: 8px; margin: 5px 0; }}
      .box {{ font-size: 16px; line-height: 1.2; }}
      @media print {{
        body {{ margin: 12px; }}
      }}
    </style>
  </head>
  <body>
    <h1>Grocery Checklist</h1>
    {sections}
  </body>
</html>"""


def build_print_checklist_html(grouped: Mapping[str, Sequence[Any]], stores: Sequence[str]) -> str:
    sections = []
    for store in stores:
        items = grouped.get(store) or []
        if not items:
            continue
        lis = "".join(
            f'<li><span class="box">□</span><span>{escape_html(format_item(i))}</span></li>' for i in items
        )
        sections.append(f"<section><h2>{escape_html(store)}</h2><ul>{lis}</ul></section>")

    if not sections:
        return ""
    return _PRINT_TEMPLATE.format(sections="".join(sections))
