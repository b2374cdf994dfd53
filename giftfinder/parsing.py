# giftfinder/parsing.py
#
# Model output is asked to be a JSON array but is not guaranteed to be one.
# The parser accepts a few JSON shapes and falls back to "###Suggestion"
# blocks with Gift:/Reason:/Price: lines. Bad items are dropped, never raised.

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .config import MAX_SUGGESTIONS, SUGGESTION_MARKER
from .models import GiftSuggestion
from .slog import log_event

NO_REASON = "No specific reason provided."

_FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)

_LABELS = ("gift:", "reason:", "price:")


@dataclass
class StructuredArray:
    items: List[Any]


@dataclass
class StructuredWrapped:
    items: List[Any]


@dataclass
class SingleObject:
    item: dict


@dataclass
class Unparseable:
    reason: str = ""


ParsedPayload = Union[StructuredArray, StructuredWrapped, SingleObject, Unparseable]


def strip_code_fence(text: str) -> str:
    s = (text or "").strip()
    m = _FENCE_RE.match(s)
    if m and m.group(2):
        return m.group(2).strip()
    return s


def classify_payload(text: str) -> ParsedPayload:
    try:
        data = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        # Deeply nested arrays exhaust the decoder stack
        return Unparseable(reason=f"{type(e).__name__}: {e}")

    if isinstance(data, list):
        return StructuredArray(items=data)
    if isinstance(data, dict):
        if isinstance(data.get("suggestions"), list):
            return StructuredWrapped(items=data["suggestions"])
        if isinstance(data.get("name"), str) and isinstance(data.get("reason"), str):
            return SingleObject(item=data)
    return Unparseable(reason=f"unexpected JSON shape: {type(data).__name__}")


def _candidate_items(payload: ParsedPayload) -> List[Any]:
    if isinstance(payload, (StructuredArray, StructuredWrapped)):
        return payload.items
    if isinstance(payload, SingleObject):
        return [payload.item]
    return []


def suggestions_from_payload(payload: ParsedPayload) -> List[GiftSuggestion]:
    out: List[GiftSuggestion] = []
    for it in _candidate_items(payload):
        if not isinstance(it, dict):
            continue
        name = it.get("name")
        reason = it.get("reason")
        if not isinstance(name, str) or not isinstance(reason, str):
            continue
        price = it.get("price")
        out.append(
            GiftSuggestion(
                name=name,
                reason=reason,
                price=price if isinstance(price, str) else None,
            )
        )
    return out


@dataclass
class _Block:
    name: Optional[str] = None
    reason: Optional[str] = None
    price: Optional[str] = None
    seen: set = field(default_factory=set)


def _scan_block(block: str) -> _Block:
    b = _Block()
    for line in block.strip().split("\n"):
        s = line.strip()
        low = s.lower()
        for label in _LABELS:
            if not low.startswith(label) or label in b.seen:
                continue
            b.seen.add(label)
            value = s[len(label):].strip()
            if label == "gift:":
                b.name = value
            elif label == "reason:":
                b.reason = value
            else:
                b.price = value
            break
    return b


def parse_marker_blocks(text: str, marker: str = SUGGESTION_MARKER) -> List[GiftSuggestion]:
    """Fallback: one suggestion per marker block that names a gift."""
    out: List[GiftSuggestion] = []
    for block in (text or "").split(marker)[1:]:
        b = _scan_block(block)
        if not b.name:
            continue
        out.append(
            GiftSuggestion(
                name=b.name,
                reason=b.reason or NO_REASON,
                price=b.price or None,
            )
        )
    return out


def parse_suggestions(text: str, limit: int = MAX_SUGGESTIONS) -> List[GiftSuggestion]:
    payload = classify_payload(strip_code_fence(text))
    suggestions = suggestions_from_payload(payload)
    if suggestions:
        return suggestions[:limit]

    log_event(
        "parse.fallback",
        level=logging.DEBUG,
        payload=type(payload).__name__,
        reason=getattr(payload, "reason", ""),
    )
    return parse_marker_blocks(text)[:limit]
