"""Action block extraction from generated assistant text.

Two marker grammars are recognized, in this order:

- closed: ``[ACTION: KIND] payload [/ACTION]``
- bare:   ``[ACTION: KIND]`` followed directly by a ``{...}`` payload with no
  close marker (the generator regularly forgets it)

Each grammar match claims its character span. The bare pass skips any marker
inside a span the closed pass already claimed, so one payload is never emitted
twice. Actions are returned in the order their blocks appear in the text.
"""

import logging
import re
from typing import NamedTuple

from pydantic import ValidationError

from plan_editor.actions.decoder import DEFAULT_SALVAGE_TIME, DecodeFailure, decode
from plan_editor.models.actions import Action, ActionKind, parse_action
from plan_editor.utils.metrics import metrics

logger = logging.getLogger(__name__)

_OPEN_MARKER_RE = re.compile(r"\[ACTION:\s*([\w-]+)\s*\]", re.IGNORECASE)
_CLOSED_BLOCK_RE = re.compile(
    r"\[ACTION:\s*([\w-]+)\s*\]\s*((?:(?!\[ACTION:).)*?)\s*\[/ACTION\]",
    re.IGNORECASE | re.DOTALL,
)
_ORPHAN_CLOSE_RE = re.compile(r"\[/ACTION\]", re.IGNORECASE)
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_EXTRA_BLANK_LINES_RE = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+\n")

# Fixed label -> variant lookup; anything else yields no action.
ACTION_KINDS: dict[str, ActionKind] = {
    "add_activity": "add_activity",
    "remove_activity": "remove_activity",
    "update_activity": "update_activity",
    "reorder_activities": "reorder_activities",
    "update_day_title": "update_day_title",
}

Span = tuple[int, int]


class _Block(NamedTuple):
    start: int
    end: int
    label: str
    payload: str


class ExtractionResult(NamedTuple):
    """Prose left for display plus the actions found, in text order."""

    cleaned_text: str
    actions: list[Action]


def _overlaps(span: Span, claimed: list[Span]) -> bool:
    start, end = span
    return any(start < c_end and end > c_start for c_start, c_end in claimed)


def _string_end(text: str, start: int) -> int:
    """Index just past the double-quoted string opened at ``start``.

    An unterminated string stops at the first raw newline or action marker,
    neither of which can appear inside a JSON string.
    """
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            return i + 1
        if ch == "\n" or (ch == "[" and _OPEN_MARKER_RE.match(text, i)):
            return i
        i += 2 if ch == "\\" else 1
    return n


def _scan_bare_payload_end(text: str, start: int) -> int:
    """Find where a bare ``{...}`` payload starting at ``start`` ends.

    Ends after the brace that balances the opening one. A payload that never
    balances is cut at the next action marker, the next blank line, or the end
    of the text, including when it was cut off inside a string.
    """
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            i = _string_end(text, i)
            continue
        if ch == "[" and _OPEN_MARKER_RE.match(text, i):
            return i
        if ch == "\n" and _BLANK_LINE_RE.match(text, i):
            return i
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return n


def _closed_blocks(text: str, claimed: list[Span]) -> list[_Block]:
    blocks: list[_Block] = []
    for match in _CLOSED_BLOCK_RE.finditer(text):
        span = (match.start(), match.end())
        if _overlaps(span, claimed):
            continue
        claimed.append(span)
        blocks.append(_Block(span[0], span[1], match.group(1), match.group(2).strip()))
    return blocks


def _bare_blocks(text: str, claimed: list[Span]) -> list[_Block]:
    blocks: list[_Block] = []
    for match in _OPEN_MARKER_RE.finditer(text):
        if _overlaps((match.start(), match.end()), claimed):
            continue

        payload_start = match.end()
        while payload_start < len(text) and text[payload_start].isspace():
            payload_start += 1

        if payload_start < len(text) and text[payload_start] == "{":
            end = _scan_bare_payload_end(text, payload_start)
            payload = text[payload_start:end].strip()
        else:
            # Marker with nothing decodable after it; consume the marker alone
            end = match.end()
            payload = ""

        span = (match.start(), end)
        if _overlaps(span, claimed):
            logger.debug(f"Bare payload at {span} runs into a claimed block, skipping")
            continue
        claimed.append(span)
        blocks.append(_Block(span[0], span[1], match.group(1), payload))
    return blocks


def _strip_spans(text: str, spans: list[Span]) -> str:
    for start, end in sorted(spans, reverse=True):
        text = text[:start] + text[end:]
    text = _ORPHAN_CLOSE_RE.sub("", text)
    text = _TRAILING_SPACE_RE.sub("\n", text)
    text = _EXTRA_BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def _block_to_action(block: _Block, default_time: str) -> Action | None:
    kind = ACTION_KINDS.get(block.label.lower().replace("-", "_"))
    if kind is None:
        logger.warning(f"Unknown action kind {block.label!r}, skipping")
        metrics.inc_dropped("unknown_kind")
        return None

    # Field salvage only knows how to rebuild an addition
    result = decode(
        block.payload, default_time=default_time, allow_salvage=kind == "add_activity"
    )
    if isinstance(result, DecodeFailure):
        logger.warning(f"Could not decode {kind} payload ({result.reason}), skipping")
        metrics.record_decode("failed")
        metrics.inc_dropped("decode_failed")
        return None
    metrics.record_decode(result.stage)

    if not isinstance(result.value, dict):
        logger.warning(f"{kind} payload is not an object, skipping")
        metrics.inc_dropped("invalid_payload")
        return None

    try:
        action = parse_action(kind, result.value)
    except ValidationError as e:
        logger.warning(f"Invalid {kind} payload: {e.error_count()} error(s), skipping")
        metrics.inc_dropped("invalid_payload")
        return None

    metrics.inc_extracted(kind)
    return action


def extract(raw_text: str, *, default_time: str = DEFAULT_SALVAGE_TIME) -> ExtractionResult:
    """Pull action blocks out of generated text.

    Args:
        raw_text: Untrusted assistant output
        default_time: Activity time used when a salvaged payload has none

    Returns:
        ExtractionResult of (cleaned_text, actions). Text without markers comes
        back trimmed and otherwise unchanged.
    """
    claimed: list[Span] = []
    blocks = _closed_blocks(raw_text, claimed)
    blocks += _bare_blocks(raw_text, claimed)

    if not blocks:
        return ExtractionResult(cleaned_text=raw_text.strip(), actions=[])

    actions: list[Action] = []
    for block in sorted(blocks, key=lambda b: b.start):
        action = _block_to_action(block, default_time)
        if action is not None:
            actions.append(action)

    logger.info(f"Parsed {len(actions)} action(s) from {len(blocks)} action block(s)")
    return ExtractionResult(
        cleaned_text=_strip_spans(raw_text, [(b.start, b.end) for b in blocks]),
        actions=actions,
    )
