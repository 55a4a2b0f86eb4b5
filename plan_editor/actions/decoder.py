"""Repairing decoder for action payloads produced by the text generator.

The generator frequently emits JSON-ish fragments: single quotes, unquoted keys,
trailing commas, Python literals, or a payload cut off mid-value. Decoding walks
an ordered ladder of strategies and stops at the first one that yields a value:

1. strict   - ``json.loads`` on the fragment as-is
2. repaired - syntactic repair pass, then ``json.loads``
3. salvaged - targeted field search that rebuilds a minimal add-activity payload

A fragment none of them can handle comes back as ``DecodeFailure`` rather than an
exception, so callers have to deal with it explicitly.
"""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SALVAGE_TIME = "12:00"

_DOUBLE_QUOTED_RE = re.compile(r'"(?:[^"\\]|\\.)*"')
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_UNQUOTED_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][\w-]*)\s*:")
_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_PYTHON_LITERALS = (
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
    (re.compile(r"\bNone\b"), "null"),
)
_DANGLING_KEY_RE = re.compile(r',?\s*"[^"]*"\s*:\s*([A-Za-z]*)\s*$')

_CLOSERS = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class Decoded:
    """Successfully decoded payload and the stage that produced it."""

    value: Any
    stage: str


@dataclass(frozen=True)
class DecodeFailure:
    """Payload no strategy could decode; keeps the fragment for logging."""

    fragment: str
    reason: str


DecodeResult = Decoded | DecodeFailure


def _map_outside_strings(text: str, fn: Callable[[str], str]) -> str:
    """Apply ``fn`` to every region of ``text`` not inside a double-quoted string."""
    parts: list[str] = []
    last = 0
    for match in _DOUBLE_QUOTED_RE.finditer(text):
        parts.append(fn(text[last : match.start()]))
        parts.append(match.group(0))
        last = match.end()
    parts.append(fn(text[last:]))
    return "".join(parts)


def _normalize_single_quotes(text: str) -> str:
    """Rewrite single-quoted strings as JSON double-quoted strings.

    A quote inside a single-quoted string only closes it when followed by a
    structural character (or the end of input), so apostrophes in names survive.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            match = _DOUBLE_QUOTED_RE.match(text, i)
            end = match.end() if match else n
            out.append(text[i:end])
            i = end
            continue
        if ch != "'":
            out.append(ch)
            i += 1
            continue

        buf: list[str] = []
        j = i + 1
        closed = False
        while j < n:
            c = text[j]
            if c == "\\" and j + 1 < n:
                nxt = text[j + 1]
                buf.append("'" if nxt == "'" else c + nxt)
                j += 2
                continue
            if c == "'":
                rest = text[j + 1 :].lstrip()
                if not rest or rest[0] in ",}]:":
                    closed = True
                    break
                buf.append("'")
            elif c == '"':
                buf.append('\\"')
            else:
                buf.append(c)
            j += 1

        out.append('"' + "".join(buf) + ('"' if closed else ""))
        i = j + 1 if closed else n
    return "".join(out)


def _open_string_start(text: str) -> int | None:
    """Index of the opening quote of an unterminated trailing string, if any."""
    i = 0
    n = len(text)
    while i < n:
        if text[i] == '"':
            match = _DOUBLE_QUOTED_RE.match(text, i)
            if match is None:
                return i
            i = match.end()
        else:
            i += 1
    return None


def _close_truncated_tail(text: str) -> str:
    """Drop or close an incomplete trailing key/value pair."""
    start = _open_string_start(text)
    if start is not None:
        before = text[:start].rstrip()
        if before.endswith(":"):
            # Cut off inside a string value: keep the key, blank the value
            text = before + ' ""'
        elif before.endswith(","):
            # Cut off inside a key (or array element): drop it with its comma
            text = before[:-1]
        else:
            text = before

    match = _DANGLING_KEY_RE.search(text)
    if match and match.group(1) not in ("true", "false", "null"):
        text = text[: match.start()]

    return text.rstrip().rstrip(",")


def _balance_closers(text: str) -> str:
    """Append the closing brackets/braces still open at the end of ``text``."""
    stack: list[str] = []
    stripped = _DOUBLE_QUOTED_RE.sub('""', text)
    for ch in stripped:
        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in "}]" and stack and stack[-1] == ch:
            stack.pop()
    return text + "".join(reversed(stack))


def _fix_structure(segment: str) -> str:
    segment = _TRAILING_COMMA_RE.sub(r"\1", segment)
    segment = _UNQUOTED_KEY_RE.sub(r'\1"\2":', segment)
    for pattern, replacement in _PYTHON_LITERALS:
        segment = pattern.sub(replacement, segment)
    return segment


def repair_json_text(text: str) -> str:
    """Apply the syntactic repair pass to a JSON-ish fragment."""
    repaired = _CODE_FENCE_RE.sub("", text.strip())
    repaired = _normalize_single_quotes(repaired)
    repaired = _map_outside_strings(repaired, _fix_structure)
    repaired = _close_truncated_tail(repaired)
    repaired = _balance_closers(repaired)
    # Closing may expose a trailing comma again, e.g. '{"a": 1,' -> '{"a": 1,}'
    return _map_outside_strings(repaired, lambda s: _TRAILING_COMMA_RE.sub(r"\1", s))


def _try_strict(text: str) -> Any | None:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _try_repaired(text: str) -> Any | None:
    try:
        return json.loads(repair_json_text(text), strict=False)
    except json.JSONDecodeError:
        return None


def _field_pattern(field: str, value: str) -> re.Pattern[str]:
    # Field names must stand alone: "name" never matches inside "day_name"
    return re.compile(rf"""(?<![\w])["']?{field}["']?\s*:\s*{value}""")


_SALVAGE_DAY_RE = _field_pattern("dayNumber", r"""["']?(\d+)""")
_SALVAGE_NAME_RE = _field_pattern("name", r"""(["'])(.+?)\1""")
_SALVAGE_TIME_RE = _field_pattern("time", r"""(["'])(.+?)\1""")
_SALVAGE_COST_RE = _field_pattern("cost", r"""["']?(\d+(?:\.\d+)?)""")


def salvage_add_activity(text: str, default_time: str = DEFAULT_SALVAGE_TIME) -> dict | None:
    """Rebuild a minimal add-activity payload from a day number and a name.

    Time defaults to ``default_time`` and cost to 0 when absent. Returns None
    unless both the day number and the name can be found.
    """
    day_match = _SALVAGE_DAY_RE.search(text)
    name_match = _SALVAGE_NAME_RE.search(text)
    if not day_match or not name_match:
        return None

    time_match = _SALVAGE_TIME_RE.search(text)
    cost_match = _SALVAGE_COST_RE.search(text)
    name = name_match.group(2)
    cost = float(cost_match.group(1)) if cost_match else 0

    return {
        "dayNumber": int(day_match.group(1)),
        "activity": {
            "name": name,
            "time": time_match.group(2) if time_match else default_time,
            "cost": int(cost) if cost == int(cost) else cost,
            "type": "activity",
            "description": name,
        },
    }


def decode(
    text: str, *, default_time: str = DEFAULT_SALVAGE_TIME, allow_salvage: bool = True
) -> DecodeResult:
    """Decode a possibly malformed payload fragment.

    Args:
        text: Payload text taken from an action block
        default_time: Time used when salvage cannot find one
        allow_salvage: Whether to fall back to rebuilding an add-activity
            payload; callers decoding other action kinds turn this off

    Returns:
        Decoded with the first stage that succeeded, or DecodeFailure
    """
    if not text or not text.strip():
        return DecodeFailure(fragment=text, reason="empty payload")

    stages: list[tuple[str, Callable[[str], Any | None]]] = [
        ("strict", _try_strict),
        ("repaired", _try_repaired),
        ("salvaged", lambda t: salvage_add_activity(t, default_time)),
    ]
    if not allow_salvage:
        stages.pop()

    for stage, strategy in stages:
        value = strategy(text)
        if value is not None:
            if stage != "strict":
                logger.debug(f"Payload decoded after {stage} stage")
            return Decoded(value=value, stage=stage)

    logger.warning(f"Payload repair failed for: {text[:200]!r}")
    return DecodeFailure(fragment=text, reason="unrecoverable payload")
