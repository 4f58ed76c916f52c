# -*- coding: utf-8 -*-
"""LLM — lenient parsing of model output (JSON objects/arrays and plain lists)."""

from __future__ import annotations

import ast
import json
import re
from typing import Any, Dict, Iterator, List, Tuple

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", flags=re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_BULLET = re.compile(r"^[\d.\-)*•\s]+")
_CLOSER_AHEAD = re.compile(r"[ \t\r\n]*[}\]]")


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    return _FENCE_CLOSE.sub("", cleaned)


def _scan(text: str) -> Iterator[Tuple[int, str, bool]]:
    """Yield ``(index, char, quoted)``; quote marks count as quoted."""
    quoted = False
    escaped = False
    for i, ch in enumerate(text):
        if quoted:
            yield i, ch, True
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                quoted = False
        else:
            quoted = ch == '"'
            yield i, ch, quoted


def remove_trailing_commas(text: str) -> str:
    """Drop commas whose next non-blank character closes an object or array."""
    dangling = {
        i for i, ch, quoted in _scan(text)
        if ch == "," and not quoted and _CLOSER_AHEAD.match(text, i + 1)
    }
    return "".join(ch for i, ch in enumerate(text) if i not in dangling)


def iter_json_candidates(text: str, opener: str = "{") -> List[str]:
    """Top-level balanced spans starting with ``opener`` (``{`` or ``[``).

    Brackets inside string literals are ignored, so replies that mix prose
    with one or more JSON blobs still yield each blob.
    """
    closer = "}" if opener == "{" else "]"
    cleaned = _strip_fences(text)

    spans: List[str] = []
    depth = 0
    start = 0
    for i, ch, quoted in _scan(cleaned):
        if quoted:
            continue
        if ch == opener:
            if depth == 0:
                start = i
            depth += 1
        elif ch == closer and depth:
            depth -= 1
            if depth == 0:
                spans.append(cleaned[start : i + 1])
    return spans


def _sanitize_json_like(text: str) -> str:
    # Curly quotes, trailing commas and non-finite floats are the usual offenders.
    cleaned = text
    cleaned = cleaned.replace("“", "\"").replace("”", "\"").replace("‘", "'").replace("’", "'")
    cleaned = remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\b-?Infinity\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def _loads_lenient(candidate: str) -> Any:
    sanitized = _sanitize_json_like(candidate)
    last_error: Exception | None = None
    for attempt in (candidate, sanitized):
        try:
            return json.loads(attempt)
        except ValueError as exc:
            last_error = exc
    # Python-literal-ish output (single quotes, None/True/False).
    py = re.sub(r"\bnull\b", "None", sanitized, flags=re.IGNORECASE)
    py = re.sub(r"\btrue\b", "True", py, flags=re.IGNORECASE)
    py = re.sub(r"\bfalse\b", "False", py, flags=re.IGNORECASE)
    try:
        return ast.literal_eval(py)
    except (ValueError, SyntaxError) as exc:
        raise ValueError(f"not JSON: {last_error or exc}") from exc


def parse_json_object(content: str) -> Dict[str, Any]:
    last_error: Exception | None = None
    for candidate in iter_json_candidates(content, "{"):
        try:
            parsed = _loads_lenient(candidate)
        except ValueError as exc:
            last_error = exc
            continue
        if isinstance(parsed, dict):
            return parsed
    raise ValueError(f"Failed to parse model JSON object: {last_error or 'no object found'}")


def parse_json_array(content: str) -> List[Any]:
    """A JSON array from model output; an object holding a single list is unwrapped."""
    last_error: Exception | None = None
    for candidate in iter_json_candidates(content, "["):
        try:
            parsed = _loads_lenient(candidate)
        except ValueError as exc:
            last_error = exc
            continue
        if isinstance(parsed, list):
            return parsed
    try:
        obj = parse_json_object(content)
    except ValueError as exc:
        last_error = last_error or exc
    else:
        lists = [v for v in obj.values() if isinstance(v, list)]
        if len(lists) == 1:
            return lists[0]
    raise ValueError(f"Failed to parse model JSON array: {last_error or 'no array found'}")


def parse_line_list(content: str) -> List[str]:
    """One item per line; bullets and numbering are stripped, blanks dropped."""
    out: List[str] = []
    for line in _strip_fences(content or "").splitlines():
        item = _BULLET.sub("", line.strip()).strip()
        if item:
            out.append(item)
    return out
