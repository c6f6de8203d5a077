from __future__ import annotations

import concurrent.futures
import json
import re
import warnings
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import ExternalCorrectionWarning
from .schemas import ExternalCorrection, ScoreHints


Payload = Union[ExternalCorrection, Mapping[str, Any], str, None]
Fetch = Callable[[str], Payload]

_CORRECTED_RE = re.compile(r"^\s*Corrected:\s*(.+)$", re.IGNORECASE | re.MULTILINE)
_REPLY_RE = re.compile(r"^\s*Reply:\s*(.+)$", re.IGNORECASE | re.MULTILINE)
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_HINT_KEYS = ("score_hints", "scoreHints")


def _warn(message: str) -> None:
    warnings.warn(message, ExternalCorrectionWarning, stacklevel=3)


def parse_labelled_reply(raw: Optional[str]) -> Optional[ExternalCorrection]:
    """
    Read a chat-style reply of the form

        Corrected: <corrected sentence>
        Reply: <conversation reply>

    Missing labels leave the matching field unset; no labels at all is None.
    """
    if not raw:
        return None
    corrected = _CORRECTED_RE.search(raw)
    reply = _REPLY_RE.search(raw)
    if corrected is None and reply is None:
        return None
    return ExternalCorrection(
        corrected_text=corrected.group(1).strip() if corrected else None,
        reply=reply.group(1).strip() if reply else None,
    )


def parse_json_reply(raw: Optional[str]) -> Optional[ExternalCorrection]:
    """Parse a JSON correction payload, optionally wrapped in a ``` fence."""
    if not raw or not raw.strip():
        return None
    body = _FENCE_RE.sub("", raw.strip())
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        _warn(f"External reply is not valid JSON: {e}")
        return None
    if not isinstance(data, dict):
        _warn(f"External reply must be a JSON object, got {type(data).__name__}")
        return None
    return _from_mapping(data)


def _valid(model: type[BaseModel], data: Mapping[str, Any], what: str) -> bool:
    try:
        model.model_validate(data)
    except ValidationError as e:
        _warn(f"Ignoring invalid external {what}: {e.errors()[0]['msg']}")
        return False
    return True


def _from_mapping(data: Mapping[str, Any]) -> ExternalCorrection:
    """
    Validate a payload field by field. An invalid field, score hint or error
    entry is dropped on its own; the rest of the payload is kept.
    """
    try:
        return ExternalCorrection.model_validate(dict(data))
    except ValidationError:
        pass

    clean: dict[str, Any] = {}
    for key, value in data.items():
        if key in _HINT_KEYS and isinstance(value, Mapping):
            value = {k: v for k, v in value.items() if _valid(ScoreHints, {k: v}, f"score hint {k!r}")}
        elif key == "errors" and isinstance(value, list):
            value = [
                item
                for i, item in enumerate(value)
                if _valid(ExternalCorrection, {"errors": [item]}, f"error #{i}")
            ]
        if _valid(ExternalCorrection, {key: value}, f"field {key!r}"):
            clean[key] = value
    return ExternalCorrection.model_validate(clean)


def coerce_payload(payload: Payload) -> Optional[ExternalCorrection]:
    if payload is None or isinstance(payload, ExternalCorrection):
        return payload
    if isinstance(payload, str):
        if payload.lstrip().startswith(("{", "```")):
            return parse_json_reply(payload)
        return parse_labelled_reply(payload)
    if isinstance(payload, Mapping):
        return _from_mapping(payload)
    _warn(f"Ignoring external correction of type {type(payload).__name__}")
    return None


def fetch_with_timeout(fetch: Fetch, text: str, timeout_s: float = 10.0) -> Optional[ExternalCorrection]:
    """
    Call the external corrector and wait at most `timeout_s` seconds.

    Every failure (exception, timeout, unreadable payload) is reported as an
    ExternalCorrectionWarning and returns None, which callers treat as
    "no external correction". The call is not retried.
    """
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fetch, text)
    try:
        payload = future.result(timeout=timeout_s)
    except concurrent.futures.TimeoutError:
        future.cancel()
        _warn(f"External correction timed out after {timeout_s:g}s")
        return None
    except Exception as e:
        _warn(f"External correction failed: {type(e).__name__}: {e}")
        return None
    finally:
        # Do not wait for a hung worker; it is abandoned.
        executor.shutdown(wait=False)

    return coerce_payload(payload)
