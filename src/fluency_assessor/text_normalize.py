from __future__ import annotations

import re
import unicodedata


_SPACES = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\s]|_")


def normalize_text(text: str | None) -> str:
    """
    Lower-case, drop anything that is not alphanumeric or whitespace, collapse
    whitespace runs and trim. Never raises; empty or garbage input gives "".
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFC", text)
    text = text.lower()
    text = _NON_WORD.sub("", text)
    text = _SPACES.sub(" ", text)
    return text.strip()

