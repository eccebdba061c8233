import re

_TAG_RE = re.compile(r"<[^>]*>")
_SENTENCE_END_RE = re.compile(r"[.!?]")

# Rich-text editors store an empty blockers field as this
EMPTY_RICH_TEXT_VALUES = {"<p>None</p>", "None"}


def strip_html(text: str) -> str:
    return _TAG_RE.sub("", text or "").strip()


def first_sentence(text: str, limit: int = 100) -> str:
    """Text before the first '.', '!' or '?', else the first `limit` characters."""
    head = _SENTENCE_END_RE.split(text, maxsplit=1)[0]
    return head or text[:limit]


def is_blank_rich_text(text: str) -> bool:
    if not text or not text.strip():
        return True
    return text.strip() in EMPTY_RICH_TEXT_VALUES
