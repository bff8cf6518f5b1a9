import re

_ANSI_RE = re.compile(r"\x1B\[[0-9;]*[A-Za-z]")


def strip_ansi(s: str) -> str:
    return _ANSI_RE.sub("", s or "")


def truncate_middle(s: str, max_len: int, marker: str = " ... ") -> str:
    """Keep the head and tail of `s`, joined by `marker`, within `max_len` characters."""
    if max_len <= 0 or s is None:
        return ""
    if len(s) <= max_len:
        return s
    if max_len <= len(marker):
        return marker[:max_len]
    avail = max_len - len(marker)
    head = (avail + 1) // 2
    tail = avail - head
    return s[:head] + marker + s[-tail:] if tail > 0 else s[:head] + marker
