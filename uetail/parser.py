"""
Parsing of Unreal log lines.

A line usually looks like

    [2024.01.01-12.00.00:000][  0]LogRenderer: Warning: shader compile slow

i.e. a bracketed timestamp, an optional bracketed frame/thread marker, a
category token ending in ':' and the message. Any of those may be missing;
parsing never fails, it only finds less structure.
"""

from dataclasses import dataclass

# Severity levels, also used as palette attribute suffixes by the UI
NORMAL  = 'normal'
WARNING = 'warning'
ERROR   = 'error'


@dataclass(frozen=True)
class LogLine:
    raw_text:  str
    severity:  str
    timestamp: str | None
    category:  str | None
    message:   str

    @property
    def structured(self) -> bool:
        return self.timestamp is not None or self.category is not None


def classify(text: str) -> str:
    # Error wins over warning; both are plain case-insensitive substring tests.
    lower = text.lower()
    if 'error' in lower:
        return ERROR
    if 'warning' in lower:
        return WARNING
    return NORMAL


def _skip_ws(s: str, i: int) -> int:
    n = len(s)
    while i < n and s[i].isspace():
        i += 1
    return i


def split_components(raw: str) -> tuple[str | None, str | None, str]:
    # Return (timestamp, category, message) for one line.
    pos = 0
    ts  = None
    if raw.startswith('['):
        end = raw.find(']')
        if end != -1:
            ts  = raw[1:end]
            pos = _skip_ws(raw, end + 1)
            # optional second group, e.g. [  0]; content is dropped
            if raw.startswith('[', pos):
                end2 = raw.find(']', pos)
                if end2 != -1:
                    pos = _skip_ws(raw, end2 + 1)

    rest = raw[pos:]
    head = rest.lstrip()
    colon = head.find(':')
    if colon > 0:
        left = head[:colon]
        if not any(ch.isspace() for ch in left):
            return ts, left, head[colon + 1:].lstrip(':').lstrip()
    return ts, None, rest


def parse_line(raw: str) -> LogLine:
    ts, category, message = split_components(raw)
    return LogLine(
        raw_text  = raw,
        severity  = classify(raw),
        timestamp = ts,
        category  = category,
        message   = message,
    )


# Cook progress
_COOKED_LABEL = 'cooked packages '
_REMAIN_LABEL = 'packages remain '
_TOTAL_LABEL  = 'total '


def _number_after(hay: str, label: str) -> int | None:
    i = hay.find(label)
    if i == -1:
        return None
    j = _skip_ws(hay, i + len(label))
    k = j
    while k < len(hay) and '0' <= hay[k] <= '9':
        k += 1
    if k == j:
        return None
    return int(hay[j:k])


def parse_cook_progress(text: str) -> tuple[int, int, int] | None:
    """
    Extract (cooked, remaining, total) from a line like

        LogCook: Display: Cooked packages 816 Packages Remain 4532 Total 5348

    Returns None unless at least one of cooked/remaining is present. A
    missing number is reported as 0; total falls back to cooked + remaining.
    """
    lower  = text.lower()
    cooked = _number_after(lower, _COOKED_LABEL)
    remain = _number_after(lower, _REMAIN_LABEL)
    if cooked is None and remain is None:
        return None
    cooked = cooked or 0
    remain = remain or 0
    total  = _number_after(lower, _TOTAL_LABEL)
    if not total:
        total = cooked + remain
    return cooked, remain, total
