"""Pure predicates over text strings used by splitting and merge decisions.

Every function takes a plain string (callers strip it first) and returns
a bool; none of them look at geometry.  Patterns are prefix matches.
"""

from __future__ import annotations

import re

# ── List markers ───────────────────────────────────────────────────────

_BULLET_CHARS = ("•", "-", "*")
_OPEN_PARENS = ("(", "（")
_MARKER_SECOND_CHARS = ".)。、．"

_RE_PAREN_NUMBER = re.compile(r"\d{1,3}")
_RE_PAREN_LETTER = re.compile(r"[a-zA-Z]")
_RE_PAREN_ROMAN = re.compile(r"(?i)(i{1,3}|iv|v|vi{0,3}|ix|x|xi{0,2})")
_RE_PAREN_NUMBER_LETTER = re.compile(r"\d+[a-zA-Z]")
_RE_PAREN_SHORT = re.compile(r"[a-zA-Z]|\d{1,2}")
_RE_DOTTED_MARKER = re.compile(r"[a-zA-Z0-9][.．、]")

# Exact-match markers found alone in the first column of list-style tables.
_RE_CELL_MARKER = re.compile(r"\(\d+\)|\([a-zA-Z]\)|[a-zA-Z]\.|\d+\.|[•*-]")

# ── Glossary / definition / reference entries ──────────────────────────

_RE_GLOSSARY_ABBR_LINE = re.compile(r"[A-Z][A-Z0-9.()&/]{0,14}\s+[A-Za-z]")
_RE_GLOSSARY_WORD_LINE = re.compile(r"[a-zA-Z]{2,10}\s+[A-Z][a-z]")
_RE_ABBR = re.compile(r"[A-Z][A-Z0-9.()&/]{0,14}")
_RE_MIXED_ABBR = re.compile(r"[A-Za-z][A-Za-z0-9\-]{1,11}")
_RE_COMPOUND_ABBR = re.compile(r"[A-Z]{2,6}\([A-Za-z&/]+\)(/[A-Z]+)?")

_DEFINITION_PATTERNS = [
    re.compile(r"[a-z][a-z\s\-]+\.\s{1,3}[A-Z]"),
    re.compile(r"[a-z][a-z\s\-]*[A-Z]+[a-zA-Z]*\.\s{1,3}[A-Z]"),
    re.compile(r"[A-Z]{2,6}\.\s{1,3}(Defined|See|As defined)"),
    re.compile(r"[A-Z][a-zA-Z\s]+\.\s{1,3}(The|A|An|See|As|Services)"),
]

_REFERENCE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"ASTM\s+",
        r"DoD\s+Directive",
        r"DoD\s+Instruction",
        r"DoD\s+Manual",
        r"DoD\s+\d",
        r"Defense\s+Federal",
        r"Deputy\s+Secretary",
        r"Section\s+\d",
        r"Title\s+\d",
        r"Public\s+Law",
        r"Executive\s+Order",
        r"OMB\s+",
        r"\d+\s+U\.?S\.?C",
    )
]

# ── Structure ──────────────────────────────────────────────────────────

_CAPTION_PATTERNS = [
    re.compile(r"(Table|Figure|Chart|Graph|Exhibit)\s+\d+", re.IGNORECASE),
    re.compile(r"(表|图|圖)\s*\d+"),
    re.compile(r"(Note|Notes|Source|Sources):", re.IGNORECASE),
]

_RE_SECTION_TITLE = re.compile(
    r"SECTION\s+\d+|GLOSSARY|REFERENCES|APPENDIX|TABLE OF CONTENTS|INDEX",
    re.IGNORECASE,
)

_RE_SECTION_NUMBER = re.compile(r"\d+\.\d*\.?\s+|[A-Z]\.\d+\.?\s+")
_RE_TOC_SECTION = re.compile(r"SECTION\s+\d+")


def _close_paren_index(text: str) -> int:
    idx = text.find(")")
    if idx == -1:
        idx = text.find("）")
    return idx


def is_chinese(ch: str) -> bool:
    return "\u4e00" <= ch <= "\u9fff"


def starts_with_bullet(text: str) -> bool:
    """True when *text* opens with a bullet or a short list marker.

    Recognised: ``•``/``-``/``*``; ``(a)``, ``(1)``, ``(10)`` but not
    parenthesised acronyms such as ``(PPBS)``; a letter, digit or CJK
    character followed by ``.`` ``)`` ``。`` ``、`` or ``．``; and
    numbers up to three digits followed by a dot.
    """
    if not text:
        return False
    first = text[0]
    if first in _BULLET_CHARS:
        return True

    if first in _OPEN_PARENS and len(text) >= 3:
        close = _close_paren_index(text)
        if 1 < close <= 4 and _RE_PAREN_SHORT.fullmatch(text[1:close]):
            return True

    if len(text) >= 2 and (first.isalnum() or is_chinese(first)):
        if text[1] in _MARKER_SECOND_CHARS:
            return True
        if first.isdigit() and len(text) >= 3:
            dot = text.find(".")
            if 0 < dot < 4 and text[:dot].isdigit():
                return True
    return False


def is_list_item_start(text: str) -> bool:
    """True when *text* begins a list item (looser than :func:`starts_with_bullet`)."""
    if not text:
        return False
    if text[0] in _OPEN_PARENS and len(text) >= 3:
        close = _close_paren_index(text)
        if 1 < close < 10:
            inside = text[1:close]
            if (
                _RE_PAREN_NUMBER.fullmatch(inside)
                or _RE_PAREN_LETTER.fullmatch(inside)
                or _RE_PAREN_ROMAN.fullmatch(inside)
                or _RE_PAREN_NUMBER_LETTER.fullmatch(inside)
            ):
                return True
    if _RE_DOTTED_MARKER.match(text):
        return True
    return text.startswith(_BULLET_CHARS)


def is_list_marker(text: str) -> bool:
    """True when *text* is nothing but a list marker, e.g. ``(3)`` or ``b.``."""
    return bool(_RE_CELL_MARKER.fullmatch(text.strip()))


def is_glossary_entry(text: str) -> bool:
    """Abbreviation-then-definition line such as ``DoD  Department of Defense``."""
    if len(text) < 3:
        return False
    return bool(
        _RE_GLOSSARY_ABBR_LINE.match(text) or _RE_GLOSSARY_WORD_LINE.match(text)
    )


def is_glossary_entry_start(text: str) -> bool:
    """First word is an abbreviation and the remainder starts with a letter."""
    if len(text) < 3:
        return False
    parts = re.split(r"\s+", text, maxsplit=1)
    if len(parts) < 2:
        return False
    abbr, definition = parts
    if not definition or not definition[0].isascii() or not definition[0].isalpha():
        return False
    if _RE_ABBR.fullmatch(abbr):
        return True
    if _RE_MIXED_ABBR.fullmatch(abbr) and any(c.isupper() for c in abbr):
        return True
    return bool(_RE_COMPOUND_ABBR.fullmatch(abbr))


def is_definition_entry(text: str) -> bool:
    """Term-dot-definition line such as ``access control.  The process ...``."""
    if len(text) < 5:
        return False
    return any(p.match(text) for p in _DEFINITION_PATTERNS)


def is_reference_entry(text: str) -> bool:
    """Citation of a standard, directive, statute or code section."""
    if len(text) < 10:
        return False
    return any(p.match(text) for p in _REFERENCE_PATTERNS)


def is_table_caption(text: str) -> bool:
    """``Table 3 ...``, ``Figure 2``, ``表 1``, ``Source: ...`` and the like."""
    if not text:
        return False
    return any(p.match(text) for p in _CAPTION_PATTERNS)


def is_new_section_title(text: str) -> bool:
    return bool(_RE_SECTION_TITLE.match(text))


def starts_with_section_number(text: str) -> bool:
    """``3.1 Scope``, ``2. Purpose``, ``A.2 Terms``."""
    return bool(_RE_SECTION_NUMBER.match(text))


def is_toc_entry_start(text: str) -> bool:
    return starts_with_section_number(text) or bool(_RE_TOC_SECTION.match(text))


def has_leader_dots(text: str) -> bool:
    return "...." in text or "…" in text


def first_word_length(text: str, limit: int = 20) -> int:
    """Length of the first whitespace-delimited word, capped at *limit*."""
    n = 0
    for ch in text[:limit]:
        if ch.isspace():
            break
        n += 1
    return n
