"""
Statement scanner for Turtle documents.

Splits a document into top-level statements (directives and triple
blocks) without interpreting them. Each statement is handed to the
grammar on its own, so a prefix only applies to the statements after
its declaration and a malformed statement can be skipped.

Labelled blank nodes are rewritten to IRIs under BNODE_IRI_PREFIX so the
same label keeps one identity across separately parsed statements.
"""

import re
from typing import Literal, Optional, Tuple
from pydantic import BaseModel, Field


BNODE_IRI_PREFIX = "urn:x-rdfdocs:bnode:"

StatementKind = Literal["prefix", "base", "triples"]

_PREFIX_START = re.compile(r"@prefix\b|PREFIX\s", re.IGNORECASE)
_BASE_START = re.compile(r"@base\b|BASE\s", re.IGNORECASE)
_SPARQL_DIRECTIVE = re.compile(r"(PREFIX|BASE)\s", re.IGNORECASE)

# Characters after a '.' that start a new term, so the '.' ends a statement
_TERM_START = "#<[(\"'"


class Statement(BaseModel):
    """One top-level statement"""
    text: str = Field(..., description="Statement text with comments removed")
    start: int = Field(..., description="Offset of the first character")
    end: int = Field(..., description="Offset just past the statement")
    kind: StatementKind = Field(default="triples")


def skip_insignificant(source: str, pos: int) -> int:
    """Return the offset of the next character that is not whitespace or comment"""
    n = len(source)
    while pos < n:
        ch = source[pos]
        if ch.isspace():
            pos += 1
        elif ch == "#":
            end = source.find("\n", pos)
            pos = n if end < 0 else end + 1
        else:
            break
    return pos


def scan_statement(source: str, pos: int) -> Optional[Statement]:
    """
    Scan the statement starting at or after pos.

    Returns None when only whitespace and comments remain. An unterminated
    statement at the end of input is returned as is; the grammar reports it.
    """
    pos = skip_insignificant(source, pos)
    n = len(source)
    if pos >= n:
        return None

    start = pos
    sparql = _SPARQL_DIRECTIVE.match(source, pos) is not None
    out = []
    depth = 0

    while pos < n:
        ch = source[pos]

        if ch == "#":
            end = source.find("\n", pos)
            pos = n if end < 0 else end
            out.append(" ")
            continue

        if ch == "<":
            end = source.find(">", pos + 1)
            end = n if end < 0 else end + 1
            out.append(source[pos:end])
            pos = end
            if sparql:
                break
            continue

        if ch in "\"'":
            end, closed = _string_end(source, pos)
            out.append(source[pos:end])
            pos = end
            if not closed:
                # A short string cannot span lines, its statement ends here
                break
            continue

        if ch == "\\":
            out.append(source[pos:pos + 2])
            pos += 2
            continue

        if ch == "_" and source.startswith("_:", pos) and not _inside_name(source, pos):
            label, end = _blank_label(source, pos + 2)
            out.append(f"<{BNODE_IRI_PREFIX}{label}>")
            pos = end
            continue

        if ch in "[(":
            depth += 1
        elif ch in "])":
            depth = max(depth - 1, 0)
        elif ch == "." and depth == 0 and _ends_statement(source, pos):
            out.append(ch)
            pos += 1
            break

        out.append(ch)
        pos += 1

    return Statement(
        text="".join(out).strip(),
        start=start,
        end=pos,
        kind=_classify(source, start)
    )


def _classify(source: str, start: int) -> StatementKind:
    if _PREFIX_START.match(source, start):
        return "prefix"
    if _BASE_START.match(source, start):
        return "base"
    return "triples"


def _ends_statement(source: str, pos: int) -> bool:
    # '.' inside a prefixed name or a decimal is followed by a name character
    if pos + 1 >= len(source):
        return True
    nxt = source[pos + 1]
    return nxt.isspace() or nxt in _TERM_START


def _inside_name(source: str, pos: int) -> bool:
    if pos == 0:
        return False
    prev = source[pos - 1]
    return prev.isalnum() or prev in "_-:"


def _blank_label(source: str, pos: int) -> Tuple[str, int]:
    """Read a blank node label; it never ends with '.'"""
    end = pos
    n = len(source)
    while end < n and (source[end].isalnum() or source[end] in "_-." or ord(source[end]) > 127):
        end += 1
    while end > pos and source[end - 1] == ".":
        end -= 1
    return source[pos:end], end


def _string_end(source: str, pos: int) -> Tuple[int, bool]:
    """Offset just past the string literal starting at pos, and whether it was closed"""
    quote = source[pos]
    n = len(source)

    if source.startswith(quote * 3, pos):
        i = pos + 3
        while i < n:
            if source[i] == "\\":
                i += 2
            elif source.startswith(quote * 3, i):
                # Quotes right before the closing delimiter belong to the content
                while i + 3 < n and source[i + 3] == quote:
                    i += 1
                return i + 3, True
            else:
                i += 1
        return n, False

    i = pos + 1
    while i < n:
        ch = source[i]
        if ch == "\\":
            i += 2
        elif ch == quote:
            return i + 1, True
        elif ch == "\n":
            return i, False
        else:
            i += 1
    return n, False
