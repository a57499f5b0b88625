"""
Employee name forms: display ("Last, First") and match key ("first last").
Names from different sources are compared only through to_match_key.
"""
import re

_PAREN_RE = re.compile(r"\s*\([^)]*\)?")
_SPACE_RE = re.compile(r"\s+")


def to_display_form(name: str) -> str:
    """'First [Middle] Last' -> 'Last, First [Middle]'. No-op if already 'Last, First'."""
    name = _SPACE_RE.sub(" ", (name or "").strip())
    if "," in name:
        return name
    parts = name.split(" ")
    if len(parts) < 2:
        return name
    return f"{parts[-1]}, {' '.join(parts[:-1])}"


def to_match_key(name: str) -> str:
    """Strip role tags in parentheses, case-fold, reorder 'Last, First' to 'first last'."""
    key = _PAREN_RE.sub(" ", name or "")
    key = _SPACE_RE.sub(" ", key).strip().lower()
    if "," in key:
        last, _, first = key.partition(",")
        key = f"{first.strip()} {last.strip()}".strip()
    return key


def names_match(a: str, b: str) -> bool:
    return to_match_key(a) == to_match_key(b)


def first_name(name: str) -> str:
    """First given name from either form; used for greetings."""
    name = _PAREN_RE.sub(" ", name or "").strip()
    if "," in name:
        given = name.split(",", 1)[1].strip()
    else:
        given = name
    parts = given.split()
    return parts[0] if parts else ""
