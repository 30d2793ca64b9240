"""Column name repair."""
import re
from typing import Iterable, List


RESERVED_WORDS = frozenset({
    "if", "else", "repeat", "while", "function", "for", "next", "break",
    "TRUE", "FALSE", "NULL", "Inf", "NaN", "NA", "NA_integer_", "NA_real_",
    "NA_character_", "in",
})

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9._]")
_NEEDS_PREFIX = re.compile(r"^([0-9_]|\.[0-9])")


def make_unique(names: Iterable[str], sep: str = ".") -> List[str]:
    """Append ``.1``, ``.2``, ... to repeated names.

    The first occurrence keeps its name. Suffixes skip any name that is
    already taken, so ``["a", "a", "a.1"]`` becomes ``["a", "a.2", "a.1"]``.
    """
    names = [str(n) for n in names]
    seen = set(names)
    counts: dict = {}
    used: set = set()
    result = []
    for name in names:
        if name not in used:
            used.add(name)
            result.append(name)
            continue
        k = counts.get(name, 0)
        while True:
            k += 1
            candidate = f"{name}{sep}{k}"
            if candidate not in seen and candidate not in used:
                break
        counts[name] = k
        used.add(candidate)
        result.append(candidate)
    return result


def make_names(names: Iterable[str], unique: bool = True) -> List[str]:
    """Turn arbitrary header text into syntactically valid column names.

    Examples:
        >>> make_names(["my col", "1st", "", "if"])
        ['my.col', 'X1st', 'X', 'if.']
        >>> make_names(["a", "a"])
        ['a', 'a.1']
    """
    out = []
    for raw in names:
        name = "" if raw is None else str(raw)
        name = _INVALID_CHARS.sub(".", name)
        if not name or _NEEDS_PREFIX.match(name):
            name = "X" + name
        if name in RESERVED_WORDS:
            name += "."
        out.append(name)
    return make_unique(out) if unique else out


def tidy_unique(names: Iterable[str]) -> List[str]:
    """Repair names the tidy way: keep text verbatim, fix blanks and repeats.

    Blank names become ``...<pos>``; every copy of a repeated name becomes
    ``<name>...<pos>``. Positions are 1-based.

    Examples:
        >>> tidy_unique(["x", "", "x"])
        ['x...1', '...2', 'x...3']
    """
    names = ["" if n is None else str(n) for n in names]
    repeated = {n for n in names if n and names.count(n) > 1}
    out = []
    for pos, name in enumerate(names, start=1):
        if not name:
            out.append(f"...{pos}")
        elif name in repeated:
            out.append(f"{name}...{pos}")
        else:
            out.append(name)
    return out
