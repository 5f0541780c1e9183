"""Stage 1: Parse raw input lines into structured receptacle patterns.

The module recognises three line shapes:

- delimited tuples such as ``CS8269A, LMZC, 20, 10, Red`` (comma, tab or
  whitespace separated),
- the same tuples with a trailing quantity suffix, e.g. ``... Red !43``,
- free-form order descriptions, which are flagged as natural language and
  left for Stage 2 to interpret.

Parsing never raises. Unreadable numbers become ``0.0`` and an unreadable
line falls back to its own text as the receptacle token.
"""

from __future__ import annotations

import re

from whip_pipeline.models import ParsedPattern, PatternInput

QUANTITY_SUFFIX_RE = re.compile(r"^(?P<body>.*?)\s*!\s*(?P<quantity>[^!]*?)\s*$", re.DOTALL)
QUANTITY_DIGITS_RE = re.compile(r"!\s*\d+\s*$")
RECEPTACLE_TOKEN_RE = re.compile(
    r"^(?:(?=\S*[A-Za-z])(?=\S*\d)[A-Za-z0-9][A-Za-z0-9/-]*|[A-Z][A-Z0-9-]{2,})$"
)
NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
WHITESPACE_RE = re.compile(r"\s+")
WORD_RE = re.compile(r"[a-z]+")
PLAIN_WORD_RE = re.compile(r"^[a-z]+[.,;:]?$")

NATURAL_LANGUAGE_WORDS = frozenset(
    {
        "total",
        "whips",
        "ranging",
        "lengths",
        "colors",
        "colours",
        "needed",
        "required",
        "including",
    }
)
NATURAL_LANGUAGE_PHRASES = (
    "power whip",
    "liquid tight",
    "bell box",
    "pin and sleeve",
    "pinned and sleeve",
)
MIN_PROSE_TOKENS = 6
MIN_TUPLE_FIELDS = 2
MAX_TUPLE_FIELDS = 5

PATTERN_FIELDS = ("receptacle", "conduit_type", "whip_length", "tail_length", "label_color")


def split_lines(block: str) -> list[str]:
    """Split a submitted text block into meaningful pattern lines.

    Args:
        block: Newline-separated text as pasted or read from a file.

    Returns:
        Stripped lines with blanks and ``#`` comment lines removed.
    """

    lines: list[str] = []
    for line in block.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines


def parse_number(token: str | None) -> float | None:
    """Read the first number in a length token.

    Args:
        token: Raw token such as ``"20"``, ``"50ft"`` or ``"20'"``.

    Returns:
        ``None`` for a missing/empty token, ``0.0`` when no number is present,
        otherwise the parsed value.
    """

    if token is None or not token.strip():
        return None
    match = NUMBER_RE.search(token)
    if match is None:
        return 0.0
    return float(match.group(0))


def format_length(value: float | None) -> str:
    """Render a length for display, dropping a redundant ``.0``."""

    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def parse_quantity(token: str) -> int:
    """Parse a ``!N`` suffix; anything other than an integer >= 1 yields 1."""

    token = token.strip()
    if not token.isdigit():
        return 1
    quantity = int(token)
    return quantity if quantity >= 1 else 1


def split_fields(body: str) -> tuple[list[str], str]:
    """Split a tuple body on its delimiter.

    Commas win over tabs, and tabs win over plain whitespace runs.

    Args:
        body: Pattern text without any quantity suffix.

    Returns:
        Tuple of ``(tokens, delimiter_name)``.
    """

    if "," in body:
        return [part.strip() for part in body.split(",")], "comma"
    if "\t" in body:
        return [part.strip() for part in body.split("\t") if part.strip()], "tab"
    return [part for part in WHITESPACE_RE.split(body.strip()) if part], "space"


def has_delimited_shape(line: str) -> bool:
    """Return whether a line is shaped like a pattern tuple.

    A trailing ``!N`` suffix always marks a tuple. Otherwise the body must split
    on commas or tabs into two to five fields, the first of which looks like a
    receptacle code (``CS8269A``, ``L6-20R``, ``UNKNOWNX``).
    """

    if QUANTITY_DIGITS_RE.search(line):
        return True
    body, _ = _split_quantity(line.strip())
    if "," not in body and "\t" not in body:
        return False
    tokens, _ = split_fields(body)
    if not MIN_TUPLE_FIELDS <= len(tokens) <= MAX_TUPLE_FIELDS:
        return False
    return RECEPTACLE_TOKEN_RE.fullmatch(tokens[0]) is not None


def is_natural_language(line: str) -> bool:
    """Decide whether a line reads as prose rather than a delimited tuple.

    Tuple-shaped lines (see :func:`has_delimited_shape`) are never prose, even
    when a field spells out a conduit such as ``Liquid Tight``. Any other line
    is prose when it contains one of the marker words/phrases, or when it has
    no comma/tab separators and most of at least six tokens are plain
    lowercase words.

    Args:
        line: One stripped input line.

    Returns:
        ``True`` when the line should be routed to the interpreter.
    """

    if has_delimited_shape(line):
        return False
    lowered = line.lower()
    if any(word in NATURAL_LANGUAGE_WORDS for word in WORD_RE.findall(lowered)):
        return True
    if any(phrase in lowered for phrase in NATURAL_LANGUAGE_PHRASES):
        return True
    if "," in line or "\t" in line:
        return False

    tokens = line.split()
    if len(tokens) < MIN_PROSE_TOKENS:
        return False
    plain = sum(1 for token in tokens if PLAIN_WORD_RE.fullmatch(token))
    return plain * 2 > len(tokens)


def _split_quantity(line: str) -> tuple[str, str | None]:
    """Separate a trailing ``!N`` suffix from the pattern body."""

    if "!" not in line:
        return line, None
    match = QUANTITY_SUFFIX_RE.match(line)
    if match is None:
        return line, None
    return match.group("body"), match.group("quantity")


def parse(line: str | PatternInput) -> ParsedPattern:
    """Parse one input line into a :class:`ParsedPattern`.

    Args:
        line: Raw input line, as text or wrapped in :class:`PatternInput`.

    Returns:
        Parsed pattern. Natural-language lines are returned flagged with
        ``is_natural_language`` and the full text as receptacle placeholder;
        Stage 2 supplies their real content. The receptacle falls back to the
        raw line when no token can be read, so only an empty string yields an
        empty receptacle; :func:`split_lines` never emits one.
    """

    if isinstance(line, PatternInput):
        line = line.text
    text = line.strip()
    if is_natural_language(text):
        return ParsedPattern(
            receptacle=text,
            is_natural_language=True,
            raw=line,
            delimiter="natural",
        )

    body, quantity_token = _split_quantity(text)
    is_quantity_based = quantity_token is not None and quantity_token != ""
    quantity = parse_quantity(quantity_token) if is_quantity_based else 1

    tokens, delimiter = split_fields(body)
    padded = [token or None for token in tokens] + [None] * len(PATTERN_FIELDS)
    values = dict(zip(PATTERN_FIELDS, padded))

    receptacle = values["receptacle"] or body.strip() or text or line
    return ParsedPattern(
        receptacle=receptacle,
        conduit_type=values["conduit_type"],
        whip_length=parse_number(values["whip_length"]),
        tail_length=parse_number(values["tail_length"]),
        label_color=values["label_color"],
        quantity=quantity,
        is_natural_language=False,
        is_quantity_based=is_quantity_based,
        raw=line,
        delimiter=delimiter,
    )
