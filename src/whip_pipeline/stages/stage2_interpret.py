"""Stage 2: Interpret free-form order descriptions.

The interpreter is a keyword/phrase matcher, not a grammar. Every field is
driven by an ordered rule table and the first rule that hits wins, so alias
tables can be extended without touching the control flow below.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from whip_pipeline.config import DEFAULT_CONFIG, PipelineConfig
from whip_pipeline.models import LengthRange, NaturalLanguageSpec

logger = logging.getLogger(__name__)

QUANTITY_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\d+)\s*(?:power\s+)?whips?\b", re.IGNORECASE),
    re.compile(r"(\d+)\s*total\b", re.IGNORECASE),
    re.compile(r"\btotal\s*(?:of\s*)?(\d+)", re.IGNORECASE),
)

RECEPTACLE_ALIASES: tuple[tuple[str, str], ...] = (
    ("iec pinned and sleeve plug", "CS8269A"),
    ("iec pin and sleeve", "CS8269A"),
    ("nema 5-15", "460C9W"),
    ("nema 5-20", "460R9W"),
    ("nema 6-15", "L6-15R"),
    ("nema 6-20", "L6-20R"),
    ("nema l5-20", "L5-20R"),
    ("nema l5-30", "L5-30R"),
)
RECEPTACLE_CODE_RE = re.compile(
    r"\b(CS\d{4}[A-Z]?|460[A-Z]\d+[A-Z]*|L\d+-\d+[RP]|\d+-\d+R)\b", re.IGNORECASE
)

CONDUIT_ALIASES: tuple[tuple[str, str], ...] = (
    ("liquidtight flexible metal conduit", "LFMC"),
    ("liquid tight conduit", "LMZC"),
    ("liquid tight", "LMZC"),
    ("flexible metal conduit", "FMC"),
    ("metal conduit", "MCC"),
    ("thermoplastic", "TO"),
    ("service cable", "SO"),
)
# Case-sensitive: lowercase "so"/"mc" in prose are not conduit codes.
CONDUIT_CODE_RE = re.compile(r"\b(LMZC|LFMC|FMC|MMC|MCC|EMT|MC|SO)\b")

LENGTH_RANGE_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\d+)\s*['’]\s*(?:-|to)\s*(\d+)\s*['’]"),
    re.compile(
        r"ranging\s+from\s+(\d+)\s*(?:'|’|ft\.?|feet|foot)?\s*(?:to|-)\s*(\d+)",
        re.IGNORECASE,
    ),
    re.compile(r"(\d+)\s*-\s*(\d+)\s*(?:ft\.?|feet|foot)\b", re.IGNORECASE),
)
DISCRETE_LENGTHS_RE = re.compile(r"lengths?\s*:\s*(\d+(?:\s*,\s*\d+)*)", re.IGNORECASE)

COLOR_NAMES: tuple[tuple[str, str], ...] = (
    ("red", "Red"),
    ("orange", "Orange"),
    ("blue", "Blue"),
    ("yellow", "Yellow"),
    ("purple", "Purple"),
    ("tan", "Tan"),
    ("pink", "Pink"),
    ("gray", "Gray"),
    ("grey", "Gray"),
    ("green", "Green"),
    ("black", "Black"),
    ("white", "White"),
)
COLOR_RE = re.compile(r"\b(" + "|".join(name for name, _ in COLOR_NAMES) + r")\b", re.IGNORECASE)
SENTENCE_SPLIT_RE = re.compile(r"[\n.;]+")

TAIL_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"tails?\s*(?:length\s*)?(?:of\s*)?(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*(?:'|’|ft\.?|feet|foot)?\s*(?:pig)?tails?\b", re.IGNORECASE),
    re.compile(r"pig\s*tail\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
)


def _bell_box(text: str) -> str | None:
    lowered = text.lower()
    if "ip67" in lowered or "bell box" in lowered:
        return "IP67 bell box"
    return None


def _amperage(text: str) -> str | None:
    match = re.search(r"\b(\d+)\s*(?:a|amps?)\b", text, re.IGNORECASE)
    return f"{match.group(1)}A" if match else None


def _wire_gauge(text: str) -> str | None:
    match = re.search(r"#\s*(\d+)\s*awg\b|\b(\d+)\s*awg\b", text, re.IGNORECASE)
    if not match:
        return None
    return f"#{match.group(1) or match.group(2)} AWG"


def _wire_count(text: str) -> str | None:
    match = re.search(r"\b(\d+)\s*(?:wires|conductors)\b", text, re.IGNORECASE)
    return f"{match.group(1)} wires" if match else None


FEATURE_RULES: tuple[Callable[[str], str | None], ...] = (
    _bell_box,
    _amperage,
    _wire_gauge,
    _wire_count,
)


def extract_quantity(text: str) -> int | None:
    """Return the first total quantity stated in ``text``, if any."""

    for rule in QUANTITY_RULES:
        match = rule.search(text)
        if match:
            return int(match.group(1))
    return None


def extract_quantities(text: str) -> tuple[int, ...]:
    """Every distinct quantity stated in ``text``, in rule then text order."""

    found: list[int] = []
    for rule in QUANTITY_RULES:
        for match in rule.finditer(text):
            value = int(match.group(1))
            if value not in found:
                found.append(value)
    return tuple(found)


def extract_receptacle(text: str) -> str:
    """Map receptacle prose to a code; aliases are checked before raw codes."""

    lowered = text.lower()
    for alias, code in RECEPTACLE_ALIASES:
        if alias in lowered:
            return code
    match = RECEPTACLE_CODE_RE.search(text)
    return match.group(1).upper() if match else ""


def extract_conduit(text: str) -> str:
    """Map conduit prose to a code; longer aliases win over shorter ones."""

    lowered = text.lower()
    for alias, code in CONDUIT_ALIASES:
        if alias in lowered:
            return code
    match = CONDUIT_CODE_RE.search(text)
    return match.group(1) if match else ""


def extract_length_range(text: str) -> LengthRange | None:
    """Read a length span or an explicit ``lengths:`` list.

    Args:
        text: Full natural-language block.

    Returns:
        ``LengthRange`` with ``minimum <= maximum``, or ``None`` when the text
        states no lengths.
    """

    for rule in LENGTH_RANGE_RULES:
        match = rule.search(text)
        if match:
            low, high = sorted((int(match.group(1)), int(match.group(2))))
            return LengthRange(minimum=low, maximum=high)

    discrete_match = DISCRETE_LENGTHS_RE.search(text)
    if discrete_match:
        lengths = tuple(
            dict.fromkeys(int(value) for value in re.findall(r"\d+", discrete_match.group(1)))
        )
        return LengthRange(minimum=min(lengths), maximum=max(lengths), discrete=lengths)
    return None


def extract_colors(text: str) -> tuple[str, ...]:
    """Collect colors named in sentences that mention "color"/"colour".

    Colors keep their order of appearance and are de-duplicated after
    canonicalisation, so ``grey`` and ``gray`` count once.
    """

    canonical = dict(COLOR_NAMES)
    colors: list[str] = []
    for sentence in SENTENCE_SPLIT_RE.split(text):
        lowered = sentence.lower()
        if "color" not in lowered and "colour" not in lowered:
            continue
        for match in COLOR_RE.finditer(sentence):
            name = canonical[match.group(1).lower()]
            if name not in colors:
                colors.append(name)
    return tuple(colors)


def extract_features(text: str) -> tuple[str, ...]:
    """Run every feature rule once and keep the hits in rule order."""

    features: list[str] = []
    for rule in FEATURE_RULES:
        feature = rule(text)
        if feature and feature not in features:
            features.append(feature)
    return tuple(features)


def extract_tail_length(text: str) -> float | None:
    """Return the first tail/pigtail length stated in ``text``, if any."""

    for rule in TAIL_RULES:
        match = rule.search(text)
        if match:
            return float(match.group(1))
    return None


def interpret(block: str, config: PipelineConfig = DEFAULT_CONFIG) -> NaturalLanguageSpec:
    """Build a :class:`NaturalLanguageSpec` from a free-form text block.

    The whole block is scanned at once, so facts may be spread over several
    lines. Missing facts fall back to defaults: quantity 1, empty receptacle and
    conduit (flagged later by the resolver), a single-point length range at
    ``config.default_whip_length``, no colors, and
    ``config.default_tail_length``.

    Args:
        block: Natural-language order description.
        config: Run configuration supplying defaults.

    Returns:
        Interpreted specification.
    """

    quantity = extract_quantity(block)
    stated = extract_quantities(block)
    if len(stated) > 1:
        logger.warning("Order states several quantities %s; using %d", list(stated), quantity)
    length_range = extract_length_range(block)
    if length_range is None:
        length_range = LengthRange(
            minimum=config.default_whip_length,
            maximum=config.default_whip_length,
        )
    tail_length = extract_tail_length(block)

    return NaturalLanguageSpec(
        total_quantity=quantity if quantity is not None and quantity > 0 else 1,
        receptacle_type=extract_receptacle(block),
        conduit_type=extract_conduit(block),
        length_range=length_range,
        colors=extract_colors(block),
        features=extract_features(block),
        tail_length=tail_length if tail_length is not None else config.default_tail_length,
    )
