# logic_notes.py
"""
Fragrance Note Normalization
Turns raw note fields from the backend into deduplicated, display-ready names.
Never raises: bad input degrades to an empty list or an empty string.
"""
import re
from types import MappingProxyType

from models import NOTE_TIERS, PerfumeNotes

# Multi-word notes that must stay one token
COMPOUND_NOTES = frozenset([
    "iso e super",
    "pink pepper",
    "black pepper",
    "white pepper",
    "green pepper",
    "red pepper",
    "white musk",
    "black currant",
    "red berries",
    "black tea",
    "green tea",
    "white tea",
    "sea notes",
    "woody notes",
    "aquatic notes",
    "citrus notes",
    "spicy notes",
    "floral notes",
    "oriental notes",
    "ambergris accord",
    "oud wood",
    "sea salt",
    "tonka bean",
    "vanilla bean",
    "cocoa bean",
    "coffee bean",
    "ambroxan super",
    "hedione hc",
    "cashmeran wood",
    "cedar wood",
    "sandalwood accord",
    "patchouli leaf",
    "orange blossom",
    "lily of the valley",
    "apple blossom",
])

# Display strings the title-case rule would get wrong
CAPITALIZATION_RULES = MappingProxyType({
    "ylang-ylang": "Ylang-Ylang",
    "iso e super": "Iso E Super",
    "hedione hc": "Hedione HC",
    "ambroxan": "Ambroxan",
    "cashmeran": "Cashmeran",
    "tonka bean": "Tonka Bean",
    "oud": "Oud",
    "patchouli": "Patchouli",
})

_WHITESPACE = re.compile(r"\s+")


def normalize_note_key(raw) -> str:
    """Lower-case, trim and collapse whitespace. This is the note's identity."""
    if not isinstance(raw, str):
        return ""
    return _WHITESPACE.sub(" ", raw.strip().lower())


def _capitalize(word):
    # Leave letters whose upper case does not map back one-to-one ("ß" -> "SS")
    first = word[:1]
    upper = first.upper()
    if len(upper) != 1 or upper.lower() != first:
        return word
    return upper + word[1:]


def format_note(raw) -> str:
    """
    Format a single note name for display.

    Overrides in CAPITALIZATION_RULES win; everything else is title-cased
    word by word. COMPOUND_NOTES is not consulted here.

    Args:
        raw: Note text as received from the API

    Returns:
        Display string, or "" for empty/non-string input
    """
    key = normalize_note_key(raw)
    if not key:
        return ""

    if key in CAPITALIZATION_RULES:
        return CAPITALIZATION_RULES[key]

    return " ".join(_capitalize(word) for word in key.split(" "))


def _split_note_input(value):
    if value is None:
        return []
    if isinstance(value, str):
        # Commas only: "pink pepper" must survive as one segment
        return [segment.strip() for segment in value.split(",") if segment.strip()]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    return []


def _dedupe_formatted(raw_notes):
    seen = set()
    formatted = []
    for raw in raw_notes:
        note = format_note(raw)
        key = normalize_note_key(note)
        if not key or key in seen:
            continue
        seen.add(key)
        formatted.append(note)
    return formatted


def parse_note_field(value) -> list:
    """
    Parse one note field (comma-joined string or list of strings).

    Args:
        value: str, list/tuple of str, or None

    Returns:
        Formatted notes, first occurrence of each normalized name kept,
        in original order
    """
    return _dedupe_formatted(_split_note_input(value))


def format_notes(notes) -> list:
    """Format an already split list of notes. Non-lists give []."""
    if not isinstance(notes, (list, tuple)):
        return []
    return _dedupe_formatted(n for n in notes if isinstance(n, str))


def is_compound_note(note) -> bool:
    return normalize_note_key(note) in COMPOUND_NOTES


def _tier_source(perfume, tier):
    structured = getattr(perfume, "notes", None)
    if structured is not None:
        tier_notes = getattr(structured, tier, None)
        if tier_notes:
            return tier_notes
    return getattr(perfume, f"{tier}_notes", None)


def normalize_perfume_notes(perfume) -> PerfumeNotes:
    """
    Build the structured notes for a perfume.

    A populated structured tier takes precedence over the raw *_notes field.
    """
    return PerfumeNotes(**{tier: parse_note_field(_tier_source(perfume, tier)) for tier in NOTE_TIERS})


def all_notes(perfume) -> list:
    """Every note of a perfume (structured tiers first, then raw fields), blanks dropped."""
    notes = []

    structured = getattr(perfume, "notes", None)
    if structured is not None:
        for tier in NOTE_TIERS:
            notes.extend(getattr(structured, tier, None) or [])

    for tier in NOTE_TIERS:
        notes.extend(_split_note_input(getattr(perfume, f"{tier}_notes", None)))

    return [n.strip() for n in notes if isinstance(n, str) and n.strip()]
