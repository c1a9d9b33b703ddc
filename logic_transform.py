# logic_transform.py
"""
Backend Payload Transform
Converts raw perfume / recommendation payloads into Perfume and
RecommendationItem records with normalized notes.
(result size can be tuned via env: MAX_RECOMMENDATIONS=4)
"""
import os

from models import NOTE_TIERS, Perfume, PerfumeNotes, RecommendationItem, RecommendationSignal
from logic_notes import normalize_perfume_notes, parse_note_field

MAX_RECOMMENDATIONS = int(os.getenv("MAX_RECOMMENDATIONS", "4"))

SIGNAL_FIELDS = ("similarityScore", "sharedNotes", "olfactiveProfile")
_TEXT_FIELDS = ("name", "brand", "title", "description")


def unwrap_neo4j_int(value):
    """Neo4j integers arrive as {"low": n, "high": 0}; plain values pass through."""
    if isinstance(value, dict) and "low" in value:
        return value["low"]
    return value


def _text(value):
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _note_field(value):
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return [v for v in value if isinstance(v, str)]
    return None


def _structured_notes(value):
    if not isinstance(value, dict):
        return None
    return PerfumeNotes(**{tier: parse_note_field(value.get(tier)) for tier in NOTE_TIERS})


def transform_perfume(raw) -> Perfume:
    """
    Build a Perfume from a backend record.

    Args:
        raw: dict as returned by the perfumes / recommendations endpoints

    Returns:
        Perfume with `notes` filled by the note normalizer
    """
    if isinstance(raw, Perfume):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, dict):
        raw = {}

    year = unwrap_neo4j_int(raw.get("year"))
    if not isinstance(year, (int, str)) or isinstance(year, bool):
        year = None

    fields = {name: _text(raw.get(name)) for name in _TEXT_FIELDS}
    perfume = Perfume(
        id=_text(raw.get("id")),
        year=year,
        imgId=raw.get("imgId") if isinstance(raw.get("imgId"), str) else None,
        imageUrl=raw.get("imageUrl") if isinstance(raw.get("imageUrl"), str) else None,
        top_notes=_note_field(raw.get("top_notes")),
        middle_notes=_note_field(raw.get("middle_notes")),
        base_notes=_note_field(raw.get("base_notes")),
        notes=_structured_notes(raw.get("notes")),
        **fields,
    )
    perfume.notes = normalize_perfume_notes(perfume)
    return perfume


def extract_signal(item) -> RecommendationSignal:
    """
    Read the similarity signal of one recommendation entry.

    The backend nests the signal on the perfume object; fields found on the
    entry itself take precedence.
    """
    if not isinstance(item, dict):
        return RecommendationSignal()

    nested = item.get("perfume") if isinstance(item.get("perfume"), dict) else {}
    values = {}
    for field in SIGNAL_FIELDS:
        if item.get(field) is not None:
            values[field] = item[field]
        elif nested.get(field) is not None:
            values[field] = nested[field]
    return RecommendationSignal.model_validate(values)


def _entries(payload):
    if isinstance(payload, dict):
        if payload.get("status") not in (None, "success"):
            print(f"[WARNING] Recommendation payload status '{payload.get('status')}': {payload.get('message', '')}")
            return []
        payload = payload.get("data")
    if not isinstance(payload, list):
        return []
    return payload


def transform_recommendations(payload, limit=None, exclude_ids=()) -> list:
    """
    Turn a recommendations response into ranked RecommendationItems.

    Args:
        payload: list of entries, or the {"status", "data"} envelope
        limit: max items kept (default MAX_RECOMMENDATIONS, None/<=0 keeps all)
        exclude_ids: perfume ids to drop before ranking (e.g. rejected ones)

    Returns:
        List of RecommendationItem, in backend order
    """
    if limit is None:
        limit = MAX_RECOMMENDATIONS
    excluded = {str(i) for i in exclude_ids or ()}

    items = []
    for position, entry in enumerate(_entries(payload)):
        if not isinstance(entry, dict):
            print(f"[WARNING] Skipping malformed recommendation entry #{position}: {type(entry).__name__}")
            continue

        raw_perfume = entry.get("perfume") if isinstance(entry.get("perfume"), dict) else entry
        perfume = transform_perfume(raw_perfume)
        if perfume.id and perfume.id in excluded:
            continue

        evidence = entry.get("notes") if isinstance(entry.get("notes"), list) else []
        items.append(RecommendationItem(
            perfume=perfume,
            signal=extract_signal(entry),
            notes=[n for n in evidence if isinstance(n, dict)],
        ))

    if limit and limit > 0:
        items = items[:limit]
    return items
