# logic_explain.py
"""
Recommendation Explanations
Picks one "why this was recommended" reason per candidate.

Two strategies live here and are intentionally kept apart:
- explain_from_signal: backend similarity signals, first matching rule wins
- explain_pair: two full perfume records, highest confidence wins
"""
import re

import numpy as np

from models import FAMILIES, RecommendationReason, RecommendationSignal, ExplainedRecommendation
from logic_notes import all_notes

# Signal rule thresholds
SHARED_NOTES_THRESHOLD = 6
FAMILY_SCORE_THRESHOLD = 4.0
SIMILARITY_THRESHOLD = 2.5
SIMILARITY_SCALE = 3.0

# Pairwise comparison tables
COLOR_PREFIXES = ("white", "black", "pink", "red", "blue", "green", "yellow")
NOTE_SUFFIXES = ("oil", "extract", "absolute")
COMPLEMENTARY_PAIRS = (
    ("citrus", "woody"),
    ("floral", "spicy"),
    ("fresh", "warm"),
    ("light", "deep"),
    ("sweet", "dry"),
    ("aquatic", "oriental"),
)

_PREFIX_RE = re.compile(r"^(?:%s)\s+" % "|".join(COLOR_PREFIXES))
_SUFFIX_RE = re.compile(r"\s+(?:%s)$" % "|".join(NOTE_SUFFIXES))
_WHITESPACE = re.compile(r"\s+")


def _clamp(value):
    return float(min(1.0, max(0.0, value)))


def family_vector(profile) -> np.ndarray:
    """Profile scores as a vector aligned with FAMILIES (missing -> 0)."""
    profile = profile or {}
    return np.array([float(profile.get(family, 0.0) or 0.0) for family in FAMILIES], dtype=float)


def dominant_family(profile):
    """
    Highest scoring olfactive family.

    Ties go to the family listed first in FAMILIES (np.argmax returns the
    first maximum). A profile without any positive score has no dominant
    family.

    Returns:
        (family, score), or ("", 0.0)
    """
    vec = family_vector(profile)
    idx = int(np.argmax(vec))
    if vec[idx] <= 0:
        return "", 0.0
    return FAMILIES[idx], float(vec[idx])


def _format_number(value):
    """Shortest round-trip text, without a trailing ".0" on whole numbers."""
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def explain_from_signal(signal, index: int = 0) -> RecommendationReason:
    """
    Explain one backend recommendation.

    Rules are evaluated in order and the first match wins; each rule caps
    its confidence below the cap of the rule before it.

    Args:
        signal: RecommendationSignal (or a dict in backend shape)
        index: Zero-based rank of the candidate in the result list

    Returns:
        RecommendationReason
    """
    if isinstance(signal, dict):
        signal = RecommendationSignal.model_validate(signal)
    elif not isinstance(signal, RecommendationSignal):
        signal = RecommendationSignal()

    score = signal.similarity_score
    shared = _format_number(signal.shared_notes)

    if signal.shared_notes > SHARED_NOTES_THRESHOLD:
        return RecommendationReason(
            type="similar_notes",
            confidence=_clamp(min(0.95, score / SIMILARITY_SCALE)),
            details=f"Shares {shared} fragrance notes with incredible similarity",
            matching_elements=[f"{shared} shared notes"],
        )

    family, family_score = dominant_family(signal.olfactive_profile)
    if family_score > FAMILY_SCORE_THRESHOLD:
        return RecommendationReason(
            type="similar_family",
            confidence=_clamp(min(0.9, score / SIMILARITY_SCALE)),
            details=f"Similar {family.lower()} profile with {_format_number(family_score)} matching elements",
            matching_elements=[family],
        )

    if score > SIMILARITY_THRESHOLD:
        return RecommendationReason(
            type="complementary",
            confidence=_clamp(min(0.85, score / SIMILARITY_SCALE)),
            details=f"High compatibility score of {score:.1f} - perfect match!",
            matching_elements=[f"{score:.1f} similarity"],
        )

    return RecommendationReason(
        type="popular_choice",
        confidence=_clamp(max(0.6, 0.8 - index * 0.1)),
        details="Curated recommendation based on advanced fragrance analysis",
        matching_elements=[],
    )


def comparison_key(note) -> str:
    """Looser note key for pairwise matching: drops one colour prefix and one suffix."""
    if not isinstance(note, str):
        return ""
    key = _WHITESPACE.sub(" ", note.lower()).strip()
    key = _PREFIX_RE.sub("", key)
    return _SUFFIX_RE.sub("", key)


def common_notes(source_notes, candidate_notes) -> list:
    """Source notes whose comparison key also appears in the candidate, in source order."""
    candidate_keys = {comparison_key(n) for n in candidate_notes}
    candidate_keys.discard("")

    seen = set()
    common = []
    for note in source_notes:
        key = comparison_key(note)
        if key in candidate_keys and key not in seen:
            seen.add(key)
            common.append(note)
    return common


def are_complementary(source_notes, candidate_notes) -> bool:
    lowered_source = [n.lower() for n in source_notes]
    lowered_candidate = [n.lower() for n in candidate_notes]

    for first, second in COMPLEMENTARY_PAIRS:
        has_first = any(first in n for n in lowered_source)
        has_second = any(second in n for n in lowered_candidate)
        if has_first and has_second:
            return True
    return False


def _same_brand(source, candidate):
    a = (source.brand or "").strip().lower()
    b = (candidate.brand or "").strip().lower()
    return bool(a) and a == b


def explain_pair(source, candidate, index: int = 0) -> RecommendationReason:
    """
    Explain a recommendation from two full perfume records.

    Used when the backend sent no similarity signal. Every matching reason
    is collected and the most confident one is returned (ties keep the
    earlier reason: brand, then notes, then complementary).

    Args:
        source: Perfume the user is looking at
        candidate: Recommended Perfume
        index: Zero-based rank of the candidate

    Returns:
        RecommendationReason
    """
    reasons = []

    if _same_brand(source, candidate):
        reasons.append(RecommendationReason(
            type="same_brand",
            confidence=0.85,
            details=f"Both perfumes are from {source.brand}, known for their consistent quality and style.",
            matching_elements=[source.brand],
        ))

    source_notes = all_notes(source)
    candidate_notes = all_notes(candidate)

    shared = common_notes(source_notes, candidate_notes)
    if shared:
        plural = "s" if len(shared) > 1 else ""
        reasons.append(RecommendationReason(
            type="similar_notes",
            confidence=_clamp(min(0.95, 0.6 + len(shared) * 0.1)),
            details=f"Shares {len(shared)} key fragrance note{plural}: {', '.join(shared[:3])}.",
            matching_elements=shared,
        ))

    if are_complementary(source_notes, candidate_notes):
        reasons.append(RecommendationReason(
            type="complementary",
            confidence=0.75,
            details="This fragrance complements your choice with contrasting yet harmonious notes.",
            matching_elements=[],
        ))

    if not reasons:
        reasons.append(RecommendationReason(
            type="popular_choice",
            confidence=_clamp(max(0.5, 0.8 - index * 0.1)),
            details="Highly rated fragrance that perfume enthusiasts often enjoy alongside similar scents.",
            matching_elements=[],
        ))

    best = reasons[0]
    for reason in reasons[1:]:
        if reason.confidence > best.confidence:
            best = reason
    return best


def explain_recommendations(items) -> list:
    """Signal-based reasons for a ranked list of RecommendationItem."""
    return [
        ExplainedRecommendation(perfume=item.perfume, reason=explain_from_signal(item.signal, index))
        for index, item in enumerate(items)
    ]


def explain_similar(source, candidates) -> list:
    """Pairwise reasons for a ranked list of candidate perfumes."""
    return [
        ExplainedRecommendation(perfume=candidate, reason=explain_pair(source, candidate, index))
        for index, candidate in enumerate(candidates)
    ]
