# logic_feedback.py
"""
Love / Not-for-me Feedback
Pure operations over FeedbackData. Where the data is stored is up to the caller.
"""
import os
from collections import Counter
from datetime import datetime, timezone

from models import BrandCount, FeedbackAnalysis, FeedbackData, FeedbackStatus, NoteCount, NOTE_TIERS, YearRange
from logic_notes import normalize_note_key

INSIGHT_MIN_FEEDBACK = int(os.getenv("INSIGHT_MIN_FEEDBACK", "3"))
TOP_NOTES_LIMIT = 5
TOP_BRANDS_LIMIT = 3


def _now():
    return datetime.now(timezone.utc).isoformat()


def clear_feedback() -> FeedbackData:
    return FeedbackData(loved=[], rejected=[], timestamp=_now())


def feedback_status(data: FeedbackData, perfume_id: str) -> FeedbackStatus:
    if perfume_id in data.loved:
        return "loved"
    if perfume_id in data.rejected:
        return "rejected"
    return None


def toggle_love(data: FeedbackData, perfume_id: str) -> FeedbackData:
    """Love a perfume, or un-love it if already loved. Always removes it from rejected."""
    if perfume_id in data.loved:
        loved = [i for i in data.loved if i != perfume_id]
    else:
        loved = data.loved + [perfume_id]
    rejected = [i for i in data.rejected if i != perfume_id]
    return FeedbackData(loved=loved, rejected=rejected, timestamp=_now())


def toggle_reject(data: FeedbackData, perfume_id: str) -> FeedbackData:
    """Mirror of toggle_love for the rejected list."""
    if perfume_id in data.rejected:
        rejected = [i for i in data.rejected if i != perfume_id]
    else:
        rejected = data.rejected + [perfume_id]
    loved = [i for i in data.loved if i != perfume_id]
    return FeedbackData(loved=loved, rejected=rejected, timestamp=_now())


def total_feedback_count(data: FeedbackData) -> int:
    return len(data.loved) + len(data.rejected)


def has_enough_feedback(data: FeedbackData, minimum: int = INSIGHT_MIN_FEEDBACK) -> bool:
    return total_feedback_count(data) >= minimum


def _year(value):
    try:
        year = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return year if year > 0 else None


def analyze_preferences(data: FeedbackData, perfumes) -> FeedbackAnalysis:
    """
    Summarize what the user loved.

    Args:
        data: Current feedback
        perfumes: Perfumes with normalized `notes` (see logic_transform)

    Returns:
        FeedbackAnalysis with top notes, top brands and the year range
    """
    loved_ids = set(data.loved)
    loved = [p for p in perfumes if p.id in loved_ids]
    if not loved:
        return FeedbackAnalysis()

    note_counts = Counter()
    brand_counts = Counter()
    years = []

    for perfume in loved:
        if perfume.notes is not None:
            for tier in NOTE_TIERS:
                for note in getattr(perfume.notes, tier):
                    key = normalize_note_key(note)
                    if key:
                        note_counts[key] += 1
        brand_counts[perfume.brand] += 1

        year = _year(perfume.year)
        if year is not None:
            years.append(year)

    # most_common keeps first-seen order among equal counts
    return FeedbackAnalysis(
        top_notes=[NoteCount(note=n, count=c) for n, c in note_counts.most_common(TOP_NOTES_LIMIT)],
        top_brands=[BrandCount(brand=b, count=c) for b, c in brand_counts.most_common(TOP_BRANDS_LIMIT)],
        preferred_year_range=YearRange(min=min(years), max=max(years)) if years else None,
    )


def filter_rejected(items, data: FeedbackData) -> list:
    """Drop perfumes (or items carrying a .perfume) the user marked as not for them."""
    rejected = set(data.rejected)
    kept = []
    for item in items:
        perfume = getattr(item, "perfume", item)
        if getattr(perfume, "id", None) not in rejected:
            kept.append(item)
    return kept
