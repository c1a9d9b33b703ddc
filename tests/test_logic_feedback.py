from models import FeedbackData, Perfume, PerfumeNotes, RecommendationItem, RecommendationSignal
from logic_feedback import (
    analyze_preferences,
    clear_feedback,
    feedback_status,
    filter_rejected,
    has_enough_feedback,
    toggle_love,
    toggle_reject,
    total_feedback_count,
)


def loved_perfume(pid, brand, year=None, top=(), middle=(), base=()):
    return Perfume(
        id=pid,
        brand=brand,
        year=year,
        notes=PerfumeNotes(top=list(top), middle=list(middle), base=list(base)),
    )


def test_toggle_love_and_reject_are_exclusive():
    data = clear_feedback()
    data = toggle_love(data, "a")
    assert feedback_status(data, "a") == "loved"

    data = toggle_reject(data, "a")
    assert feedback_status(data, "a") == "rejected"
    assert data.loved == []

    data = toggle_love(data, "a")
    assert data.loved == ["a"]
    assert data.rejected == []


def test_toggle_twice_removes():
    data = toggle_love(toggle_love(FeedbackData(), "a"), "a")
    assert feedback_status(data, "a") is None
    assert data.timestamp


def test_toggle_does_not_mutate_input():
    data = FeedbackData(loved=["a"], rejected=["b"])
    toggle_reject(data, "a")
    assert data.loved == ["a"]
    assert data.rejected == ["b"]


def test_counts_and_threshold():
    data = FeedbackData(loved=["a", "b"], rejected=["c"])
    assert total_feedback_count(data) == 3
    assert has_enough_feedback(data)
    assert not has_enough_feedback(FeedbackData(loved=["a"]))
    assert has_enough_feedback(FeedbackData(loved=["a"]), minimum=1)


def test_analyze_preferences():
    perfumes = [
        loved_perfume("a", "Dior", year=2010, top=["Bergamot", "Pink Pepper"], base=["Musk"]),
        loved_perfume("b", "Dior", year="2015", top=["bergamot"], middle=["Rose"]),
        loved_perfume("c", "Chanel", year="unknown", base=["musk", "Amber"]),
        loved_perfume("d", "Hermes", year=1990, top=["Bergamot"]),
    ]
    data = FeedbackData(loved=["a", "b", "c"], rejected=["d"])

    analysis = analyze_preferences(data, perfumes)

    assert [(n.note, n.count) for n in analysis.top_notes] == [
        ("bergamot", 2),
        ("musk", 2),
        ("pink pepper", 1),
        ("rose", 1),
        ("amber", 1),
    ]
    assert [(b.brand, b.count) for b in analysis.top_brands] == [("Dior", 2), ("Chanel", 1)]
    assert (analysis.preferred_year_range.min, analysis.preferred_year_range.max) == (2010, 2015)


def test_analyze_preferences_without_loved():
    analysis = analyze_preferences(FeedbackData(rejected=["a"]), [loved_perfume("a", "X")])
    assert analysis.top_notes == []
    assert analysis.top_brands == []
    assert analysis.preferred_year_range is None


def test_filter_rejected_handles_perfumes_and_items():
    data = FeedbackData(rejected=["b"])
    perfumes = [Perfume(id="a"), Perfume(id="b")]
    items = [RecommendationItem(perfume=p, signal=RecommendationSignal()) for p in perfumes]

    assert [p.id for p in filter_rejected(perfumes, data)] == ["a"]
    assert [i.perfume.id for i in filter_rejected(items, data)] == ["a"]
