import pytest

from models import Perfume
from logic_transform import (
    MAX_RECOMMENDATIONS,
    extract_signal,
    transform_perfume,
    transform_recommendations,
    unwrap_neo4j_int,
)


def backend_entry(pid, score=0.0, shared=0, profile=None, **perfume_fields):
    perfume = {"id": pid, "name": f"Perfume {pid}", "brand": "Maison", **perfume_fields}
    perfume.update({"similarityScore": score, "sharedNotes": shared, "olfactiveProfile": profile or {}})
    return {"perfume": perfume, "notes": [{"category": "top", "note": {"properties": {"name": "rose"}}}]}


def test_unwrap_neo4j_int():
    assert unwrap_neo4j_int({"low": 2011, "high": 0}) == 2011
    assert unwrap_neo4j_int(1999) == 1999
    assert unwrap_neo4j_int(None) is None


def test_transform_perfume_normalizes_comma_joined_notes():
    perfume = transform_perfume({
        "id": "abc-1",
        "brand": "Le Labo",
        "year": {"low": 2006, "high": 0},
        "top_notes": "pink pepper, Bergamot, bergamot",
        "middle_notes": "iso e super",
        "base_notes": None,
    })
    assert perfume.year == 2006
    assert perfume.notes.top == ["Pink Pepper", "Bergamot"]
    assert perfume.notes.middle == ["Iso E Super"]
    assert perfume.notes.base == []


def test_transform_perfume_prefers_structured_notes():
    perfume = transform_perfume({
        "id": "x",
        "top_notes": "lemon",
        "notes": {"top": ["hedione hc", "Hedione HC"], "middle": "rose, oud", "base": 12},
    })
    assert perfume.notes.top == ["Hedione HC"]
    assert perfume.notes.middle == ["Rose", "Oud"]
    assert perfume.notes.base == []


@pytest.mark.parametrize("raw", [None, "perfume", [], {}])
def test_transform_perfume_never_raises(raw):
    perfume = transform_perfume(raw)
    assert perfume.id == ""
    assert perfume.notes.top == []


def test_transform_perfume_coerces_ids_and_bad_years():
    perfume = transform_perfume({"id": 17, "brand": None, "year": {"high": 1}, "imgId": 5})
    assert perfume.id == "17"
    assert perfume.brand == ""
    assert perfume.year is None
    assert perfume.img_id is None


def test_transform_accepts_perfume_instance():
    perfume = transform_perfume(Perfume(id="p", top_notes="oud, OUD"))
    assert perfume.notes.top == ["Oud"]


def test_extract_signal_reads_nested_perfume_fields():
    sig = extract_signal(backend_entry("a", score=2.2, shared=5, profile={"WOODY": 6}))
    assert sig.similarity_score == pytest.approx(2.2)
    assert sig.shared_notes == 5
    assert sig.olfactive_profile == {"WOODY": 6.0}


def test_extract_signal_top_level_fields_win():
    entry = backend_entry("a", score=1.0)
    entry["similarityScore"] = 2.8
    assert extract_signal(entry).similarity_score == pytest.approx(2.8)


def test_extract_signal_missing():
    sig = extract_signal({"perfume": {"id": "a"}})
    assert sig.similarity_score == 0.0
    assert sig.shared_notes == 0
    assert sig.olfactive_profile == {}
    assert extract_signal("nope").shared_notes == 0


def test_extract_signal_overflowing_numbers():
    sig = extract_signal({"perfume": {"id": "a", "sharedNotes": 1e400, "similarityScore": "-inf"}})
    assert sig.shared_notes == 0
    assert sig.similarity_score == 0.0


def test_transform_recommendations_envelope_and_default_limit():
    payload = {"status": "success", "data": [backend_entry(str(i)) for i in range(10)]}
    items = transform_recommendations(payload)
    assert len(items) == MAX_RECOMMENDATIONS
    assert items[0].perfume.id == "0"
    assert items[0].notes[0]["category"] == "top"


def test_transform_recommendations_excludes_before_limit():
    payload = [backend_entry(str(i)) for i in range(5)]
    items = transform_recommendations(payload, limit=3, exclude_ids=["0", "2"])
    assert [i.perfume.id for i in items] == ["1", "3", "4"]


def test_transform_recommendations_zero_limit_keeps_all():
    payload = [backend_entry(str(i)) for i in range(6)]
    assert len(transform_recommendations(payload, limit=0)) == 6


def test_transform_recommendations_skips_malformed(capsys):
    payload = [backend_entry("a"), "junk", None, backend_entry("b")]
    items = transform_recommendations(payload, limit=10)
    assert [i.perfume.id for i in items] == ["a", "b"]
    assert "[WARNING]" in capsys.readouterr().out


def test_transform_recommendations_error_envelope(capsys):
    assert transform_recommendations({"status": "error", "message": "boom"}) == []
    assert "boom" in capsys.readouterr().out


@pytest.mark.parametrize("payload", [None, "data", 5, {"status": "success"}])
def test_transform_recommendations_bad_payload(payload):
    assert transform_recommendations(payload) == []


def test_flat_entries_without_perfume_key():
    items = transform_recommendations([{"id": "z", "similarityScore": 2.6, "top_notes": "rose"}], limit=1)
    assert items[0].perfume.id == "z"
    assert items[0].perfume.notes.top == ["Rose"]
    assert items[0].signal.similarity_score == pytest.approx(2.6)
