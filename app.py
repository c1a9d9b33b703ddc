# app.py
import os
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from models import ExplainedRecommendation, FeedbackAnalysis, FeedbackData, Perfume, FAMILIES
from logic_notes import COMPOUND_NOTES, CAPITALIZATION_RULES, parse_note_field
from logic_explain import explain_recommendations, explain_similar
from logic_transform import MAX_RECOMMENDATIONS, transform_perfume, transform_recommendations
from logic_feedback import INSIGHT_MIN_FEEDBACK, analyze_preferences, has_enough_feedback, total_feedback_count
from logic_validate import validate_perfume_id, sanitize_error_message

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

print("[OK] Note normalizer loaded")
print(f"     - {len(COMPOUND_NOTES)} compound notes, {len(CAPITALIZATION_RULES)} capitalization overrides")
print(f"     - Olfactive families: {', '.join(FAMILIES)}")


class NotesRequest(BaseModel):
    notes: Union[str, List[str], None] = None


class NotesResponse(BaseModel):
    notes: List[str]


class ExplainRequest(BaseModel):
    # Backend /api/recommendations response: a list or the {"status", "data"} envelope
    payload: Union[Dict[str, Any], List[Any]]
    rejected: List[str] = []
    limit: Optional[int] = None


class CompareRequest(BaseModel):
    source: Dict[str, Any]
    candidates: List[Dict[str, Any]]


class InsightsRequest(BaseModel):
    feedback: FeedbackData
    perfumes: List[Dict[str, Any]] = []


class InsightsResponse(BaseModel):
    enough_feedback: bool
    total_feedback: int
    analysis: FeedbackAnalysis


app = FastAPI(title="Fragrance Recommendation Explainer API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _checked_perfume(raw: Dict[str, Any], role: str) -> Perfume:
    perfume = transform_perfume(raw)
    if perfume.id and not validate_perfume_id(perfume.id):
        raise HTTPException(status_code=400, detail=f"Invalid {role} perfume id")
    return perfume


@app.get("/health")
def health():
    return {
        "status": "ok",
        "compound_notes": len(COMPOUND_NOTES),
        "capitalization_rules": len(CAPITALIZATION_RULES),
        "families": FAMILIES,
        "max_recommendations": MAX_RECOMMENDATIONS,
        "insight_min_feedback": INSIGHT_MIN_FEEDBACK,
    }


@app.post("/notes/format", response_model=NotesResponse)
def format_notes_endpoint(body: NotesRequest):
    return NotesResponse(notes=parse_note_field(body.notes))


@app.post("/perfumes/transform", response_model=Perfume)
def transform_perfume_endpoint(raw: Dict[str, Any]):
    return _checked_perfume(raw, "source")


@app.post("/recommendations/explain", response_model=List[ExplainedRecommendation])
def explain_endpoint(body: ExplainRequest):
    if body.limit is not None and body.limit < 0:
        raise HTTPException(status_code=422, detail="limit must be >= 0")
    try:
        items = transform_recommendations(body.payload, limit=body.limit, exclude_ids=body.rejected)
    except Exception as e:
        print(f"[WARNING] Could not read recommendation payload: {e}")
        raise HTTPException(status_code=500, detail=sanitize_error_message(e))
    return explain_recommendations(items)


@app.post("/recommendations/compare", response_model=List[ExplainedRecommendation])
def compare_endpoint(body: CompareRequest):
    source = _checked_perfume(body.source, "source")
    candidates = [_checked_perfume(c, "candidate") for c in body.candidates]
    return explain_similar(source, candidates)


@app.post("/feedback/insights", response_model=InsightsResponse)
def insights_endpoint(body: InsightsRequest):
    enough = has_enough_feedback(body.feedback)
    analysis = FeedbackAnalysis()
    if enough:
        perfumes = [transform_perfume(p) for p in body.perfumes]
        analysis = analyze_preferences(body.feedback, perfumes)
    return InsightsResponse(
        enough_feedback=enough,
        total_feedback=total_feedback_count(body.feedback),
        analysis=analysis,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
