from __future__ import annotations
from fastapi import APIRouter, HTTPException
from copilot.schemas.intent import IntentRequest, IntentResponse
from copilot.services.intent_detector import detect_intent, generate_intent_context, plan_data_fetches

router = APIRouter(prefix="/api/intent", tags=["intent"])


@router.post("", response_model=IntentResponse, response_model_by_alias=True)
async def classify_query(req: IntentRequest):
    """Classify a chat query and plan the data the dashboard should fetch for it."""
    if not req.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")

    intent = detect_intent(req.query)
    return IntentResponse(
        intent=intent,
        fetches=plan_data_fetches(intent),
        context=generate_intent_context(intent),
    )
