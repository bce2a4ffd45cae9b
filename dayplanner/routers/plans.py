from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from dayplanner.dependencies import get_current_uid, get_document_store
from dayplanner.models.itinerary import ItineraryView, ListPlansResponse
from dayplanner.services.document_store import DocumentStoreService
from dayplanner.services.persistence import from_document

logger = logging.getLogger(__name__)
router = APIRouter(tags=["plans"])


@router.get("/plans", response_model=ListPlansResponse)
def list_plans(
    limit: int = Query(20, ge=1, le=100),
    uid: str = Depends(get_current_uid),
    store: DocumentStoreService = Depends(get_document_store),
):
    docs = store.list_plans_for_user(uid, limit=limit)
    return ListPlansResponse(ok=True, plans=[from_document(d) for d in docs])


@router.get("/plans/{planId}", response_model=ItineraryView)
def get_plan(
    planId: str,
    uid: str = Depends(get_current_uid),
    store: DocumentStoreService = Depends(get_document_store),
):
    """Read-only view of a saved plan, one entry per day"""
    doc = store.get_plan_for_user(uid, planId)
    if doc is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return from_document(doc, plan_id=planId)
