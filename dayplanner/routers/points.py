from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List

from dayplanner.dependencies import get_current_uid, get_document_store
from dayplanner.models.itinerary import Point
from dayplanner.services.document_store import DocumentStoreService

router = APIRouter(tags=["points"])

class AddPointRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


@router.get("/points", response_model=List[Point])
def list_points(uid: str = Depends(get_current_uid), store: DocumentStoreService = Depends(get_document_store)):
    return store.list_points(uid)


@router.post("/points", response_model=Point)
def add_point(
    body: AddPointRequest,
    uid: str = Depends(get_current_uid),
    store: DocumentStoreService = Depends(get_document_store),
):
    return store.add_point(uid, body.name, body.lat, body.lng)


@router.delete("/points/{pointId}")
def delete_point(
    pointId: str,
    uid: str = Depends(get_current_uid),
    store: DocumentStoreService = Depends(get_document_store),
):
    # existing day assignments keep their copy of the point
    if not store.delete_point(uid, pointId):
        raise HTTPException(status_code=404, detail="Point not found")
    return {"ok": True}
