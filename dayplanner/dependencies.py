import logging
from typing import Optional, Dict, Any

from fastapi import Header, HTTPException, Depends
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from pymongo import MongoClient

from dayplanner.config import settings
from dayplanner.services.document_store import DocumentStoreService
from dayplanner.services.planner_session import PlannerSession, get_planner_registry
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


# Lazily initialize a single global database handle to reuse across requests
_db_client = None


def get_database():
    global _db_client
    if _db_client is None:
        client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=8000)
        _db_client = client[settings.mongodb_db]
        DocumentStoreService(_db_client).ensure_indexes()
        logger.info("Connected to document store database: %s", settings.mongodb_db)
    return _db_client


# ---------------------------
# FastAPI dependencies
# ---------------------------
def get_document_store() -> DocumentStoreService:
    """Dependency to get DocumentStoreService instance"""
    return DocumentStoreService(get_database())


def _extract_bearer_token(authorization_header: Optional[str]) -> str:
    if not authorization_header:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    parts = authorization_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    return parts[1]


def verify_id_token(token: str):
    """
    Verify a Firebase ID token and return the decoded claims (contains uid).
    Raises HTTPException(401) on failure.
    """
    try:
        return id_token.verify_firebase_token(
            token,
            google_requests.Request(),
            audience=settings.firebase_project_id or None,
        )
    except Exception as e:
        logger.exception("Invalid Firebase ID token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired ID token")


async def verify_id_token_dependency(authorization: Optional[str] = Header(None)):
    """
    FastAPI dependency that checks Authorization header and verifies the ID token.
    Returns decoded token (a dict).
    """
    token = _extract_bearer_token(authorization)
    return verify_id_token(token)


def get_current_uid(decoded_token: Dict[str, Any] = Depends(verify_id_token_dependency)) -> str:
    """
    Extract uid from the decoded token. Firebase puts it in both user_id and sub.
    Raises HTTPException(401) when absent.
    """
    uid = decoded_token.get("user_id") or decoded_token.get("sub")
    if not uid:
        raise HTTPException(status_code=401, detail="Invalid UID in token")
    return uid


async def get_planner_session(uid: str = Depends(get_current_uid)) -> PlannerSession:
    """The caller's in-memory planner session"""
    return get_planner_registry().get_or_create(uid)
