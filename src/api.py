"""
FastAPI surface for insight generation, listing and feedback.

Authentication lives in front of this service; the caller's user id
arrives in the X-User-Id header.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config import load_settings
from errors import (
    InsightNotFoundError,
    InsufficientDataError,
    InvalidStatusTransitionError,
    StorageError,
)
from insight_engine import InsightEngine
from storage import HealthRepository, PostgresRepository, get_repository

log = logging.getLogger("api")

settings = load_settings()


def _user_key(request: Request) -> str:
    return request.headers.get("X-User-Id") or get_remote_address(request)


def _generation_limit() -> str:
    return f"{settings.daily_generation_limit}/day"


limiter = Limiter(key_func=_user_key)


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="Health Journal Insights API", version="1.0.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

_repository: Optional[HealthRepository] = None


def get_repo() -> HealthRepository:
    global _repository
    if _repository is None:
        _repository = get_repository(settings)
    return _repository


def current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def sufficient_history(
    user_id: str = Depends(current_user_id),
    repo: HealthRepository = Depends(get_repo),
) -> str:
    """Reject short histories before the daily cap sees the request."""
    try:
        count = len(repo.get_all_entries(user_id))
    except StorageError as e:
        log.error("Entry count failed for %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Internal server error")
    if count < settings.min_entries:
        raise HTTPException(
            status_code=400,
            detail=str(InsufficientDataError(settings.min_entries, count)),
        )
    return user_id


class FeedbackRequest(BaseModel):
    helpful: bool


# ─── Routes ────────────────────────────────────────────────

@app.get("/")
def root() -> Dict[str, Any]:
    return {"service": "health-journal-insights", "status": "ok"}


@app.get("/health-check")
def health_check(repo: HealthRepository = Depends(get_repo)) -> JSONResponse:
    try:
        repo.ping()
        return JSONResponse({"status": "Online", "message": "Online"})
    except StorageError as e:
        return JSONResponse(
            status_code=200,
            content={
                "status": "Waking up",
                "message": f"Service starting or DB unavailable: {e}",
            },
        )


@app.post("/api/v1/insights/generate")
@limiter.limit(_generation_limit)
def generate_insights(
    request: Request,
    user_id: str = Depends(sufficient_history),
    repo: HealthRepository = Depends(get_repo),
) -> Dict[str, Any]:
    engine = InsightEngine(
        repo,
        correlation_threshold=settings.correlation_threshold,
        min_entries=settings.min_entries,
    )
    try:
        result = engine.generate_insights(user_id)
    except InsufficientDataError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        log.error("Generate insights failed for %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Internal server error")
    return result.model_dump(mode="json")


@app.get("/api/v1/insights")
def list_insights(
    user_id: str = Depends(current_user_id),
    repo: HealthRepository = Depends(get_repo),
) -> Dict[str, Any]:
    try:
        insights = repo.get_insights(user_id)
    except StorageError as e:
        log.error("Listing insights failed for %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"insights": [i.model_dump(mode="json") for i in insights]}


@app.post("/api/v1/insights/{insight_id}/feedback")
def insight_feedback(
    insight_id: str,
    body: FeedbackRequest,
    user_id: str = Depends(current_user_id),
    repo: HealthRepository = Depends(get_repo),
) -> Dict[str, Any]:
    try:
        insight = repo.get_insight(insight_id)
        if insight is None or insight.user_id != user_id:
            raise HTTPException(status_code=404, detail="Insight not found")

        status = insight.status
        # helpful=True is acknowledged only; nothing moves an insight to confirmed
        if not body.helpful and status != "dismissed":
            status = repo.update_insight_status(insight_id, "dismissed").status
    except InsightNotFoundError:
        raise HTTPException(status_code=404, detail="Insight not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        log.error("Insight feedback failed for %s: %s", insight_id, e)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "status": status}


@app.get("/api/v1/admin/schema-audit")
def schema_audit(repo: HealthRepository = Depends(get_repo)) -> Dict[str, Any]:
    if not isinstance(repo, PostgresRepository):
        raise HTTPException(status_code=400, detail="Schema audit requires the postgres backend")
    try:
        return repo.schema_audit()
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
