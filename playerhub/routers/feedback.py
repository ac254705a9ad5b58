from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException

from ..auth_utils import require_admin, user_token
from ..feedback import FeedbackError, FeedbackNotFound
from ..schemas import (
    FeedbackCreateRequest,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackUpdateRequest,
)
from ..state import Hub, get_hub

router = APIRouter(prefix="/api", tags=["feedback"])


@router.post("/feedback", response_model=FeedbackResponse)
async def create_feedback(
    req: FeedbackCreateRequest = Body(default=FeedbackCreateRequest()),
    token: str = Depends(user_token),
    hub: Hub = Depends(get_hub),
):
    try:
        item = hub.feedback.create(token, req.model_dump())
    except FeedbackError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FeedbackResponse(feedback=item)


@router.get("/feedback/mine", response_model=FeedbackListResponse)
async def my_feedback(token: str = Depends(user_token), hub: Hub = Depends(get_hub)):
    try:
        items = hub.feedback.for_user(token)
    except FeedbackError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FeedbackListResponse(feedback=items)


@router.get("/admin/feedback", response_model=FeedbackListResponse, dependencies=[Depends(require_admin)])
async def list_feedback(hub: Hub = Depends(get_hub)):
    return FeedbackListResponse(feedback=hub.feedback.all())


@router.patch("/admin/feedback/{feedback_id}", response_model=FeedbackResponse, dependencies=[Depends(require_admin)])
async def update_feedback(
    feedback_id: str,
    req: FeedbackUpdateRequest = Body(default=FeedbackUpdateRequest()),
    hub: Hub = Depends(get_hub),
):
    try:
        item = hub.feedback.update(feedback_id, status=req.status, admin_notes=req.adminNotes)
    except FeedbackNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FeedbackError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FeedbackResponse(feedback=item)
