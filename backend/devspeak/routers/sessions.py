from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import PracticeSession
from ..progress import build_dashboard, dashboard_zone, finite_score
from ..settings import settings
from .auth import User, get_current_user


router = APIRouter(tags=["sessions"])
logger = logging.getLogger(__name__)


class LogSessionRequest(BaseModel):
	module_type: Optional[str] = None
	task_name: Optional[str] = None
	scores: Optional[Dict[str, Any]] = None
	user_input: Optional[Any] = None
	ai_feedback: Optional[str] = None


def _missing(value: Any) -> bool:
	return value is None or (isinstance(value, str) and not value.strip())


@router.post("/log-session", status_code=201)
async def log_session(req: LogSessionRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	if _missing(req.module_type) or _missing(req.user_input) or _missing(req.ai_feedback):
		raise HTTPException(status_code=400, detail="Missing required session data.")
	# JSON bodies may carry NaN/Infinity literals; only finite numbers are stored
	if req.scores and any(finite_score(v) is None for v in req.scores.values()):
		raise HTTPException(status_code=400, detail="Scores must be finite numbers.")
	# Owner always comes from the token, never from the body
	row = PracticeSession(
		user_id=user.username,
		module_type=req.module_type,
		task_name=req.task_name or None,
		scores=req.scores or None,
		user_input=req.user_input,
		ai_feedback=req.ai_feedback,
	)
	try:
		db.add(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		logger.exception("Failed to insert practice session for %s (%s)", user.username, req.module_type)
		raise HTTPException(status_code=500, detail="Failed to log practice session.")
	return {"message": "Session logged successfully"}


@router.get("/progress-data")
async def progress_data(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		rows = db.execute(
			select(PracticeSession)
			.where(PracticeSession.user_id == user.username)
			.order_by(PracticeSession.created_at.asc(), PracticeSession.id.asc())
		).scalars().all()
	except SQLAlchemyError:
		logger.exception("Failed to load practice sessions for %s", user.username)
		raise HTTPException(status_code=500, detail="Internal Server Error")
	return build_dashboard(rows, dashboard_zone(settings.dashboard_timezone))
