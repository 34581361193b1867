from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..evaluation import EvaluationError, evaluate_module
from ..gemini_client import GeminiClient, get_llm_client


router = APIRouter(tags=["practice"])


# Fields are optional and untyped here so that a missing or non-string one is
# reported as a 400 naming the field instead of a generic 422.

class CodeReviewRequest(BaseModel):
	role: Optional[Any] = None
	codeToReview: Optional[Any] = None
	userReview: Optional[Any] = None


class InterviewRequest(BaseModel):
	# Job title the candidate is interviewing for
	role: Optional[Any] = None
	question: Optional[Any] = None
	answer: Optional[Any] = None


class PairProgrammingRequest(BaseModel):
	role: Optional[Any] = None
	task: Optional[Any] = None
	code: Optional[Any] = None
	instruction: Optional[Any] = None


class StandupRequest(BaseModel):
	yesterday: Optional[Any] = None
	today: Optional[Any] = None
	blockers: Optional[Any] = None


class WritingRequest(BaseModel):
	writingType: Optional[Any] = None
	userContent: Optional[Any] = None


async def _evaluate(module: str, req: BaseModel, client: GeminiClient) -> Dict[str, Any]:
	payload = req.model_dump()
	for field, value in payload.items():
		if value is not None and not isinstance(value, str):
			raise HTTPException(status_code=400, detail=f"{field} must be a string.")
	try:
		return await evaluate_module(module, payload, client)
	except EvaluationError as err:
		raise HTTPException(status_code=err.status_code, detail=err.message)


@router.post("/code-review")
async def code_review(req: CodeReviewRequest, client: GeminiClient = Depends(get_llm_client)):
	return await _evaluate("code-review", req, client)


@router.post("/interview")
async def interview(req: InterviewRequest, client: GeminiClient = Depends(get_llm_client)):
	return await _evaluate("interview", req, client)


@router.post("/pair-programming")
async def pair_programming(req: PairProgrammingRequest, client: GeminiClient = Depends(get_llm_client)):
	return await _evaluate("pair-programming", req, client)


@router.post("/standup")
async def standup(req: StandupRequest, client: GeminiClient = Depends(get_llm_client)):
	return await _evaluate("standup", req, client)


@router.post("/writing")
async def writing(req: WritingRequest, client: GeminiClient = Depends(get_llm_client)):
	return await _evaluate("writing", req, client)
