"""
Evaluation pipeline shared by every practice module.

Each module (and, for code-review and pair-programming, each role within it)
is described by a ModuleSpec: which request fields must be present, how to
build the prompt, which numeric metrics and text keys the model must return,
and which markdown fences to strip from the raw completion. A single
coroutine, run_evaluation, executes any spec:

	check inputs -> build prompt -> call model -> strip fences -> parse JSON
	-> validate keys -> clamp scores

Errors are raised as EvaluationError subclasses carrying the HTTP status the
router should answer with.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Pattern, Protocol, Tuple

from . import prompts
from .gemini_client import LLMUnavailableError

logger = logging.getLogger(__name__)


INVALID_JSON_MESSAGE = "AI failed to return a valid JSON format."
MODEL_UNAVAILABLE_MESSAGE = "AI service is currently unavailable. Please try again later."

JSON_FENCE = re.compile(r"```(?:json)?")
CODE_FENCE = re.compile(r"```(?:json|javascript|js)?")


class EvaluationError(Exception):
	status_code = 500

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class InvalidRequestError(EvaluationError):
	status_code = 400


class InvalidModelOutputError(EvaluationError):
	status_code = 500


class ModelUnavailableError(EvaluationError):
	status_code = 500


class TextGenerator(Protocol):
	async def generate(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class ModuleSpec:
	module: str
	role: Optional[str]
	required_inputs: Tuple[str, ...]
	build_prompt: Callable[[Dict[str, Any]], str]
	numeric_keys: Tuple[str, ...]
	text_keys: Tuple[str, ...] = ("feedback",)
	fence_pattern: Pattern[str] = JSON_FENCE

	@property
	def label(self) -> str:
		return f"{self.module}/{self.role}" if self.role else self.module


# module -> role -> spec; modules without role variants use the None key.
# Interview also takes a "role", but it is a free-text job title for the prompt.
MODULE_SPECS: Dict[str, Dict[Optional[str], ModuleSpec]] = {
	"code-review": {
		"reviewer": ModuleSpec(
			module="code-review",
			role="reviewer",
			required_inputs=("codeToReview", "userReview"),
			build_prompt=prompts.build_code_review_reviewer_prompt,
			numeric_keys=("constructiveness", "specificity", "tone"),
		),
		"author": ModuleSpec(
			module="code-review",
			role="author",
			required_inputs=("codeToReview",),
			build_prompt=prompts.build_code_review_author_prompt,
			numeric_keys=("correctness", "readability", "bestPractices"),
		),
	},
	"interview": {
		None: ModuleSpec(
			module="interview",
			role=None,
			required_inputs=("role", "question", "answer"),
			build_prompt=prompts.build_interview_prompt,
			numeric_keys=("accuracy", "depth", "clarity"),
		),
	},
	"pair-programming": {
		"driver": ModuleSpec(
			module="pair-programming",
			role="driver",
			required_inputs=("task", "code"),
			build_prompt=prompts.build_pair_driver_prompt,
			numeric_keys=("correctness", "efficiency", "readability"),
			fence_pattern=CODE_FENCE,
		),
		"navigator": ModuleSpec(
			module="pair-programming",
			role="navigator",
			required_inputs=("instruction",),
			build_prompt=prompts.build_pair_navigator_prompt,
			numeric_keys=("clarity", "effectiveness", "precision"),
			text_keys=("generatedCode",),
			fence_pattern=CODE_FENCE,
		),
	},
	"standup": {
		None: ModuleSpec(
			module="standup",
			role=None,
			required_inputs=("yesterday", "today"),
			build_prompt=prompts.build_standup_prompt,
			numeric_keys=("clarity", "conciseness", "impact"),
		),
	},
	"writing": {
		None: ModuleSpec(
			module="writing",
			role=None,
			required_inputs=("writingType", "userContent"),
			build_prompt=prompts.build_writing_prompt,
			numeric_keys=("clarity", "structure", "tone", "completeness"),
		),
	},
}


def _is_blank(value: Any) -> bool:
	if value is None:
		return True
	if isinstance(value, str):
		return not value.strip()
	return False


def resolve_spec(module: str, payload: Dict[str, Any]) -> ModuleSpec:
	variants = MODULE_SPECS.get(module)
	if variants is None:
		raise InvalidRequestError(f"Unsupported module '{module}'.")
	if None in variants:
		return variants[None]
	role = payload.get("role")
	if _is_blank(role):
		raise InvalidRequestError("role is required.")
	spec = variants.get(str(role).strip())
	if spec is None:
		expected = ", ".join(r for r in variants if r)
		raise InvalidRequestError(f"Invalid role '{role}'. Expected one of: {expected}.")
	return spec


def check_required_inputs(spec: ModuleSpec, payload: Dict[str, Any]) -> None:
	for field in spec.required_inputs:
		if _is_blank(payload.get(field)):
			if spec.role:
				raise InvalidRequestError(f"{field} is required for the {spec.role} role.")
			raise InvalidRequestError(f"{field} is required.")


def strip_fences(text: str, pattern: Pattern[str] = JSON_FENCE) -> str:
	return pattern.sub("", text or "").strip()


def parse_model_json(raw: str, spec: ModuleSpec) -> Dict[str, Any]:
	cleaned = strip_fences(raw, spec.fence_pattern)
	try:
		data = json.loads(cleaned)
	except ValueError:
		logger.error("Failed to parse model JSON for %s: %r", spec.label, raw)
		raise InvalidModelOutputError(INVALID_JSON_MESSAGE)
	if not isinstance(data, dict):
		logger.error("Model JSON for %s is not an object: %r", spec.label, raw)
		raise InvalidModelOutputError(INVALID_JSON_MESSAGE)
	return data


def round_half_up(value: float) -> int:
	return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
	return round_half_up(max(0, min(100, value)))


def is_number(value: Any) -> bool:
	"""Ints of any size and finite floats; bools don't count."""
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return False
	# math.isfinite would overflow on ints past the float range
	return isinstance(value, int) or math.isfinite(value)


def validate_evaluation(data: Dict[str, Any], spec: ModuleSpec) -> Dict[str, Any]:
	"""Check the model's object against the ModuleSpec keys and return only those, scores clamped."""
	result: Dict[str, Any] = {}
	for key in spec.numeric_keys:
		value = data.get(key)
		if not is_number(value):
			logger.error("Invalid or missing key %r in %s response: %r", key, spec.label, data)
			raise InvalidModelOutputError(f"AI response was missing or had an invalid type for '{key}'.")
		result[key] = clamp_score(value)
	for key in spec.text_keys:
		value = data.get(key)
		if not isinstance(value, str):
			logger.error("Invalid or missing key %r in %s response: %r", key, spec.label, data)
			raise InvalidModelOutputError(f"AI response was missing or had an invalid type for '{key}'.")
		result[key] = value
	return result


async def run_evaluation(spec: ModuleSpec, payload: Dict[str, Any], client: TextGenerator) -> Dict[str, Any]:
	check_required_inputs(spec, payload)
	prompt = spec.build_prompt(payload)
	try:
		raw = await client.generate(prompt)
	except LLMUnavailableError as err:
		logger.error("Language model unavailable for %s: %s", spec.label, err)
		raise ModelUnavailableError(MODEL_UNAVAILABLE_MESSAGE) from err
	data = parse_model_json(raw, spec)
	return validate_evaluation(data, spec)


async def evaluate_module(module: str, payload: Dict[str, Any], client: TextGenerator) -> Dict[str, Any]:
	spec = resolve_spec(module, payload)
	return await run_evaluation(spec, payload, client)
