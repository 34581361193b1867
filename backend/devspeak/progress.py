from __future__ import annotations
import math
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from .evaluation import is_number, round_half_up
from .models import PracticeSession


EMPTY_MESSAGE = "No practice sessions found."
# Pseudo-metric some clients send alongside the real ones; kept out of strongest/weakest
OVERALL_METRIC = "overall"
RECENT_LIMIT = 5


def _as_utc(value: datetime) -> datetime:
	# SQLite hands back naive datetimes; everything is stored as UTC
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value.astimezone(timezone.utc)


def finite_score(value: Any) -> Optional[float]:
	"""Return the score as a finite float, or None when it can't be averaged."""
	if not is_number(value):
		return None
	try:
		score = float(value)
	except OverflowError:
		return None
	return score if math.isfinite(score) else None


def _numeric_scores(scores: Optional[Dict[str, Any]]) -> Dict[str, float]:
	if not isinstance(scores, dict):
		return {}
	numeric: Dict[str, float] = {}
	for key, value in scores.items():
		score = finite_score(value)
		if score is not None:
			numeric[key] = score
	return numeric


def _mean(values: Sequence[float]) -> Optional[float]:
	total = sum(values)
	# Scores near the float limit can still overflow once summed
	if not math.isfinite(total):
		return None
	return total / len(values)


def _trend_label(day: date) -> str:
	return f"{day:%b} {day.day}"


def _display_timestamp(value: datetime) -> str:
	hour = value.hour % 12 or 12
	suffix = "AM" if value.hour < 12 else "PM"
	return f"{value.month}/{value.day}/{value.year}, {hour}:{value:%M:%S} {suffix}"


def _heatmap(created: Sequence[datetime]) -> List[Dict[str, Any]]:
	counts: Dict[str, int] = {}
	for ts in created:
		day = ts.date().isoformat()
		counts[day] = counts.get(day, 0) + 1
	return [{"day": day, "value": value} for day, value in counts.items()]


def _module_counts(rows: Sequence[PracticeSession]) -> Dict[str, int]:
	counts: Dict[str, int] = {}
	for row in rows:
		counts[row.module_type] = counts.get(row.module_type, 0) + 1
	return counts


def _score_trends(rows: Sequence[PracticeSession], created: Sequence[datetime], tz: tzinfo) -> List[Dict[str, Any]]:
	by_day: Dict[date, List[Dict[str, float]]] = {}
	for row, ts in zip(rows, created):
		local_day = ts.astimezone(tz).date()
		by_day.setdefault(local_day, []).append(_numeric_scores(row.scores))

	trends: List[Dict[str, Any]] = []
	for day, day_scores in by_day.items():
		by_metric: Dict[str, List[float]] = {}
		for scores in day_scores:
			for key, value in scores.items():
				by_metric.setdefault(key, []).append(value)
		point: Dict[str, Any] = {"date": _trend_label(day)}
		for key, values in by_metric.items():
			avg = _mean(values)
			if avg is not None:
				point[key] = round_half_up(avg)
		trends.append(point)
	return trends


def _analysis(rows: Sequence[PracticeSession]) -> Dict[str, Dict[str, Any]]:
	all_scores: Dict[str, List[float]] = {}
	for row in rows:
		for key, value in _numeric_scores(row.scores).items():
			if key == OVERALL_METRIC:
				continue
			all_scores.setdefault(key, []).append(value)

	strongest: Dict[str, Any] = {"name": "N/A", "score": 0}
	weakest: Dict[str, Any] = {"name": "N/A", "score": 100}
	best_avg: float = 0
	worst_avg: float = 100
	for key, values in all_scores.items():
		avg = _mean(values)
		if avg is None:
			continue
		if avg > best_avg:
			best_avg = avg
			strongest = {"name": key, "score": round_half_up(avg)}
		if avg < worst_avg:
			worst_avg = avg
			weakest = {"name": key, "score": round_half_up(avg)}
	return {"strongestArea": strongest, "weakestArea": weakest}


def _recent_activity(rows: Sequence[PracticeSession], created: Sequence[datetime], tz: tzinfo) -> List[Dict[str, Any]]:
	recent = list(zip(rows, created))[-RECENT_LIMIT:]
	recent.reverse()
	return [
		{"module": row.module_type, "date": _display_timestamp(ts.astimezone(tz))}
		for row, ts in recent
	]


def build_dashboard(rows: Iterable[PracticeSession], tz: Optional[tzinfo] = None) -> Dict[str, Any]:
	"""Summarise a user's sessions for the progress page.

	`rows` must already be ordered by creation time, oldest first. Returns
	the empty-state payload when there are no rows.
	"""
	rows = list(rows)
	if not rows:
		return {"message": EMPTY_MESSAGE}
	zone = tz or timezone.utc
	created = [_as_utc(row.created_at) for row in rows]
	return {
		"totalSessions": len(rows),
		"firstPracticeDate": created[0].isoformat(),
		"heatmapData": _heatmap(created),
		"moduleCounts": _module_counts(rows),
		"scoreTrends": _score_trends(rows, created, zone),
		"analysis": _analysis(rows),
		"recentActivity": _recent_activity(rows, created, zone),
	}


def dashboard_zone(name: str) -> tzinfo:
	if not name or name.upper() == "UTC":
		return timezone.utc
	return ZoneInfo(name)
