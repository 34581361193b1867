from __future__ import annotations
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON
from .db import Base


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Primary key is username
	username = Column(String(128), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
	updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# JWT "jti" claim
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), index=True, nullable=False)
	created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
	last_activity_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class PracticeSession(Base):
	"""One completed practice attempt. Rows are append-only."""
	__tablename__ = "practice_sessions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(128), index=True, nullable=False)
	module_type = Column(String(64), nullable=False)
	task_name = Column(String(256), nullable=True)
	# metric name -> score
	scores = Column(JSON, nullable=True)
	user_input = Column(JSON, nullable=False)
	ai_feedback = Column(Text, nullable=False)
	created_at = Column(DateTime(timezone=True), default=_utcnow, index=True, nullable=False)
