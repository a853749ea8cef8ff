from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from .db import Base


class Response(Base):
	__tablename__ = "responses"
	# One row per submitted answer
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(128), nullable=False, index=True)
	objective = Column(Text, nullable=False, index=True)
	item_id = Column(String(64), nullable=True, index=True)
	session_id = Column(String(64), nullable=True, index=True)
	selected_answer = Column(String(8), nullable=False)
	correct_answer = Column(String(8), nullable=False)
	is_correct = Column(Boolean, nullable=False)
	latency_ms = Column(Integer, nullable=True)
	difficulty = Column(String(8), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	__table_args__ = (Index("ix_responses_user_objective", "user_id", "objective"),)


class Mastery(Base):
	__tablename__ = "mastery"
	# Composite key: one counter row per (user, objective)
	user_id = Column(String(128), primary_key=True)
	objective = Column(String(512), primary_key=True)
	correct = Column(Integer, default=0, nullable=False)
	total = Column(Integer, default=0, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class GeneratedItem(Base):
	__tablename__ = "generated_items"
	id = Column(String(64), primary_key=True)
	objective = Column(Text, nullable=False)
	objective_normalized = Column(String(512), nullable=False, index=True)
	topic = Column(String(128), nullable=True, index=True)
	difficulty = Column(String(8), default="medium", nullable=False)
	stem = Column(Text, nullable=False)
	code = Column(Text, nullable=True)
	options_json = Column(Text, nullable=False)  # [{id, text}, ...]
	correct = Column(String(1), nullable=False)
	feedback_json = Column(Text, nullable=False)  # {correct, incorrect, explanation}
	source = Column(String(32), default="ai-generated", nullable=False)
	model = Column(String(128), nullable=True)
	# unreviewed | validated | flagged | deprecated
	quality = Column(String(16), default="unreviewed", nullable=False, index=True)
	use_count = Column(Integer, default=0, nullable=False)
	correct_count = Column(Integer, default=0, nullable=False)
	total_attempts = Column(Integer, default=0, nullable=False)
	last_used_at = Column(DateTime, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	__table_args__ = (Index("ix_generated_objective_difficulty", "objective_normalized", "difficulty"),)
