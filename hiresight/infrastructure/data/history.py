"""
Assessment history storage.
Keeps a newest-first list of completed interviews and aptitude tests per user.
"""
import os
import re
import json
import time
import uuid
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
import datetime
from typing import Dict, List, Optional, Any

logger = logging.getLogger("history")

ENTRY_KINDS = ("interview", "aptitude")


@dataclass
class HistoryEntry:
    """One completed assessment."""
    kind: str  # interview | aptitude
    score: float
    user_id: str = "local"
    entry_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    date: str = field(default_factory=lambda: datetime.date.today().isoformat())
    duration_seconds: float = 0.0
    status: str = "completed"
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in ENTRY_KINDS:
            raise ValueError(f"Unknown history entry kind: {self.kind}")

    @property
    def duration_label(self) -> str:
        """Duration as M:SS."""
        total = int(round(self.duration_seconds))
        return f"{total // 60}:{total % 60:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryEntry':
        return cls(
            kind=data["kind"],
            score=float(data.get("score", 0.0)),
            user_id=data.get("user_id", "local"),
            entry_id=data.get("entry_id") or uuid.uuid4().hex,
            date=data.get("date") or datetime.date.today().isoformat(),
            duration_seconds=float(data.get("duration_seconds", 0.0)),
            status=data.get("status", "completed"),
            details=dict(data.get("details") or {}),
        )


class HistoryRepository(ABC):
    """Storage contract for assessment history."""

    @abstractmethod
    def save(self, entry: HistoryEntry) -> None:
        """Store an entry. Saving an existing entry_id replaces it."""

    @abstractmethod
    def load(self, user_id: str) -> List[HistoryEntry]:
        """All entries for a user, newest first."""

    def get(self, user_id: str, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self.load(user_id):
            if entry.entry_id == entry_id:
                return entry
        return None

    def latest(self, user_id: str, kind: str) -> Optional[HistoryEntry]:
        """Most recent completed entry of a kind."""
        for entry in self.load(user_id):
            if entry.kind == kind and entry.status == "completed":
                return entry
        return None

    def has_completed_aptitude(self, user_id: str) -> bool:
        return self.latest(user_id, "aptitude") is not None


class InMemoryHistoryRepository(HistoryRepository):
    """History kept in process memory."""

    def __init__(self):
        self._entries: Dict[str, List[HistoryEntry]] = {}

    def save(self, entry: HistoryEntry) -> None:
        entries = [e for e in self._entries.get(entry.user_id, []) if e.entry_id != entry.entry_id]
        entries.insert(0, entry)
        self._entries[entry.user_id] = entries

    def load(self, user_id: str) -> List[HistoryEntry]:
        return list(self._entries.get(user_id, []))


class JsonFileHistoryRepository(HistoryRepository):
    """History stored as one JSON file per user."""

    def __init__(self, history_dir: str):
        self.history_dir = history_dir
        os.makedirs(self.history_dir, exist_ok=True)

    def _get_history_path(self, user_id: str) -> str:
        safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", user_id) or "_"
        return os.path.join(self.history_dir, f"{safe_id}.json")

    def save(self, entry: HistoryEntry) -> None:
        entries = [e for e in self.load(entry.user_id) if e.entry_id != entry.entry_id]
        entries.insert(0, entry)

        path = self._get_history_path(entry.user_id)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump([e.to_dict() for e in entries], f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
        logger.info(f"Saved {entry.kind} history entry {entry.entry_id} for {entry.user_id}")

    def load(self, user_id: str) -> List[HistoryEntry]:
        path = self._get_history_path(user_id)
        if not os.path.exists(path):
            return []

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read history from {path}: {e}")
            return []

        entries = []
        for item in data:
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history entry in {path}: {e}")
        return entries


def interview_entry(result, user_id: str = "local", **details) -> HistoryEntry:
    """
    History entry for a finished interview.

    Args:
        result: InterviewResult
        user_id: Owner of the entry
        details: Extra fields such as position or domain

    Returns:
        HistoryEntry scored by the mean overall confidence (0 when no answer had metrics)
    """
    score = round(result.average_confidence) if result.average_confidence is not None else 0
    return HistoryEntry(
        kind="interview",
        score=score,
        user_id=user_id,
        duration_seconds=result.duration_seconds,
        status="ended_early" if result.ended_early else "completed",
        details=dict(
            details,
            session_id=result.session_id,
            questions=[t.question_text for t in result.turns],
            responses=[t.answer_text for t in result.turns if t.answer_text.strip()],
            topics_covered=list(result.topics_covered),
            recorded_at=time.time(),
        ),
    )


def aptitude_entry(result, user_id: str = "local", **details) -> HistoryEntry:
    """History entry for a scored aptitude test (practice or formal)."""
    data = dict(details, **result.to_dict())
    return HistoryEntry(
        kind="aptitude",
        score=round(result.overall_score),
        user_id=user_id,
        duration_seconds=result.time_taken_seconds,
        status="estimated" if result.is_estimate else "completed",
        details=data,
    )
