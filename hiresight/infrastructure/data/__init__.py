"""
Data management infrastructure for assessment history.
"""

from .history import (
    HistoryEntry, HistoryRepository, InMemoryHistoryRepository,
    JsonFileHistoryRepository, interview_entry, aptitude_entry
)

__all__ = [
    'HistoryEntry',
    'HistoryRepository',
    'InMemoryHistoryRepository',
    'JsonFileHistoryRepository',
    'interview_entry',
    'aptitude_entry'
]
