"""
Structured data models and schemas for the interview flow.
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any, List
from enum import Enum
import json

from .models import Turn


class ControllerState(str, Enum):
    """States of the conversation turn controller."""
    AWAITING_FIRST_QUESTION = "awaiting_first_question"
    AWAITING_ANSWER = "awaiting_answer"
    PROCESSING_ANSWER = "processing_answer"
    COMPLETE = "complete"


class QuestionCategory(str, Enum):
    """Question focus areas, in the order an interview moves through them."""
    INTRODUCTION = "introduction"
    TECHNICAL = "technical"
    PROJECT_SPECIFIC = "project-specific"
    BEHAVIORAL = "behavioral"
    PROBLEM_SOLVING = "problem-solving"
    SITUATIONAL = "situational"
    FOLLOW_UP = "follow-up"


@dataclass
class QuestionFocus:
    """What the next question should be about."""
    category: str
    difficulty: str = "medium"
    focus_area: Optional[str] = None


@dataclass
class NextQuestion:
    """Response from the question-generation collaborator."""
    text: Optional[str]
    is_follow_up: bool = False
    acknowledgement: Optional[str] = None
    should_continue: bool = True
    topic: Optional[str] = None

    def validate(self) -> bool:
        """A question that continues the interview must have text."""
        if self.should_continue and not (self.text and self.text.strip()):
            return False
        return True


@dataclass
class TurnOutcome:
    """Result of submitting one answer to the controller."""
    turn: Turn
    next_question: Optional[str] = None
    acknowledgement: Optional[str] = None
    is_follow_up: bool = False
    is_complete: bool = False
    topic: Optional[str] = None

    @property
    def prompt_text(self) -> str:
        """What the interviewer says next: acknowledgement followed by the question."""
        parts = [p.strip() for p in (self.acknowledgement, self.next_question) if p and p.strip()]
        return " ".join(parts)


def extract_json(raw_response: str) -> Dict[str, Any]:
    """
    Extract a JSON object from an LLM reply.

    Args:
        raw_response: Raw text from the LLM, possibly wrapped in prose or code fences

    Returns:
        Parsed JSON object

    Raises:
        ValueError: If no JSON object can be found
    """
    try:
        data = json.loads(raw_response)
    except json.JSONDecodeError:
        start = raw_response.find("{")
        end = raw_response.rfind("}")
        if start != -1 and end != -1 and end > start:
            try:
                data = json.loads(raw_response[start:end+1])
            except json.JSONDecodeError:
                raise ValueError(f"Could not extract valid JSON from LLM response: {raw_response}")
        else:
            raise ValueError(f"No JSON found in LLM response: {raw_response}")

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got: {raw_response}")
    return data


def parse_llm_question(raw_response: str, default_category: str,
                       is_follow_up: bool = False) -> NextQuestion:
    """
    Parse an LLM reply of the form {"text": ..., "category": ...} into a NextQuestion.

    Raises:
        ValueError: If the reply has no usable question text
    """
    data = extract_json(raw_response)
    text = data.get("text") or data.get("question")
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"LLM response has no question text: {raw_response}")

    question = NextQuestion(
        text=text.strip(),
        is_follow_up=is_follow_up,
        topic=data.get("category") or default_category,
    )
    if not question.validate():
        raise ValueError(f"Question validation failed: {question}")
    return question


def parse_follow_up(raw_response: str) -> NextQuestion:
    """
    Parse an LLM follow-up reply:
    {"acknowledgement": ..., "followUpQuestion": {"text": ..., "category": ...}}

    Raises:
        ValueError: If the reply has no usable follow-up question
    """
    data = extract_json(raw_response)
    follow_up = data.get("followUpQuestion") or data.get("follow_up_question") or {}
    text = follow_up.get("text") if isinstance(follow_up, dict) else None
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"LLM response has no follow-up question: {raw_response}")

    acknowledgement = data.get("acknowledgement") or data.get("humanResponse")
    return NextQuestion(
        text=text.strip(),
        is_follow_up=True,
        acknowledgement=acknowledgement.strip() if isinstance(acknowledgement, str) else None,
        topic=QuestionCategory.FOLLOW_UP.value,
    )


def history_as_dicts(history: List[Turn]) -> List[Dict[str, Any]]:
    """Compact question/answer view of the history for prompts."""
    return [
        {"question": t.question_text, "answer": t.answer_text, "topic": t.topic}
        for t in history
    ]
