"""
HTTP client for the aptitude question bank and test lifecycle.
"""
import logging
from typing import Optional, Dict, Any, List, Tuple, Callable, TypeVar

import requests

from .models import (
    AptitudeQuestion, AptitudeSession, AnswerRecord, AptitudeCategory,
    FormalResult, CATEGORY_SCORE_KEYS
)
from .scoring import best_effort_score
from ..config import API_BASE_URL, API_TIMEOUT

logger = logging.getLogger("aptitude_client")

T = TypeVar("T")


class AptitudeApiError(RuntimeError):
    """Raised when the aptitude backend fails or reports an unsuccessful response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def _parse_category_scores(scores: Optional[Dict[str, Any]]) -> Dict[AptitudeCategory, float]:
    scores = scores or {}
    return {
        category: float(scores.get(key) or 0.0)
        for key, category in CATEGORY_SCORE_KEYS.items()
    }


def _parse_questions(data: Dict[str, Any]) -> List[AptitudeQuestion]:
    return [AptitudeQuestion.from_api(q) for q in data.get("questions") or []]


def _parse_results(data: Dict[str, Any], test_id: str) -> Tuple[FormalResult, List[AnswerRecord]]:
    test = data.get("test") or {}
    answers = [
        AnswerRecord(
            question_id=str(a.get("questionId") or idx),
            category=AptitudeCategory(a["category"]),
            selected_option=a.get("selectedOption"),
            is_correct=bool(a.get("isCorrect")),
            correct_option=a.get("correctOption"),
        )
        for idx, a in enumerate(data.get("answers") or [])
    ]
    answered = [a for a in answers if a.answered]
    result = FormalResult(
        overall_score=float(test.get("overallScore") or 0.0),
        category_scores=_parse_category_scores(test.get("scores")),
        correct=sum(1 for a in answered if a.is_correct),
        answered=len(answered),
        total_questions=len(answers),
        time_taken_seconds=float(test.get("timeTaken") or 0.0),
        test_id=str(test.get("id") or test_id),
        completed_at=test.get("completedAt"),
    )
    return result, answers


class AptitudeApiClient:
    """Client for the /aptitude endpoints. Every response is {success, data, message}."""

    def __init__(self,
                 base_url: str = API_BASE_URL,
                 token: Optional[str] = None,
                 timeout: float = API_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, action: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Error {action}: {e}")
            raise AptitudeApiError(f"Failed {action}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            logger.error(f"Error {action}: unexpected {type(body).__name__} body")
            raise AptitudeApiError(f"Failed {action}: HTTP {resp.status_code}",
                                   status_code=resp.status_code)

        if resp.status_code >= 400 or not body.get("success") or body.get("data") is None:
            message = body.get("message") or f"HTTP {resp.status_code}"
            logger.error(f"Error {action}: {message}")
            raise AptitudeApiError(f"Failed {action}: {message}", status_code=resp.status_code)
        return body["data"]

    @staticmethod
    def _parse(action: str, parse: Callable[[Any], T], data: Any) -> T:
        """Apply a payload parser; a malformed payload becomes an AptitudeApiError."""
        try:
            return parse(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Malformed response {action}: {e!r}")
            raise AptitudeApiError(f"Failed {action}: malformed response ({e!r})") from e

    def get_questions(self, position: str) -> List[AptitudeQuestion]:
        """Questions for a formal test, without answers."""
        data = self._request("GET", "/aptitude/questions", "fetching questions",
                             params={"position": position})
        return self._parse("fetching questions", _parse_questions, data)

    def get_practice_questions(self, position: str) -> List[AptitudeQuestion]:
        """Practice questions, with the correct option and an explanation."""
        data = self._request("GET", "/aptitude/practice-questions", "fetching practice questions",
                             params={"position": position})
        return self._parse("fetching practice questions", _parse_questions, data)

    def start_test(self, position: str, is_practice: bool = False) -> AptitudeSession:
        data = self._request("POST", "/aptitude/start", "starting test",
                             json={"position": position, "isPractice": is_practice})
        return self._parse("starting test", AptitudeSession.from_api, data)

    def submit_answer(self, test_id: str, question: AptitudeQuestion,
                      selected_option: int) -> AnswerRecord:
        """Submit one answer; the backend reports whether it was correct."""
        data = self._request("POST", f"/aptitude/{test_id}/answers", "submitting answer",
                             json={"questionId": question.question_id, "selectedOption": selected_option})

        def parse(data: Dict[str, Any]) -> AnswerRecord:
            correct_option = data.get("correctOption")
            return AnswerRecord(
                question_id=question.question_id,
                category=question.category,
                selected_option=selected_option,
                is_correct=bool(data.get("isCorrect")),
                correct_option=int(correct_option) if correct_option is not None else None,
                explanation=data.get("explanation"),
            )

        return self._parse("submitting answer", parse, data)

    def complete_test(self, test_id: str, time_taken_seconds: float,
                      answers: Optional[List[AnswerRecord]] = None,
                      total_questions: Optional[int] = None) -> FormalResult:
        """
        Finish a test and get its score.

        Args:
            test_id: Test to complete
            time_taken_seconds: Time the candidate spent
            answers: Answers recorded locally, used for the counts and for the fallback score
            total_questions: Number of questions in the test

        Returns:
            FormalResult from the backend, or a local estimate (is_estimate=True) when the
            backend fails or sends a malformed score and local answers are available

        Raises:
            AptitudeApiError: If the backend fails and there are no local answers
        """
        answers = answers or []
        total = total_questions if total_questions is not None else len(answers)
        answered = [a for a in answers if a.answered]

        def parse(data: Dict[str, Any]) -> FormalResult:
            return FormalResult(
                overall_score=float(data.get("overallScore") or 0.0),
                category_scores=_parse_category_scores(data.get("scores")),
                correct=sum(1 for a in answered if a.is_correct),
                answered=len(answered),
                total_questions=total,
                time_taken_seconds=float(data.get("timeTaken") or time_taken_seconds),
                test_id=test_id,
                completed_at=data.get("completedAt"),
            )

        try:
            data = self._request("POST", f"/aptitude/{test_id}/complete", "completing test",
                                 json={"timeTaken": time_taken_seconds})
            return self._parse("completing test", parse, data)
        except AptitudeApiError:
            if not answers:
                raise
            logger.warning(f"Backend score unavailable for test {test_id}, using local estimate")
            return best_effort_score(answers, total, time_taken_seconds, test_id=test_id)

    def get_results(self, test_id: str) -> Tuple[FormalResult, List[AnswerRecord]]:
        """Stored result of a completed test with its per-question answers."""
        data = self._request("GET", f"/aptitude/{test_id}/results", "getting test results")
        return self._parse("getting test results", lambda d: _parse_results(d, test_id), data)

    def get_history(self) -> List[Dict[str, Any]]:
        """Completed formal tests, newest first, as returned by the backend."""
        data = self._request("GET", "/aptitude/history", "fetching test history")
        return self._parse("fetching test history", lambda d: list(d.get("tests") or []), data)
