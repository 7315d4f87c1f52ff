"""
Question generation: decides what the interviewer asks next.
"""
import re
import random
import logging
from typing import List, Optional

from .schemas import (
    NextQuestion, QuestionFocus, QuestionCategory,
    parse_llm_question, parse_follow_up, history_as_dicts
)
from .models import Turn, CandidateProfile
from .prompts import InterviewPrompts, PromptFormatter
from .errors import QuestionGenerationError, QuestionTimeoutError
from ..infrastructure.llm import LLMError, LLMTimeoutError
from ..config import (
    BASE_QUESTIONS, MIN_QUESTIONS, PLANNED_QUESTIONS_MIN, PLANNED_QUESTIONS_MAX,
    BRIEF_ANSWER_CHARS, MAX_ACKNOWLEDGEMENT_CHARS, INTERVIEW_FOCUS,
    LLM_TIMEOUT, FIRST_QUESTION_TIMEOUT, ACKNOWLEDGEMENT_TIMEOUT
)

logger = logging.getLogger("decision_engine")

OFF_TOPIC_KEYWORDS = (
    "personal life", "family", "hobbies", "weekend", "vacation",
    "politics", "religion", "sports", "weather", "gossip",
)

_EXAMPLE_PATTERN = re.compile(r"example|instance|time when|situation where", re.IGNORECASE)


def plan_question_count(profile: CandidateProfile) -> int:
    """
    Number of questions to plan for a candidate.

    8 base questions, +1 per project (max 3), +2 with any work experience,
    +1 per three skills (max 3), clamped to [10, 15].
    """
    count = BASE_QUESTIONS
    count += min(len(profile.projects), 3)
    count += 2 if profile.work_experience else 0
    count += min(len(profile.skills) // 3, 3)
    return max(PLANNED_QUESTIONS_MIN, min(PLANNED_QUESTIONS_MAX, count))


def determine_focus(question_number: int, planned_questions: int,
                    covered_categories: List[str]) -> QuestionFocus:
    """Pick the focus of the next question from interview progress."""
    if question_number == 0:
        return QuestionFocus(QuestionCategory.INTRODUCTION.value, "easy")

    progress = question_number / planned_questions if planned_questions else 1.0
    if progress < 0.3:
        return QuestionFocus(QuestionCategory.TECHNICAL.value, "easy", "core skills")
    if progress < 0.6:
        if QuestionCategory.PROJECT_SPECIFIC.value not in covered_categories:
            return QuestionFocus(QuestionCategory.PROJECT_SPECIFIC.value, "medium")
        return QuestionFocus(QuestionCategory.TECHNICAL.value, "medium", "advanced concepts")
    if progress < 0.8:
        if QuestionCategory.BEHAVIORAL.value not in covered_categories:
            return QuestionFocus(QuestionCategory.BEHAVIORAL.value, "medium")
        return QuestionFocus(QuestionCategory.PROBLEM_SOLVING.value, "medium")
    return QuestionFocus(QuestionCategory.SITUATIONAL.value, "hard", "leadership and decision making")


def should_follow_up(history: List[Turn]) -> bool:
    """
    Whether the next question should dig into the last answer.

    Brief answers and behavioral answers without a concrete example get a
    follow-up, but never two follow-ups in a row.
    """
    if not history:
        return False
    last = history[-1]
    if last.is_follow_up:
        return False

    answer = last.answer_text.strip()
    if len(answer) < BRIEF_ANSWER_CHARS:
        return True
    return last.topic == QuestionCategory.BEHAVIORAL.value and not _EXAMPLE_PATTERN.search(answer)


def needs_redirection(history: List[Turn], window: int = 2) -> bool:
    """Whether recent answers drifted into off-topic subjects."""
    for turn in history[-window:]:
        answer = turn.answer_text.lower()
        if any(keyword in answer for keyword in OFF_TOPIC_KEYWORDS):
            return True
    return False


class ContextualQuestionGenerator:
    """Generates interview questions with an LLM, using the conversation so far as context."""

    def __init__(self, llm_client, prompt_engine: Optional['PromptEngine'] = None,
                 rng: Optional[random.Random] = None):
        self.llm_client = llm_client
        self.prompt_engine = prompt_engine or PromptEngine()
        self.rng = rng or random.Random()
        self._fallbacks = InterviewPrompts.fallback_messages()

    def generate(self, history: List[Turn], profile: CandidateProfile,
                 planned_questions: int) -> NextQuestion:
        """
        Decide the next question.

        Args:
            history: All recorded turns, including the answer just given
            profile: Candidate profile from the resume
            planned_questions: Number of questions planned for this candidate

        Returns:
            NextQuestion; should_continue is False when the interview is done

        Raises:
            QuestionTimeoutError: If the LLM does not answer in time
            QuestionGenerationError: If the LLM request fails
        """
        answered = len(history)
        if answered >= planned_questions and answered >= MIN_QUESTIONS:
            logger.info(f"Planned questions reached ({answered}/{planned_questions}), closing")
            return NextQuestion(
                text=None,
                should_continue=False,
                acknowledgement=self.closing_message(),
            )

        if should_follow_up(history):
            question = self._generate_follow_up(history, profile, planned_questions)
        else:
            question = self._generate_planned(history, profile, planned_questions)
            if history:
                question.acknowledgement = self.generate_acknowledgement(history[-1].answer_text)

        if history and not question.is_follow_up and needs_redirection(history):
            logger.info("Recent answers went off-topic, redirecting")
            question.acknowledgement = self.rng.choice(self._fallbacks["redirections"])

        return question

    def closing_message(self) -> str:
        return self.rng.choice(self._fallbacks["closings"])

    def generate_acknowledgement(self, answer: str) -> str:
        """Short acknowledgement of an answer. Falls back to a canned phrase on any LLM problem."""
        prompt = InterviewPrompts.acknowledgement_prompt(answer)
        try:
            raw = self.llm_client.generate_content(prompt, temperature=0.7, timeout=ACKNOWLEDGEMENT_TIMEOUT)
        except LLMError as e:
            logger.warning(f"Acknowledgement generation failed: {e}, using fallback")
            return self.rng.choice(self._fallbacks["acknowledgements"])

        acknowledgement = PromptFormatter.clean_acknowledgement(raw)
        if not acknowledgement or len(acknowledgement) > MAX_ACKNOWLEDGEMENT_CHARS:
            return self.rng.choice(self._fallbacks["acknowledgements"])
        return acknowledgement

    def _generate_planned(self, history: List[Turn], profile: CandidateProfile,
                          planned_questions: int) -> NextQuestion:
        question_number = len(history)
        covered = [t.topic for t in history if t.topic]
        focus = determine_focus(question_number, planned_questions, covered)

        prompt = self.prompt_engine.build_question_prompt(history, profile, planned_questions, focus)
        timeout = FIRST_QUESTION_TIMEOUT if question_number == 0 else LLM_TIMEOUT
        logger.info(f"Generating question {question_number + 1}/{planned_questions} ({focus.category})")
        raw = self._query(prompt, timeout)

        try:
            return parse_llm_question(raw, default_category=focus.category)
        except ValueError as e:
            logger.warning(f"Unusable question from LLM ({e}), using template question")
            return NextQuestion(
                text=InterviewPrompts.template_question(
                    focus.category, profile.domain, profile.skills, profile.projects
                ),
                topic=focus.category,
            )

    def _generate_follow_up(self, history: List[Turn], profile: CandidateProfile,
                            planned_questions: int) -> NextQuestion:
        prompt = self.prompt_engine.build_follow_up_prompt(history, profile, planned_questions)
        logger.info(f"Generating follow-up to turn {history[-1].index}")
        raw = self._query(prompt, LLM_TIMEOUT)

        try:
            question = parse_follow_up(raw)
        except ValueError as e:
            logger.warning(f"Unusable follow-up from LLM ({e}), using fallback")
            question = NextQuestion(
                text=self._fallbacks["follow_up_questions"][0],
                is_follow_up=True,
                topic=QuestionCategory.FOLLOW_UP.value,
            )
        if not question.acknowledgement or len(question.acknowledgement) > MAX_ACKNOWLEDGEMENT_CHARS:
            question.acknowledgement = self.rng.choice(self._fallbacks["acknowledgements"])
        return question

    def _query(self, prompt: str, timeout: float) -> str:
        try:
            raw = self.llm_client.generate_content(prompt, temperature=0.7, timeout=timeout)
        except LLMTimeoutError as e:
            logger.error(f"Question generation timed out after {timeout}s")
            raise QuestionTimeoutError(str(e)) from e
        except LLMError as e:
            logger.error(f"Question generation failed: {e}")
            raise QuestionGenerationError(str(e)) from e
        logger.debug(f"Raw LLM response: {raw!r}")
        return raw


class PromptEngine:
    """Handles prompt generation and templating."""

    def __init__(self, interview_focus: str = INTERVIEW_FOCUS, recent_turns: int = 3):
        self.interview_focus = interview_focus
        self.recent_turns = recent_turns

    def build_question_prompt(self, history: List[Turn], profile: CandidateProfile,
                              planned_questions: int, focus: QuestionFocus) -> str:
        """
        Build the prompt for the next planned question.

        Args:
            history: Recorded turns
            profile: Candidate profile
            planned_questions: Planned question count
            focus: Category and difficulty for the question

        Returns:
            Formatted prompt string
        """
        return InterviewPrompts.next_question_prompt(
            interviewer_context=self._interviewer_context(history, profile, planned_questions),
            recent_turns=history_as_dicts(history[-self.recent_turns:]),
            question_number=len(history) + 1,
            planned_questions=planned_questions,
            category=focus.category,
            difficulty=focus.difficulty,
            focus_area=focus.focus_area or focus.category,
            top_skills=profile.skills[:3],
        )

    def build_follow_up_prompt(self, history: List[Turn], profile: CandidateProfile,
                               planned_questions: int) -> str:
        return InterviewPrompts.follow_up_prompt(
            interviewer_context=self._interviewer_context(history, profile, planned_questions),
            recent_turns=history_as_dicts(history[-self.recent_turns:]),
            latest_answer=history[-1].answer_text,
        )

    def _interviewer_context(self, history: List[Turn], profile: CandidateProfile,
                             planned_questions: int) -> str:
        topics = []
        for turn in history:
            if turn.topic and turn.topic not in topics:
                topics.append(turn.topic)

        return InterviewPrompts.interviewer_context_template().format(
            domain=profile.domain,
            focus=self.interview_focus,
            experience=profile.experience,
            skills=PromptFormatter.format_list(profile.skills),
            projects=PromptFormatter.format_list(profile.projects, limit=3),
            topics=PromptFormatter.format_list(topics, limit=len(topics) or 1, empty="None yet"),
            asked=len(history),
            planned=planned_questions,
        )
