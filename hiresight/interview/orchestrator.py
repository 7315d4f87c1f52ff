"""
Interview orchestrator: runs a complete interview from the terminal.
"""
import logging
from typing import Optional, Dict, Callable

from .models import CandidateProfile, InterviewResult
from .schemas import ControllerState, TurnOutcome
from .controller import ConversationController
from .services import (
    AnswerTranscriptionService, SpeechSynthesisService,
    ConversationManager, CapturedAnswer
)
from .decision_engine import ContextualQuestionGenerator, PromptEngine
from .events import InterviewEventBus, EventLogger, InterviewMetrics
from .errors import QuestionGenerationError, TranscriptionError, NoSpeechDetectedError
from ..infrastructure.data import HistoryRepository, JsonFileHistoryRepository, interview_entry
from ..utils import setup_logging
from ..config import (
    VERTEX_LOCATION, MODEL_NAME, MAX_TURNS, WORKDIR, LANGUAGE_CODE,
    TTS_VOICE, HISTORY_DIR, INTERVIEW_FOCUS, LLM_TIMEOUT
)

logger = logging.getLogger("orchestrator")

END_COMMAND = "/end"


class InterviewOrchestrator:
    """
    Runs an interview over the conversation controller.

    Collaborators (question generator, history repository, speech services) can be
    injected; otherwise they are built from the Google Cloud settings.
    """

    def __init__(self,
                 project_id: Optional[str] = None,
                 location: str = VERTEX_LOCATION,
                 model_name: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 llm_timeout: int = LLM_TIMEOUT,
                 max_turns: int = MAX_TURNS,
                 workdir: str = WORKDIR,
                 history_dir: str = HISTORY_DIR,
                 interview_focus: str = INTERVIEW_FOCUS,
                 language_code: str = LANGUAGE_CODE,
                 use_tts: bool = False,
                 tts_voice: str = TTS_VOICE,
                 log_file: Optional[str] = None,
                 log_level: str = "DEBUG",
                 question_generator=None,
                 history_repository: Optional[HistoryRepository] = None,
                 transcription_service: Optional[AnswerTranscriptionService] = None,
                 tts_service: Optional[SpeechSynthesisService] = None,
                 input_fn: Callable[[str], str] = input):

        if question_generator is None:
            if not project_id:
                raise ValueError("project_id is required for LLM functionality")
            from ..infrastructure.llm import VertexRestClient
            llm_client = VertexRestClient(
                project=project_id,
                location=location,
                model=model_name,
                credentials_json=credentials_json,
                timeout=llm_timeout
            )
            question_generator = ContextualQuestionGenerator(llm_client, PromptEngine(interview_focus))
        self.question_generator = question_generator
        self.controller: Optional[ConversationController] = None

        self.max_turns = max_turns
        self.log_file = log_file
        if log_file:
            setup_logging(log_file, log_level)

        # Initialize event system
        self.event_bus = InterviewEventBus()
        self.event_logger = EventLogger()
        self.metrics = InterviewMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

        self.conversation_manager = ConversationManager(workdir)
        self.history = history_repository or JsonFileHistoryRepository(history_dir)
        self.tts_service = tts_service or SpeechSynthesisService(use_tts=use_tts, voice=tts_voice)
        self._transcription_service = transcription_service
        self.language_code = language_code
        self.input_fn = input_fn

    @property
    def transcription_service(self) -> AnswerTranscriptionService:
        if self._transcription_service is None:
            self._transcription_service = AnswerTranscriptionService(language_code=self.language_code)
        return self._transcription_service

    def run(self, profile: Optional[CandidateProfile] = None,
            user_id: str = "local", voice_mode: bool = False) -> InterviewResult:
        """
        Run the complete interview.

        Args:
            profile: Candidate profile for question generation
            user_id: Owner of the saved history entry
            voice_mode: Read answers from WAV file paths instead of typed text

        Returns:
            InterviewResult with all recorded turns
        """
        profile = profile or CandidateProfile()
        self.controller = ConversationController(
            self.question_generator, max_turns=self.max_turns, event_bus=self.event_bus
        )
        controller = self.controller

        print(f"\n🎙️  Starting interview - up to {self.max_turns} questions")
        if self.log_file:
            print(f"📝 Detailed logs: {self.log_file}")
        print(f"   Type {END_COMMAND} at any time to end the interview")
        print("=" * 50)

        try:
            prompt = controller.start(profile)
        except QuestionGenerationError as e:
            logger.error("Could not start interview: %s", e)
            print("❌ Could not generate the first question - check log for details")
            raise

        while controller.state != ControllerState.COMPLETE:
            self.tts_service.speak_or_print(prompt)
            turn_index = controller.session.current_turn_index()
            answer = self._capture_answer(voice_mode)
            if answer is None:
                controller.finish()
                break
            if not answer.transcript:
                continue

            outcome = self._submit(answer, turn_index)
            if outcome is None:
                break
            prompt = outcome.prompt_text

        result = controller.result()
        if result.closing_message:
            self.tts_service.speak_or_print(result.closing_message)

        self._save(result, user_id, profile)
        self._display_results(result)
        return result

    def _capture_answer(self, voice_mode: bool) -> Optional[CapturedAnswer]:
        """Read one answer. None means the candidate ended the interview."""
        prompt = "🎧 Path to your recorded answer (WAV): " if voice_mode else "💬 Your answer: "
        try:
            raw = self.input_fn(prompt)
        except EOFError:
            return None

        raw = (raw or "").strip()
        if raw.lower() == END_COMMAND:
            return None
        if not raw:
            print("⚠️  Please give an answer, or type /end to finish")
            return CapturedAnswer(transcript="")
        if not voice_mode:
            return CapturedAnswer(transcript=raw)

        print("🔍 Processing speech...")
        try:
            answer = self.transcription_service.transcribe_file(raw)
        except NoSpeechDetectedError:
            print("⚠️  No speech detected - please try again")
            return CapturedAnswer(transcript="")
        except (TranscriptionError, OSError) as e:
            logger.error("Failed to transcribe %s: %s", raw, e)
            print("❌ Transcription failed - check log for details")
            return CapturedAnswer(transcript="")

        print(f"💬 \"{answer.transcript}\"")
        if answer.confidence_metrics:
            print(f"   Confidence: {answer.confidence_metrics.overall_score:.0f}/100")
        return answer

    def _submit(self, answer: CapturedAnswer, turn_index: int) -> Optional[TurnOutcome]:
        """Submit an answer for the turn it was captured on, offering retries when question generation fails."""
        print("🤔 Analyzing response...")
        try:
            return self.controller.submit_answer(
                answer.transcript, answer.confidence_metrics, turn_index=turn_index
            )
        except QuestionGenerationError as e:
            logger.error("Question generation failed: %s", e)

        while True:
            print("❌ Could not get the next question. Press Enter to retry or type /end to finish.")
            try:
                choice = self.input_fn("> ")
            except EOFError:
                choice = END_COMMAND
            if (choice or "").strip().lower() == END_COMMAND:
                self.controller.finish()
                return None
            try:
                return self.controller.retry()
            except QuestionGenerationError as e:
                logger.error("Retry failed: %s", e)

    def _save(self, result: InterviewResult, user_id: str, profile: CandidateProfile) -> None:
        try:
            self.conversation_manager.save_transcript(self.controller.session, result)
            self.history.save(interview_entry(result, user_id, domain=profile.domain))
        except OSError as e:
            logger.error("Failed to save interview: %s", e)
            print("⚠️  Could not save interview history - check log for details")

    def _display_results(self, result: InterviewResult) -> None:
        stats = self.controller.session.stats()
        print("\n" + "=" * 50)
        print("🛑 INTERVIEW ENDED EARLY" if result.ended_early else "🎯 INTERVIEW COMPLETE")
        print("=" * 50)
        print(f"💬 Questions answered: {stats['total_turns']} ({stats['follow_up_count']} follow-ups)")
        if result.topics_covered:
            print(f"📚 Topics covered: {', '.join(result.topics_covered)}")
        if result.average_confidence is not None:
            print(f"🔢 Average confidence: {result.average_confidence:.0f}/100")
        print(f"⏱️  Duration: {result.duration_seconds / 60:.1f} min")
        if self.log_file:
            print(f"📁 Full details logged to: {self.log_file}")
        print(f"📈 Session metrics: {self.metrics.get_metrics()}")

    def get_metrics(self) -> Dict[str, int]:
        return self.metrics.get_metrics()
