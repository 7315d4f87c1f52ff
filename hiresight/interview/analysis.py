"""
Speech confidence analysis for interview answers.
Turns word-level timestamps into filler-word, pause and fluency scores.

All scores are on a 0-100 scale. The scoring functions are pure so they can be
called on metrics computed elsewhere (for example by a speech service that only
reports counts).
"""
import re
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .models import (
    WordTimestamp, PauseAnalysis, FillerWordAnalysis,
    SpeechBreakdown, ConfidenceMetrics
)
from ..config import (
    PAUSE_MIN_GAP, PAUSE_SHORT_MAX, PAUSE_MEDIUM_MAX, PAUSE_LONG_MAX,
    SPEECH_RATE_MIN_WPM, SPEECH_RATE_MAX_WPM,
    SPEECH_RATE_PENALTY_PER_WPM, SPEECH_RATE_MAX_PENALTY,
    OVERALL_WEIGHTS, SINGLE_WORD_FILLERS, MULTI_WORD_FILLERS
)

logger = logging.getLogger("speech_analysis")

_PUNCTUATION = re.compile(r"[.,!?;]")


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def classify_pause(duration: float) -> str:
    """Classify a gap by duration: short, medium, long or excessive."""
    if duration <= PAUSE_SHORT_MAX:
        return "short"
    if duration <= PAUSE_MEDIUM_MAX:
        return "medium"
    if duration <= PAUSE_LONG_MAX:
        return "long"
    return "excessive"


# -----------------------------------------------------------------------------
# Pure scoring functions
# -----------------------------------------------------------------------------

def filler_word_score(filler_count: int, total_words: int) -> float:
    """
    Score filler-word usage. Fewer fillers relative to total words scores higher.

    0-2% fillers is excellent (90-100), 2-5% good (75-89), 5-10% average (50-74),
    10-15% poor (25-49), above 15% very poor (0-24).
    """
    if total_words <= 0:
        return 0.0

    pct = (filler_count / total_words) * 100

    if pct <= 2:
        score = max(90.0, 100 - pct * 5)
    elif pct <= 5:
        score = max(75.0, 90 - (pct - 2) * 5)
    elif pct <= 10:
        score = max(50.0, 75 - (pct - 5) * 5)
    elif pct <= 15:
        score = max(25.0, 50 - (pct - 10) * 5)
    else:
        score = max(0.0, 25 - (pct - 15) * 2)
    return round(score, 2)


def pause_score(pauses: Sequence[PauseAnalysis], total_speech_time: float) -> float:
    """Score pausing. No pauses at all is the maximum score."""
    if not pauses:
        return 100.0

    long_pauses = sum(1 for p in pauses if p.type == "long")
    excessive_pauses = sum(1 for p in pauses if p.type == "excessive")
    average = sum(p.duration for p in pauses) / len(pauses)

    score = 100.0
    score -= long_pauses * 5
    score -= excessive_pauses * 15
    if average > PAUSE_MEDIUM_MAX:
        score -= (average - PAUSE_MEDIUM_MAX) * 10

    # Some pausing is natural
    if total_speech_time > 0:
        pauses_per_minute = len(pauses) / (total_speech_time / 60)
        if 5 <= pauses_per_minute <= 15:
            score += 5

    return float(round(_clamp(score)))


def speech_rate_penalty(speech_rate: float) -> float:
    """Penalty for speaking outside the target words-per-minute band."""
    if speech_rate < SPEECH_RATE_MIN_WPM:
        deviation = SPEECH_RATE_MIN_WPM - speech_rate
    elif speech_rate > SPEECH_RATE_MAX_WPM:
        deviation = speech_rate - SPEECH_RATE_MAX_WPM
    else:
        return 0.0
    return min(SPEECH_RATE_MAX_PENALTY, deviation * SPEECH_RATE_PENALTY_PER_WPM)


def fluency_score(filler: float, pause: float, speech_rate: float, total_words: int) -> float:
    """Combine filler and pause scores with speech-rate deviation."""
    if total_words <= 0:
        return 0.0

    score = (filler + pause) / 2
    if filler >= 80 and pause >= 80:
        score += 5
    elif filler < 40 or pause < 40:
        score -= 10

    score -= speech_rate_penalty(speech_rate)
    return float(round(_clamp(score)))


def overall_score(filler: float, pause: float, fluency: float, total_words: int) -> float:
    """Weighted aggregate of the sub-scores."""
    if total_words <= 0:
        return 0.0
    w_filler, w_pause, w_fluency = OVERALL_WEIGHTS
    return float(round(filler * w_filler + pause * w_pause + fluency * w_fluency))


def score_speech(total_words: int, total_speech_time: float,
                 pauses: Sequence[PauseAnalysis], filler_count: int,
                 speech_rate: float) -> Dict[str, float]:
    """
    Score raw speech measurements.

    Returns:
        Dict with overall_score, filler_word_score, pause_score and fluency_score
    """
    filler = filler_word_score(filler_count, total_words)
    pause = pause_score(pauses, total_speech_time)
    fluency = fluency_score(filler, pause, speech_rate, total_words)
    return {
        "overall_score": overall_score(filler, pause, fluency, total_words),
        "filler_word_score": filler,
        "pause_score": pause,
        "fluency_score": fluency,
    }


def score_breakdown(breakdown: SpeechBreakdown) -> ConfidenceMetrics:
    """Compute all confidence scores from a speech breakdown."""
    scores = score_speech(
        breakdown.total_words, breakdown.total_speech_time,
        breakdown.pauses, breakdown.filler_count, breakdown.speech_rate
    )
    return ConfidenceMetrics(breakdown=breakdown, **scores)


# -----------------------------------------------------------------------------
# Word-timestamp analysis
# -----------------------------------------------------------------------------

class SpeechAnalyzer:
    """Derives confidence metrics from speech-to-text word timestamps."""

    def __init__(self,
                 single_fillers=SINGLE_WORD_FILLERS,
                 multi_fillers=MULTI_WORD_FILLERS):
        self.single_fillers = frozenset(single_fillers)
        self.multi_fillers = frozenset(tuple(p) for p in multi_fillers)

    def analyze_words(self, words: Sequence[WordTimestamp]) -> ConfidenceMetrics:
        """
        Analyze a transcribed answer.

        Args:
            words: Recognized words in speaking order

        Returns:
            ConfidenceMetrics for the answer (zero scores for an empty answer)
        """
        words = list(words or [])
        if not words:
            return score_breakdown(SpeechBreakdown())

        fillers = self.find_filler_words(words)
        pauses = self.find_pauses(words)
        speech_rate, speech_time, pause_time = self.speech_timing(words, pauses)

        breakdown = SpeechBreakdown(
            total_words=len(words),
            filler_words=fillers,
            pauses=pauses,
            average_pause_duration=(pause_time / len(pauses)) if pauses else 0.0,
            speech_rate=speech_rate,
            total_speech_time=speech_time,
            total_pause_time=pause_time,
        )
        metrics = score_breakdown(breakdown)
        logger.debug(
            "Analyzed %d words: %d fillers, %d pauses, %.1f wpm -> overall %.0f",
            len(words), breakdown.filler_count, len(pauses), speech_rate, metrics.overall_score
        )
        return metrics

    def find_filler_words(self, words: Sequence[WordTimestamp]) -> List[FillerWordAnalysis]:
        """Find single-word and two-word fillers. A phrase is counted at its first word."""
        tokens = [_PUNCTUATION.sub("", w.word.lower()).strip() for w in words]
        found: Dict[str, List[int]] = {}

        i = 0
        while i < len(tokens):
            pair = (tokens[i], tokens[i + 1]) if i + 1 < len(tokens) else None
            if pair in self.multi_fillers:
                found.setdefault(" ".join(pair), []).append(i)
                i += 2
                continue
            if tokens[i] in self.single_fillers:
                found.setdefault(tokens[i], []).append(i)
            i += 1

        total = len(words)
        return [
            FillerWordAnalysis(
                word=word,
                count=len(positions),
                positions=positions,
                percentage=(len(positions) / total) * 100,
            )
            for word, positions in found.items()
        ]

    def find_pauses(self, words: Sequence[WordTimestamp]) -> List[PauseAnalysis]:
        """Find gaps between consecutive words longer than the minimum gap."""
        if len(words) < 2:
            return []

        starts = np.array([w.start for w in words], dtype=float)
        ends = np.array([w.end for w in words], dtype=float)
        gaps = starts[1:] - ends[:-1]

        return [
            PauseAnalysis(duration=float(gap), position=int(idx), type=classify_pause(float(gap)))
            for idx, gap in enumerate(gaps)
            if gap > PAUSE_MIN_GAP
        ]

    def speech_timing(self, words: Sequence[WordTimestamp],
                      pauses: Sequence[PauseAnalysis]) -> Tuple[float, float, float]:
        """
        Compute speaking rate and time split.

        Returns:
            Tuple of (words_per_minute, total_speech_time, total_pause_time)
        """
        if not words:
            return 0.0, 0.0, 0.0

        total_audio = words[-1].end - words[0].start
        pause_time = float(sum(p.duration for p in pauses))
        speech_time = total_audio - pause_time
        rate = (len(words) / speech_time) * 60 if speech_time > 0 else 0.0
        return rate, speech_time, pause_time


def analyze_transcript_words(words: Optional[Sequence[WordTimestamp]]) -> ConfidenceMetrics:
    """Convenience wrapper around SpeechAnalyzer().analyze_words."""
    return SpeechAnalyzer().analyze_words(words or [])
