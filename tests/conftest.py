import pytest

from hiresight.interview.models import CandidateProfile
from hiresight.interview.controller import ConversationController
from hiresight.interview.events import InterviewEventBus
from hiresight.interview.testing import MockQuestionGenerator


@pytest.fixture
def profile():
    return CandidateProfile(
        skills=["Python", "SQL"],
        experience="3 years",
        domain="Backend Engineering",
        projects=["Payments API"],
    )


@pytest.fixture
def event_bus():
    bus = InterviewEventBus()
    bus.received = []
    bus.subscribe_all(bus.received.append)
    return bus


@pytest.fixture
def make_controller(event_bus):
    """Build a controller around a scripted question generator."""
    def _make(script=None, max_turns=5):
        generator = MockQuestionGenerator(script)
        controller = ConversationController(generator, max_turns=max_turns, event_bus=event_bus)
        return controller, generator
    return _make


