"""
Interview prompt templates and canned phrases.

This module contains all the prompt templates used by question generation,
keeping them separate from the business logic for easier maintenance and editing.
"""

from typing import Dict, Any, List
import json


class InterviewPrompts:
    """Collection of all interview-related prompts."""

    @staticmethod
    def interviewer_context_template() -> str:
        """Base template describing the interviewer and the candidate."""
        return """
You are a professional, conversational interviewer conducting a {domain} interview for a {focus} role.
Be natural and human-like, not robotic.

Interview Context:
- Candidate Experience: {experience}
- Domain: {domain}
- Key Skills: {skills}
- Projects: {projects}
- Topics Covered: {topics}
- Questions Asked: {asked}/{planned}
        """.strip()

    @staticmethod
    def next_question_prompt(
        interviewer_context: str,
        recent_turns: List[Dict[str, Any]],
        question_number: int,
        planned_questions: int,
        category: str,
        difficulty: str,
        focus_area: str,
        top_skills: List[str]
    ) -> str:
        """Prompt for the next planned question."""
        return f"""
{interviewer_context}

Recent conversation: {json.dumps(recent_turns, ensure_ascii=False)}

Generate the next question ({question_number}/{planned_questions}) focusing on: {category}

Requirements:
- Be conversational and natural, like a real human interviewer
- Consider the conversation flow and previous responses
- Don't repeat topics already covered thoroughly
- Make questions relevant to their background: {", ".join(top_skills)}
- Focus on: {focus_area}
- Difficulty: {difficulty}

Respond ONLY with minified JSON (no code fences) in this exact format:
{{"text":"<your natural, conversational interview question>","category":"{category}","difficulty":"{difficulty}"}}
        """.strip()

    @staticmethod
    def follow_up_prompt(interviewer_context: str, recent_turns: List[Dict[str, Any]],
                         latest_answer: str) -> str:
        """Prompt for a follow-up that digs into the latest answer."""
        return f"""
{interviewer_context}

Recent conversation: {json.dumps(recent_turns, ensure_ascii=False)}

Candidate's latest response: {json.dumps(latest_answer, ensure_ascii=False)}

Generate a natural follow-up question that digs deeper or asks for clarification,
and a brief human-like acknowledgement of the response (like "That's interesting", "I see", "Good point").

Respond ONLY with minified JSON (no code fences) in this exact format:
{{"acknowledgement":"<1-5 words>","followUpQuestion":{{"text":"<follow-up question>","category":"follow-up","difficulty":"medium"}}}}
        """.strip()

    @staticmethod
    def acknowledgement_prompt(answer: str) -> str:
        """Prompt for a short acknowledgement of an answer."""
        return f"""
Generate a brief, natural human acknowledgement (1-5 words) for this response: {json.dumps(answer[:200], ensure_ascii=False)}

Examples: "That's great", "I see", "Interesting", "Good point", "Makes sense", "Absolutely", "Right", "Fair enough"

Respond with ONLY the acknowledgement.
        """.strip()

    @staticmethod
    def fallback_messages() -> Dict[str, List[str]]:
        """Canned phrases for when LLM generation fails or is not needed."""
        return {
            "acknowledgements": [
                "That's great", "I see", "Interesting", "Good point", "Makes sense",
                "Absolutely", "Right", "Fair enough", "Nice", "Excellent"
            ],
            "redirections": [
                "That's interesting, but let's get back to the technical aspects.",
                "I appreciate that context. Now, let's focus on your professional experience.",
                "Good to know. Let me ask you about something more specific to the role.",
                "Thanks for sharing. Let's dive into the technical side of things.",
                "I see. Let's talk about your work experience instead."
            ],
            "closings": [
                "Thank you for your time today. It's been a great conversation!",
                "Excellent! I really enjoyed our discussion about your experience.",
                "That's wonderful. Thank you for walking me through your background.",
                "Great answers! I appreciate you taking the time to share your insights.",
                "Perfect! That gives me a really good understanding of your experience."
            ],
            "follow_up_questions": [
                "Could you elaborate on that a bit more? I'd like to understand your approach better.",
                "Could you tell me more about that?"
            ],
            "generic_questions": [
                "What's an achievement you're particularly proud of in your career?",
                "Can you tell me about a challenging problem you solved recently?",
                "How do you usually approach learning a new technology?",
                "Tell me about a time you worked closely with a team to deliver something."
            ],
        }

    @staticmethod
    def template_question(category: str, domain: str, skills: List[str], projects: List[str]) -> str:
        """Non-LLM question for a focus category."""
        if category == "introduction":
            return f"Could you tell me a bit about yourself and what interests you about {domain}?"
        if category == "technical":
            skill = skills[0] if skills else "programming"
            return f"Can you tell me about your experience with {skill}? What projects have you used it in?"
        if category == "project-specific":
            project = projects[0] if projects else "one of your projects"
            return f"Can you walk me through {project}? What was your role and what challenges did you face?"
        return "What's an achievement you're particularly proud of in your career?"


class PromptFormatter:
    """Helper class for formatting prompt fragments."""

    @staticmethod
    def format_list(values: List[Any], limit: int = 5, empty: str = "None listed") -> str:
        items = [str(v) for v in values[:limit] if str(v).strip()]
        return ", ".join(items) if items else empty

    @staticmethod
    def clean_acknowledgement(raw: str) -> str:
        """Strip quotes and whitespace the LLM tends to add around short replies."""
        return raw.strip().strip('"').strip("'").strip()
