#!/usr/bin/env python3
"""
Main entry point for the Hiresight interview system.
Allows running the package with: python -m hiresight
"""
import sys
from .config import get_config
from .interview.errors import QuestionGenerationError
from . import InterviewOrchestrator


def main():
    """Command-line interface for the interview orchestrator."""

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    # TTS configuration with explicit flags taking precedence
    explicit_tts = "--tts" in sys.argv or "--speech" in sys.argv
    explicit_text = "--text" in sys.argv or "--no-tts" in sys.argv

    if explicit_text:
        use_tts = False
    elif explicit_tts:
        use_tts = True
    else:
        use_tts = config.enable_tts  # Use config default

    voice_mode = "--audio" in sys.argv
    max_turns = config.max_turns
    tts_voice = config.tts_voice
    for arg in sys.argv:
        if arg.startswith("--max-turns="):
            try:
                max_turns = int(arg.split("=")[1])
            except (ValueError, IndexError):
                print("❌ Invalid max turns value. Use --max-turns=N with N >= 1")
                sys.exit(1)
            if max_turns < 1:
                print("❌ Invalid max turns value. Use --max-turns=N with N >= 1")
                sys.exit(1)
        elif arg.startswith("--voice="):
            tts_voice = arg.split("=", 1)[1] or tts_voice

    # Show configuration
    if use_tts:
        print(f"🔊 TTS Mode: questions will be spoken aloud ({tts_voice})")
        print("   (Use --text or --no-tts to disable speech)")
    else:
        print("📝 Text Mode: Questions will be displayed as text only")
    if voice_mode:
        print("🎧 Audio answers: give the path of a WAV recording for each answer")

    # Create orchestrator using configuration
    orchestrator = InterviewOrchestrator(
        project_id=config.google_cloud_project,
        credentials_json=config.google_application_credentials,
        location=config.vertex_location,
        model_name=config.model_name,
        llm_timeout=config.llm_timeout,
        max_turns=max_turns,
        workdir=config.workdir,
        history_dir=config.history_dir,
        interview_focus=config.interview_focus,
        language_code=config.language_code,
        use_tts=use_tts,
        tts_voice=tts_voice,
        log_file=config.log_file,
        log_level=config.log_level,
    )

    # Run the interview
    try:
        orchestrator.run(voice_mode=voice_mode)
    except QuestionGenerationError:
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Interview interrupted")
        sys.exit(130)

    # Results are already displayed by the run() method
    # Detailed information is in the log file


if __name__ == "__main__":
    main()
