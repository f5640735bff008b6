# app/cli.py
import argparse

from agents.text_service import build_text_service
from app.catalog import DEFAULT_LEVEL, DEFAULT_TOPIC, all_topics, list_levels
from app.config import get_settings
from app.errors import RewriteError
from app.logging_config import configure_logging
from app.session import LessonSession
from app.ui_actions import (
    action_begin_writing,
    action_new_lesson,
    action_next_tier,
    action_restart,
    action_retry,
    action_study_text,
    action_submit,
    action_view,
    plain_text_to_html,
)

HELP = "Commands: /study /retry /next /new /score /help /quit. Finish a paragraph with an empty line."


def print_prompt(session: LessonSession):
    view = action_view(session)
    print(f"\n=== {view.title} ({view.level}) — level {view.tier_number}/{view.tier_count}, "
          f"{view.masking_percentage}% hidden ===")
    print(view.masked_text)


def print_feedback(session: LessonSession):
    view = action_view(session)
    fb = view.feedback
    print(f"\nScore: {fb.score}/100")
    for s in fb.strengths:
        print(f"  + {s}")
    for s in fb.improvements:
        print(f"  - {s}")
    wrong = [d for d in fb.word_diffs if not d.is_correct]
    if wrong:
        print("Marked words:")
        for d in wrong:
            print(f"  * {d.word.strip()}: {d.error_type}")
    print("Proficiency: " + ", ".join(f"{k}={v:.1f}" for k, v in fb.proficiency.as_mapping().items()))

    if view.completed:
        print("\n✅ Lesson complete! Type /new for another paragraph.")
    elif view.can_advance:
        print("Type /next for the next level or /retry to try again.")
    else:
        print("Type /retry to try again.")


def study_then_write(session: LessonSession):
    print("\n--- STUDY ---")
    print(session.lesson.reference_text)
    input("\nPress Enter when you are ready to write...")
    action_begin_writing(session)
    print_prompt(session)


def read_paragraph(first_line: str) -> str:
    lines = [first_line]
    while True:
        line = input()
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="rewrite-coach", description="Rebuild a model paragraph from memory.")
    parser.add_argument("--level", default=DEFAULT_LEVEL.value, choices=[lv.value for lv in list_levels()])
    parser.add_argument("--topic", default=DEFAULT_TOPIC, choices=[t.id for t in all_topics()])
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(log_level=settings.log_level, environment=settings.environment)

    try:
        service = build_text_service(settings)
    except RewriteError as e:
        parser.error(str(e))

    print("Welcome to ReWrite Coach")
    print(HELP)
    session = action_new_lesson(service, args.level, args.topic)
    study_then_write(session)

    while True:
        msg = input("\nYou: ")
        cmd = msg.strip().lower()
        if cmd in ["exit", "quit", "/quit"]:
            break

        try:
            if cmd == "/help":
                print(HELP)
            elif cmd == "/study":
                study = action_study_text(session)
                print(study if study is not None else "The study text stays hidden on the from-memory level.")
            elif cmd == "/score":
                print_feedback(session)
            elif cmd == "/retry":
                action_retry(session)
                print_prompt(session)
            elif cmd == "/next":
                action_next_tier(session)
                print_prompt(session)
            elif cmd == "/new":
                action_restart(session)
                study_then_write(session)
            elif cmd.startswith("/"):
                print(f"Unknown command. {HELP}")
            elif cmd:
                text = read_paragraph(msg)
                action_submit(session, plain_text_to_html(text))
                print_feedback(session)
        except RewriteError as e:
            print(f"⚠️ {e}")


if __name__ == "__main__":
    main()
