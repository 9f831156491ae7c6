"""Interactive CLI application."""
import sys
from datetime import datetime, timedelta
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt

from scripture_tutor.config import get_settings
from scripture_tutor.content import LocalContentProvider, fetch_verses_or_empty, load_reference
from scripture_tutor.dashboard import get_score_color, get_study_stats
from scripture_tutor.db import init_db, load_progress_record, update_quota
from scripture_tutor.errors import TutorError
from scripture_tutor.importer import import_file
from scripture_tutor.memory import get_memory_cards, record_memory_result
from scripture_tutor.models import QuestionKind, QuizQuestion, ReadingDay, VerseRef
from scripture_tutor.plan import (
    ensure_start_date, get_all_days, get_calendar_days_elapsed, get_reading_day, get_todays_plan,
)
from scripture_tutor.minitest import build_mini_test, finish_mini_test, record_practice_test
from scripture_tutor.quiz import check_quiz_answer, get_day_quiz, record_quiz_score, shuffled_choices
from scripture_tutor.review import get_due_references
from scripture_tutor.seed import seed_all, is_seeded
from scripture_tutor.session import MiniTestSession
from scripture_tutor.streak import SessionLimiter, format_time_remaining

console = Console()

EXIT_WORDS = ("q", "quit", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a study session early."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = Prompt.ask(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return int(answer)


def setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def show_welcome():
    console.print(Panel(
        "[bold]30 Day Bible Challenge[/bold]\n[dim]Read, remember, and test yourself[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's reading + mini test"),
        ("test", "Mini test for any day"),
        ("quiz", "Multiple-choice quiz for a day"),
        ("memory", "Memory verse drill"),
        ("review", "Review verses that are due"),
        ("dashboard", "Streak + progress"),
        ("plan", "View 30-day plan"),
        ("import", "Add verse texts"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_question(session: MiniTestSession):
    """Prompt for an answer to the current question and return the candidate."""
    view = session.current_view()
    number = f"Q{session.cursor + 1}/{session.total_questions}"
    if view.kind is QuestionKind.GAP_FILL:
        console.print(Panel(view.prompt, title=f"{number} Fill the gaps ({view.reference})", border_style="cyan"))
        console.print("  Word bank: " + ", ".join(f"[cyan]{w}[/cyan]" for w in view.options))
        raw = session_prompt(f"Enter the {view.blanks} missing words in order, comma-separated")
        return [w.strip() for w in raw.split(",") if w.strip()]
    if view.kind is QuestionKind.IDENTIFY_REFERENCE:
        console.print(Panel(view.prompt, title=f"{number} Name the verse", border_style="cyan"))
        for i, option in enumerate(view.options, 1):
            console.print(f"  [cyan]{i})[/cyan] {option}")
        choice = session_int_prompt("Your answer", choices=[str(i) for i in range(1, len(view.options) + 1)])
        return view.options[choice - 1]
    if view.kind is QuestionKind.MATCH_PAIRS:
        console.print(Panel(view.prompt, title=f"{number} Match the references", border_style="cyan"))
        for i, reference in enumerate(view.options, 1):
            console.print(f"  [cyan]{i})[/cyan] {reference}")
        matches = {}
        for snippet in view.snippets:
            console.print(f"\n  [italic]{snippet}[/italic]")
            choice = session_int_prompt("Reference", choices=[str(i) for i in range(1, len(view.options) + 1)])
            matches[snippet] = view.options[choice - 1]
        return matches
    console.print(Panel(view.prompt, title=f"{number} Type the verse ({view.reference})", border_style="cyan"))
    return session_prompt("Type the full verse")


def run_mini_test(session: MiniTestSession) -> None:
    if session.complete:
        console.print("[yellow]Not enough verse text for a mini test today.[/yellow]")
        return
    console.print(f"\n[bold]Mini Test[/bold] — {session.total_questions} questions\n")
    while not session.complete:
        question = session.current
        if session.answer(ask_question(session)):
            console.print("[green]Correct![/green]")
        else:
            console.print(f"[red]Not quite.[/red] [dim]{question.verse.reference}: {question.verse.text}[/dim]")
            if question.attempts == 1:
                console.print("[dim]You'll see this one again before the end.[/dim]")
        console.print()
        session.advance()
    console.print(
        f"[bold]Score: {session.score}/{session.total_questions} ({session.percentage:.0f}%)"
        f"  +{session.earned_reward} XP[/bold]\n"
    )


def run_memory_drill(db_path: str, cards: list[VerseRef]) -> None:
    if not cards:
        console.print("[yellow]No memory verses available![/yellow]")
        return
    console.print(f"\n[bold]Memory Drill[/bold] — {len(cards)} verses\n")
    for i, card in enumerate(cards, 1):
        console.print(Panel(card.reference, title=f"Verse {i}/{len(cards)}", border_style="cyan"))
        session_prompt("[dim]Recite it, then press Enter to reveal[/dim]", default="")
        console.print(Panel(card.text, border_style="green"))
        answer = session_prompt("Did you get it? (y/n)", choices=["y", "n"] + list(EXIT_WORDS), show_choices=False)
        record = record_memory_result(db_path, card.reference, answer == "y")
        console.print(f"[dim]Mastery {record.level}/5, next review {record.next_review_at:%b %d}[/dim]\n")


def run_quiz_session(db_path: str, day: ReadingDay, questions: list[QuizQuestion]) -> tuple[int, int]:
    if not questions:
        console.print("[yellow]No questions available![/yellow]")
        return 0, 0
    correct = 0
    console.print(f"\n[bold]Quiz[/bold] — Day {day.id}: {day.title}, {len(questions)} questions\n")
    for i, q in enumerate(questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q.question}\n")
        choices = shuffled_choices(q)
        letters = "abcd"[:len(choices)]
        for letter, choice in zip(letters, choices):
            console.print(f"  [cyan]{letter})[/cyan] {choice}")
        answer = session_prompt("\nYour answer", choices=list(letters) + list(EXIT_WORDS), show_choices=False)
        if check_quiz_answer(q, choices[letters.index(answer)]):
            console.print("[green]Correct![/green]")
            correct += 1
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_answer}[/green]")
        console.print(f"[dim]{q.verse_reference}[/dim]\n")
    result = record_quiz_score(db_path, correct, len(questions), day.id)
    console.print(
        f"[bold]Score: {correct}/{len(questions)} ({result.percentage:.0f}%)  +{result.earned_reward} XP[/bold]\n"
    )
    return correct, len(questions)


def start_limited_session(db_path: str) -> bool:
    settings = get_settings()
    now = datetime.now()
    window = timedelta(hours=settings.session_window_hours)

    def consume(quota):
        limiter = SessionLimiter(quota, settings.free_session_limit, window)
        return limiter.try_start(now), limiter.time_until_refill(now)

    allowed, until_refill = update_quota(db_path, settings.free_session_limit, now, consume)
    if not allowed:
        wait = format_time_remaining(until_refill)
        console.print(Panel(
            f"You've used all {settings.free_session_limit} free sessions.\n"
            f"More sessions in [bold]{wait}[/bold], or upgrade for unlimited study.",
            title="Session Limit", border_style="yellow",
        ))
    return allowed


def run_day(db_path: str, day) -> None:
    provider = LocalContentProvider(db_path)
    verses = fetch_verses_or_empty(
        provider, day.book, day.start_chapter, day.start_verse, day.end_chapter, day.end_verse,
    )
    console.print(Panel(
        "\n".join(f"[dim]{v.verse}[/dim] {v.text}" for v in verses) or "[dim]No verse text stored for this passage.[/dim]",
        title=f"Day {day.id}: {day.title} ({day.reference})", subtitle=day.theme,
    ))
    session_prompt("[dim]Press Enter when done reading[/dim]", default="")
    session = build_mini_test(db_path, day)
    run_mini_test(session)
    if not session.complete:
        return
    result, progress = finish_mini_test(db_path, session, day)
    console.print(f"[green]Day {day.id} complete![/green] Streak: [bold]{progress.current_streak}[/bold] days")
    if result.missed_references:
        console.print(f"[dim]Worth another look: {', '.join(result.missed_references)}[/dim]")


def cmd_today(db_path: str):
    ensure_start_date(db_path)
    day = get_todays_plan(db_path)
    if not day:
        console.print("[yellow]The reading plan is empty.[/yellow]")
        return
    if not start_limited_session(db_path):
        return
    run_day(db_path, day)


def ask_day(db_path: str):
    today = get_todays_plan(db_path)
    day_id = IntPrompt.ask(
        "Day number", choices=[str(i) for i in range(1, 31)], show_choices=False,
        default=today.id if today else 1,
    )
    day = get_reading_day(db_path, day_id)
    if not day:
        console.print(f"[yellow]Day {day_id} is not in the reading plan.[/yellow]")
    return day


def cmd_test(db_path: str):
    day = ask_day(db_path)
    if not day or not start_limited_session(db_path):
        return
    session = build_mini_test(db_path, day)
    run_mini_test(session)
    if session.complete and session.total_questions:
        record_practice_test(db_path, session, day)


def cmd_quiz(db_path: str):
    day = ask_day(db_path)
    if not day or not start_limited_session(db_path):
        return
    run_quiz_session(db_path, day, get_day_quiz(db_path, day))


def cmd_memory(db_path: str):
    day = get_todays_plan(db_path)
    if not day:
        console.print("[yellow]The reading plan is empty.[/yellow]")
        return
    console.print(f"\n[bold]Memory verse for Day {day.id}:[/bold] {day.memory_verse}")
    run_memory_drill(db_path, get_memory_cards(db_path, day))


def cmd_review(db_path: str):
    console.print("\n[bold]Due Reviews[/bold]\n")
    due = get_due_references(db_path)
    if not due:
        console.print("[green]Nothing due for review. Keep it up![/green]")
        return
    provider = LocalContentProvider(db_path)
    cards = []
    for item in due:
        cards.extend(load_reference(provider, item["reference"]))
    run_memory_drill(db_path, cards)


def cmd_dashboard(db_path: str):
    stats = get_study_stats(db_path)
    cal_days = get_calendar_days_elapsed(db_path)
    header = f"{stats['days_completed']} of 30 days completed"
    if cal_days:
        header += f" (Calendar Day {cal_days})"
    console.print(Panel(f"[bold]{header}[/bold]", title="Progress Dashboard", border_style="blue"))

    pct = stats["completion"]
    bar_filled = int(pct / 5)
    bar = f"[blue]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/blue]"
    console.print(f"\n  Plan: [bold]{pct}%[/bold] {bar} {stats['completion_label']}\n")

    table = Table(title="Stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    color = get_score_color(stats["avg_test_score"])
    table.add_row("Current streak", f"{stats['current_streak']} days")
    table.add_row("Longest streak", f"{stats['longest_streak']} days")
    table.add_row("Games played", str(stats["games_played"]))
    table.add_row("Average score", f"[{color}]{stats['avg_test_score']}%[/{color}]")
    table.add_row("XP earned", str(stats["total_reward"]))
    table.add_row("Verses mastered", f"{stats['verses_mastered']} / {stats['verses_tracked']}")
    table.add_row("Reviews due", str(stats["reviews_due"]))
    table.add_row("Free sessions left", str(stats["sessions_remaining"]))
    console.print(table)


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path)
    console.print(f"[green]Imported {result['verse_count']} verses from {result['filename']}[/green]")


def cmd_plan(db_path: str):
    progress = load_progress_record(db_path)
    today = get_todays_plan(db_path)
    table = Table(title="30-Day Reading Plan")
    table.add_column("Day", justify="right")
    table.add_column("Title")
    table.add_column("Passage")
    table.add_column("Status")
    for day in get_all_days(db_path):
        if day.id in progress.completed_day_ids:
            status = "[green]Done[/green]"
        elif today and day.id == today.id:
            status = "[cyan]Today[/cyan]"
        else:
            status = ""
        table.add_row(str(day.id), day.title, day.reference, status)
    console.print(table)


def main():
    settings = get_settings()
    setup_logging(settings.log_level)
    db_path = settings.db_path
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice == "today":
                cmd_today(db_path)
            elif choice == "test":
                cmd_test(db_path)
            elif choice == "quiz":
                cmd_quiz(db_path)
            elif choice == "memory":
                cmd_memory(db_path)
            elif choice == "review":
                cmd_review(db_path)
            elif choice == "dashboard":
                cmd_dashboard(db_path)
            elif choice == "plan":
                cmd_plan(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you tomorrow![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to the menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TutorError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
