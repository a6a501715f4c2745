"""Interactive CLI application."""
import logging
import sys
import sqlite3

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from flashdrill.bank import get_categories, load_bank
from flashdrill.config import load_settings, setup_logging
from flashdrill.dashboard import (
    get_category_stats, get_mastery_color, get_overview, get_questions_by_status,
)
from flashdrill.db import KeyValueStore
from flashdrill.errors import (
    NoMatchingQuestions, QuestionBankError, ResetConfirmationDeclined, StaleQuestionReference,
)
from flashdrill.models import Outcome, Question, QuestionType, Status
from flashdrill.progress import ProgressStore
from flashdrill.quiz import check_answer, format_answer, option_keys
from flashdrill.scheduler import WEIGHT_HARD, WEIGHT_NEW, count_by_weight
from flashdrill.session import SessionController

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "menu")

TYPE_NAMES = {
    QuestionType.SINGLE: "Single choice",
    QuestionType.MULTIPLE: "Multiple choice",
    QuestionType.JUDGMENT: "True / false",
}


class SessionExitRequested(Exception):
    """Raised when the learner types q/menu during a session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def show_welcome():
    console.print(Panel(
        "[bold]Exam Question Drill[/bold]\n[dim]Flashcard practice with progress tracking[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Smart review (hard + new first)"),
        ("category", "Practice one category"),
        ("dashboard", "Progress overview"),
        ("mastered", "List mastered questions"),
        ("hard", "List questions still being learned"),
        ("reset", "Reset all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_question(question: Question, position: int, total: int) -> None:
    body = f"[dim]{question.category} · {TYPE_NAMES[question.type]}[/dim]\n\n{question.text}"
    console.print(Panel(body, title=f"Question {position}/{total}", border_style="cyan"))
    if question.type is QuestionType.JUDGMENT:
        console.print("  [cyan]√[/cyan]) True    [cyan]×[/cyan]) False  [dim](t/f also accepted)[/dim]")
        return
    for key, option in zip(option_keys(question), question.options):
        console.print(f"  [cyan]{key})[/cyan] {option}")


def ask_answer(question: Question) -> bool:
    hint = "letters, e.g. AC" if question.type is QuestionType.MULTIPLE else "one option"
    while True:
        answer = session_prompt(f"\nYour answer [dim]({hint}, q to leave)[/dim]")
        try:
            return check_answer(question, answer)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")


def run_study_session(controller: SessionController) -> None:
    """Serve questions until the queue is done or the learner leaves.

    Progress and the session cursor are saved after every answer, so an
    interrupted run (Ctrl+C, closed terminal) resumes at the same question.
    Typing q ends the session instead.
    """
    while controller.is_active:
        try:
            question = controller.current_question()
        except StaleQuestionReference as e:
            console.print(f"[red]{e}. The session was ended; please start a new one.[/red]")
            return
        position, total = controller.position()
        show_question(question, position, total)

        correct = ask_answer(question)
        if correct:
            console.print("[green]Correct![/green]")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{format_answer(question)}[/green]")
        if question.explanation:
            console.print(f"[dim]{question.explanation}[/dim]")

        result = controller.submit_answer(Outcome.EASY if correct else Outcome.HARD)
        console.print()
        if result.completed:
            s = result.summary
            console.print(Panel(
                f"Answered [bold]{s['answered']}[/bold] questions: "
                f"[green]{s['easy']} easy[/green], [red]{s['hard']} hard[/red] ({s['accuracy']}%)",
                title="Session complete", border_style="green",
            ))


def start_and_run(controller: SessionController, category: str | None = None,
                  question_type: QuestionType | None = None) -> None:
    try:
        controller.start_session(category, question_type)
    except NoMatchingQuestions as e:
        console.print(f"[yellow]{e}.[/yellow]")
        return
    run_study_session(controller)


def cmd_resume(controller: SessionController):
    position, total = controller.position()
    console.print(f"[cyan]Resuming your session at question {position} of {total}.[/cyan]\n")
    run_study_session(controller)


def cmd_review(controller: SessionController):
    counts = count_by_weight(controller.bank, controller.progress_snapshot())
    console.print(
        f"\n[bold]Smart Review[/bold] [dim]({counts.get(WEIGHT_HARD, 0)} hard, "
        f"{counts.get(WEIGHT_NEW, 0)} new)[/dim]"
    )
    start_and_run(controller)


def cmd_category(controller: SessionController):
    categories = get_categories(controller.bank)
    if not categories:
        console.print("[yellow]The question bank is empty.[/yellow]")
        return
    for i, cat in enumerate(categories, 1):
        console.print(f"  [cyan]{i}[/cyan]) {cat}")
    choice = Prompt.ask("Select category", choices=[str(i) for i in range(1, len(categories) + 1)])
    category = categories[int(choice) - 1]

    types = {"all": None, **{t.value: t for t in QuestionType}}
    picked = Prompt.ask("Question type", choices=list(types), default="all")
    start_and_run(controller, category, types[picked])


def cmd_dashboard(controller: SessionController):
    progress = controller.progress_snapshot()
    overview = get_overview(controller.bank, progress)
    color = get_mastery_color(overview["percent"])

    bar_filled = int(overview["percent"] / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(Panel(
        f"Total [bold]{overview['total']}[/bold]  |  "
        f"Mastered [green]{overview['mastered']}[/green]  |  "
        f"Learning [dark_orange]{overview['learning']}[/dark_orange]  |  "
        f"New [blue]{overview['new']}[/blue]\n\n"
        f"Mastery: [bold]{overview['percent']}%[/bold] {bar}",
        title="Progress Dashboard", border_style="blue",
    ))

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Questions", justify="right")
    table.add_column("S / M / J", justify="right")
    table.add_column("Mastered", justify="right")
    table.add_column("Status")
    for cs in get_category_stats(controller.bank, progress):
        c = get_mastery_color(cs["percent"])
        table.add_row(
            cs["category"],
            str(cs["total"]),
            f"{cs['single']} / {cs['multiple']} / {cs['judgment']}",
            f"{cs['mastered']} ({cs['percent']}%)",
            f"[{c}]{cs['label']}[/{c}]",
        )
    console.print(table)


def cmd_list(controller: SessionController, status: Status):
    groups = get_questions_by_status(controller.bank, controller.progress_snapshot(), status)
    title = "Mastered questions" if status is Status.MASTERED else "Questions to work on"
    if not groups:
        console.print(f"[dim]{title}: none yet.[/dim]")
        return
    console.print(f"\n[bold]{title}[/bold]")
    for category, questions in groups.items():
        console.print(f"\n[cyan]{category}[/cyan] ({len(questions)})")
        for q in questions:
            console.print(f"  • {q.text} [green]→ {format_answer(q)}[/green]")


def confirm_reset() -> bool:
    if not Confirm.ask("Reset ALL progress? Every question becomes new again", default=False):
        raise ResetConfirmationDeclined()
    return True


def cmd_reset(controller: SessionController):
    if controller.reset_all_progress(confirm=confirm_reset):
        console.print("[green]All progress has been reset.[/green]")
    else:
        console.print("[dim]Reset cancelled.[/dim]")


def build_services(settings) -> SessionController:
    bank = load_bank(settings.bank_path)
    storage = KeyValueStore(settings.db_path)
    progress = ProgressStore(storage)
    return SessionController(bank, progress, storage)


def main():
    settings = load_settings()
    setup_logging(settings.log_level, console=console)
    try:
        controller = build_services(settings)
    except (QuestionBankError, sqlite3.Error, OSError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    show_welcome()
    if not controller.storage.available:
        console.print(
            f"[yellow]Could not open {settings.db_path}. "
            "Starting with no saved progress; answers may not be saved.[/yellow]"
        )

    choice = "resume" if controller.is_active else None
    while True:
        if choice is None:
            show_menu()
            if controller.is_active:
                console.print(f"  [cyan]{'resume':<14}[/cyan] Continue the interrupted session")
            choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "resume" and controller.is_active:
                cmd_resume(controller)
            elif choice == "review":
                cmd_review(controller)
            elif choice == "category":
                cmd_category(controller)
            elif choice == "dashboard":
                cmd_dashboard(controller)
            elif choice == "mastered":
                cmd_list(controller, Status.MASTERED)
            elif choice == "hard":
                cmd_list(controller, Status.LEARNING)
            elif choice == "reset":
                cmd_reset(controller)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            controller.exit_session()
            console.print("[dim]Session ended. Your answers so far are saved.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("Command %r failed", choice)
            console.print(f"[red]Error: {e}[/red]")
        choice = None


if __name__ == "__main__":
    main()
