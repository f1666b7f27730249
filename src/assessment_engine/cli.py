from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from assessment_engine.errors import NoContentError
from assessment_engine.learning import QuestionKind, Variant
from assessment_engine.system import AssessmentSystem, ImportReport

app = typer.Typer(help="Question import and adaptive assessment tools.")
console = Console()

load_dotenv(override=False)


def _load_system(config: Optional[Path], api_key: Optional[str] = None) -> AssessmentSystem:
    """Instantiate `AssessmentSystem` with optional config overrides and API key."""
    return AssessmentSystem.from_config(config, api_key=api_key)


def _print_report(report: ImportReport) -> None:
    table = Table(title=f"Parsed {len(report.questions)} of {report.expected_count} question(s)")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Question")
    table.add_column("Answer")
    table.add_column("Pts", justify="right")
    for question in report.questions:
        if question.kind is QuestionKind.MULTIPLE_CHOICE:
            answer = question.correct_answer or "[red]not marked[/red]"
            options = ", ".join(question.options)
            text = f"{question.prompt}\n[dim]{options}[/dim]"
        else:
            answer = question.answer_key or "-"
            text = question.prompt
        table.add_row(str(question.order), question.kind.value, text, answer, str(question.points))
    console.print(table)
    for issue in report.issues:
        color = "red" if issue.severity == "error" else "yellow"
        where = f"Q{issue.order}: " if issue.order else ""
        console.print(f"[{color}]{issue.severity.upper()}[/{color}] {where}{issue.message}")


@app.command()
def parse(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Preview the questions parsed from a text file and list review issues."""
    system = _load_system(config)
    report = system.preview_import(source.read_text(encoding="utf-8"))
    _print_report(report)
    if not report.test_ready:
        raise typer.Exit(code=1)


@app.command("import")
def import_questions(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    level: int = typer.Option(..., min=1, help="Difficulty level of the question set."),
    variant: Variant = typer.Option(Variant.A, help="Question set variant (A, B or C)."),
    replace: bool = typer.Option(False, help="Replace the set instead of appending."),
    allow_incomplete: bool = typer.Option(False, help="Save even when review finds errors."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Parse a text file and save it as the question set for a level and variant."""
    system = _load_system(config)
    report = system.import_questions(
        source.read_text(encoding="utf-8"),
        level=level,
        variant=variant,
        replace=replace,
        allow_incomplete=allow_incomplete,
    )
    _print_report(report)
    if not report.saved:
        console.print("[red]Nothing was saved.[/red]")
        raise typer.Exit(code=1)
    console.print(f"Saved {len(report.questions)} question(s) to {report.set_id}.")


@app.command("show-state")
def show_state(
    student_id: str = typer.Argument(...),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Show a student's ladder position and recorded skill levels."""
    system = _load_system(config)
    state = system.progress_tracker.load_state(student_id)
    console.print(f"[bold]{student_id}[/bold]: Level {state.level} Variant {state.variant.value}")
    for skill, level in sorted(system.progress_tracker.skill_levels(student_id).items()):
        console.print(f"- {skill}: level {level}")


@app.command()
def take(
    student_id: str = typer.Argument(...),
    skill: Optional[str] = typer.Option(None, help="Skill recorded when the attempt passes."),
    level: int = typer.Option(1, min=1, help="Starting level for students without saved state."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
    api_key: Optional[str] = typer.Option(None, help="Model API key for essay grading."),
):
    """Take the next assessment for a student in the terminal."""
    system = _load_system(config, api_key)
    session = system.start_session(student_id, skill=skill, default_level=level)
    try:
        questions = session.begin()
    except NoContentError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    state = session.state
    console.print(f"[bold]Level {state.level} Assessment[/bold] - Variant {state.variant.value}")
    answers: Dict[str, str] = {}
    for idx, question in enumerate(questions, start=1):
        console.print(f"\n[bold]Question {idx}[/bold] {question.prompt}")
        if question.kind is QuestionKind.MULTIPLE_CHOICE:
            for choice_idx, option in enumerate(question.options):
                console.print(f"  {chr(65 + choice_idx)}. {option}")
            letter = typer.prompt("Answer letter", default="").strip().upper()
            if len(letter) == 1 and 0 <= ord(letter) - 65 < len(question.options):
                answers[question.id] = question.options[ord(letter) - 65]
        else:
            answers[question.id] = typer.prompt("Answer", default="")

    result = session.submit_answers(answers)
    color = "green" if result.passed else "yellow"
    console.print(f"\n[bold]{result.score}%[/bold] [{color}]{'PASSED' if result.passed else 'FAILED'}[/{color}]")
    console.print(result.message)
    if result.breakdown.fallback_count:
        console.print(
            f"[yellow]{result.breakdown.fallback_count} essay(s) could not be graded "
            "and received the fallback score.[/yellow]"
        )
    new_state = session.advance()
    console.print(f"Next: Level {new_state.level} Variant {new_state.variant.value}")


if __name__ == "__main__":
    app()
