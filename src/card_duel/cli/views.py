"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of cards, targets and duels.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from ..core.affect import EMOTION_DISPLAY, OpponentConfidence
from ..core.deck import card_points, category_difficulty
from ..core.duel import DuelResult
from ..core.exercises.base import ExerciseDefinition
from ..core.models import Emotion, ExerciseTarget
from ..core.scoring import ScoreAward

console = Console()

_SPECIAL_ICONS = {"double": "×2", "block": "🛡", "steal": "⚡", "bonus": "+"}


def _fmt_target(target: ExerciseTarget | None) -> str:
    return str(target) if target is not None else "[dim]—[/dim]"


def _fmt_base(exercise: ExerciseDefinition) -> str:
    if exercise.base_reps is not None:
        return f"{exercise.base_reps} reps"
    if exercise.base_duration is not None:
        return f"{exercise.base_duration}s"
    return "[dim]—[/dim]"


def _fmt_award(award: ScoreAward | None) -> str:
    if award is None:
        return "[dim]—[/dim]"
    text = f"+{award.points_awarded}"
    if award.transferred:
        text += f" (+{award.transferred} stolen)"
    if award.special_blocked:
        text += " [red]blocked[/red]"
    elif award.special is not None:
        text += f" {_SPECIAL_ICONS[award.special]}"
    return text


def format_catalog_table(
    rows: Sequence[tuple[ExerciseDefinition, ExerciseTarget | None]],
    level: int,
) -> Table:
    """
    Build the exercise catalog table.

    Args:
        rows: (definition, scaled target or None) pairs in display order
        level: Difficulty level the targets were scaled for

    Returns:
        Rich Table
    """
    table = Table(title=f"Exercise Catalog (level {level})")

    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Kind", style="dim")
    table.add_column("Base", justify="right")
    table.add_column("Target", justify="right", style="bold")
    table.add_column("Pts", justify="right")
    table.add_column("Diff", justify="right", style="dim")

    for exercise, target in rows:
        table.add_row(
            exercise.exercise_id,
            exercise.display_name,
            exercise.category,
            exercise.card_type,
            _fmt_base(exercise),
            _fmt_target(target),
            str(card_points(exercise)),
            str(category_difficulty(exercise.category)),
        )

    return table


def print_catalog(
    rows: Sequence[tuple[ExerciseDefinition, ExerciseTarget | None]],
    level: int,
    estimate_minutes: int,
) -> None:
    console.print(format_catalog_table(rows, level))
    console.print(f"[dim]Playing every card once takes about {estimate_minutes} min.[/dim]")


def print_scaled_target(exercise: ExerciseDefinition, level: int, target: ExerciseTarget) -> None:
    """Print one scaled target."""
    console.print(f"[bold]{exercise.display_name}[/bold] [dim]({exercise.exercise_id})[/dim]")
    console.print(f"  Base:   {_fmt_base(exercise)}")
    console.print(f"  Level:  {level}")
    console.print(f"  Target: [bold green]{target}[/bold green]")
    if exercise.instructions:
        console.print(f"  [dim]{exercise.instructions}[/dim]")


def print_affect(
    emotion: Emotion,
    confidence: OpponentConfidence,
    message_visible: bool = True,
) -> None:
    """
    Print the opponent's face, speech bubble and confidence meter.

    Meter is drawn as 20 cells, one per 5 points.
    """
    expression, message = EMOTION_DISPLAY[emotion]
    console.print(f"{expression}  [bold]{emotion}[/bold]")
    if message_visible:
        console.print(f'  [italic]"{message}"[/italic]')
    filled = confidence.meter // 5
    bar = "█" * filled + "░" * (20 - filled)
    console.print(f"  Confidence: {confidence.label} [cyan]{bar}[/cyan] {confidence.meter}%")


def format_duel_table(result: DuelResult) -> Table:
    table = Table(title="Simulated Duel")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Player card", style="cyan")
    table.add_column("Target", justify="right")
    table.add_column("Ticks", justify="right", style="dim")
    table.add_column("Player", justify="right")
    table.add_column("Opponent card", style="magenta")
    table.add_column("Opponent", justify="right")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Mood")

    for r in result.rounds:
        ticks = "skip" if r.skipped else str(r.ticks)
        table.add_row(
            str(r.number),
            r.player_card.exercise.display_name,
            r.target,
            ticks,
            _fmt_award(r.player_award),
            r.opponent_card.exercise.display_name if r.opponent_card is not None else "[dim]—[/dim]",
            _fmt_award(r.opponent_award),
            f"{r.player_score}–{r.ai_score}",
            f"{EMOTION_DISPLAY[r.emotion][0]} {r.emotion}",
        )

    return table


def print_duel(result: DuelResult) -> None:
    console.print(format_duel_table(result))
    if result.winner == "player":
        print_success(f"You win {result.player_score}–{result.ai_score}!")
    elif result.winner == "opponent":
        print_info(f"Opponent wins {result.ai_score}–{result.player_score}.")
    else:
        print_info(f"Tie at {result.player_score}.")
    console.print(f"[dim]Emotion changes: {' → '.join(result.emotion_changes) or 'none'}[/dim]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
