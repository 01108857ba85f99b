"""Interactive CLI application."""
import argparse
import logging
import subprocess
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from nvim_mastery import state as actions
from nvim_mastery.cheatsheet import (
    category_by_id, format_date, has_keybindings_in_category, has_settings_in_category,
    keybindings_for_category, matches_search, search_rows, settings_for_category,
)
from nvim_mastery.content import CATALOG_PATH, CHEATSHEET_PATH, ContentError, load_cheatsheet
from nvim_mastery.dashboard import get_difficulty_breakdown, get_mastery_color, get_progress_summary
from nvim_mastery.filters import all_tags, difficulty_counts, results_label
from nvim_mastery.flashcards import (
    accuracy, deck_progress, next_card, previous_card, reveal_answer, select_choice, show_hint,
    start_session,
)
from nvim_mastery.models import AppState, Cheatsheet, CheatsheetSetting, CheckKind, Cursor, Difficulty
from nvim_mastery.practice import (
    diff_actions, edit_buffer, practice_template, ready_to_complete, session_stats,
    start_editor_session, track_action,
)
from nvim_mastery.progress import is_completed, success_rate, suggest_next
from nvim_mastery.storage import DEFAULT_DB_PATH

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = {"q", "menu"}


class SessionExitRequested(Exception):
    """Raised when the user leaves a drill or practice flow early."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str] | None = None) -> int:
    while True:
        answer = session_prompt(prompt).strip()
        if answer.isdigit() and (choices is None or answer in choices):
            return int(answer)
        console.print("[red]Please enter one of the listed numbers.[/red]")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def show_welcome():
    console.print(Panel(
        "[bold]Neovim Mastery[/bold]\n[dim]Challenges, flashcards and practice for Neovim[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("challenges", "List challenges matching the current filters"),
        ("search", "Set the search term"),
        ("difficulty", "Filter by difficulty"),
        ("tag", "Toggle a tag filter"),
        ("clear", "Clear all filters"),
        ("show", "Open a challenge"),
        ("exercise", "Practice exercise in your editor"),
        ("flashcards", "Flashcard drill"),
        ("cheatsheet", "Search the cheatsheet"),
        ("dashboard", "Progress overview"),
        ("export", "Export progress to a JSON file"),
        ("reset", "Reset all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_challenges(state: AppState) -> None:
    visible = actions.visible_challenges(state)
    counts = difficulty_counts(list(state.catalog.challenges))
    filters = state.filters
    console.print(
        f"[dim]Search: {filters.search_term or '-'} | Difficulty: {filters.difficulty_facet} | "
        f"Tags: {', '.join(sorted(filters.tag_facet)) or '-'}[/dim]"
    )
    table = Table(title=results_label(len(visible)))
    table.add_column("ID", justify="right")
    table.add_column("Challenge", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Time", justify="right")
    table.add_column("Tags", style="dim")
    table.add_column("Done")
    for entry in visible:
        table.add_row(
            str(entry.id),
            entry.title,
            entry.difficulty.value,
            f"~{entry.expected_time_min} min",
            ", ".join(sorted(entry.tags)[:3]),
            "[green]✓[/green]" if is_completed(state.snapshot, entry.id) else "",
        )
    console.print(table)
    console.print("  " + "  ".join(f"{name}: [bold]{count}[/bold]" for name, count in counts.items()))


def cmd_search(state: AppState) -> AppState:
    term = Prompt.ask("Search term (blank to clear)", default="")
    return actions.apply_filters(state, search_term=term)


def cmd_difficulty(state: AppState) -> AppState:
    choice = Prompt.ask(
        "Difficulty", choices=["all"] + [d.value for d in Difficulty], default=state.filters.difficulty_facet,
    )
    return actions.apply_filters(state, difficulty=choice)


def cmd_tag(state: AppState) -> AppState:
    tags = all_tags(list(state.catalog.challenges))
    if not tags:
        console.print("[yellow]No tags to filter by.[/yellow]")
        return state
    console.print("Tags: " + ", ".join(
        f"[green]{t}[/green]" if t in state.filters.tag_facet else t for t in tags
    ))
    tag = Prompt.ask("Tag to toggle", choices=tags)
    return actions.apply_filters(state, toggle_tag=tag)


def run_challenge_practice(state: AppState, db_path: str, challenge_id: int) -> AppState:
    """Open the challenge's practice buffer in the editor until the user is done."""
    entry = state.catalog.get_challenge(challenge_id)
    session = start_editor_session(challenge_id)
    buffer = practice_template(entry)
    while True:
        try:
            edited = edit_buffer(buffer)
        except (OSError, subprocess.CalledProcessError) as e:
            console.print(f"[red]Could not run editor: {e}[/red]")
            return state
        for kind, line in diff_actions(buffer, edited):
            session = track_action(session, kind, (line,))
        buffer = edited
        stats = session_stats(session)
        console.print(f"[dim]{stats['actions']} edits in {stats['duration']}[/dim]")
        if ready_to_complete(session):
            console.print("[green]Good progress! Ready to complete?[/green]")
            if Confirm.ask("Mark this challenge as completed?", default=True):
                state = actions.complete_challenge(state, db_path, challenge_id)
                console.print(Panel(
                    f"[bold]{entry.title}[/bold]\n"
                    f"Practice time: {stats['duration']}\n"
                    f"Actions performed: {stats['actions']}\n"
                    f"Focus areas: {', '.join(sorted(entry.tags))}",
                    title="Challenge Completed!", border_style="green",
                ))
                upcoming = suggest_next(list(state.catalog.challenges), state.snapshot, challenge_id)
                if upcoming:
                    console.print(f"[cyan]Next up: #{upcoming.id} {upcoming.title}[/cyan]")
                return state
        if not Confirm.ask("Keep practicing?", default=True):
            return state


def cmd_show(state: AppState, db_path: str) -> AppState:
    challenge_id = IntPrompt.ask("Challenge ID")
    entry = state.catalog.get_challenge(challenge_id)
    if entry is None:
        console.print(f"[red]No challenge with ID {challenge_id}.[/red]")
        return state
    done = is_completed(state.snapshot, entry.id)
    criteria = "\n".join(f"  • {c}" for c in entry.acceptance_criteria)
    console.print(Panel(
        f"{entry.description}\n\n[bold]Difficulty:[/bold] {entry.difficulty.value}  "
        f"[bold]Time:[/bold] ~{entry.expected_time_min} min\n"
        f"[bold]Tags:[/bold] {', '.join(sorted(entry.tags))}\n\n"
        f"[bold]Acceptance criteria:[/bold]\n{criteria}",
        title=f"#{entry.id} {entry.title}" + (" [green]✓[/green]" if done else ""),
        border_style="cyan",
    ))
    action = Prompt.ask(
        "Action", choices=["toggle", "practice", "back"], default="back",
    )
    if action == "toggle":
        state = actions.toggle_challenge(state, db_path, entry.id)
        label = "completed" if is_completed(state.snapshot, entry.id) else "incomplete"
        console.print(f"[green]Marked {label}.[/green]")
    elif action == "practice":
        state = run_challenge_practice(state, db_path, entry.id)
    return state


def _ask_cursor() -> Cursor:
    while True:
        raw = session_prompt("Where did you leave the cursor? (line:col, 1-based)")
        line, _, col = raw.partition(":")
        if line.strip().isdigit() and col.strip().isdigit():
            return Cursor(line=int(line) - 1, col=int(col) - 1)
        console.print("[red]Enter the position as line:col, for example 6:10.[/red]")


def run_exercise(state: AppState, db_path: str, exercise_id: int) -> AppState:
    exercise = state.catalog.get_exercise(exercise_id)
    if exercise is None:
        console.print(f"[red]No exercise with ID {exercise_id}.[/red]")
        return state
    goals = "\n".join(f"  • {g}" for g in exercise.goals)
    console.print(Panel(
        f"{exercise.description}\n\n[bold]Difficulty:[/bold] {exercise.difficulty.value}\n\n"
        f"[bold]Goals:[/bold]\n{goals}\n\n[dim]Hint: {exercise.hint}[/dim]",
        title=exercise.title, border_style="cyan",
    ))
    session_prompt("[dim]Press Enter to open the exercise in your editor[/dim]", default="")
    try:
        final_text = edit_buffer(exercise.initial_text)
    except (OSError, subprocess.CalledProcessError) as e:
        console.print(f"[red]Could not run editor: {e}[/red]")
        return state
    cursor = _ask_cursor() if exercise.solution_check is CheckKind.CURSOR_POSITION else Cursor(0, 0)
    state, verdict = actions.submit_exercise(state, db_path, exercise.id, final_text, cursor)
    if verdict is None:
        return state
    if verdict.success:
        console.print(Panel(
            f"{verdict.message}\n\nExercise completed successfully!",
            title=verdict.encouragement, border_style="green",
        ))
    else:
        console.print(Panel(
            f"{verdict.message}\n\n[bold]Tip:[/bold] {exercise.hint}",
            title="Keep Practicing!", border_style="yellow",
        ))
    console.print(
        f"Exercises completed: [bold]{state.exercise_stats.completed}[/bold]  |  "
        f"Success rate: [bold]{success_rate(state.exercise_stats)}%[/bold]"
    )
    return state


def cmd_exercise(state: AppState, db_path: str) -> AppState:
    exercises = state.catalog.practice_exercises
    if not exercises:
        console.print("[yellow]No practice exercises available.[/yellow]")
        return state
    for ex in exercises:
        console.print(f"  [cyan]{ex.id}[/cyan]) {ex.title} ({ex.difficulty.value})")
    exercise_id = session_int_prompt("Select exercise", choices=[str(ex.id) for ex in exercises])
    return run_exercise(state, db_path, exercise_id)


def run_flashcard_session(cards: list) -> None:
    if not cards:
        console.print("[yellow]No flashcards available![/yellow]")
        return
    session = start_session(cards)
    console.print(f"\n[bold]Flashcard Session[/bold] — {len(cards)} cards\n")
    try:
        while True:
            card = session.current
            current, total = deck_progress(session)
            choices = "\n".join(f"  [cyan]{i + 1})[/cyan] {c}" for i, c in enumerate(card.choices))
            console.print(Panel(f"{card.question}\n\n{choices}", title=f"Card {current}/{total}", border_style="cyan"))
            valid = [str(i + 1) for i in range(len(card.choices))]
            answer = session_prompt("Your answer (h for hint, p for previous, Enter to skip)", default="").strip().lower()
            if answer == "p":
                if session.position == 0:
                    console.print("[yellow]Already at the first card.[/yellow]")
                session = previous_card(session)
                continue
            if answer == "h":
                session = show_hint(session)
                console.print(f"[dim]Hint: {card.hint}[/dim]")
                answer = session_prompt("Your answer (Enter to skip)", default="").strip()
            if answer in valid:
                session = select_choice(session, int(answer) - 1)
            session = reveal_answer(session)
            if session.selected == card.correct_index:
                console.print("[green]Correct![/green]")
            console.print(f"Correct answer: [green]{card.choices[card.correct_index]}[/green]\n")
            if current == total:
                break
            session = next_card(session)
    except SessionExitRequested:
        console.print("[dim]Leaving flashcards.[/dim]")
    stats = session.stats
    console.print(
        f"[bold]Correct: {stats.correct}  Incorrect: {stats.incorrect}  "
        f"Accuracy: {accuracy(stats)}%[/bold]\n"
    )


def render_category_sections(cheatsheet: Cheatsheet, category_id: str, query: str = "") -> int:
    """Print the settings and keybindings sections of one category. Returns rows shown."""
    cat = category_by_id(cheatsheet, category_id)
    console.print(Panel(
        cat.description if cat else "", title=cat.name if cat else category_id, border_style="blue",
    ))
    shown = 0
    if has_settings_in_category(cheatsheet, category_id):
        table = Table(title="Settings")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        table.add_column("Description")
        for item in settings_for_category(cheatsheet, category_id):
            for row in item.settings:
                if matches_search(item, row, query):
                    table.add_row(row.setting, row.value, row.description)
                    shown += 1
        console.print(table)
    if has_keybindings_in_category(cheatsheet, category_id):
        table = Table(title="Keybindings")
        table.add_column("Keys", style="cyan")
        table.add_column("Mode", style="dim")
        table.add_column("Action")
        table.add_column("Description")
        for item in keybindings_for_category(cheatsheet, category_id):
            for row in item.keybindings:
                if matches_search(item, row, query):
                    table.add_row(row.keys, row.mode, row.action, row.description)
                    shown += 1
        console.print(table)
    return shown


def cmd_cheatsheet(cheatsheet_path: Path) -> None:
    try:
        cheatsheet = load_cheatsheet(cheatsheet_path)
    except ContentError as e:
        console.print(f"[red]Failed to load cheatsheet: {e}[/red]")
        return
    query = Prompt.ask("Search (blank for everything)", default="")
    category_ids = [c.id for c in cheatsheet.categories]
    category = Prompt.ask("Category", choices=["all"] + category_ids, default="all")
    console.print(f"[dim]{cheatsheet.metadata.get('title', 'Cheatsheet')} "
                  f"(updated {format_date(cheatsheet.metadata.get('last_updated'))})[/dim]")
    if category != "all":
        if not render_category_sections(cheatsheet, category, query):
            console.print("[yellow]Nothing matches that search.[/yellow]")
        return

    rows = search_rows(cheatsheet, query)
    table = Table(title="All categories")
    table.add_column("Category", style="dim")
    table.add_column("Keys / Setting", style="cyan")
    table.add_column("Action / Value")
    table.add_column("Description")
    for item, row in rows:
        cat = category_by_id(cheatsheet, item.category)
        cat_name = cat.name if cat else item.category
        if isinstance(row, CheatsheetSetting):
            table.add_row(cat_name, row.setting, row.value, row.description)
        else:
            table.add_row(cat_name, f"{row.keys} [dim]({row.mode})[/dim]", row.action, row.description)
    console.print(table)
    if not rows:
        console.print("[yellow]Nothing matches that search.[/yellow]")


def cmd_dashboard(state: AppState) -> None:
    summary = get_progress_summary(state)
    color = get_mastery_color(summary["percentage"])
    console.print(Panel(
        f"[bold]{summary['completed']} of {summary['total']} challenges completed[/bold]",
        title="Neovim Mastery Dashboard", border_style="blue",
    ))
    bar_filled = int(summary["percentage"] / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Progress: [bold]{summary['percentage']}%[/bold] {bar} [{color}]{summary['label']}[/{color}]\n")

    table = Table(title="By Difficulty")
    table.add_column("Difficulty", style="cyan")
    table.add_column("Completed", justify="right")
    for row in get_difficulty_breakdown(state):
        table.add_row(row["difficulty"], f"{row['completed']}/{row['total']}")
    console.print(table)

    console.print(f"\n  Exercises: [bold]{summary['exercises_completed']}[/bold]  |  "
                  f"Success rate: [bold]{summary['exercise_success_rate']}%[/bold]")


def cmd_export(state: AppState) -> None:
    directory = Prompt.ask("Export directory", default=".")
    path = actions.export_progress(state, directory)
    console.print(f"[green]Progress exported to {path}[/green]")


def cmd_reset(state: AppState, db_path: str) -> AppState:
    if Confirm.ask("Are you sure you want to reset all progress? This cannot be undone.", default=False):
        state = actions.reset_progress(state, db_path)
        console.print("[green]Progress reset.[/green]")
    return state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nvim-mastery", description="Neovim challenges, flashcards and practice")
    parser.add_argument("--db", default=DEFAULT_DB_PATH, help="progress database path")
    parser.add_argument("--content", type=Path, default=CATALOG_PATH, help="challenge catalog (JSON or YAML)")
    parser.add_argument("--cheatsheet", type=Path, default=CHEATSHEET_PATH, help="cheatsheet JSON")
    parser.add_argument("--verbose", action="store_true", help="show debug logging")
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    db_path = args.db
    state = actions.load_app_state(db_path, args.content)
    show_welcome()
    if state.notice:
        console.print(f"[red]{state.notice}[/red]")

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="challenges").strip().lower()
        try:
            if choice == "challenges":
                render_challenges(state)
            elif choice == "search":
                state = cmd_search(state)
                render_challenges(state)
            elif choice == "difficulty":
                state = cmd_difficulty(state)
                render_challenges(state)
            elif choice == "tag":
                state = cmd_tag(state)
                render_challenges(state)
            elif choice == "clear":
                state = actions.clear_filters(state)
                render_challenges(state)
            elif choice == "show":
                state = cmd_show(state, db_path)
            elif choice == "exercise":
                state = cmd_exercise(state, db_path)
            elif choice == "flashcards":
                run_flashcard_session(list(state.catalog.flashcards))
            elif choice == "cheatsheet":
                cmd_cheatsheet(args.cheatsheet)
            elif choice == "dashboard":
                cmd_dashboard(state)
            elif choice == "export":
                cmd_export(state)
            elif choice == "reset":
                state = cmd_reset(state, db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy editing![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to the menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
