"""
Onboarding - CLI Entry Point.

Usage:
    onboarding run               Start an interactive questionnaire
    onboarding quick-picks       List the quick pick catalog
    onboarding health            Check configuration
    onboarding serve             Start the HTTP API
    onboarding --help            Show help
"""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="onboarding",
    help="Adaptive onboarding questionnaire with an LLM question oracle.",
    add_completion=False,
)
console = Console()

COMMANDS_HELP = "[dim]Commands: 'skip', 'undo', 'pick <id>', 'tracks', 'quit'[/dim]"


# =============================================================================
# Rendering
# =============================================================================

def render_question(session) -> None:
    question = session.current_question
    summary = session.progress_summary()

    header = f"Step {summary.current_step + 1}/{summary.total_steps}  ·  {summary.progress_percent}% covered"
    body = f"[bold]{question.prompt}[/bold]"
    if question.context:
        body += f"\n[dim]{question.context}[/dim]"

    ui = question.ui
    if ui.kind in ("chips", "checkbox_list", "toggle_pair"):
        body += "\n\n" + "\n".join(f"  {i}. {option}" for i, option in enumerate(ui.options, 1))
        if ui.kind == "checkbox_list":
            body += "\n\n[dim]Pick several: numbers separated by commas[/dim]"
    elif ui.kind == "range":
        body += f"\n\n[dim]Enter a number from {ui.min:g} to {ui.max:g}[/dim]" if ui.min is not None and ui.max is not None else ""
    elif ui.kind == "short_text" and ui.placeholder:
        body += f"\n\n[dim]{ui.placeholder}[/dim]"

    if session.current_question_rationale:
        body += f"\n\n[italic dim]Why: {session.current_question_rationale}[/italic dim]"

    console.print(Panel(body, title=header, border_style="green"))


def parse_answer(ui, text: str):
    """
    Turn typed input into an answer value for the question's widget.

    Numbers select options; anything else is taken verbatim.
    """
    if ui.kind == "range":
        value = float(text)
        if ui.min is not None and value < ui.min or ui.max is not None and value > ui.max:
            raise ValueError(f"{value:g} is out of range")
        return value

    if ui.kind in ("chips", "toggle_pair"):
        if text.isdigit() and 1 <= int(text) <= len(ui.options):
            return ui.options[int(text) - 1]
        return text

    if ui.kind == "checkbox_list":
        picked = []
        for part in (p.strip() for p in text.split(",")):
            if part.isdigit() and 1 <= int(part) <= len(ui.options):
                picked.append(ui.options[int(part) - 1])
            elif part:
                picked.append(part)
        return picked

    return text


def render_tracks(session) -> None:
    if not session.data.tracks:
        console.print("[dim]No track recommendations yet.[/dim]")
        return

    table = Table(title="Recommended Tracks")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Level")
    table.add_column("Hours", justify="right")
    for track in session.data.tracks:
        table.add_row(track.id, track.title, track.level, f"{track.eta_hours:g}" if track.eta_hours else "-")
    console.print(table)


# =============================================================================
# Interactive Loop
# =============================================================================

async def _fetch_with_spinner(coro) -> None:
    with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
        await coro


async def _interactive(session, resume: bool) -> None:
    from onboarding.models import get_quick_pick

    await _fetch_with_spinner(session.initialize(resume=resume))

    while True:
        if session.is_complete:
            console.print("\n[bold green]Setup finished![/bold green] Your profile is complete.")
            render_tracks(session)
            break

        if session.current_question is None:
            console.print("[yellow]Couldn't load the next question.[/yellow] Type 'retry' or 'quit'.")
        else:
            render_question(session)

        user_input = (await asyncio.to_thread(console.input, "\n[bold blue]You:[/bold blue] ")).strip()
        command = user_input.lower()

        if command in ("exit", "quit", "q"):
            console.print("\n[dim]Progress saved. Goodbye! 👋[/dim]")
            break
        if not user_input:
            continue

        if command == "retry":
            await _fetch_with_spinner(session.fetch_next_question())
        elif command == "skip":
            await _fetch_with_spinner(session.skip_question())
        elif command == "undo":
            session.undo()
            if session.current_question is None:
                await _fetch_with_spinner(session.fetch_next_question())
        elif command == "tracks":
            render_tracks(session)
        elif command.startswith("pick "):
            pick = get_quick_pick(user_input[5:].strip())
            if pick is None:
                console.print("[red]Unknown quick pick.[/red] See 'onboarding quick-picks'.")
                continue
            await _fetch_with_spinner(session.handle_quick_pick(pick))
        elif session.current_question is not None:
            try:
                value = parse_answer(session.current_question.ui, user_input)
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
                continue
            await _fetch_with_spinner(session.answer_question(value))


@app.command()
def run(
    resume: Optional[bool] = typer.Option(None, "--resume/--fresh", help="Continue the saved session instead of starting over"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log all oracle prompts to prompt_logs/"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
) -> None:
    """Start an interactive onboarding questionnaire."""
    from onboarding.config import get_settings
    from onboarding.llm.prompt_logger import enable_prompt_logging, get_session_log_dir
    from onboarding.state import create_session

    settings = get_settings()
    logging.basicConfig(level=settings.log_level if verbose else logging.WARNING)

    log_prompts = log_prompts or settings.onboarding_log_prompts
    if log_prompts:
        enable_prompt_logging(True)
        console.print("[dim]📝 Prompt logging enabled. Check prompt_logs/ after the session.[/dim]")

    if not settings.oracle_configured:
        console.print("[dim]No OPENAI_API_KEY set: using canned offline questions.[/dim]")

    console.print(
        Panel.fit(
            "[bold green]Onboarding[/bold green]\n"
            "A few quick questions to map how you work.\n\n" + COMMANDS_HELP,
            title="Welcome",
            border_style="green",
        )
    )

    session = create_session(settings)
    try:
        asyncio.run(_interactive(session, settings.resume_sessions if resume is None else resume))
    except KeyboardInterrupt:
        console.print("\n\n[dim]Session interrupted. Goodbye! 👋[/dim]")
    finally:
        session.close()

    if log_prompts:
        log_dir = get_session_log_dir()
        if log_dir:
            console.print(f"\n[dim]📝 Prompts logged to: {log_dir}[/dim]")


@app.command("quick-picks")
def quick_picks() -> None:
    """List the quick pick catalog."""
    from onboarding.models import QUICK_PICKS

    table = Table(title="Quick Picks")
    table.add_column("ID", style="cyan")
    table.add_column("Label")
    table.add_column("Category")
    table.add_column("Targets", style="dim")
    for pick in QUICK_PICKS:
        table.add_row(pick.id, pick.label, pick.category, ", ".join(pick.targets))
    console.print(table)


@app.command()
def health() -> None:
    """Check configuration."""
    from onboarding.config import get_settings

    console.print("\n[bold]Onboarding Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.onboarding_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.oracle_configured:
            endpoint = settings.openai_base_url or "api.openai.com"
            console.print(f"✅ Oracle API key configured ({settings.oracle_model} @ {endpoint})")
        else:
            console.print("ℹ️  No oracle API key: offline mock questions will be used")

        console.print(f"   Snapshot file: {settings.snapshot_path}")
        console.print(f"   Completion threshold: {settings.completion_threshold}%")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Check your .env file.[/dim]")
        raise typer.Exit(1)


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the HTTP API server."""
    import os

    import uvicorn

    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Onboarding API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}/api/onboarding")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "onboarding.api:create_app",
        factory=True,
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from onboarding import __version__

    console.print(f"Onboarding version {__version__}")


if __name__ == "__main__":
    app()
