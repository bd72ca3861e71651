"""CLI interface for Timeline Tracker."""
import os
import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(help="Timeline Tracker - projects, phases and tasks")

# Configure logging
logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("PORT", "3000"))


def _read_json(path: Path):
    """Read a state file; a missing or corrupt file yields None."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None


def serve(host: str = "0.0.0.0", port: int = DEFAULT_PORT) -> None:
    """Run the API server."""
    import uvicorn

    logger.info("Server listening on port %d", port)
    uvicorn.run("services.api.app.main:app", host=host, port=port)


def summary(state_file: str, today: Optional[date] = None) -> str:
    """Return a text overview: progress per project and the focus list."""
    from ..tracker.normalize import load_state
    from ..tracker.progress import FOCUS_LIMIT, compute_focus_items, project_progress

    state = load_state(_read_json(Path(state_file)))
    lines = []
    if not state.projects:
        lines.append("No projects yet.")
    for project in state.projects:
        stats = project_progress(project)
        lines.append(
            f"{project.name} [{project.type}] - {stats.progress}% "
            f"({stats.open_tasks}/{stats.total_tasks} tasks open, {len(project.phases)} phases)"
        )

    focus = compute_focus_items(state.projects, today, limit=FOCUS_LIMIT)
    lines.append("")
    lines.append("Focus:")
    if not focus:
        lines.append("  nothing urgent")
    for item in focus:
        due = f", due {item.task.due_date}" if item.task.due_date else ""
        lines.append(f"  - {item.task.title} ({item.project_name} / {item.phase_name}: {item.reason}{due})")
    return "\n".join(lines)


def normalize(state_file: str, out: Optional[str] = None) -> Path:
    """Write the canonical form of a state file (in place by default)."""
    from ..tracker.normalize import normalize_state

    source = Path(state_file)
    target = Path(out) if out else source
    canonical = normalize_state(_read_json(source))
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(canonical, f, ensure_ascii=False, indent=2)
    return target


@app.command("serve")
def cli_serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind"),
    port: int = typer.Option(DEFAULT_PORT, help="Port (defaults to $PORT or 3000)"),
):
    """Start the HTTP server."""
    serve(host, port)


@app.command("summary")
def cli_summary(
    state_file: str = typer.Argument(..., help="Path to a state JSON file"),
    today: Optional[str] = typer.Option(None, help="Pretend today is YYYY-MM-DD"),
):
    """Print project progress and the top focus items."""
    day = date.fromisoformat(today) if today else None
    print(summary(state_file, day))


@app.command("normalize")
def cli_normalize(
    state_file: str = typer.Argument(..., help="Path to a state JSON file"),
    out: Optional[str] = typer.Option(None, "--out", help="Write here instead of in place"),
):
    """Repair a state file into canonical shape."""
    target = normalize(state_file, out)
    print(f"✓ Normalized state written to {target}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
