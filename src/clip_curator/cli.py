"""Command-line interface using Typer."""

from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from clip_curator import __version__
from clip_curator.logging import setup_logging

# Setup logging
setup_logging()

app = typer.Typer(
    name="clip-curator",
    help="Clip Curator - discover, edit and review short-form clips",
    add_completion=False,
)

jobs_app = typer.Typer(help="Content job commands")
review_app = typer.Typer(help="Review queue commands")
app.add_typer(jobs_app, name="jobs")
app.add_typer(review_app, name="review")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Clip Curator v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Clip Curator - turn openly licensed videos into reviewed clips."""
    pass


def _parse_uuid(value: str, what: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        console.print(f"[bold red]Invalid {what}: {value}[/bold red]")
        raise typer.Exit(code=1)


def _print_report(title: str, report: dict) -> None:
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in report.items():
        table.add_row(key, str(value)[:120])
    console.print(table)


# =============================================================================
# PIPELINE COMMANDS
# =============================================================================


@app.command()
def discover(
    max_new_jobs: Optional[int] = typer.Option(None, "--max", "-m", help="Cap on jobs created"),
    enqueue: bool = typer.Option(False, "--enqueue", "-q", help="Run on a Celery worker instead"),
) -> None:
    """Search for candidate videos and create PENDING jobs."""
    if enqueue:
        from clip_curator.jobs.pipeline import discover_task

        task = discover_task.delay(max_new_jobs=max_new_jobs)
        console.print(f"[green]Task enqueued: {task.id}[/green]")
        return

    from clip_curator.jobs.stages import Providers
    from clip_curator.services.discovery import run_discovery
    from clip_curator.utils.async_utils import run_async

    console.print("[bold blue]Running discovery...[/bold blue]")
    providers = Providers.from_settings()
    result = run_async(run_discovery(providers.llm, providers.source, max_new_jobs=max_new_jobs))
    _print_report("Discovery", result.to_dict())


@app.command("run-stage")
def run_stage(
    stage: str = typer.Argument(..., help="download, transcribe, analyze, edit, review or all"),
    enqueue: bool = typer.Option(False, "--enqueue", "-q", help="Run on a Celery worker instead"),
) -> None:
    """Run one invocation of a pipeline stage."""
    from clip_curator.errors import SkipLimitExceededError
    from clip_curator.jobs.stages import STAGE_ORDER

    if stage != "all" and stage not in STAGE_ORDER:
        console.print(f"[bold red]Unknown stage: {stage}[/bold red]")
        console.print(f"[dim]Available stages: {', '.join(STAGE_ORDER)}, all[/dim]")
        raise typer.Exit(code=1)

    if enqueue:
        from clip_curator.jobs.pipeline import STAGE_TASKS

        task = STAGE_TASKS[stage].delay()
        console.print(f"[green]Task enqueued: {task.id}[/green]")
        return

    from clip_curator.jobs import pipeline
    from clip_curator.utils.async_utils import run_async

    if stage == "all":
        for name, report in run_async(pipeline.run_all_stages()).items():
            _print_report(name, report)
        return

    try:
        report = run_async(pipeline.run_stage(stage))
    except SkipLimitExceededError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        raise typer.Exit(code=1)
    _print_report(stage, report)


@app.command()
def status(
    task_id: str = typer.Argument(..., help="The task ID to check"),
) -> None:
    """Check the status of a Celery task."""
    from celery.result import AsyncResult

    from clip_curator.worker import celery_app

    result = AsyncResult(task_id, app=celery_app)

    table = Table(title="Task Status")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Task ID", task_id)
    table.add_row("Status", result.state)
    if result.state == "SUCCESS":
        table.add_row("Result", str(result.result)[:200])
    elif result.state == "FAILURE":
        table.add_row("Error", str(result.result))
    console.print(table)


@app.command()
def health() -> None:
    """Check the health of the running API."""
    import httpx

    from clip_curator.config import settings

    url = f"http://{settings.api_host}:{settings.api_port}/health/ready"

    try:
        response = httpx.get(url, timeout=10)
        data = response.json()
    except httpx.RequestError as e:
        console.print(f"[bold red]Cannot connect to API: {e}[/bold red]")
        console.print("[dim]Is the API server running?[/dim]")
        raise typer.Exit(code=1)

    table = Table(title="Service Health")
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    for component in ("database", "redis", "storage"):
        table.add_row(component.capitalize(), "✓" if data.get(component) else "✗")
    console.print(table)

    if not data.get("ready"):
        console.print("[bold yellow]Some services unhealthy[/bold yellow]")
        raise typer.Exit(code=1)
    console.print("[bold green]All services healthy![/bold green]")


@app.command()
def worker() -> None:
    """Start a Celery worker (for development)."""
    console.print("[bold blue]Starting Celery worker...[/bold blue]")

    import subprocess
    import sys

    subprocess.run(
        [sys.executable, "-m", "celery", "-A", "clip_curator.worker", "worker", "--loglevel=info"],
        check=True,
    )


# =============================================================================
# JOBS COMMANDS
# =============================================================================


@jobs_app.command("list")
def jobs_list(
    status_filter: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of jobs"),
) -> None:
    """List recent jobs."""
    from clip_curator.db.session import get_session_context
    from clip_curator.domain.enums import JobStatus
    from clip_curator.services.jobs import list_jobs

    job_status = None
    if status_filter:
        try:
            job_status = JobStatus(status_filter.upper())
        except ValueError:
            console.print(f"[bold red]Unknown status: {status_filter}[/bold red]")
            raise typer.Exit(code=1)

    with get_session_context() as session:
        jobs, total = list_jobs(session, status=job_status, limit=limit)
        table = Table(title=f"Jobs ({len(jobs)} of {total})")
        table.add_column("ID", style="dim")
        table.add_column("Status", style="cyan")
        table.add_column("Score")
        table.add_column("Source")
        table.add_column("Created")
        for job in jobs:
            table.add_row(
                str(job.id)[:8],
                job.status,
                str(job.quality_score if job.quality_score is not None else "-"),
                job.source_title[:40],
                job.created_at.strftime("%Y-%m-%d %H:%M"),
            )
    console.print(table)


@jobs_app.command("stats")
def jobs_stats() -> None:
    """Show job counts by status."""
    from clip_curator.db.session import get_session_context
    from clip_curator.services.jobs import count_by_status

    with get_session_context() as session:
        counts = count_by_status(session)

    table = Table(title="Jobs by Status")
    table.add_column("Status", style="cyan")
    table.add_column("Count", justify="right")
    for name, count in sorted(counts.items()):
        table.add_row(name, str(count))
    console.print(table)


@jobs_app.command("delete")
def jobs_delete(
    job_id: str = typer.Argument(..., help="Job ID (UUID)"),
    actor: str = typer.Option("admin", "--by", help="Who is deleting"),
) -> None:
    """Soft-delete a job."""
    from clip_curator.db.session import get_session_context
    from clip_curator.errors import JobNotFoundError
    from clip_curator.services.jobs import soft_delete_job

    job_uuid = _parse_uuid(job_id, "job ID")
    try:
        with get_session_context() as session:
            soft_delete_job(session, job_uuid, deleted_by=actor)
    except JobNotFoundError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Deleted job {job_uuid}[/green]")


# =============================================================================
# REVIEW COMMANDS
# =============================================================================


@review_app.command("pending")
def review_pending(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries"),
) -> None:
    """List the review queue, highest priority first."""
    from clip_curator.db.session import get_session_context
    from clip_curator.services.review import list_pending

    with get_session_context() as session:
        items, total = list_pending(session, limit=limit)
        table = Table(title=f"Pending Review ({total})")
        table.add_column("ID", style="dim")
        table.add_column("Priority", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Category")
        table.add_column("Title")
        for item in items:
            table.add_row(
                str(item.id),
                item.review_priority,
                str(item.quality_score),
                item.category,
                item.title[:50],
            )
    console.print(table)


@review_app.command("approve")
def review_approve(
    pending_id: str = typer.Argument(..., help="Review entry ID (UUID)"),
    reviewer: str = typer.Option("admin", "--reviewer", "-r"),
    title: Optional[str] = typer.Option(None, "--title", help="Replace the generated title"),
) -> None:
    """Approve an entry and publish it."""
    from clip_curator.adapters.storage import get_storage_provider
    from clip_curator.db.session import SessionLocal
    from clip_curator.domain.models import ReviewEdits
    from clip_curator.errors import ClipCuratorError
    from clip_curator.services.review import approve_and_publish

    pending_uuid = _parse_uuid(pending_id, "review entry ID")
    edits = ReviewEdits(title=title) if title else None
    with SessionLocal() as session:
        try:
            outcome = approve_and_publish(session, pending_uuid, reviewer, get_storage_provider(), edits)
        except ClipCuratorError as e:
            console.print(f"[bold red]✗ {e}[/bold red]")
            raise typer.Exit(code=1)

    if outcome.publish_error:
        console.print(f"[bold yellow]Approved, but publish failed: {outcome.publish_error}[/bold yellow]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]✓ {outcome.job_status}[/bold green] content={outcome.published_content_id}")


@review_app.command("reject")
def review_reject(
    pending_id: str = typer.Argument(..., help="Review entry ID (UUID)"),
    reason: Optional[str] = typer.Option(None, "--reason", help="Rejection reason code"),
    note: Optional[str] = typer.Option(None, "--note", help="Free-text note"),
    reviewer: str = typer.Option("admin", "--reviewer", "-r"),
) -> None:
    """Reject an entry."""
    from clip_curator.db.session import SessionLocal
    from clip_curator.domain.enums import RejectionReason
    from clip_curator.errors import ClipCuratorError
    from clip_curator.services.review import reject

    pending_uuid = _parse_uuid(pending_id, "review entry ID")
    reason_enum = None
    if reason:
        try:
            reason_enum = RejectionReason(reason.upper())
        except ValueError:
            console.print(f"[bold red]Unknown reason: {reason}[/bold red]")
            console.print(f"[dim]Options: {', '.join(r.value for r in RejectionReason)}[/dim]")
            raise typer.Exit(code=1)

    with SessionLocal() as session:
        try:
            outcome = reject(session, pending_uuid, reviewer, reason_enum, note)
        except (ClipCuratorError, ValueError) as e:
            console.print(f"[bold red]✗ {e}[/bold red]")
            raise typer.Exit(code=1)
    console.print(f"[bold green]✓ {outcome.job_status}[/bold green]")


@review_app.command("stats")
def review_stats() -> None:
    """Show review dashboard statistics."""
    from dataclasses import asdict

    from clip_curator.db.session import get_session_context
    from clip_curator.services.dashboard import get_dashboard_stats

    with get_session_context() as session:
        stats = get_dashboard_stats(session)
    _print_report("Review Dashboard", asdict(stats))


if __name__ == "__main__":
    app()
