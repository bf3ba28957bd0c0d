"""Command line entrypoint for scholar-sync.

Analyze a local PDF, a PDF URL or an arXiv id, and inspect the activity log.
"""
import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .activity import ActivityRecorder, open_activity_log
from .config import Settings
from .downloader import arxiv_pdf_url, fetch_document, read_document
from .errors import DownloadError
from .models import AggregateResult, Progress, Run, Stage, User
from .pipeline import build_pipeline

console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def render_result(result: AggregateResult) -> None:
    summary = result.summary
    evaluation = result.evaluation

    console.rule(f"[bold]{result.metadata.title}[/bold]")
    console.print(f"[dim]{result.metadata.abstract}[/dim]\n")
    console.print(summary.main_summary)
    for heading, items in (
        ("Contributions", summary.contributions),
        ("Method", summary.method),
        ("Results", summary.results),
        ("Limitations", summary.limitations),
    ):
        if not items:
            continue
        console.print(f"\n[bold]{heading}[/bold]")
        for item in items:
            console.print(f"  - {item}")

    scores = Table(title="Faithfulness", show_header=True)
    scores.add_column("Metric")
    scores.add_column("Score", justify="right")
    scores.add_row("Overall", f"{evaluation.score:.0f}")
    scores.add_row("Semantic similarity", f"{evaluation.semantic_similarity_score:.0f}")
    scores.add_row("Key-point coverage", f"{evaluation.keypoint_coverage_score:.0f}")
    console.print()
    console.print(scores)
    if evaluation.reasoning:
        console.print(evaluation.reasoning)
    for point in evaluation.missing_keypoints:
        console.print(f"  [yellow]missing:[/yellow] {point}")

    if result.similar_papers:
        related = Table(title="Related work", show_header=True)
        related.add_column("Title")
        related.add_column("Source")
        related.add_column("URL", overflow="fold")
        for paper in result.similar_papers:
            related.add_row(paper.title, paper.source or "", paper.url)
        console.print(related)
    else:
        console.print("[dim]No related papers found.[/dim]")


async def _load(args: argparse.Namespace) -> bytes:
    if args.url:
        return await fetch_document(args.url)
    if args.id:
        return await fetch_document(arxiv_pdf_url(args.id))
    return await read_document(args.path)


async def _analyze_mode(args: argparse.Namespace, settings: Settings) -> int:
    source = args.url or (args.id and arxiv_pdf_url(args.id)) or args.path
    if args.dry_run:
        console.print(f"[yellow]Dry run:[/yellow] would analyze {source} with model {settings.model}")
        return 0

    try:
        document = await _load(args)
    except DownloadError as exc:
        console.print(f"[red]Could not load document:[/red] {exc}")
        return 1

    activity = open_activity_log(settings.db_path)
    user = User(id=f"u_{args.user}", username=args.user)
    pipeline = build_pipeline(settings, listeners=[ActivityRecorder(activity, user)])

    with console.status("Starting analysis...") as status:

        def _on_event(event) -> None:
            if isinstance(event, Progress):
                status.update(event.label)

        pipeline.subscribe(_on_event)
        run: Run = await pipeline.submit(document)

    if run.stage is not Stage.COMPLETED:
        console.print(f"[red]Analysis failed:[/red] {run.error}")
        return 1

    for warning in run.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")
    if args.json:
        print(json.dumps(run.result.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    else:
        render_result(run.result)
    return 0


async def _logs_mode(settings: Settings, clear: bool) -> int:
    activity = open_activity_log(settings.db_path)
    if clear:
        await activity.clear()
        console.print("[green]Activity log cleared.[/green]")
        return 0

    entries = await activity.list()
    table = Table(title=f"Activity log ({len(entries)})")
    table.add_column("When")
    table.add_column("User")
    table.add_column("Paper")
    table.add_column("Action")
    for entry in entries:
        when = datetime.fromtimestamp(entry.timestamp / 1000).isoformat(sep=" ", timespec="seconds")
        table.add_row(when, entry.username, entry.paper_title, entry.action_type)
    console.print(table)
    return 0


async def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.logs or args.clear_logs:
        return await _logs_mode(settings, clear=args.clear_logs)
    return await _analyze_mode(args, settings)


def main() -> None:
    parser = argparse.ArgumentParser(prog="scholar-sync")
    parser.add_argument("path", nargs="?", help="Local PDF to analyze")
    parser.add_argument("--url", help="Analyze a PDF fetched from this URL")
    parser.add_argument("--id", help="Analyze an arXiv paper by id (e.g., 2101.00001)")
    parser.add_argument("--user", default="cli", help="Username recorded in the activity log")
    parser.add_argument("--db", default=None, help="Path to sqlite DB file for the activity log")
    parser.add_argument("--logs", action="store_true", help="List the activity log")
    parser.add_argument("--clear-logs", action="store_true", help="Delete all activity log entries")
    parser.add_argument("--json", action="store_true", help="Print the aggregate result as JSON")
    parser.add_argument("--dry-run", action="store_true", help="Show actions without calling the model")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    configure_logging(args.verbose)

    sources = [s for s in (args.path, args.url, args.id) if s]
    if not (args.logs or args.clear_logs):
        if len(sources) != 1:
            console.print("[red]Specify exactly one of PATH, --url or --id.[/red]")
            sys.exit(2)

    try:
        settings = Settings.from_env(db_path=args.db)
    except ValueError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        sys.exit(2)

    if (args.logs or args.clear_logs) and not settings.db_path:
        console.print("[red]The activity log requires --db (or SCHOLAR_SYNC_DB) to point to a sqlite database file.[/red]")
        sys.exit(2)

    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
