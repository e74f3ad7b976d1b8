"""Command line interface.

Run: git-auditor audit <username>
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import history
from .auditor import audit_account
from .config import AuditConfig
from .core.errors import AccountNotFoundError, FetchError, InvalidUsernameError
from .core.models import AuditReport
from .db import close_db, init_db
from .report import (
    CATEGORY_LABELS,
    account_stats,
    influence_badge,
    recruiter_feedback,
    top_actions,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="git-auditor",
    help="Audit a public GitHub profile and score it from 0 to 100.",
    no_args_is_help=True,
)
console = Console()

GRADE_STYLES = {"A": "bold green", "B": "green", "C": "yellow", "D": "dark_orange", "F": "bold red"}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _bar(percentage: int, width: int = 30) -> str:
    filled = round(percentage / 100 * width)
    return "█" * filled + "░" * (width - filled)


def render_report(report: AuditReport, show_checks: bool = False) -> None:
    profile = report.profile
    result = report.result

    name = profile.name or profile.login
    badge = influence_badge(profile)
    header = f"[bold]{escape(name)}[/] [dim]@{escape(profile.login)}[/]" + (f"  [yellow]{badge}[/]" if badge else "")
    details = " · ".join(
        escape(part) for part in (profile.company, profile.location, profile.email, profile.blog) if part
    )
    console.print(Panel(
        f"{header}\n{escape(profile.bio or 'No bio set')}\n[dim]{details or '-'}  ·  {profile.followers} followers[/]",
        title="Profile",
    ))

    grade = result.grade.value
    console.print(
        f"\nScore: [bold]{result.global_score}/100[/]   Grade: [{GRADE_STYLES[grade]}]{grade}[/]\n"
    )

    table = Table(title="Categories", show_header=False)
    table.add_column("Category", style="cyan")
    table.add_column("Bar")
    table.add_column("%", justify="right")
    for category, percentage in result.categories.items():
        table.add_row(CATEGORY_LABELS.get(category, category.value), _bar(percentage), f"{percentage}%")
    console.print(table)

    if result.red_flags:
        console.print(Panel(
            "\n".join(f"• {escape(flag)}" for flag in result.red_flags),
            title="Red flags",
            border_style="red",
        ))

    actions = top_actions(result)
    if actions:
        actions_table = Table(title="Top actions")
        actions_table.add_column("#", justify="right")
        actions_table.add_column("Check", style="bold")
        actions_table.add_column("Category", style="dim")
        actions_table.add_column("Tip")
        for i, check in enumerate(actions, 1):
            actions_table.add_row(str(i), escape(check.label), check.category.value.upper(), escape(check.tip))
        console.print(actions_table)
    else:
        console.print("[green]Flawless profile![/]")

    if show_checks:
        checks_table = Table(title="Checklist")
        checks_table.add_column("", justify="center")
        checks_table.add_column("Check")
        checks_table.add_column("Points", justify="right")
        checks_table.add_column("Tip", style="dim")
        for check in result.checks:
            mark = "[green]✔[/]" if check.passed else "[red]✘[/]"
            label = escape(check.label) + (" [blue]BONUS[/]" if check.is_bonus else "")
            points = f"+{check.weight:g}" if check.passed else "0"
            checks_table.add_row(mark, label, points, escape(check.tip))
        console.print(checks_table)

    if report.scanned_repos:
        repos_table = Table(title="Scanned repositories")
        repos_table.add_column("Repository", style="cyan")
        repos_table.add_column("Language")
        repos_table.add_column("Stars", justify="right")
        repos_table.add_column("Forks", justify="right")
        repos_table.add_column("Issues", justify="right")
        for repo in report.scanned_repos:
            repos_table.add_row(
                escape(repo.name),
                escape(repo.language or "N/A"),
                str(repo.stargazers_count),
                str(repo.forks_count),
                str(repo.open_issues_count),
            )
        console.print(repos_table)

    stats = account_stats(profile, report.source_repos)
    console.print(
        f"Repositories: [bold]{stats.repo_count}[/] ({stats.volume_label}) [dim]{stats.volume_hint}[/]\n"
        f"Years on GitHub: [bold]{stats.years}[/] ({stats.seniority_label}) [dim]{stats.seniority_hint}[/]"
    )
    console.print(Panel(escape(recruiter_feedback(result)), title="Recruiter feedback"))


async def _run_audit(
    username: Optional[str],
    tokens: List[str],
    save: bool,
) -> Optional[AuditReport]:
    await init_db()
    try:
        if not username:
            username = await history.last_username()
            if not username:
                raise InvalidUsernameError("Enter a valid username.")
            console.print(f"[dim]Using last audited username: {username}[/]")

        config = AuditConfig.from_env().with_tokens(tokens)
        with console.status(f"[bold blue]Auditing {username}...[/]"):
            report = await audit_account(username, config)
        if save:
            await history.save_audit(report)
        return report
    finally:
        await close_db()


@app.command()
def audit(
    username: Optional[str] = typer.Argument(None, help="GitHub username. Defaults to the last audited one."),
    token: List[str] = typer.Option([], "--token", "-t", help="GitHub token(s), comma separated or repeated."),
    checks: bool = typer.Option(False, "--checks", help="Show the full checklist."),
    save: bool = typer.Option(True, "--save/--no-save", help="Store the result in the local history."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress."),
):
    """Audit a GitHub account."""
    _configure_logging(verbose)
    try:
        report = asyncio.run(_run_audit(username, token, save))
    except (FetchError, AccountNotFoundError, InvalidUsernameError) as exc:
        console.print(f"[red]Audit failed: {escape(str(exc))}[/]")
        raise typer.Exit(1)
    render_report(report, show_checks=checks)


async def _load_history(limit: int, username: Optional[str]) -> list[dict]:
    await init_db()
    try:
        return await history.list_audits(limit=limit, username=username)
    finally:
        await close_db()


@app.command("history")
def show_history(
    limit: int = typer.Option(20, "--limit", "-n", help="How many audits to show."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Only audits of this user."),
):
    """List past audits."""
    rows = asyncio.run(_load_history(limit, username))
    if not rows:
        console.print("[dim]No audits yet.[/]")
        return

    table = Table(title="Audit history")
    table.add_column("When", style="dim")
    table.add_column("User", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Grade", justify="center")
    table.add_column("Red flags", justify="right")
    for row in rows:
        table.add_row(
            row["created_at"][:16].replace("T", " "),
            escape(row["username"]),
            str(row["global_score"]),
            f"[{GRADE_STYLES.get(row['grade'], '')}]{row['grade']}[/]",
            str(row["red_flag_count"]),
        )
    console.print(table)


def main():
    """Entry point for the CLI command."""
    app()


if __name__ == "__main__":
    main()
