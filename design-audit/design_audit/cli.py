"""
Command-Line Interface

CLI using rich for colored output and progress indicators.
Drives the DesignAuditService: Figma extraction, single-screen audits,
multi-screen audits and functionality checks.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config
from .dispatcher import ScreenAuditBoard
from .log import setup_logging
from .models import AuditConfig, FrameDescriptor, ImageInput, ScreenAuditResult
from .rules import PERSONAS
from .service import DesignAuditService


console = Console()

output_option = click.option(
    '--output',
    default='rich',
    type=click.Choice(['rich', 'json'], case_sensitive=False),
    help='Output format: rich (colored terminal) or json (for tools)'
)
persona_option = click.option(
    '--persona',
    default='solo',
    type=click.Choice(sorted(PERSONAS), case_sensitive=False),
    help='Evaluation persona'
)
fidelity_option = click.option(
    '--fidelity',
    default='high-fidelity',
    type=click.Choice(['wireframe', 'mvp', 'high-fidelity']),
    help='Fidelity of the design being audited'
)
purpose_option = click.option(
    '--purpose',
    default='review',
    type=click.Choice(['pre-handoff', 'review', 'portfolio', 'stakeholder']),
    help='Why the audit is being run'
)


@click.group()
@click.option(
    '--env-file',
    default=None,
    type=click.Path(exists=True),
    help='Path to .env file (defaults to ./.env)'
)
@click.option(
    '--provider',
    default=None,
    type=click.Choice(['gateway', 'anthropic'], case_sensitive=False),
    help='Vision provider to use. Defaults to VISION_PROVIDER from .env'
)
@click.option('--debug', is_flag=True, help='Verbose logging')
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, env_file: Optional[str], provider: Optional[str], debug: bool):
    """
    Design Audit - AI Design Review

    Extract screens from Figma and audit them against UX/UI heuristics.

    Examples:

      # List exportable frames of a Figma file
      design-audit frames https://www.figma.com/design/AbC123/App

      # Audit a local screenshot as an accessibility reviewer
      design-audit audit screen.png --persona a11y

      # Audit every extracted Figma screen, JSON for tools
      design-audit audit-figma https://www.figma.com/design/AbC123/App --output json
    """
    setup_logging(debug)
    try:
        config = load_config(Path(env_file) if env_file else None)
    except ValueError as e:
        console.print(f"[red]❌ Invalid configuration: {e}[/red]")
        sys.exit(1)
    if provider:
        config = config.model_copy(update={"vision_provider": provider})
    ctx.obj = DesignAuditService(config)


@main.command()
@click.argument('figma_url')
@output_option
@click.pass_obj
def frames(service: DesignAuditService, figma_url: str, output: str):
    """Extract and export the top-level frames of a Figma file."""
    with console.status("[cyan]Fetching Figma frames..."):
        payload = asyncio.run(service.extract_figma_frames(figma_url))
    _exit_on_error(payload)

    if output == 'json':
        _output_json(payload)
        return

    console.print()
    console.print(Panel.fit(
        f"[bold]{escape(payload['fileName'])}[/bold]\n"
        f"Extracted {payload['exportedFrames']} of {payload['totalFrames']} frames",
        border_style="cyan"
    ))
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Frame", style="cyan")
    table.add_column("Node")
    table.add_column("Image URL", overflow="fold")
    for i, frame in enumerate(payload["frames"], 1):
        table.add_row(str(i), escape(frame["name"]), frame["nodeId"], frame["imageUrl"])
    console.print(table)
    _print_warnings(payload.get("warnings", []))


@main.command()
@click.argument('image')
@persona_option
@fidelity_option
@purpose_option
@click.option('--screen-name', default=None, help='Name of the screen, for context')
@output_option
@click.pass_obj
def audit(
    service: DesignAuditService,
    image: str,
    persona: str,
    fidelity: str,
    purpose: str,
    screen_name: Optional[str],
    output: str
):
    """Audit one screenshot (local file or image URL)."""
    config = AuditConfig(fidelity=fidelity, purpose=purpose, screen_name=screen_name)
    with console.status("[cyan]Analyzing design with vision model..."):
        payload = asyncio.run(service.audit_design(_load_image(image), persona, config))
    _exit_on_error(payload)

    if output == 'json':
        _output_json(payload)
    else:
        _output_audit(payload, screen_name or image)


@main.command(name='audit-figma')
@click.argument('figma_url')
@persona_option
@fidelity_option
@purpose_option
@output_option
@click.pass_obj
def audit_figma(
    service: DesignAuditService,
    figma_url: str,
    persona: str,
    fidelity: str,
    purpose: str,
    output: str
):
    """Extract Figma frames and audit every screen."""
    with console.status("[cyan]Fetching Figma frames..."):
        extraction = asyncio.run(service.extract_figma_frames(figma_url))
    _exit_on_error(extraction)

    frame_list = [FrameDescriptor.model_validate(frame) for frame in extraction["frames"]]
    results = _run_screens(
        service, frame_list, persona, AuditConfig(fidelity=fidelity, purpose=purpose)
    )

    if output == 'json':
        _output_json({
            "fileName": extraction["fileName"],
            "totalFrames": extraction["totalFrames"],
            "exportedFrames": extraction["exportedFrames"],
            "screens": [result.to_wire() for result in results],
        })
        return

    console.print()
    console.print(Panel.fit(
        f"[bold]{escape(extraction['fileName'])}[/bold]\n"
        f"Audited {len(results)} of {extraction['totalFrames']} frames as '{escape(persona)}'",
        border_style="cyan"
    ))
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Screen", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Risk", justify="center")
    table.add_column("Issues", justify="right")
    for result in results:
        if result.result is None:
            table.add_row(escape(result.screen_name), "[red]failed[/red]", "-", escape(result.error or ""))
            continue
        score = result.result.overall_score
        table.add_row(
            escape(result.screen_name),
            f"[{_score_color(score)}]{score:g}/100[/]",
            result.result.risk_level,
            str(len(result.result.issues))
        )
    console.print(table)
    _print_warnings(extraction.get("warnings", []))


@main.command()
@click.argument('image')
@click.option('--screen-name', default=None, help='Name of the screen, for context')
@output_option
@click.pass_obj
def functionality(service: DesignAuditService, image: str, screen_name: Optional[str], output: str):
    """Rate whether a screen lets users get their task done."""
    with console.status("[cyan]Evaluating functionality..."):
        payload = asyncio.run(service.audit_functionality(_load_image(image), screen_name))
    _exit_on_error(payload)

    if output == 'json':
        _output_json(payload)
        return

    verdict_color = {"good": "green", "mixed": "yellow", "bad": "red"}[payload["verdict"]]
    console.print()
    console.print(Panel.fit(
        f"[bold {verdict_color}]{payload['verdict'].upper()}[/] ({payload['score']:g}/100)\n"
        f"{escape(payload['summary'])}",
        border_style=verdict_color
    ))
    for title, key in (("Strengths", "strengths"), ("Weaknesses", "weaknesses"),
                       ("Recommendations", "recommendations")):
        if payload[key]:
            console.print(f"\n[bold]{title}[/bold]")
            for item in payload[key]:
                console.print(f"  • {escape(item)}")
    console.print()


def _run_screens(
    service: DesignAuditService,
    frame_list: list[FrameDescriptor],
    persona: str,
    config: AuditConfig
) -> list[ScreenAuditResult]:
    """Run the multi-screen audit with a live progress bar"""
    board = ScreenAuditBoard(frame_list)
    setup_errors: list[dict] = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console
    ) as progress:
        task = progress.add_task("[cyan]Auditing screens...", total=len(frame_list))

        def on_complete(index: int, result: ScreenAuditResult) -> None:
            board.record(index, result)
            mark = "[green]✓[/green]" if result.error is None else "[red]✗[/red]"
            progress.console.print(f"  {mark} {escape(result.screen_name)}")
            progress.advance(task)

        asyncio.run(service.audit_multi_screen(
            frame_list, persona, config, on_complete, on_error=setup_errors.append
        ))

    if setup_errors:
        _exit_on_error(setup_errors[0])
    return board.results


def _load_image(value: str) -> ImageInput:
    """Image URL or local file path to ImageInput"""
    if value.startswith(("http://", "https://")):
        return ImageInput(url=value)
    path = Path(value)
    if not path.is_file():
        raise click.BadParameter(f"No such image file: {value}", param_hint="IMAGE")
    return ImageInput.from_path(path)


def _exit_on_error(payload: dict) -> None:
    if "error" not in payload:
        return
    console.print(f"[red]❌ Error: {escape(payload['error'])}[/red]")
    if payload.get("retryAfter") is not None:
        console.print(f"[yellow]Try again in {payload['retryAfter']:g} seconds.[/yellow]")
    sys.exit(1)


def _output_audit(payload: dict, label: str):
    """Output an audit result in rich formatted terminal output"""
    score = payload["overallScore"]
    console.print()
    console.print(Panel.fit(
        f"[bold]Design Audit[/bold]: {escape(label)}\n"
        f"Score: [{_score_color(score)}]{score:g}/100[/]   Risk: {escape(payload['riskLevel'])}\n\n"
        f"{escape(payload['summary'])}",
        border_style="cyan"
    ))

    if not payload["categories"]:
        console.print("\n[bold green]✓ No issues found![/bold green]\n")
        return

    scores_table = Table(show_header=True, header_style="bold magenta")
    scores_table.add_column("Category", style="cyan")
    scores_table.add_column("Score", justify="right")
    scores_table.add_column("Issues", justify="right")
    for category in payload["categories"]:
        scores_table.add_row(
            escape(f"{category['icon']} {category['name']}".strip()),
            f"[{_score_color(category['score'])}]{category['score']:g}/100[/]",
            str(len(category["issues"]))
        )
    console.print(scores_table)

    severity_style = {"critical": ("🔴", "bold red"), "warning": ("🟡", "bold yellow"), "info": ("🟢", "bold green")}
    issues = [issue for category in payload["categories"] for issue in category["issues"]]
    for severity, (emoji, style) in severity_style.items():
        matching = [issue for issue in issues if issue["severity"] == severity]
        if not matching:
            continue
        console.print(f"\n[{style}]{severity.capitalize()}:[/]")
        for issue in matching:
            rule = escape(f"[{issue['ruleId']}] ") if issue.get("ruleId") else ""
            console.print(f"  {emoji} {rule}{escape(issue['title'])}")
            if issue["description"]:
                console.print(f"     {escape(issue['description'])}")
            if issue["suggestion"]:
                console.print(f"     💡 {escape(issue['suggestion'])}")
    console.print()


def _output_json(payload: dict):
    """Output payload as JSON for tools"""
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _print_warnings(warnings: list[str]):
    for warning in warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")


def _score_color(score: float) -> str:
    if score >= 90:
        return "green"
    elif score >= 75:
        return "yellow"
    elif score >= 60:
        return "orange3"
    else:
        return "red"


if __name__ == "__main__":
    main()
