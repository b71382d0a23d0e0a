"""Analyze command implementation."""

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..analysis import AnalysisOutput, run_analysis
from ..document import load_document
from ..knowledge import load_knowledge

SEVERITY_STYLES = {"critical": "bold red", "warning": "yellow", "info": "dim"}

# --fail-on level -> severities that fail the run
FAIL_LEVELS = {
    "critical": ("critical",),
    "warning": ("critical", "warning"),
    "never": (),
}


def run_analyze(
    knowledge_dir: Path | None,
    input_path: Path,
    output_path: Path | None = None,
    output_json: bool = False,
    fail_on: str = "critical",
) -> int:
    """Analyze a design document and report its findings.

    Args:
        knowledge_dir: Knowledge base directory (None for the bundled one)
        input_path: Analysis input JSON document
        output_path: Also write the JSON result to this file
        output_json: Print JSON to stdout instead of tables
        fail_on: Exit with error if findings at this severity or higher exist

    Returns:
        Exit code (0 = success, 1 = findings at or above fail_on)
    """
    console = Console(stderr=True)

    console.print(f"Loading {input_path}...", style="dim")
    document = load_document(input_path)
    knowledge = load_knowledge(knowledge_dir)
    console.print(
        f"Analyzing {len(document.screens)} screens with {len(knowledge.rules)} rules "
        f"across {len(knowledge.categories)} categories",
        style="dim",
    )

    output = run_analysis(document, knowledge)
    payload = output.to_dict()

    if output_path is not None:
        output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        console.print(f"Results written to {output_path}", style="dim")

    if output_json:
        print(json.dumps(payload, indent=2))
    else:
        _print_human_output(Console(), output)

    console.print(f"Done. {output.summary.total_findings} findings total.", style="dim")

    failing = FAIL_LEVELS.get(fail_on, ())
    counts = {"critical": output.summary.critical, "warning": output.summary.warning}
    if any(counts.get(level, 0) > 0 for level in failing):
        return 1
    return 0


def _severity_cell(severity: str) -> str:
    style = SEVERITY_STYLES.get(severity, "")
    return f"[{style}]{severity}[/]" if style else severity


def _print_human_output(console: Console, output: AnalysisOutput) -> None:
    """Print findings as rich tables."""
    screen_findings = [(s.name, f) for s in output.screens for f in s.findings]
    if screen_findings:
        table = Table(title="Screen findings")
        table.add_column("id", style="dim", no_wrap=True)
        table.add_column("screen", style="cyan")
        table.add_column("severity")
        table.add_column("rule", style="magenta")
        table.add_column("title")
        for screen_name, f in screen_findings:
            table.add_row(f.id, screen_name, _severity_cell(f.severity), f.rule_id, f.title)
        console.print(table)

    if output.flow_findings:
        table = Table(title="Flow findings")
        table.add_column("id", style="dim", no_wrap=True)
        table.add_column("severity")
        table.add_column("rule", style="magenta")
        table.add_column("title")
        for f in output.flow_findings:
            table.add_row(f.id, _severity_cell(f.severity), f.rule_id, f.title)
        console.print(table)

    if output.flow_types:
        table = Table(title="Flow types")
        table.add_column("type", style="cyan")
        table.add_column("confidence")
        table.add_column("screens", justify="right")
        table.add_column("evidence", style="dim")
        for t in output.flow_types:
            table.add_row(t.type, t.confidence, str(len(t.trigger_screens)), ", ".join(t.trigger_patterns))
        console.print(table)

    if output.missing_screen_findings:
        table = Table(title="Missing screens")
        table.add_column("id", style="dim", no_wrap=True)
        table.add_column("flow", style="cyan")
        table.add_column("severity")
        table.add_column("screen")
        for m in output.missing_screen_findings:
            table.add_row(m.id, m.flow_name, _severity_cell(m.severity), m.missing_screen.name)
        console.print(table)

    summary = output.summary
    console.print()
    if summary.total_findings == 0:
        console.print("No findings", style="bold green")
        return
    style = "bold red" if summary.critical else "yellow" if summary.warning else "dim"
    console.print(
        f"{summary.total_findings} findings: {summary.critical} critical, "
        f"{summary.warning} warning, {summary.info} info",
        style=style,
    )
