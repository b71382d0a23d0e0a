"""Rules command implementation."""

from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from ..knowledge import Rule, load_knowledge
from ..knowledge.schema import ExpectCondition


def run_rules_list(knowledge_dir: Path | None, category: str | None = None) -> int:
    """List the loaded rule catalog, optionally for one category.

    Returns:
        Exit code (0 = success, 1 = unknown category)
    """
    console = Console()
    knowledge = load_knowledge(knowledge_dir)

    rules = list(knowledge.rules)
    if category:
        category = category.lower().strip()
        if category not in knowledge.categories:
            console.print(f"Unknown category: {category}", style="bold red")
            console.print("Available categories:", style="bold")
            for c in knowledge.categories:
                console.print(f"  - {c}")
            return 1
        rules = [r for r in rules if r.category == category]

    table = Table(title="Rules")
    table.add_column("rule", style="cyan", no_wrap=True)
    table.add_column("severity")
    table.add_column("name")
    for r in rules:
        table.add_row(f"{r.category}/{r.id}", r.severity, r.name)
    console.print(table)
    console.print(f"{len(rules)} rules", style="dim")
    return 0


def _describe_condition(condition: ExpectCondition) -> str:
    parts: list[str] = []
    if condition.component_names:
        parts.append("component " + " or ".join(f"`{c}`" for c in condition.component_names))
    if condition.with_properties:
        parts.append(", ".join(f"`{k}={v}`" for k, v in condition.with_properties.items()))
    if condition.layer_name_patterns:
        parts.append("layer matching " + " or ".join(f"`{p}`" for p in condition.layer_name_patterns))
    if condition.with_visual_cues:
        parts.append("visual cue " + " or ".join(condition.with_visual_cues))
    return "; ".join(parts) or "(empty)"


def _explanation(rule: Rule) -> str:
    lines = [
        f"## {rule.category}/{rule.id}",
        "",
        f"**{rule.name}** ({rule.severity})",
        "",
        rule.description,
        "",
        "### Triggers",
        "",
    ]
    trigger = rule.triggers
    if trigger.component_names:
        lines.append(f"- components: {', '.join(trigger.component_names)}")
    if trigger.layer_name_patterns:
        lines.append(f"- layer names: {', '.join(f'`{p}`' for p in trigger.layer_name_patterns)}")
    if trigger.pattern_types:
        lines.append(f"- patterns: {', '.join(trigger.pattern_types)}")
    if trigger.is_empty:
        lines.append("- any node in a detected pattern")

    lines.extend(["", "### Expects", ""])
    for condition in rule.expects.in_screen:
        lines.append(f"- in screen: {_describe_condition(condition)}")
    for condition in rule.expects.in_flow:
        lines.append(f"- in flow: {_describe_condition(condition)}")
    if rule.expects.is_empty:
        lines.append("- nothing; any trigger match is reported")

    if rule.recommendation.message:
        lines.extend(["", "### Recommendation", "", rule.recommendation.message])
        for ref in rule.recommendation.components:
            variant = f" ({ref.variant})" if ref.variant else ""
            lines.append(f"- {ref.label}: `{ref.shadcn_id}`{variant}")

    return "\n".join(lines)


def run_rules_explain(knowledge_dir: Path | None, rule_id: str) -> int:
    """Explain one rule.

    Returns:
        Exit code (0 = success, 1 = rule not found)
    """
    console = Console()
    knowledge = load_knowledge(knowledge_dir)

    rule = knowledge.rule(rule_id.strip())
    if rule is None:
        console.print(f"Unknown rule: {rule_id}", style="bold red")
        console.print()
        console.print("Known rules:", style="bold")
        for r in knowledge.rules:
            console.print(f"  - {r.category}/{r.id}")
        return 1

    console.print(Markdown(_explanation(rule)))
    return 0
