"""
Rule engine: matches the rule catalog against one screen's detected patterns.

A rule may specify component names, layer-name expressions and pattern roles.
Every trigger kind the rule specifies must hold for the same node; kinds it
leaves out are ignored. This keeps a harmless "Read more" button from
triggering a destructive-action rule just because both are buttons.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..knowledge.schema import Rule, Trigger
from ..models import ElementNode
from .matching import all_present, contains_any, matches_any_pattern
from .patterns import DetectedPattern


@dataclass(frozen=True)
class TriggeredRule:
    rule: Rule
    matched_nodes: tuple[ElementNode, ...]


def index_pattern_roles(patterns: Iterable[DetectedPattern]) -> tuple[dict[str, ElementNode], dict[str, set[str]]]:
    """
    Collect every node that appears in a pattern, plus node id -> role tags.

    Nodes keep first-seen order.
    """
    nodes: dict[str, ElementNode] = {}
    roles: dict[str, set[str]] = {}
    for pattern in patterns:
        for node in pattern.nodes:
            nodes.setdefault(node.id, node)
            roles.setdefault(node.id, set()).add(pattern.type)
    return nodes, roles


def node_matches_trigger(trigger: Trigger, node: ElementNode, roles: set[str]) -> bool:
    """AND across the trigger kinds the rule specifies."""
    return all_present(
        [
            (lambda: contains_any(node.label, trigger.component_names)) if trigger.component_names else None,
            (lambda: matches_any_pattern(trigger.layer_name_patterns, node.name, node.text_content))
            if trigger.layer_name_patterns
            else None,
            (lambda: bool(roles.intersection(trigger.pattern_types))) if trigger.pattern_types else None,
        ]
    )


def match_rules(patterns: Sequence[DetectedPattern], rules: Iterable[Rule]) -> list[TriggeredRule]:
    """Rules with at least one matching node, in catalog order."""
    nodes, roles = index_pattern_roles(patterns)
    triggered: list[TriggeredRule] = []

    for rule in rules:
        matched = tuple(
            node for node in nodes.values() if node_matches_trigger(rule.triggers, node, roles.get(node.id, set()))
        )
        if matched:
            triggered.append(TriggeredRule(rule=rule, matched_nodes=matched))

    return triggered
