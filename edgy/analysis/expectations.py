"""
Expectation checking for triggered rules.

Each triggered rule is checked against a cascade of scopes, stopping at the
first tier that satisfies it:

1. in-screen: the rule's `in_screen` conditions against the current screen
2. flow siblings: the same `in_screen` conditions against every screen in the
   flow group (only when the group has more than one screen)
3. flow-wide: the rule's `in_flow` conditions against every screen in the run
4. visual cues: for categories with a known cue type, a sibling screen showing
   that cue on the triggering components where this screen does not

Sibling and run-wide trees are only read when an earlier tier failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Sequence

from ..knowledge.schema import ExpectCondition, Rule
from ..models import ElementNode, flatten_tree, flatten_trees
from .matching import all_present, contains_any, matches_any_pattern
from .rule_engine import TriggeredRule
from .visual_cues import node_has_visual_cue, sibling_has_new_visual_cue, visual_cue_for_category

MISSING_IN_SCREEN = "Missing in current screen"
MISSING_IN_FLOW = "Missing across entire flow"
NO_MATCHING_STATE = "No matching state found"


@dataclass(frozen=True)
class UnmetExpectation:
    rule: Rule
    matched_nodes: tuple[ElementNode, ...]
    reason: str


def _properties_match(node: ElementNode, expected: dict[str, str]) -> bool:
    for key, value in expected.items():
        actual = node.component_properties.get(key)
        if actual is None or actual.lower() != value.lower():
            return False
    return True


def node_satisfies(condition: ExpectCondition, node: ElementNode) -> bool:
    """
    One node against one condition.

    A layer-name match or a visual-cue match each satisfies the condition on
    its own. Otherwise component name and properties must all hold, and at
    least one of them must be specified.
    """
    if condition.layer_name_patterns and matches_any_pattern(
        condition.layer_name_patterns, node.name, node.text_content
    ):
        return True

    if condition.with_visual_cues and any(node_has_visual_cue(node, cue) for cue in condition.with_visual_cues):
        return True

    if not (condition.component_names or condition.with_properties):
        return False

    return all_present(
        [
            (lambda: contains_any(node.component_name, condition.component_names))
            if condition.component_names
            else None,
            (lambda: _properties_match(node, condition.with_properties)) if condition.with_properties else None,
        ]
    )


def check_condition(condition: ExpectCondition, nodes: Sequence[ElementNode]) -> bool:
    """True if any node satisfies the condition; an empty node list never does."""
    return any(node_satisfies(condition, node) for node in nodes)


def _any_condition(conditions: Sequence[ExpectCondition], nodes: Sequence[ElementNode]) -> bool:
    return any(check_condition(c, nodes) for c in conditions)


class _Scope:
    """Lazily flattened node lists for the screen, its flow group and the run."""

    def __init__(
        self,
        screen_tree: ElementNode,
        all_screen_trees: Sequence[ElementNode],
        flow_group_trees: Sequence[ElementNode] | None,
    ):
        self.screen_tree = screen_tree
        self._all_trees = all_screen_trees
        self._flow_trees = flow_group_trees

    @cached_property
    def screen_nodes(self) -> list[ElementNode]:
        return flatten_tree(self.screen_tree)

    @cached_property
    def flow_trees(self) -> list[ElementNode]:
        trees = self._flow_trees if self._flow_trees is not None else self._all_trees
        return list(trees)

    @property
    def has_siblings(self) -> bool:
        return len(self.flow_trees) > 1

    @cached_property
    def flow_nodes(self) -> list[ElementNode]:
        return flatten_trees(self.flow_trees)

    @cached_property
    def sibling_trees(self) -> list[ElementNode]:
        return [t for t in self.flow_trees if t is not self.screen_tree]

    @cached_property
    def all_nodes(self) -> list[ElementNode]:
        return flatten_trees(self._all_trees)


def _visual_cue_inferred(rule: Rule, matched_nodes: Sequence[ElementNode], scope: _Scope) -> bool:
    cue = visual_cue_for_category(rule.category)
    if cue is None or not scope.has_siblings:
        return False

    component_names = sorted({n.component_name for n in matched_nodes if n.component_name}) or None
    return any(
        sibling_has_new_visual_cue(scope.screen_nodes, flatten_tree(sibling), cue, component_names)
        for sibling in scope.sibling_trees
    )


def _check_one(triggered: TriggeredRule, scope: _Scope) -> UnmetExpectation | None:
    rule = triggered.rule
    in_screen = rule.expects.in_screen
    in_flow = rule.expects.in_flow

    # The trigger alone is the finding
    if not in_screen and not in_flow:
        return UnmetExpectation(rule=rule, matched_nodes=triggered.matched_nodes, reason=NO_MATCHING_STATE)

    reason = ""

    if in_screen:
        if _any_condition(in_screen, scope.screen_nodes):
            return None
        reason = MISSING_IN_SCREEN
        # A satisfied sibling suppresses the finding; the reason stays as recorded
        if scope.has_siblings and _any_condition(in_screen, scope.flow_nodes):
            return None

    if in_flow:
        if _any_condition(in_flow, scope.all_nodes):
            return None
        reason = reason or MISSING_IN_FLOW

    if _visual_cue_inferred(rule, triggered.matched_nodes, scope):
        return None

    return UnmetExpectation(rule=rule, matched_nodes=triggered.matched_nodes, reason=reason)


def check_expectations(
    triggered_rules: Sequence[TriggeredRule],
    screen_tree: ElementNode,
    all_screen_trees: Sequence[ElementNode],
    flow_group_trees: Sequence[ElementNode] | None = None,
) -> list[UnmetExpectation]:
    """
    Return the triggered rules whose expectations no tier satisfies.

    `flow_group_trees` are the trees of the screen's flow group, including the
    screen itself; without an explicit grouping every screen in the run is
    treated as a sibling.
    """
    scope = _Scope(screen_tree, all_screen_trees, flow_group_trees)
    unmet: list[UnmetExpectation] = []
    for triggered in triggered_rules:
        result = _check_one(triggered, scope)
        if result is not None:
            unmet.append(result)
    return unmet
