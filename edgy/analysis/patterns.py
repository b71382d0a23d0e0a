"""
Pattern detection over one screen's node tree.

Each structural role is described by a small predicate table: an ordered list
of (predicate, confidence) rows. A node takes the confidence of the first row
whose predicate holds; no row holding means the node does not have the role.
Bound component names yield "high", layer-name and shape heuristics "medium",
and the repeating-children heuristic "low".
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from ..models import Confidence, ElementNode, PatternType, flatten_tree
from .matching import contains_any

# -----------------------------------------------------------------------------
# Vocabularies
# -----------------------------------------------------------------------------

FORM_FIELD_COMPONENTS = (
    "input", "textarea", "select", "combobox", "datepicker", "date-picker",
    "radiogroup", "radio-group", "checkbox", "switch", "slider", "toggle",
)

BUTTON_COMPONENTS = ("button", "btn", "cta", "icon-button", "iconbutton")

LIST_INDICATORS = ("list", "grid", "table", "feed", "timeline", "cards")

DESTRUCTIVE_KEYWORDS = (
    "delete", "remove", "destroy", "clear", "reset", "revoke",
    "unsubscribe", "deactivate", "disable", "archive",
)

SEARCH_INDICATORS = ("search", "filter", "query", "find")

DATA_DISPLAY_COMPONENTS = ("card", "table", "avatar", "badge", "chart", "stat", "metric")

DATA_DISPLAY_LAYER_KEYWORDS = (
    "card", "widget", "panel", "stats", "data", "info", "metric",
    "stat", "chart", "graph", "kpi",
)

MODAL_COMPONENTS = (
    "dialog", "modal", "alertdialog", "alert-dialog", "sheet",
    "drawer", "overlay", "popover", "dropdown-menu", "context-menu",
)

MODAL_LAYER_KEYWORDS = (
    "modal", "dialog", "popup", "overlay", "drawer", "sheet",
    "bottom-sheet", "bottomsheet",
)

NAV_COMPONENTS = (
    "tabs", "tab", "navbar", "nav-bar", "sidebar", "breadcrumb",
    "navigation", "menu", "menubar", "stepper", "step",
)

NAV_LAYER_KEYWORDS = (
    "nav", "tabs", "tab-bar", "tabbar", "sidebar", "breadcrumb",
    "menu", "stepper", "navigation",
)

FIELD_NAME_PATTERN = re.compile(r"\b(field|form.?field|text.?input)\b", re.I)

BUTTON_VERB_PATTERN = re.compile(
    r"\b(submit|save|send|confirm|sign.?in|log.?in|register|sign.?up|cancel|close|"
    r"next|previous|back|continue|done|apply|add|create|update|edit|"
    r"go|ok|accept|decline|reject)\b",
    re.I,
)

# Containers with more children than this are never classified by action verbs
MAX_BUTTON_CHILDREN = 2

MIN_REPEATS = 3


# -----------------------------------------------------------------------------
# Predicate tables
# -----------------------------------------------------------------------------

NodePredicate = Callable[[ElementNode], bool]
RoleTable = Sequence[tuple[NodePredicate, Confidence]]


def _component_in(vocab: Iterable[str]) -> NodePredicate:
    words = tuple(vocab)
    return lambda node: contains_any(node.component_name, words)


def _name_in(vocab: Iterable[str]) -> NodePredicate:
    words = tuple(vocab)
    return lambda node: contains_any(node.name, words)


def _name_matches(pattern: re.Pattern[str]) -> NodePredicate:
    return lambda node: bool(pattern.search(node.name))


def _uncomponentized(predicate: NodePredicate) -> NodePredicate:
    """Only consult layer-name heuristics when no component is bound."""
    return lambda node: node.component_name is None and predicate(node)


def _componentized(predicate: NodePredicate) -> NodePredicate:
    return lambda node: node.component_name is not None and predicate(node)


def _not_container(predicate: NodePredicate) -> NodePredicate:
    def check(node: ElementNode) -> bool:
        if node.type.upper() == "FRAME" and len(node.children) > MAX_BUTTON_CHILDREN:
            return False
        return predicate(node)

    return check


FORM_FIELD_TABLE: RoleTable = (
    (_component_in(FORM_FIELD_COMPONENTS), "high"),
    (_uncomponentized(_name_in(FORM_FIELD_COMPONENTS)), "medium"),
    (_uncomponentized(_name_matches(FIELD_NAME_PATTERN)), "medium"),
)

BUTTON_TABLE: RoleTable = (
    (_component_in(BUTTON_COMPONENTS), "high"),
    (_uncomponentized(_name_in(BUTTON_COMPONENTS)), "medium"),
    (_uncomponentized(_not_container(_name_matches(BUTTON_VERB_PATTERN))), "medium"),
)

DATA_DISPLAY_TABLE: RoleTable = (
    (_component_in(DATA_DISPLAY_COMPONENTS), "high"),
    (_uncomponentized(_name_in(DATA_DISPLAY_LAYER_KEYWORDS)), "medium"),
)

MODAL_TABLE: RoleTable = (
    (_component_in(MODAL_COMPONENTS), "high"),
    (_uncomponentized(_name_in(MODAL_LAYER_KEYWORDS)), "medium"),
)

NAVIGATION_TABLE: RoleTable = (
    (_component_in(NAV_COMPONENTS), "high"),
    (_uncomponentized(_name_in(NAV_LAYER_KEYWORDS)), "medium"),
)

# Search matches component or layer names; any bound component makes it high
SEARCH_TABLE: RoleTable = (
    (_component_in(SEARCH_INDICATORS), "high"),
    (_componentized(_name_in(SEARCH_INDICATORS)), "high"),
    (_name_in(SEARCH_INDICATORS), "medium"),
)

LIST_NAME_TABLE: RoleTable = (
    (_name_in(LIST_INDICATORS), "medium"),
)


def classify(node: ElementNode, table: RoleTable) -> Confidence | None:
    """Confidence of the first matching row, or None."""
    for predicate, confidence in table:
        if predicate(node):
            return confidence
    return None


def _classified(nodes: Iterable[ElementNode], table: RoleTable) -> list[tuple[ElementNode, Confidence]]:
    out: list[tuple[ElementNode, Confidence]] = []
    for node in nodes:
        confidence = classify(node, table)
        if confidence is not None:
            out.append((node, confidence))
    return out


def _strongest(confidences: Iterable[Confidence]) -> Confidence:
    found = set(confidences)
    for level in ("high", "medium"):
        if level in found:
            return level  # type: ignore[return-value]
    return "low"


# -----------------------------------------------------------------------------
# Detection
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DetectedPattern:
    """A structural role inferred for one or more nodes."""

    type: PatternType
    nodes: tuple[ElementNode, ...]
    confidence: Confidence
    context: str


def is_destructive_action(node: ElementNode) -> bool:
    """Destructive variant property, or a destructive verb in name, component or text."""
    if any(value.lower() == "destructive" for value in node.component_properties.values()):
        return True
    return any(
        contains_any(text, DESTRUCTIVE_KEYWORDS)
        for text in (node.name, node.component_name, node.text_content)
    )


def repeated_child_kind(node: ElementNode) -> tuple[str, int] | None:
    """
    Most frequent child kind (component name, else node type) and its count.

    Ties go to the kind seen first. Returns None unless the node has at least
    MIN_REPEATS children and the most frequent kind occurs MIN_REPEATS times.
    """
    if len(node.children) < MIN_REPEATS:
        return None
    counts = Counter(child.component_name or child.type for child in node.children)
    kind, count = max(counts.items(), key=lambda item: item[1])
    if count < MIN_REPEATS:
        return None
    return kind, count


def _form_patterns(nodes: list[ElementNode]) -> list[DetectedPattern]:
    fields = _classified(nodes, FORM_FIELD_TABLE)
    if not fields:
        return []

    names = ", ".join(n.name for n, _ in fields)
    patterns = [
        DetectedPattern(
            type="form",
            nodes=tuple(n for n, _ in fields),
            confidence=_strongest(c for _, c in fields),
            context=f"Form with {len(fields)} field(s): {names}",
        )
    ]
    for node, confidence in fields:
        patterns.append(
            DetectedPattern(type="form-field", nodes=(node,), confidence=confidence, context=f"Form field: {node.name}")
        )
    return patterns


def _button_patterns(nodes: list[ElementNode]) -> list[DetectedPattern]:
    patterns: list[DetectedPattern] = []
    for node, confidence in _classified(nodes, BUTTON_TABLE):
        patterns.append(DetectedPattern(type="button", nodes=(node,), confidence=confidence, context=f"Button: {node.name}"))
        if is_destructive_action(node):
            patterns.append(
                DetectedPattern(
                    type="destructive-action",
                    nodes=(node,),
                    confidence=confidence,
                    context=f"Destructive action: {node.name}",
                )
            )
    return patterns


def detect_lists(nodes: list[ElementNode]) -> list[DetectedPattern]:
    """Named collections first, then unlabeled containers of repeating children."""
    patterns: list[DetectedPattern] = []
    named_ids: set[str] = set()

    for node, confidence in _classified(nodes, LIST_NAME_TABLE):
        named_ids.add(node.id)
        patterns.append(DetectedPattern(type="list", nodes=(node,), confidence=confidence, context=f"List/collection: {node.name}"))

    for node in nodes:
        if node.id in named_ids:
            continue
        repeated = repeated_child_kind(node)
        if repeated is None:
            continue
        kind, count = repeated
        patterns.append(
            DetectedPattern(
                type="list",
                nodes=(node,),
                confidence="low",
                context=f"Repeating pattern ({kind} x{count}): {node.name}",
            )
        )
    return patterns


def _grouped(
    role: PatternType,
    nodes: list[ElementNode],
    table: RoleTable,
    describe: Callable[[list[ElementNode]], str],
) -> list[DetectedPattern]:
    matched = _classified(nodes, table)
    if not matched:
        return []
    members = [n for n, _ in matched]
    return [
        DetectedPattern(
            type=role,
            nodes=tuple(members),
            confidence=_strongest(c for _, c in matched),
            context=describe(members),
        )
    ]


def detect_patterns(root: ElementNode | None) -> list[DetectedPattern]:
    """Detect all structural roles in one screen's tree, in a stable order."""
    nodes = flatten_tree(root)
    if not nodes:
        return []

    patterns: list[DetectedPattern] = []
    patterns.extend(_form_patterns(nodes))
    patterns.extend(_button_patterns(nodes))
    patterns.extend(detect_lists(nodes))
    patterns.extend(
        _grouped("data-display", nodes, DATA_DISPLAY_TABLE, lambda ms: f"Data display with {len(ms)} element(s)")
    )
    for node, confidence in _classified(nodes, MODAL_TABLE):
        patterns.append(DetectedPattern(type="modal", nodes=(node,), confidence=confidence, context=f"Modal/dialog: {node.name}"))
    patterns.extend(
        _grouped("navigation", nodes, NAVIGATION_TABLE, lambda ms: "Navigation: " + ", ".join(n.name for n in ms))
    )
    patterns.extend(
        _grouped("search", nodes, SEARCH_TABLE, lambda ms: "Search/filter: " + ", ".join(n.name for n in ms))
    )
    return patterns
