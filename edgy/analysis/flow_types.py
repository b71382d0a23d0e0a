"""
Flow type detection: what is this set of screens for?

Each trigger lists layer-name expressions, component-name substrings and
pattern roles. Unlike rule triggers these are OR-ed: any one kind matching is
enough to detect the flow type.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Literal, Mapping, Sequence

from ..models import Confidence, ElementNode, Screen, flatten_tree
from .matching import contains_any
from .patterns import DetectedPattern

FlowType = Literal[
    "authentication",
    "checkout",
    "onboarding",
    "crud",
    "search",
    "settings",
    "upload",
    "subscription",
    "messaging",
    "booking",
]

MAX_EVIDENCE = 5
EVIDENCE_NAME_LENGTH = 30


@dataclass(frozen=True)
class FlowTrigger:
    type: FlowType
    name: str
    layer_patterns: tuple[re.Pattern[str], ...] = ()
    component_names: tuple[str, ...] = ()
    pattern_types: tuple[str, ...] = ()


def _patterns(*expressions: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(e, re.IGNORECASE) for e in expressions)


FLOW_TRIGGERS: tuple[FlowTrigger, ...] = (
    FlowTrigger(
        type="authentication",
        name="Authentication Flow",
        layer_patterns=_patterns(
            r"\b(sign.?in|log.?in|login)\b",
            r"\b(register|sign.?up|create.?account)\b",
            r"\bpassword\b.*\b(input|field)\b",
            r"\b(forgot|reset).*(password)\b",
        ),
        component_names=("Input", "Password"),
    ),
    FlowTrigger(
        type="checkout",
        name="Checkout Flow",
        layer_patterns=_patterns(
            r"\b(checkout|cart|basket)\b",
            r"\b(payment|pay.?now|credit.?card)\b",
            r"\b(shipping|delivery)\b.*\b(form|address)\b",
            r"\bplace.?order\b",
        ),
    ),
    FlowTrigger(
        type="onboarding",
        name="Onboarding Flow",
        layer_patterns=_patterns(
            r"\b(welcome|get.?started|onboarding)\b",
            r"\bstep.?[0-9]",
            r"\b(first.?time|new.?user|tour)\b",
        ),
        component_names=("Stepper", "Step"),
    ),
    FlowTrigger(
        type="crud",
        name="CRUD Flow",
        layer_patterns=_patterns(
            r"\b(create|add|new).*(item|record|entry)\b",
            r"\b(edit|update|modify)\b",
            r"\b(delete|remove)\b",
        ),
        pattern_types=("list", "form", "destructive-action"),
    ),
    FlowTrigger(
        type="search",
        name="Search Flow",
        layer_patterns=_patterns(
            r"\b(search|find|query)\b",
            r"\b(filter|refine|results)\b",
        ),
        component_names=("Search", "SearchInput", "Command"),
        pattern_types=("search",),
    ),
    FlowTrigger(
        type="settings",
        name="Settings Flow",
        layer_patterns=_patterns(
            r"\b(settings|preferences|config)\b",
            r"\b(account|profile).*(settings|edit)\b",
            r"\b(notification|privacy|security).*(settings)\b",
        ),
    ),
    FlowTrigger(
        type="upload",
        name="Upload Flow",
        layer_patterns=_patterns(
            r"\b(upload|import|attach)\b",
            r"\b(drag.?drop|drop.?zone|file.?input)\b",
            r"\b(select|choose|browse).*(file)\b",
        ),
    ),
    FlowTrigger(
        type="subscription",
        name="Subscription Flow",
        layer_patterns=_patterns(
            r"\b(pricing|plans|subscription)\b",
            r"\b(upgrade|downgrade|premium|pro)\b",
            r"\b(billing|plan).*(select|choose)\b",
        ),
    ),
    FlowTrigger(
        type="messaging",
        name="Messaging Flow",
        layer_patterns=_patterns(
            r"\b(inbox|messages|chat)\b",
            r"\b(compose|new.?message|send)\b",
            r"\b(thread|conversation|dm)\b",
        ),
    ),
    FlowTrigger(
        type="booking",
        name="Booking Flow",
        layer_patterns=_patterns(
            r"\b(book|reserve|schedule)\b",
            r"\b(date|time).*(select|pick)\b",
            r"\b(appointment|reservation)\b",
        ),
        component_names=("Calendar", "DatePicker"),
    ),
)


@dataclass(frozen=True)
class DetectedFlowType:
    type: str
    confidence: Confidence
    trigger_screens: tuple[str, ...]
    trigger_patterns: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def flow_confidence(screen_count: int, evidence_count: int) -> Confidence:
    if screen_count >= 2 and evidence_count >= 3:
        return "high"
    if screen_count >= 1 and evidence_count >= 2:
        return "medium"
    return "low"


class _Evidence:
    """Ordered, de-duplicated trigger screens and evidence strings."""

    def __init__(self) -> None:
        self.screens: dict[str, None] = {}
        self.patterns: dict[str, None] = {}

    def add(self, screen_id: str, evidence: str) -> None:
        self.screens.setdefault(screen_id, None)
        self.patterns.setdefault(evidence, None)

    def __bool__(self) -> bool:
        return bool(self.screens or self.patterns)


def _collect(
    trigger: FlowTrigger,
    screen_nodes: Sequence[tuple[Screen, list[ElementNode]]],
    patterns_by_screen: Mapping[str, Sequence[DetectedPattern]],
) -> _Evidence:
    evidence = _Evidence()

    if trigger.layer_patterns:
        for screen, nodes in screen_nodes:
            for node in nodes:
                texts = (node.name, node.text_content)
                if any(p.search(t) for p in trigger.layer_patterns for t in texts if t):
                    evidence.add(screen.screen_id, f"layer: {node.name[:EVIDENCE_NAME_LENGTH]}")

    if trigger.component_names:
        for screen, nodes in screen_nodes:
            for node in nodes:
                if contains_any(node.component_name, trigger.component_names):
                    evidence.add(screen.screen_id, f"component: {node.component_name}")

    for pattern_type in trigger.pattern_types:
        screen_ids = [
            screen_id
            for screen_id, patterns in patterns_by_screen.items()
            if any(p.type == pattern_type for p in patterns)
        ]
        for screen_id in screen_ids:
            evidence.add(screen_id, f"pattern: {pattern_type}")

    return evidence


def detect_flow_types(
    screens: Sequence[Screen],
    patterns_by_screen: Mapping[str, Sequence[DetectedPattern]],
    triggers: Sequence[FlowTrigger] = FLOW_TRIGGERS,
) -> list[DetectedFlowType]:
    """
    Classify the run's likely flow types.

    Each type is reported at most once: the first trigger for it that finds
    any evidence wins. Confidence uses the full evidence count; only the
    reported evidence list is capped.
    """
    screen_nodes = [(screen, flatten_tree(screen.root)) for screen in screens]
    detected: list[DetectedFlowType] = []
    seen: set[str] = set()

    for trigger in triggers:
        if trigger.type in seen:
            continue
        evidence = _collect(trigger, screen_nodes, patterns_by_screen)
        if not evidence:
            continue
        seen.add(trigger.type)

        found = list(evidence.patterns)
        detected.append(
            DetectedFlowType(
                type=trigger.type,
                confidence=flow_confidence(len(evidence.screens), len(found)),
                trigger_screens=tuple(evidence.screens),
                trigger_patterns=tuple(found[:MAX_EVIDENCE]),
            )
        )

    return detected
