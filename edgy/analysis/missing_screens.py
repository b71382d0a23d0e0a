"""Missing-screen findings: expected screens of a detected flow type that no screen provides."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from ..knowledge.schema import ExpectedScreen, FlowRule
from ..models import Screen, flatten_tree
from .findings import ComponentSuggestion, FindingRecommendation, IdSequence
from .flow_types import DetectedFlowType
from .matching import compile_pattern, contains_any

DEFAULT_SCREEN_WIDTH = 375.0
DEFAULT_SCREEN_HEIGHT = 812.0


@dataclass(frozen=True)
class MissingScreen:
    id: str
    name: str
    description: str


@dataclass(frozen=True)
class Placeholder:
    suggested_name: str
    width: float
    height: float


@dataclass(frozen=True)
class MissingScreenFinding:
    id: str
    flow_type: str
    flow_name: str
    severity: str
    missing_screen: MissingScreen
    recommendation: FindingRecommendation
    placeholder: Placeholder

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def screen_exists(screens: Iterable[Screen], expected: ExpectedScreen) -> bool:
    """True if any screen name, node name, text or bound component matches the detection rules."""
    detection = expected.detection
    regexes = [r for r in (compile_pattern(p) for p in detection.layer_name_patterns) if r is not None]

    for screen in screens:
        nodes = flatten_tree(screen.root)
        for regex in regexes:
            if regex.search(screen.name):
                return True
            for node in nodes:
                if regex.search(node.name) or (node.text_content and regex.search(node.text_content)):
                    return True
        if detection.component_names and any(
            contains_any(n.component_name, detection.component_names) for n in nodes
        ):
            return True
    return False


def _suggestions(expected: ExpectedScreen) -> tuple[ComponentSuggestion, ...]:
    return tuple(
        ComponentSuggestion(
            name=f"{c.shadcn_id} ({c.variant})" if c.variant else c.shadcn_id,
            shadcn_id=c.shadcn_id,
            variant=c.variant,
            description=c.label,
        )
        for c in expected.components
    )


def generate_missing_screen_findings(
    screens: Sequence[Screen],
    detected_flow_types: Iterable[DetectedFlowType],
    flow_rules: Iterable[FlowRule],
    ids: IdSequence,
) -> list[MissingScreenFinding]:
    rules_by_type: dict[str, FlowRule] = {}
    for rule in flow_rules:
        rules_by_type.setdefault(rule.flow_type, rule)

    # Placeholders take the first screen's size
    width = (screens[0].width if screens else 0) or DEFAULT_SCREEN_WIDTH
    height = (screens[0].height if screens else 0) or DEFAULT_SCREEN_HEIGHT

    findings: list[MissingScreenFinding] = []
    for detected in detected_flow_types:
        rule = rules_by_type.get(detected.type)
        if rule is None:
            continue
        for expected in rule.expected_screens:
            if screen_exists(screens, expected):
                continue
            findings.append(
                MissingScreenFinding(
                    id=ids.next(),
                    flow_type=detected.type,
                    flow_name=rule.name,
                    severity=expected.severity or ("warning" if expected.required else "info"),
                    missing_screen=MissingScreen(
                        id=expected.id,
                        name=expected.name,
                        description=expected.description,
                    ),
                    recommendation=FindingRecommendation(
                        message=f'Add a "{expected.name}" screen to complete your {rule.name}.',
                        components=_suggestions(expected),
                    ),
                    placeholder=Placeholder(suggested_name=expected.name, width=width, height=height),
                )
            )
    return findings
