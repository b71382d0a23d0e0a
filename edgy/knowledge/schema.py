from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


Severity = Literal["critical", "warning", "info"]
VisualCue = Literal["error", "warning", "success", "info"]
AnnotationTarget = Literal["element", "screen"]

SEVERITIES: tuple[str, ...] = ("critical", "warning", "info")


@dataclass(frozen=True)
class Trigger:
    component_names: tuple[str, ...] = ()
    layer_name_patterns: tuple[str, ...] = ()
    pattern_types: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.component_names or self.layer_name_patterns or self.pattern_types)


@dataclass(frozen=True)
class ExpectCondition:
    component_names: tuple[str, ...] = ()
    with_properties: dict[str, str] = field(default_factory=dict)
    layer_name_patterns: tuple[str, ...] = ()
    with_visual_cues: tuple[str, ...] = ()


@dataclass(frozen=True)
class Expectation:
    in_screen: tuple[ExpectCondition, ...] = ()
    in_flow: tuple[ExpectCondition, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.in_screen or self.in_flow)


@dataclass(frozen=True)
class ComponentRef:
    shadcn_id: str
    label: str
    variant: str | None = None


@dataclass(frozen=True)
class Recommendation:
    message: str = ""
    components: tuple[ComponentRef, ...] = ()


@dataclass(frozen=True)
class Rule:
    id: str
    category: str
    name: str
    severity: Severity = "warning"
    description: str = ""
    annotation_target: AnnotationTarget | None = None
    triggers: Trigger = field(default_factory=Trigger)
    expects: Expectation = field(default_factory=Expectation)
    recommendation: Recommendation = field(default_factory=Recommendation)


@dataclass(frozen=True)
class ComponentMapping:
    shadcn_id: str
    usage: str = ""
    variant: str | None = None


@dataclass(frozen=True)
class MappingEntry:
    description: str = ""
    primary: tuple[ComponentMapping, ...] = ()
    supporting: tuple[ComponentMapping, ...] = ()


@dataclass(frozen=True)
class ScreenDetection:
    layer_name_patterns: tuple[str, ...] = ()
    component_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExpectedScreen:
    id: str
    name: str
    description: str = ""
    required: bool = False
    severity: Severity | None = None
    detection: ScreenDetection = field(default_factory=ScreenDetection)
    components: tuple[ComponentRef, ...] = ()


@dataclass(frozen=True)
class FlowRule:
    flow_type: str
    name: str
    description: str = ""
    expected_screens: tuple[ExpectedScreen, ...] = ()


@dataclass(frozen=True)
class KnowledgeBase:
    rules: tuple[Rule, ...] = ()
    mappings: dict[str, MappingEntry] = field(default_factory=dict)
    flow_rules: tuple[FlowRule, ...] = ()

    def rule(self, rule_id: str) -> Rule | None:
        for r in self.rules:
            if r.id == rule_id or f"{r.category}/{r.id}" == rule_id:
                return r
        return None

    @property
    def categories(self) -> list[str]:
        seen: dict[str, None] = {}
        for r in self.rules:
            seen.setdefault(r.category, None)
        return list(seen)
