"""Finding generation, component enrichment and flow-group deduplication."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence

from ..knowledge.schema import ComponentRef, MappingEntry
from ..models import ElementNode, Screen
from .expectations import UnmetExpectation


@dataclass
class IdSequence:
    """Sequential, zero-padded finding ids (`f-001`, `f-002`, ...) scoped to one run."""

    prefix: str
    width: int = 3
    value: int = 0

    def next(self) -> str:
        self.value += 1
        return f"{self.prefix}-{self.value:0{self.width}d}"

    def reset(self) -> None:
        self.value = 0


@dataclass(frozen=True)
class AffectedArea:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ComponentSuggestion:
    name: str
    shadcn_id: str
    description: str
    variant: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.shadcn_id, self.variant or "")


@dataclass(frozen=True)
class FindingRecommendation:
    message: str
    components: tuple[ComponentSuggestion, ...] = ()


@dataclass(frozen=True)
class Finding:
    """One unmet expectation on one screen."""

    id: str
    rule_id: str
    category: str
    severity: str
    title: str
    description: str
    affected_nodes: tuple[str, ...]
    recommendation: FindingRecommendation
    affected_area: AffectedArea | None = None
    annotation_target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScreenResult:
    screen_id: str
    name: str
    findings: tuple[Finding, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "screen_id": self.screen_id,
            "name": self.name,
            "findings": [f.to_dict() for f in self.findings],
        }


def compute_bounding_box(nodes: Sequence[ElementNode]) -> AffectedArea | None:
    """Axis-aligned box around all nodes; None for an empty list."""
    if not nodes:
        return None
    min_x = min(n.x for n in nodes)
    min_y = min(n.y for n in nodes)
    max_x = max(n.x + n.width for n in nodes)
    max_y = max(n.y + n.height for n in nodes)
    return AffectedArea(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def suggestion_from_ref(ref: ComponentRef) -> ComponentSuggestion:
    return ComponentSuggestion(
        name=ref.label,
        shadcn_id=ref.shadcn_id,
        variant=ref.variant,
        description=f"{ref.label} from shadcn/ui",
    )


def generate_findings(unmet: Iterable[UnmetExpectation], screen: Screen, ids: IdSequence) -> list[Finding]:
    """Turn unmet expectations for one screen into findings, numbering them from `ids`."""
    findings: list[Finding] = []
    for item in unmet:
        rule = item.rule
        findings.append(
            Finding(
                id=ids.next(),
                rule_id=f"{rule.category}/{rule.id}",
                category=rule.category,
                severity=rule.severity,
                annotation_target=rule.annotation_target,
                title=rule.name,
                description=f"{rule.description} ({item.reason})" if item.reason else rule.description,
                affected_nodes=tuple(n.id for n in item.matched_nodes),
                affected_area=compute_bounding_box(item.matched_nodes),
                recommendation=FindingRecommendation(
                    message=rule.recommendation.message,
                    components=tuple(suggestion_from_ref(c) for c in rule.recommendation.components),
                ),
            )
        )
    return findings


def _mapped_suggestions(entry: MappingEntry) -> list[ComponentSuggestion]:
    return [
        ComponentSuggestion(
            name=f"{m.shadcn_id} ({m.variant})" if m.variant else m.shadcn_id,
            shadcn_id=m.shadcn_id,
            variant=m.variant,
            description=m.usage,
        )
        for m in (*entry.primary, *entry.supporting)
    ]


def map_components(findings: Iterable[Finding], mappings: Mapping[str, MappingEntry]) -> list[Finding]:
    """
    Append the category's mapped components to each finding's recommendation.

    Rule-provided suggestions stay first; mapped ones already present by
    (shadcn_id, variant) are skipped.
    """
    out: list[Finding] = []
    for finding in findings:
        entry = mappings.get(finding.category)
        if entry is None:
            out.append(finding)
            continue

        existing = {c.key for c in finding.recommendation.components}
        extra: list[ComponentSuggestion] = []
        for suggestion in _mapped_suggestions(entry):
            if suggestion.key in existing:
                continue
            existing.add(suggestion.key)
            extra.append(suggestion)

        recommendation = replace(
            finding.recommendation,
            components=finding.recommendation.components + tuple(extra),
        )
        out.append(replace(finding, recommendation=recommendation))
    return out


def deduplicate_findings(
    screen_results: Sequence[ScreenResult],
    flow_groups: Mapping[str, Sequence[Screen]],
) -> list[ScreenResult]:
    """
    Keep only the first finding per rule_id within each multi-screen flow group.

    "First" follows the order of `screen_results`. Screens outside any
    multi-screen group pass through unchanged.
    """
    results = list(screen_results)
    for screens in flow_groups.values():
        if len(screens) <= 1:
            continue
        member_ids = {s.screen_id for s in screens}
        seen: set[str] = set()
        for i, result in enumerate(results):
            if result.screen_id not in member_ids:
                continue
            kept: list[Finding] = []
            for finding in result.findings:
                if finding.rule_id in seen:
                    continue
                seen.add(finding.rule_id)
                kept.append(finding)
            results[i] = replace(result, findings=tuple(kept))
    return results
