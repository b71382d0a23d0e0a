"""
Flow-level checks: edge cases that only make sense across the whole run.

Each check is a boolean predicate over every node of every screen and yields
at most one finding.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Sequence

from ..models import ElementNode, Screen, flatten_trees
from .findings import ComponentSuggestion, FindingRecommendation, IdSequence
from .matching import contains_any

DATA_COMPONENTS = ("table", "card", "list")
DATA_LAYER_KEYWORDS = ("data", "feed")
OFFLINE_KEYWORDS = ("offline", "no connection", "network error", "retry")
RESTRICTED_KEYWORDS = ("admin", "settings", "edit", "manage")
PERMISSION_KEYWORDS = ("unauthorized", "forbidden", "permission", "access denied")


@dataclass(frozen=True)
class FlowFinding:
    id: str
    rule_id: str
    category: str
    severity: str
    title: str
    description: str
    recommendation: FindingRecommendation

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FlowCheck:
    id: str
    category: str
    severity: str
    title: str
    description: str
    recommendation: FindingRecommendation
    applies: Callable[[Sequence[ElementNode]], bool]


def _names_any(nodes: Sequence[ElementNode], keywords: Sequence[str]) -> bool:
    return any(contains_any(n.name, keywords) for n in nodes)


def _missing_offline_state(nodes: Sequence[ElementNode]) -> bool:
    has_data = any(
        contains_any(n.component_name, DATA_COMPONENTS) or contains_any(n.name, DATA_LAYER_KEYWORDS) for n in nodes
    )
    return has_data and not _names_any(nodes, OFFLINE_KEYWORDS)


def _missing_permission_state(nodes: Sequence[ElementNode]) -> bool:
    return _names_any(nodes, RESTRICTED_KEYWORDS) and not _names_any(nodes, PERMISSION_KEYWORDS)


FLOW_CHECKS: tuple[FlowCheck, ...] = (
    FlowCheck(
        id="connectivity/offline-handling",
        category="connectivity",
        severity="warning",
        title="No offline/connectivity error state in flow",
        description=(
            "This flow appears to involve data-dependent content but no screen handles "
            "connectivity loss or network errors."
        ),
        recommendation=FindingRecommendation(
            message="Add a screen or overlay showing an offline/connectivity error state with a retry action.",
            components=(
                ComponentSuggestion(
                    name="Alert (Destructive)",
                    shadcn_id="alert",
                    variant="destructive",
                    description="Connection error banner",
                ),
                ComponentSuggestion(name="Button", shadcn_id="button", description="Retry action button"),
            ),
        ),
        applies=_missing_offline_state,
    ),
    FlowCheck(
        id="permissions/no-unauthorized-state",
        category="permissions",
        severity="info",
        title="No permission/unauthorized state in flow",
        description=(
            "This flow may involve restricted actions but no screen shows a permission "
            "denied or unauthorized state."
        ),
        recommendation=FindingRecommendation(
            message="Consider adding a state for when users lack permission to perform certain actions.",
            components=(
                ComponentSuggestion(name="Alert", shadcn_id="alert", description="Permission denied message"),
                ComponentSuggestion(
                    name="Button (Disabled)",
                    shadcn_id="button",
                    variant="disabled",
                    description="Disabled state for unauthorized actions",
                ),
            ),
        ),
        applies=_missing_permission_state,
    ),
)


def generate_flow_findings(
    screens: Sequence[Screen],
    ids: IdSequence,
    checks: Sequence[FlowCheck] = FLOW_CHECKS,
) -> list[FlowFinding]:
    """Run each flow-level check once over the union of all screens."""
    nodes = flatten_trees(s.root for s in screens)
    findings: list[FlowFinding] = []
    for check in checks:
        if not check.applies(nodes):
            continue
        findings.append(
            FlowFinding(
                id=ids.next(),
                rule_id=check.id,
                category=check.category,
                severity=check.severity,
                title=check.title,
                description=check.description,
                recommendation=check.recommendation,
            )
        )
    return findings
