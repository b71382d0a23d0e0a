"""
End-to-end analysis of one design document.

Per screen: detect patterns, match rules, check expectations, generate
findings. Then across the run: component mapping, flow-group deduplication,
flow-level checks, flow type detection and missing-screen findings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from ..knowledge.schema import KnowledgeBase, Rule
from ..models import AnalysisInput, Screen
from .expectations import UnmetExpectation, check_expectations
from .findings import Finding, IdSequence, ScreenResult, deduplicate_findings, generate_findings, map_components
from .flow_checks import FlowFinding, generate_flow_findings
from .flow_types import DetectedFlowType, detect_flow_types
from .flows import flow_siblings as siblings_of
from .flows import group_screens_by_flow
from .missing_screens import MissingScreenFinding, generate_missing_screen_findings
from .patterns import DetectedPattern, detect_patterns
from .rule_engine import TriggeredRule, match_rules

logger = logging.getLogger(__name__)


@dataclass
class AnalysisContext:
    """Id sequences for one run; a fresh context restarts numbering at 001."""

    findings: IdSequence = field(default_factory=lambda: IdSequence("f"))
    flow_findings: IdSequence = field(default_factory=lambda: IdSequence("ff"))
    missing_screens: IdSequence = field(default_factory=lambda: IdSequence("mf"))


@dataclass(frozen=True)
class ScreenAnalysis:
    screen: Screen
    patterns: tuple[DetectedPattern, ...]
    triggered: tuple[TriggeredRule, ...]
    unmet: tuple[UnmetExpectation, ...]
    findings: tuple[Finding, ...]


@dataclass(frozen=True)
class Summary:
    screens_analyzed: int
    total_findings: int
    critical: int
    warning: int
    info: int


@dataclass(frozen=True)
class AnalysisOutput:
    analysis_id: str
    completed_at: str
    summary: Summary
    screens: tuple[ScreenResult, ...]
    flow_findings: tuple[FlowFinding, ...] = ()
    missing_screen_findings: tuple[MissingScreenFinding, ...] = ()
    flow_types: tuple[DetectedFlowType, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis_id": self.analysis_id,
            "completed_at": self.completed_at,
            "summary": {
                "screens_analyzed": self.summary.screens_analyzed,
                "total_findings": self.summary.total_findings,
                "critical": self.summary.critical,
                "warning": self.summary.warning,
                "info": self.summary.info,
            },
            "screens": [s.to_dict() for s in self.screens],
            "flow_findings": [f.to_dict() for f in self.flow_findings],
            "missing_screen_findings": [f.to_dict() for f in self.missing_screen_findings],
            "flow_types": [t.to_dict() for t in self.flow_types],
        }


def analyze_screen(
    screen: Screen,
    *,
    rules: Sequence[Rule],
    all_screens: Sequence[Screen],
    flow_siblings: Sequence[Screen] | None,
    context: AnalysisContext,
) -> ScreenAnalysis:
    """Run detection, rule matching, expectation checks and finding generation for one screen."""
    patterns = detect_patterns(screen.root)
    triggered = match_rules(patterns, rules)
    unmet = check_expectations(
        triggered,
        screen.root,
        [s.root for s in all_screens],
        [s.root for s in flow_siblings] if flow_siblings is not None else None,
    )
    findings = generate_findings(unmet, screen, context.findings)

    logger.debug(
        "%s: %d patterns, %d rules triggered, %d unmet expectations",
        screen.name,
        len(patterns),
        len(triggered),
        len(unmet),
    )
    return ScreenAnalysis(
        screen=screen,
        patterns=tuple(patterns),
        triggered=tuple(triggered),
        unmet=tuple(unmet),
        findings=tuple(findings),
    )


def _summarize(screen_count: int, severities: Iterable[str]) -> Summary:
    severities = list(severities)
    return Summary(
        screens_analyzed=screen_count,
        total_findings=len(severities),
        critical=severities.count("critical"),
        warning=severities.count("warning"),
        info=severities.count("info"),
    )


def run_analysis(
    document: AnalysisInput,
    knowledge: KnowledgeBase,
    *,
    flow_groups: Mapping[str, Sequence[Screen]] | None = None,
    completed_at: str | None = None,
) -> AnalysisOutput:
    """
    Analyze every screen of `document` against `knowledge`.

    `flow_groups` overrides the default name-prefix grouping. The same input,
    knowledge and `completed_at` always produce an identical result.
    """
    screens = document.screens
    groups = flow_groups if flow_groups is not None else group_screens_by_flow(screens)
    context = AnalysisContext()
    logger.debug("Analyzing %d screens against %d rules", len(screens), len(knowledge.rules))

    analyses = [
        analyze_screen(
            screen,
            rules=knowledge.rules,
            all_screens=screens,
            flow_siblings=siblings_of(screen, groups),
            context=context,
        )
        for screen in screens
    ]

    results = [
        ScreenResult(
            screen_id=a.screen.screen_id,
            name=a.screen.name,
            findings=tuple(map_components(a.findings, knowledge.mappings)),
        )
        for a in analyses
    ]
    results = deduplicate_findings(results, groups)

    flow_findings = generate_flow_findings(screens, context.flow_findings)
    flow_types = detect_flow_types(screens, {a.screen.screen_id: a.patterns for a in analyses})
    missing = generate_missing_screen_findings(screens, flow_types, knowledge.flow_rules, context.missing_screens)
    logger.debug(
        "Detected flow types: %s; %d flow findings, %d missing screens",
        ", ".join(t.type for t in flow_types) or "none",
        len(flow_findings),
        len(missing),
    )

    severities = [f.severity for r in results for f in r.findings]
    severities += [f.severity for f in flow_findings]
    severities += [f.severity for f in missing]

    return AnalysisOutput(
        analysis_id=document.analysis_id,
        completed_at=completed_at or datetime.now(timezone.utc).isoformat(),
        summary=_summarize(len(screens), severities),
        screens=tuple(results),
        flow_findings=tuple(flow_findings),
        missing_screen_findings=tuple(missing),
        flow_types=tuple(flow_types),
    )
