"""Analysis engine: pattern detection, rule matching, expectation checks and findings."""

from .expectations import UnmetExpectation, check_expectations
from .findings import Finding, IdSequence, ScreenResult, deduplicate_findings, generate_findings, map_components
from .flow_checks import FlowFinding, generate_flow_findings
from .flow_types import DetectedFlowType, detect_flow_types
from .flows import extract_flow_prefix, flow_siblings, group_screens_by_flow
from .missing_screens import MissingScreenFinding, generate_missing_screen_findings
from .patterns import DetectedPattern, detect_patterns
from .pipeline import AnalysisContext, AnalysisOutput, analyze_screen, run_analysis
from .rule_engine import TriggeredRule, match_rules

__all__ = [
    "AnalysisContext",
    "AnalysisOutput",
    "DetectedFlowType",
    "DetectedPattern",
    "Finding",
    "FlowFinding",
    "IdSequence",
    "MissingScreenFinding",
    "ScreenResult",
    "TriggeredRule",
    "UnmetExpectation",
    "analyze_screen",
    "check_expectations",
    "deduplicate_findings",
    "detect_flow_types",
    "detect_patterns",
    "extract_flow_prefix",
    "flow_siblings",
    "generate_findings",
    "generate_flow_findings",
    "generate_missing_screen_findings",
    "group_screens_by_flow",
    "map_components",
    "match_rules",
    "run_analysis",
]
