import json

from edgy.analysis.pipeline import AnalysisContext, analyze_screen, run_analysis
from edgy.knowledge import KnowledgeBase
from edgy.knowledge.schema import ExpectCondition, Expectation, Rule, Trigger
from edgy.models import AnalysisInput, ElementNode, Screen

COMPLETED_AT = "2026-01-01T00:00:00+00:00"


def _rule_ids(output, screen_id: str) -> list[str]:
    screen = next(s for s in output.screens if s.screen_id == screen_id)
    return [f.rule_id for f in screen.findings]


def test_sample_analysis(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    output = run_analysis(sample_document, knowledge, completed_at=COMPLETED_AT)

    assert output.analysis_id == "sample-001"
    assert output.completed_at == COMPLETED_AT
    # Error states are designed on "Login - Error"; the pending state is missing in both and reported once
    assert _rule_ids(output, "s1") == ["loading-states/button-loading-state"]
    assert _rule_ids(output, "s2") == []
    assert "destructive-actions/delete-no-confirmation" in _rule_ids(output, "s3")

    assert [f.rule_id for f in output.flow_findings] == ["connectivity/offline-handling"]
    assert [t.type for t in output.flow_types] == ["authentication", "crud"]
    missing = {f.missing_screen.id for f in output.missing_screen_findings}
    assert "forgot-password" in missing
    assert "login-error" not in missing


def test_summary_counts_all_finding_kinds(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    output = run_analysis(sample_document, knowledge, completed_at=COMPLETED_AT)
    summary = output.summary

    total = (
        sum(len(s.findings) for s in output.screens)
        + len(output.flow_findings)
        + len(output.missing_screen_findings)
    )
    assert summary.screens_analyzed == 3
    assert summary.total_findings == total
    assert summary.critical + summary.warning + summary.info == total
    assert summary.critical >= 1


def test_analysis_is_idempotent(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    first = run_analysis(sample_document, knowledge, completed_at=COMPLETED_AT)
    second = run_analysis(sample_document, knowledge, completed_at=COMPLETED_AT)
    assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)

    ids = [f.id for s in first.screens for f in s.findings]
    assert ids[0] == "f-001"
    assert first.flow_findings[0].id == "ff-001"
    assert first.missing_screen_findings[0].id == "mf-001"


def test_to_dict_is_json_serializable(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    data = json.loads(json.dumps(run_analysis(sample_document, knowledge, completed_at=COMPLETED_AT).to_dict()))
    assert set(data) == {
        "analysis_id",
        "completed_at",
        "summary",
        "screens",
        "flow_findings",
        "missing_screen_findings",
        "flow_types",
    }
    finding = data["screens"][0]["findings"][0]
    assert finding["affected_area"] == {"x": 24.0, "y": 450.0, "width": 342.0, "height": 48.0}
    assert finding["recommendation"]["components"][0]["shadcn_id"] == "button"


def test_explicit_flow_groups_override_names(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    screens = sample_document.screens
    groups = {s.screen_id: [s] for s in screens}
    output = run_analysis(sample_document, knowledge, flow_groups=groups, completed_at=COMPLETED_AT)

    # Without siblings the login screen cannot borrow the error screen's states
    assert "error-states/form-field-errors" in _rule_ids(output, "s1")
    assert "loading-states/button-loading-state" in _rule_ids(output, "s2")


def test_flow_group_keys_are_opaque(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    login, login_error, dashboard = sample_document.screens
    groups = {"auth": [login, login_error], "home": [dashboard]}

    default = run_analysis(sample_document, knowledge, completed_at=COMPLETED_AT)
    keyed = run_analysis(sample_document, knowledge, flow_groups=groups, completed_at=COMPLETED_AT)

    assert _rule_ids(keyed, "s1") == ["loading-states/button-loading-state"]
    assert keyed.to_dict() == default.to_dict()


def test_two_screen_group_reports_shared_rule_once() -> None:
    rule = Rule(
        id="needs-alert",
        category="empty-states",
        name="Needs alert",
        triggers=Trigger(pattern_types=("form-field",)),
        expects=Expectation(in_screen=(ExpectCondition(component_names=("Alert",)),)),
    )

    def form(screen_id: str, name: str) -> Screen:
        field = ElementNode(id=f"{screen_id}:2", name="Email", type="INSTANCE", component_name="Input")
        root = ElementNode(id=f"{screen_id}:1", name=name, type="FRAME", children=(field,))
        return Screen(screen_id=screen_id, name=name, root=root)

    document = AnalysisInput(analysis_id="x", screens=(form("a", "Signup"), form("b", "Signup - Filled")))
    output = run_analysis(document, KnowledgeBase(rules=(rule,)), completed_at=COMPLETED_AT)

    assert _rule_ids(output, "a") == ["empty-states/needs-alert"]
    assert _rule_ids(output, "b") == []


def test_single_unlabeled_field_yields_one_finding() -> None:
    rule = Rule(
        id="field-errors",
        category="error-states",
        name="Field errors",
        triggers=Trigger(pattern_types=("form-field",)),
        expects=Expectation(in_screen=(ExpectCondition(component_names=("Input",)),)),
    )
    root = ElementNode(
        id="1", name="Screen", type="FRAME", children=(ElementNode(id="2", name="Email Field", type="FRAME"),)
    )
    document = AnalysisInput(analysis_id="one", screens=(Screen(screen_id="s", name="Screen", root=root),))

    output = run_analysis(document, KnowledgeBase(rules=(rule,)), completed_at=COMPLETED_AT)
    findings = output.screens[0].findings
    assert len(findings) == 1
    assert findings[0].description.endswith("(Missing in current screen)")


def test_analyze_screen_returns_stage_results(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    login = sample_document.screens[0]
    result = analyze_screen(
        login,
        rules=knowledge.rules,
        all_screens=[login],
        flow_siblings=[login],
        context=AnalysisContext(),
    )
    assert any(p.type == "form" for p in result.patterns)
    assert {t.rule.id for t in result.triggered} >= {"form-field-errors", "submit-error-feedback"}
    assert len(result.findings) == len(result.unmet)
    assert result.findings[0].id == "f-001"
