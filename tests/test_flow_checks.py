from edgy.analysis.findings import IdSequence
from edgy.analysis.flow_checks import generate_flow_findings
from edgy.models import ElementNode, Screen


def _screen(screen_id: str, name: str, *children: ElementNode) -> Screen:
    root = ElementNode(id=f"{screen_id}:1", name=name, type="FRAME", children=tuple(children))
    return Screen(screen_id=screen_id, name=name, root=root)


def _instance(node_id: str, name: str, component: str | None = None) -> ElementNode:
    return ElementNode(id=node_id, name=name, type="INSTANCE", component_name=component)


def test_data_without_offline_state() -> None:
    screens = [_screen("s1", "Home", _instance("2", "Stats", "Card"))]
    findings = generate_flow_findings(screens, IdSequence("ff"))
    assert [(f.id, f.rule_id, f.severity) for f in findings] == [("ff-001", "connectivity/offline-handling", "warning")]
    assert [c.shadcn_id for c in findings[0].recommendation.components] == ["alert", "button"]


def test_offline_screen_anywhere_satisfies_check() -> None:
    screens = [
        _screen("s1", "Home", _instance("2", "Activity Feed")),
        _screen("s2", "Home - Offline", _instance("3", "Retry Banner")),
    ]
    assert generate_flow_findings(screens, IdSequence("ff")) == []


def test_restricted_screens_without_permission_state() -> None:
    screens = [_screen("s1", "Admin Settings"), _screen("s2", "Other")]
    findings = generate_flow_findings(screens, IdSequence("ff"))
    assert [f.rule_id for f in findings] == ["permissions/no-unauthorized-state"]
    assert findings[0].severity == "info"

    screens.append(_screen("s3", "Access Denied"))
    assert generate_flow_findings(screens, IdSequence("ff")) == []


def test_flow_finding_ids_are_sequential() -> None:
    screens = [_screen("s1", "Manage Data", _instance("2", "Rows", "Table"))]
    findings = generate_flow_findings(screens, IdSequence("ff"))
    assert [f.id for f in findings] == ["ff-001", "ff-002"]
    assert generate_flow_findings([], IdSequence("ff")) == []
