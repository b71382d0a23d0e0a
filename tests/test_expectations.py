from typing import Iterator

from edgy.analysis.expectations import (
    MISSING_IN_FLOW,
    MISSING_IN_SCREEN,
    NO_MATCHING_STATE,
    check_condition,
    check_expectations,
)
from edgy.analysis.patterns import detect_patterns
from edgy.analysis.rule_engine import TriggeredRule, match_rules
from edgy.knowledge import KnowledgeBase
from edgy.knowledge.schema import ExpectCondition, Expectation, Rule, Trigger
from edgy.models import AnalysisInput, ElementNode

RED = (0.937, 0.267, 0.267)
GREY = (0.89, 0.89, 0.91)


def _node(node_id: str, name: str, type: str = "FRAME", *children: ElementNode, **kwargs) -> ElementNode:
    return ElementNode(id=node_id, name=name, type=type, children=tuple(children), **kwargs)


def _input_screen(prefix: str, *, strokes=(GREY,), extra: tuple[ElementNode, ...] = ()) -> ElementNode:
    return _node(
        f"{prefix}:1",
        "Screen",
        "FRAME",
        _node(f"{prefix}:2", "Email", "INSTANCE", component_name="Input", strokes=strokes),
        *extra,
    )


def _rule(category: str = "error-states", in_screen=(), in_flow=()) -> Rule:
    return Rule(
        id="field-errors",
        category=category,
        name="Field errors",
        triggers=Trigger(pattern_types=("form-field",)),
        expects=Expectation(in_screen=tuple(in_screen), in_flow=tuple(in_flow)),
    )


def _triggered(rule: Rule, root: ElementNode) -> list[TriggeredRule]:
    return match_rules(detect_patterns(root), [rule])


class _Unreachable:
    """A tree collection that fails the test if anything reads it."""

    def __iter__(self) -> Iterator[ElementNode]:
        raise AssertionError("later tier evaluated")

    def __len__(self) -> int:
        raise AssertionError("later tier evaluated")

    def __getitem__(self, index: int) -> ElementNode:
        raise AssertionError("later tier evaluated")


def test_condition_component_and_properties_are_anded() -> None:
    node = _node("1", "Email", "INSTANCE", component_name="Input", component_properties={"state": "Error"})
    assert check_condition(ExpectCondition(component_names=("input",), with_properties={"state": "error"}), [node])
    assert not check_condition(ExpectCondition(component_names=("input",), with_properties={"state": "loading"}), [node])
    assert not check_condition(ExpectCondition(component_names=("select",), with_properties={"state": "error"}), [node])


def test_layer_pattern_or_visual_cue_satisfies_alone() -> None:
    text = _node("1", "Helper", "TEXT", text_content="This field is required")
    red = _node("2", "Email", "INSTANCE", component_name="Input", strokes=(RED,))
    condition = ExpectCondition(component_names=("Alert",), layer_name_patterns=("(?i)required",))
    assert check_condition(condition, [text])
    assert check_condition(ExpectCondition(component_names=("Alert",), with_visual_cues=("error",)), [red])


def test_empty_condition_and_empty_nodes_never_match() -> None:
    node = _node("1", "Anything", "INSTANCE", component_name="Input")
    assert not check_condition(ExpectCondition(), [node])
    assert not check_condition(ExpectCondition(component_names=("Input",)), [])


def test_in_screen_satisfied_skips_later_tiers() -> None:
    root = _input_screen("a", extra=(_node("a:3", "Error", "INSTANCE", component_name="Alert"),))
    rule = _rule(
        in_screen=[ExpectCondition(component_names=("Alert",))],
        in_flow=[ExpectCondition(component_names=("Toast",))],
    )
    unmet = check_expectations(_triggered(rule, root), root, _Unreachable(), _Unreachable())  # type: ignore[arg-type]
    assert unmet == []


def test_sibling_screen_satisfies_in_screen_condition() -> None:
    base = _input_screen("a")
    sibling = _input_screen("b", extra=(_node("b:3", "Error", "INSTANCE", component_name="Alert"),))
    rule = _rule(category="empty-states", in_screen=[ExpectCondition(component_names=("Alert",))])

    triggered = _triggered(rule, base)
    assert check_expectations(triggered, base, [base, sibling], [base, sibling]) == []
    # Sibling outside the flow group does not count
    unmet = check_expectations(triggered, base, [base, sibling], [base])
    assert [u.reason for u in unmet] == [MISSING_IN_SCREEN]


def test_in_flow_checks_every_screen_in_the_run() -> None:
    base = _input_screen("a")
    elsewhere = _node("c:1", "Other", "FRAME", _node("c:2", "Saved", "INSTANCE", component_name="Toast"))
    rule = _rule(category="empty-states", in_flow=[ExpectCondition(component_names=("Toast",))])

    triggered = _triggered(rule, base)
    assert check_expectations(triggered, base, [base, elsewhere], [base]) == []
    unmet = check_expectations(triggered, base, [base], [base])
    assert [u.reason for u in unmet] == [MISSING_IN_FLOW]


def test_visual_cue_on_sibling_component_satisfies_error_states() -> None:
    base = _input_screen("a")
    sibling = _input_screen("b", strokes=(RED,))
    rule = _rule(in_screen=[ExpectCondition(component_names=("Alert",))])

    triggered = _triggered(rule, base)
    assert check_expectations(triggered, base, [base, sibling], [base, sibling]) == []


def test_visual_cue_requires_a_mapped_category() -> None:
    base = _input_screen("a")
    sibling = _input_screen("b", strokes=(RED,))
    rule = _rule(category="empty-states", in_screen=[ExpectCondition(component_names=("Alert",))])

    unmet = check_expectations(_triggered(rule, base), base, [base, sibling], [base, sibling])
    assert len(unmet) == 1


def test_single_member_group_skips_visual_cue_tier() -> None:
    base = _input_screen("a")
    sibling = _input_screen("b", strokes=(RED,))
    rule = _rule(in_screen=[ExpectCondition(component_names=("Alert",))])

    unmet = check_expectations(_triggered(rule, base), base, [base, sibling], [base])
    assert len(unmet) == 1


def test_cue_already_on_base_screen_is_not_new() -> None:
    base = _input_screen("a", strokes=(RED,))
    sibling = _input_screen("b", strokes=(RED,))
    rule = _rule(in_screen=[ExpectCondition(component_names=("Alert",))])

    unmet = check_expectations(_triggered(rule, base), base, [base, sibling], [base, sibling])
    assert len(unmet) == 1


def test_visual_cue_must_match_category_cue() -> None:
    base = _input_screen("a")
    sibling = _input_screen("b", strokes=(RED,))
    rule = _rule(category="loading-states", in_screen=[ExpectCondition(component_names=("Spinner",))])

    unmet = check_expectations(_triggered(rule, base), base, [base, sibling], [base, sibling])
    assert len(unmet) == 1


def test_rule_without_expectations_always_flags() -> None:
    base = _input_screen("a")
    rule = _rule()
    unmet = check_expectations(_triggered(rule, base), base, [base])
    assert [u.reason for u in unmet] == [NO_MATCHING_STATE]
    assert [n.id for n in unmet[0].matched_nodes] == ["a:2"]


def test_unlabeled_email_field_end_to_end() -> None:
    root = _node("1", "Screen", "FRAME", _node("2", "Email Field", "FRAME"))
    rule = _rule(in_screen=[ExpectCondition(component_names=("Input",))])

    patterns = detect_patterns(root)
    fields = [p for p in patterns if p.type == "form-field"]
    assert [(p.nodes[0].id, p.confidence) for p in fields] == [("2", "medium")]

    triggered = match_rules(patterns, [rule])
    assert len(triggered) == 1

    unmet = check_expectations(triggered, root, [root], [root])
    assert len(unmet) == 1
    assert unmet[0].reason == MISSING_IN_SCREEN


def test_login_alone_misses_field_errors(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    login = sample_document.screens[0].root
    triggered = match_rules(detect_patterns(login), knowledge.rules)

    unmet = check_expectations(triggered, login, [login])
    assert "form-field-errors" in {u.rule.id for u in unmet}


def test_login_error_sibling_satisfies_field_errors(sample_document: AnalysisInput, knowledge: KnowledgeBase) -> None:
    login = sample_document.screens[0].root
    trees = [s.root for s in sample_document.screens]
    triggered = match_rules(detect_patterns(login), knowledge.rules)

    unmet = check_expectations(triggered, login, trees)
    assert "form-field-errors" not in {u.rule.id for u in unmet}
