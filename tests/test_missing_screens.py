from edgy.analysis.findings import IdSequence
from edgy.analysis.flow_types import DetectedFlowType
from edgy.analysis.missing_screens import generate_missing_screen_findings, screen_exists
from edgy.knowledge.schema import ComponentRef, ExpectedScreen, FlowRule, ScreenDetection
from edgy.models import ElementNode, Screen


def _screen(screen_id: str, name: str, *children: ElementNode, width: float = 0, height: float = 0) -> Screen:
    root = ElementNode(id=f"{screen_id}:1", name=name, type="FRAME", children=tuple(children))
    return Screen(screen_id=screen_id, name=name, root=root, width=width, height=height)


FORGOT = ExpectedScreen(
    id="forgot-password",
    name="Forgot Password",
    description="Reset access",
    required=True,
    detection=ScreenDetection(layer_name_patterns=("(?i)forgot.?password",)),
    components=(ComponentRef(shadcn_id="button", label="Send link", variant="outline"),),
)
SIGN_UP = ExpectedScreen(
    id="sign-up",
    name="Sign Up",
    detection=ScreenDetection(layer_name_patterns=("([",), component_names=("SignUpForm",)),
)
LOCKED = ExpectedScreen(id="locked", name="Account Locked", severity="critical")

AUTH = FlowRule(flow_type="authentication", name="Authentication Flow", expected_screens=(FORGOT, SIGN_UP, LOCKED))
DETECTED = DetectedFlowType(type="authentication", confidence="high", trigger_screens=("s1",), trigger_patterns=())


def test_screen_exists_by_name_text_or_component() -> None:
    assert screen_exists([_screen("s1", "Forgot password")], FORGOT)
    link = ElementNode(id="2", name="Link", type="TEXT", text_content="Forgot your password?")
    assert not screen_exists([_screen("s1", "Login", link)], FORGOT)
    link = ElementNode(id="2", name="Link", type="TEXT", text_content="Forgot password?")
    assert screen_exists([_screen("s1", "Login", link)], FORGOT)

    form = ElementNode(id="2", name="Form", type="INSTANCE", component_name="SignUpForm/Default")
    assert screen_exists([_screen("s1", "Welcome", form)], SIGN_UP)
    # Malformed expression is skipped rather than raising
    assert not screen_exists([_screen("s1", "([")], SIGN_UP)


def test_generate_missing_screen_findings() -> None:
    screens = [_screen("s1", "Login", width=390, height=844)]
    findings = generate_missing_screen_findings(screens, [DETECTED], [AUTH], IdSequence("mf"))

    assert [f.id for f in findings] == ["mf-001", "mf-002", "mf-003"]
    assert [f.severity for f in findings] == ["warning", "info", "critical"]
    first = findings[0]
    assert first.flow_type == "authentication"
    assert first.flow_name == "Authentication Flow"
    assert first.missing_screen.name == "Forgot Password"
    assert first.recommendation.message == 'Add a "Forgot Password" screen to complete your Authentication Flow.'
    assert first.recommendation.components[0].name == "button (outline)"
    assert first.recommendation.components[0].description == "Send link"
    assert (first.placeholder.width, first.placeholder.height) == (390, 844)


def test_placeholder_falls_back_to_phone_size() -> None:
    findings = generate_missing_screen_findings([_screen("s1", "Login")], [DETECTED], [AUTH], IdSequence("mf"))
    assert (findings[0].placeholder.width, findings[0].placeholder.height) == (375, 812)


def test_undetected_or_unknown_flow_types_yield_nothing() -> None:
    screens = [_screen("s1", "Login")]
    assert generate_missing_screen_findings(screens, [], [AUTH], IdSequence("mf")) == []
    other = DetectedFlowType(type="checkout", confidence="low", trigger_screens=(), trigger_patterns=())
    assert generate_missing_screen_findings(screens, [other], [AUTH], IdSequence("mf")) == []
