from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from .schema import (
    SEVERITIES,
    ComponentMapping,
    ComponentRef,
    ExpectCondition,
    Expectation,
    ExpectedScreen,
    FlowRule,
    KnowledgeBase,
    MappingEntry,
    Recommendation,
    Rule,
    ScreenDetection,
    Trigger,
)

logger = logging.getLogger(__name__)

DEFAULT_KNOWLEDGE_DIR = Path(__file__).parent / "data"


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coerce_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    return tuple(str(v) for v in _coerce_list(value) if v is not None and str(v).strip())


def _opt_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _severity(value: Any, default: str | None) -> Any:
    sev = str(value).strip().lower() if isinstance(value, str) else ""
    return sev if sev in SEVERITIES else default


def _yaml_files(directory: Path) -> list[Path]:
    return sorted(p for p in directory.iterdir() if p.suffix in (".yml", ".yaml") and p.is_file())


def _read_yaml(path: Path) -> Any:
    """Parse a YAML file, logging and returning None when it cannot be read."""
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return None


def _parse_component_refs(value: Any) -> tuple[ComponentRef, ...]:
    refs: list[ComponentRef] = []
    for raw in _coerce_list(value):
        raw = _coerce_dict(raw)
        shadcn_id = _opt_str(raw.get("shadcn_id"))
        if shadcn_id is None:
            continue
        refs.append(
            ComponentRef(
                shadcn_id=shadcn_id,
                label=_opt_str(raw.get("label")) or shadcn_id,
                variant=_opt_str(raw.get("variant")),
            )
        )
    return tuple(refs)


def _parse_condition(raw: Any) -> ExpectCondition:
    raw = _coerce_dict(raw)
    props = {str(k): str(v) for k, v in _coerce_dict(raw.get("with_properties")).items() if v is not None}
    return ExpectCondition(
        component_names=_str_tuple(raw.get("component_names")),
        with_properties=props,
        layer_name_patterns=_str_tuple(raw.get("layer_name_patterns")),
        with_visual_cues=tuple(c.lower() for c in _str_tuple(raw.get("with_visual_cues"))),
    )


def _category_from(data: dict[str, Any], path: Path) -> str:
    name = data.get("name")
    if isinstance(name, str) and name.strip():
        return re.sub(r"\s+", "-", name.strip().lower())
    return path.stem


def parse_rule(raw: dict[str, Any], default_category: str) -> Rule | None:
    """Build a Rule from one YAML record, or None when it has no id."""
    rule_id = str(raw.get("id", "")).strip()
    if not rule_id:
        return None

    triggers = _coerce_dict(raw.get("triggers"))
    expects = _coerce_dict(raw.get("expects"))
    rec = _coerce_dict(raw.get("recommendation"))
    target = _opt_str(raw.get("annotation_target"))

    return Rule(
        id=rule_id,
        category=_opt_str(raw.get("category")) or default_category,
        name=_opt_str(raw.get("name")) or rule_id,
        severity=_severity(raw.get("severity"), "warning"),
        description=str(raw.get("description") or "").strip(),
        annotation_target=target if target in ("element", "screen") else None,  # type: ignore[arg-type]
        triggers=Trigger(
            component_names=_str_tuple(triggers.get("component_names")),
            layer_name_patterns=_str_tuple(triggers.get("layer_name_patterns")),
            pattern_types=_str_tuple(triggers.get("pattern_types")),
        ),
        expects=Expectation(
            in_screen=tuple(_parse_condition(c) for c in _coerce_list(expects.get("in_screen"))),
            in_flow=tuple(_parse_condition(c) for c in _coerce_list(expects.get("in_flow"))),
        ),
        recommendation=Recommendation(
            message=str(rec.get("message") or "").strip(),
            components=_parse_component_refs(rec.get("components")),
        ),
    )


def load_rules(knowledge_dir: Path) -> list[Rule]:
    """
    Load every rule file under `<knowledge_dir>/rules`.

    Files are read in name order so the catalog order is stable across runs.
    """
    rules_dir = knowledge_dir / "rules"
    if not rules_dir.is_dir():
        logger.warning("Rules directory not found at %s", rules_dir)
        return []

    rules: list[Rule] = []
    for path in _yaml_files(rules_dir):
        data = _read_yaml(path)
        if not isinstance(data, dict):
            continue
        category = _category_from(data, path)
        for raw in _coerce_list(data.get("rules")):
            if not isinstance(raw, dict):
                continue
            rule = parse_rule(raw, category)
            if rule is not None:
                rules.append(rule)
    return rules


def _parse_mappings(value: Any) -> tuple[ComponentMapping, ...]:
    out: list[ComponentMapping] = []
    for raw in _coerce_list(value):
        raw = _coerce_dict(raw)
        shadcn_id = _opt_str(raw.get("shadcn_id"))
        if shadcn_id is None:
            continue
        out.append(
            ComponentMapping(
                shadcn_id=shadcn_id,
                usage=str(raw.get("usage") or ""),
                variant=_opt_str(raw.get("variant")),
            )
        )
    return tuple(out)


def load_component_mappings(knowledge_dir: Path) -> dict[str, MappingEntry]:
    """Load category -> component mapping entries."""
    path = knowledge_dir / "components" / "component-mappings.yml"
    if not path.exists():
        logger.warning("Component mappings not found at %s", path)
        return {}

    data = _coerce_dict(_read_yaml(path))
    mappings: dict[str, MappingEntry] = {}
    for category, raw in _coerce_dict(data.get("mappings")).items():
        raw = _coerce_dict(raw)
        mappings[str(category)] = MappingEntry(
            description=str(raw.get("description") or ""),
            primary=_parse_mappings(raw.get("primary")),
            supporting=_parse_mappings(raw.get("supporting")),
        )
    return mappings


def _parse_expected_screen(raw: dict[str, Any]) -> ExpectedScreen:
    detection = _coerce_dict(raw.get("detection"))
    return ExpectedScreen(
        id=str(raw.get("id") or ""),
        name=str(raw.get("name") or ""),
        description=str(raw.get("description") or ""),
        required=bool(raw.get("required", False)),
        severity=_severity(raw.get("severity"), None),
        detection=ScreenDetection(
            layer_name_patterns=_str_tuple(detection.get("layer_name_patterns")),
            component_names=_str_tuple(detection.get("component_names")),
        ),
        components=_parse_component_refs(raw.get("components")),
    )


def load_flow_rules(knowledge_dir: Path) -> list[FlowRule]:
    """Load expected-screen rules for each flow type under `<knowledge_dir>/flows`."""
    flows_dir = knowledge_dir / "flows"
    if not flows_dir.is_dir():
        logger.warning("Flow rules directory not found at %s", flows_dir)
        return []

    flow_rules: list[FlowRule] = []
    for path in _yaml_files(flows_dir):
        data = _read_yaml(path)
        if not isinstance(data, dict):
            continue
        flow_type = _opt_str(data.get("flow_type"))
        screens_raw = _coerce_list(data.get("expected_screens"))
        if flow_type is None or not screens_raw:
            continue
        flow_rules.append(
            FlowRule(
                flow_type=flow_type,
                name=str(data.get("name") or ""),
                description=str(data.get("description") or ""),
                expected_screens=tuple(
                    _parse_expected_screen(s) for s in screens_raw if isinstance(s, dict)
                ),
            )
        )
    return flow_rules


def load_knowledge(knowledge_dir: Path | None = None) -> KnowledgeBase:
    """Load rules, component mappings and flow rules from one knowledge directory."""
    knowledge_dir = knowledge_dir or DEFAULT_KNOWLEDGE_DIR
    return KnowledgeBase(
        rules=tuple(load_rules(knowledge_dir)),
        mappings=load_component_mappings(knowledge_dir),
        flow_rules=tuple(load_flow_rules(knowledge_dir)),
    )
