"""Data models for extracted design screens."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Literal

# Solid paint color as (r, g, b), each component in the 0-1 range
Color = tuple[float, float, float]

# Structural roles assigned by the pattern detector
PatternType = Literal[
    "form",
    "form-field",
    "list",
    "data-display",
    "button",
    "destructive-action",
    "navigation",
    "search",
    "media",
    "modal",
]

Confidence = Literal["high", "medium", "low"]


def _coerce_colors(value: Any) -> tuple[Color, ...]:
    if not isinstance(value, list):
        return ()
    colors: list[Color] = []
    for raw in value:
        if isinstance(raw, (list, tuple)) and len(raw) >= 3:
            colors.append((float(raw[0]), float(raw[1]), float(raw[2])))
    return tuple(colors)


def _coerce_properties(value: Any) -> dict[str, str]:
    """Flatten `{key: {value: v}}` (extractor shape) or `{key: v}` into `{key: v}`."""
    if not isinstance(value, dict):
        return {}
    props: dict[str, str] = {}
    for key, raw in value.items():
        if isinstance(raw, dict):
            raw = raw.get("value")
        if raw is None:
            continue
        props[str(key)] = str(raw)
    return props


@dataclass(frozen=True)
class ElementNode:
    """A node in a screen's design tree.

    Children are owned by their parent and kept in document order; that order
    is meaningful for repeating-children detection.
    """

    id: str
    name: str
    type: str
    visible: bool = True
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    component_name: str | None = None
    component_properties: dict[str, str] = field(default_factory=dict)
    text_content: str | None = None
    fills: tuple[Color, ...] = ()
    strokes: tuple[Color, ...] = ()
    stroke_weight: float | None = None
    children: tuple["ElementNode", ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ElementNode":
        children_raw = data.get("children") or []
        children = tuple(cls.from_dict(c) for c in children_raw if isinstance(c, dict))

        component_name = data.get("componentName", data.get("component_name"))
        text_content = data.get("textContent", data.get("text_content"))
        stroke_weight = data.get("strokeWeight", data.get("stroke_weight"))

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            visible=bool(data.get("visible", True)),
            x=float(data.get("x", 0) or 0),
            y=float(data.get("y", 0) or 0),
            width=float(data.get("width", 0) or 0),
            height=float(data.get("height", 0) or 0),
            component_name=str(component_name) if component_name else None,
            component_properties=_coerce_properties(
                data.get("componentProperties", data.get("component_properties"))
            ),
            text_content=str(text_content) if text_content else None,
            fills=_coerce_colors(data.get("fills")),
            strokes=_coerce_colors(data.get("strokes")),
            stroke_weight=float(stroke_weight) if stroke_weight is not None else None,
            children=children,
        )

    @property
    def label(self) -> str:
        """Bound component name when present, else the layer name."""
        return self.component_name or self.name

    def walk(self) -> Iterator["ElementNode"]:
        """Yield this node and its descendants in pre-order."""
        stack: list[ElementNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def flatten_tree(node: ElementNode | None) -> list[ElementNode]:
    """Pre-order list of every node in the tree (node before its children)."""
    if node is None:
        return []
    return list(node.walk())


def flatten_trees(trees: Iterable[ElementNode]) -> list[ElementNode]:
    """Concatenated pre-order node lists for several trees."""
    nodes: list[ElementNode] = []
    for tree in trees:
        nodes.extend(flatten_tree(tree))
    return nodes


@dataclass(frozen=True)
class Screen:
    """One top-level frame and its node tree."""

    screen_id: str
    name: str
    root: ElementNode
    order: int = 0
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Screen":
        tree = data.get("node_tree")
        if not isinstance(tree, dict):
            raise ValueError(f"screen {data.get('screen_id')!r} has no node_tree")
        return cls(
            screen_id=str(data.get("screen_id", "")),
            name=str(data.get("name", "")),
            root=ElementNode.from_dict(tree),
            order=int(data.get("order", 0) or 0),
            x=float(data.get("x", 0) or 0),
            y=float(data.get("y", 0) or 0),
            width=float(data.get("width", 0) or 0),
            height=float(data.get("height", 0) or 0),
        )


@dataclass(frozen=True)
class AnalysisInput:
    """A serialized design document: the screens selected for analysis."""

    analysis_id: str
    screens: tuple[Screen, ...] = ()
    file_name: str = ""
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisInput":
        screens_raw = data.get("screens")
        if not isinstance(screens_raw, list):
            raise ValueError("analysis input requires a 'screens' list")
        return cls(
            analysis_id=str(data.get("analysis_id", "")),
            screens=tuple(Screen.from_dict(s) for s in screens_raw if isinstance(s, dict)),
            file_name=str(data.get("file_name", "")),
            timestamp=str(data.get("timestamp", "")),
        )
