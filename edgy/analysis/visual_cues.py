"""
Visual cues: semantic color classification of fills and strokes.

A red stroke on an input, or amber helper text, is treated as evidence that a
designer already modeled an error or warning state.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..knowledge.schema import VisualCue
from ..models import ElementNode
from .matching import contains_any

# Rule category -> cue that counts as evidence for it
CATEGORY_VISUAL_CUES: dict[str, VisualCue] = {
    "error-states": "error",
    "loading-states": "warning",
    "connectivity": "warning",
}


def classify_color(r: float, g: float, b: float) -> VisualCue | None:
    """Classify an RGB color (0-1 components); None for neutral colors."""
    # Reds: #FF0000, #DC2626, #EF4444, #B91C1C
    if r > 0.6 and g < 0.35 and b < 0.35:
        return "error"
    # Deep red-oranges used as error
    if r > 0.7 and g < 0.4 and b < 0.25:
        return "error"
    # Ambers: #F59E0B, #EAB308, #D97706
    if r > 0.7 and g > 0.5 and b < 0.3:
        return "warning"
    # Greens: #22C55E, #16A34A, #10B981
    if g > 0.5 and r < 0.4 and b < 0.5:
        return "success"
    # Teal greens
    if g > 0.45 and r < 0.25 and 0.3 < b < 0.7:
        return "success"
    # Blues: #3B82F6, #2563EB, #0EA5E9
    if b > 0.6 and r < 0.4 and g < 0.6:
        return "info"
    return None


def visual_cue_for_category(category: str) -> VisualCue | None:
    return CATEGORY_VISUAL_CUES.get(category)


def node_has_visual_cue(node: ElementNode, cue: str) -> bool:
    """True if one of the node's own strokes or fills classifies as `cue`."""
    for r, g, b in (*node.strokes, *node.fills):
        if classify_color(r, g, b) == cue:
            return True
    return False


def subtree_has_visual_cue(node: ElementNode, cue: str) -> bool:
    return any(node_has_visual_cue(n, cue) for n in node.walk())


def _component_filter(node: ElementNode, component_names: Sequence[str] | None) -> bool:
    if not node.component_name:
        return False
    if component_names is None:
        return True
    return contains_any(node.component_name, component_names)


def sibling_has_new_visual_cue(
    base_nodes: Iterable[ElementNode],
    sibling_nodes: Iterable[ElementNode],
    cue: str,
    component_names: Sequence[str] | None = None,
) -> bool:
    """
    Does a sibling screen show `cue` on components where the base screen does not?

    Componentized sibling nodes are compared against base instances of the same
    component (case-insensitive); the cue counts as new when the base has no such
    instance or none of them carries it. Sibling TEXT nodes carrying the cue also
    count unless a same-named base TEXT node carries it too.
    """
    base_list = list(base_nodes)
    sibling_list = list(sibling_nodes)

    base_components: dict[str, list[ElementNode]] = {}
    for node in base_list:
        if _component_filter(node, component_names):
            base_components.setdefault(node.component_name.lower(), []).append(node)  # type: ignore[union-attr]

    for node in sibling_list:
        if not _component_filter(node, component_names):
            continue
        if not subtree_has_visual_cue(node, cue):
            continue
        counterparts = base_components.get(node.component_name.lower())  # type: ignore[union-attr]
        if not counterparts:
            return True
        if all(not subtree_has_visual_cue(b, cue) for b in counterparts):
            return True

    # Colored helper text, e.g. red copy below an input
    base_text = {n.name: n for n in reversed(base_list) if n.type.upper() == "TEXT"}
    for node in sibling_list:
        if node.type.upper() != "TEXT" or not node_has_visual_cue(node, cue):
            continue
        counterpart = base_text.get(node.name)
        if counterpart is None or not node_has_visual_cue(counterpart, cue):
            return True

    return False
