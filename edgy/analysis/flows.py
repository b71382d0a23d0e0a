"""
Flow grouping by screen-name prefix.

Screens named "Login", "Login - Error" and "Login / Loading" share the prefix
"login" and form one flow group.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Sequence

from ..models import Screen

FlowGroups = Mapping[str, Sequence[Screen]]

# Delimiters between a base screen name and its variant
_DELIMITER = re.compile(r"(?:\s[-\u2013\u2014]\s|\s/\s|\s>\s|\s\|\s|\s:\s|\s?\()")


def extract_flow_prefix(name: str) -> str:
    """
    Flow key for a screen name.

    "Login - Error" -> "login", "Checkout / Step 1" -> "checkout",
    "Dashboard (Empty)" -> "dashboard".
    """
    match = _DELIMITER.search(name)
    prefix = name[: match.start()] if match else name
    return prefix.strip().lower()


def group_screens_by_flow(screens: Iterable[Screen]) -> dict[str, list[Screen]]:
    """Group screens by flow prefix, keeping first-seen group and screen order."""
    groups: dict[str, list[Screen]] = {}
    for screen in screens:
        groups.setdefault(extract_flow_prefix(screen.name), []).append(screen)
    return groups


def flow_siblings(screen: Screen, groups: FlowGroups) -> list[Screen]:
    """
    The first group containing `screen` (itself included), or just the screen.

    Membership is by screen_id, so group keys are never interpreted.
    """
    for members in groups.values():
        if any(s.screen_id == screen.screen_id for s in members):
            return list(members)
    return [screen]
