"""Knowledge base: declarative rules, component mappings and flow rules (rules as data)."""

from .load import DEFAULT_KNOWLEDGE_DIR, load_component_mappings, load_flow_rules, load_knowledge, load_rules
from .schema import KnowledgeBase, Rule

__all__ = [
    "DEFAULT_KNOWLEDGE_DIR",
    "KnowledgeBase",
    "Rule",
    "load_component_mappings",
    "load_flow_rules",
    "load_knowledge",
    "load_rules",
]
