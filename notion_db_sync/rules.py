"""
Sync rule evaluation.

A record is synced only when it satisfies every configured rule.
"""

from typing import Any

from notion_db_sync.config import RuleCondition, SyncRule
from notion_db_sync.properties import extract_property_value, to_text

TRUE_VALUES = ("true", "yes")
FALSE_VALUES = ("false", "no")


def rule_matches(rule: SyncRule, properties: dict[str, Any]) -> bool:
    """Check a single rule against a record's properties."""
    prop = properties.get(rule.property)
    if not prop:
        return False

    value = extract_property_value(prop)
    condition = rule.condition

    if condition == RuleCondition.EQUALS:
        return to_text(value).lower() == (rule.value or "").lower()
    if condition == RuleCondition.NOT_EMPTY:
        return value is not None and value != ""
    if condition == RuleCondition.IS_TRUE:
        return value is True or (isinstance(value, str) and value in TRUE_VALUES)
    if condition == RuleCondition.IS_FALSE:
        return value is False or (isinstance(value, str) and value in FALSE_VALUES)

    # Unknown conditions don't filter anything out
    return True


def check_sync_rules(rules: list[SyncRule], properties: dict[str, Any]) -> bool:
    """
    Check whether a record passes all sync rules.

    Args:
        rules: Configured rules. An empty list accepts every record.
        properties: The record's property objects.

    Returns:
        True if the record should be synced.
    """
    return all(rule_matches(rule, properties or {}) for rule in rules)
