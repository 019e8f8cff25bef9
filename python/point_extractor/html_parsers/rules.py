"""
Inclusion Rules

Each site declares an ordered table of (predicate, action) rules. The first
matching rule decides whether a transaction is kept; when no rule matches,
only point gains (amount > 0) are kept.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Mapping, Sequence

if TYPE_CHECKING:
    from .base import ParsedTransaction


class RuleAction(str, Enum):
    """What to do with a transaction matched by a rule."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    INCLUDE_IF_TOGGLE = "include_if_toggle"


@dataclass(frozen=True)
class FilterRule:
    """A single row of a site's inclusion table."""

    name: str
    predicate: Callable[["ParsedTransaction"], bool]
    action: RuleAction
    toggle: str | None = None


def include_if(name: str, predicate: Callable[["ParsedTransaction"], bool], toggle: str) -> FilterRule:
    """Rule that keeps matches only while the given option is enabled."""
    return FilterRule(name=name, predicate=predicate, action=RuleAction.INCLUDE_IF_TOGGLE, toggle=toggle)


def description_contains(*markers: str) -> Callable[["ParsedTransaction"], bool]:
    """Predicate matching any marker in the raw or normalized description."""
    def predicate(txn: "ParsedTransaction") -> bool:
        haystacks = (txn.raw_description, txn.description)
        return any(marker in text for marker in markers for text in haystacks)
    return predicate


def action_contains(*markers: str) -> Callable[["ParsedTransaction"], bool]:
    def predicate(txn: "ParsedTransaction") -> bool:
        return any(marker in (txn.action or "") for marker in markers)
    return predicate


def evaluate_rules(
    rules: Sequence[FilterRule],
    transaction: "ParsedTransaction",
    options: Mapping[str, bool]
) -> bool:
    """Decide whether a transaction should be kept.

    Args:
        rules: Ordered rule table for the site
        transaction: Candidate transaction
        options: Enabled toggles keyed by option name

    Returns:
        True if the transaction is kept
    """
    for rule in rules:
        if not rule.predicate(transaction):
            continue

        if rule.action == RuleAction.INCLUDE:
            return True
        if rule.action == RuleAction.EXCLUDE:
            return False
        return bool(options.get(rule.toggle, False))

    return transaction.amount > 0
