"""
Suggestion Rule Engine

Pattern/keyword rules that map a recognised context to a fixed list of
replacement phrases. Rules are kept sorted by descending priority and every
matching rule contributes candidates unless a first-match cutoff is asked for.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Any, FrozenSet, List, Optional, Tuple, Union

from .errors import InvalidRuleError, MappingConfigError
from .services.mapping_config_service import MappingConfigService, parse_enum
from .types import Suggestion, SuggestionCategory

logger = logging.getLogger(__name__)

RulePattern = Union[re.Pattern, FrozenSet[str]]


@dataclass(frozen=True)
class SuggestionRule:
    """
    A pattern and the phrases it yields.

    `pattern` is a regular expression or a keyword set. Strings and compiled
    patterns are both matched case-insensitively; lists, tuples and sets
    become a keyword set that matches when any keyword occurs in the context.
    Rules are immutable once built, so a rule held by a RuleEngine cannot be
    re-prioritised behind its back.
    """
    pattern: Optional[RulePattern]
    suggestions: Tuple[str, ...]
    priority: float
    category: SuggestionCategory
    context_keywords: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        pattern = self.pattern
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE) if pattern else None
        elif isinstance(pattern, re.Pattern) and not pattern.flags & re.IGNORECASE:
            pattern = re.compile(pattern.pattern, pattern.flags | re.IGNORECASE)
        elif isinstance(pattern, (list, tuple, set, frozenset)):
            pattern = frozenset(str(k).lower() for k in pattern if str(k).strip())
        object.__setattr__(self, 'pattern', pattern)

        suggestions = self.suggestions
        if isinstance(suggestions, str):
            suggestions = (suggestions,)
        elif suggestions is not None:
            suggestions = tuple(suggestions)
        object.__setattr__(self, 'suggestions', suggestions)
        object.__setattr__(self, 'context_keywords', frozenset(self.context_keywords or ()))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SuggestionRule':
        """Create a rule from a suggestion_rules.yaml entry."""
        try:
            return cls(
                pattern=data.get('pattern'),
                suggestions=tuple(data.get('suggestions') or ()),
                priority=float(data.get('priority', 0.0)),
                category=parse_enum(SuggestionCategory, data.get('category', 'generic'), 'rules'),
                context_keywords=frozenset(data.get('context_keywords') or ()),
            )
        except (re.error, TypeError, ValueError) as e:
            raise MappingConfigError(f"Invalid rule {data!r}: {e}") from e

    def matches(self, context: str) -> bool:
        if isinstance(self.pattern, frozenset):
            context_lower = context.lower()
            return any(keyword in context_lower for keyword in self.pattern)
        return self.pattern.search(context) is not None


def validate_rule(rule: SuggestionRule) -> None:
    """Raise InvalidRuleError for a rule that would corrupt later rankings."""
    if rule.pattern is None or (isinstance(rule.pattern, frozenset) and not rule.pattern):
        raise InvalidRuleError("Rule is missing a pattern")
    if not isinstance(rule.pattern, (re.Pattern, frozenset)):
        raise InvalidRuleError(f"Rule pattern must be a regular expression or a keyword set, got {rule.pattern!r}")
    if isinstance(rule.pattern, re.Pattern) and not rule.pattern.pattern:
        raise InvalidRuleError("Rule pattern is empty and would match every context")
    if not rule.suggestions:
        raise InvalidRuleError("Rule has no suggestions")
    if any(not isinstance(text, str) or not text.strip() for text in rule.suggestions):
        raise InvalidRuleError("Rule suggestions must be non-empty strings")
    if not isinstance(rule.priority, (int, float)) or not 0.0 <= rule.priority <= 1.0:
        raise InvalidRuleError(f"Rule priority must be between 0.0 and 1.0, got {rule.priority!r}")
    if not isinstance(rule.category, SuggestionCategory):
        raise InvalidRuleError(f"Rule category must be a SuggestionCategory, got {rule.category!r}")


class RuleEngine:
    """Ordered rule list; the priority of a matching rule is the confidence of its phrases."""

    def __init__(self, rules: Optional[List[SuggestionRule]] = None):
        self._rules: List[SuggestionRule] = []
        for rule in rules or []:
            validate_rule(rule)
            self._rules.append(rule)
        self._sort()

    @classmethod
    def from_config(cls, config_service: MappingConfigService) -> 'RuleEngine':
        rules = [SuggestionRule.from_dict(data) for data in config_service.get_default_rules()]
        try:
            return cls(rules)
        except InvalidRuleError as e:
            raise MappingConfigError(f"Invalid default rule: {e}") from e

    @property
    def rules(self) -> Tuple[SuggestionRule, ...]:
        return tuple(self._rules)

    def add_custom_rule(self, rule: SuggestionRule) -> None:
        """Append a rule and restore descending priority order. Rules are not deduplicated."""
        try:
            validate_rule(rule)
        except InvalidRuleError as e:
            logger.warning(f"Rejected custom rule: {e}")
            raise
        self._rules.append(rule)
        self._sort()

    def _sort(self) -> None:
        # list.sort is stable: equal priorities keep insertion order
        self._rules.sort(key=lambda rule: rule.priority, reverse=True)

    def generate(self, context: str, first_match_only: bool = False) -> List[Suggestion]:
        """Candidates from every rule matching the context, in rule order."""
        suggestions = []
        for rule in self._rules:
            if not rule.matches(context):
                continue
            suggestions.extend(
                Suggestion(replacement_text=text, confidence=rule.priority, category=rule.category)
                for text in rule.suggestions
            )
            if first_match_only:
                break
        return suggestions
