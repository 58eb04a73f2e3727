"""
Context Pattern Suggester

Reads the raw surrounding text for cue words ("error" next to "click",
"settings" next to "open") and proposes the concrete objects such a sentence
usually points at. Phrases within a group decay in confidence by rank.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, FrozenSet, List, Tuple

from ..base_suggester import BaseSuggester
from ..errors import MappingConfigError
from ..services.mapping_config_service import MappingConfigService, parse_enum, parse_word_list
from ..types import (
    AmbiguousMatch, AmbiguousWord, ContextAnalysis, Suggestion, SuggestionCategory,
    clamp_confidence
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhraseGroup:
    suggestions: Tuple[str, ...]
    confidence: float
    step: float
    category: SuggestionCategory

    def build(self) -> List[Suggestion]:
        return [
            Suggestion(
                replacement_text=text,
                confidence=clamp_confidence(self.confidence - index * self.step),
                category=self.category
            )
            for index, text in enumerate(self.suggestions)
        ]


@dataclass(frozen=True)
class ContextPattern:
    """Cue words, optional trigger words and the phrase groups they unlock."""
    name: str
    cues: Tuple[str, ...]
    triggers: Tuple[str, ...]
    words: FrozenSet[AmbiguousWord]
    groups: Tuple[PhraseGroup, ...]
    fallback: bool = False

    def matches(self, word: AmbiguousWord, context_lower: str) -> bool:
        if self.words and word not in self.words:
            return False
        if self.cues and not any(cue in context_lower for cue in self.cues):
            return False
        if self.triggers and not any(trigger in context_lower for trigger in self.triggers):
            return False
        return True


class ContextPatternSuggester(BaseSuggester):
    """
    Cue-driven candidates from the surrounding text.

    Patterns are evaluated in file order and every match contributes. A
    fallback pattern only fires when nothing before it matched. Matches
    without surrounding text have no context to read and yield nothing.
    """

    def __init__(self, patterns: List[ContextPattern]):
        self.patterns = list(patterns)

    @classmethod
    def from_config(cls, config_service: MappingConfigService) -> 'ContextPatternSuggester':
        return cls([parse_context_pattern(data) for data in config_service.get_context_patterns()])

    def suggest(self, match: AmbiguousMatch, analysis: ContextAnalysis) -> List[Suggestion]:
        context_lower = match.surrounding_text.lower()
        if not context_lower.strip():
            return []

        suggestions = []
        matched = []
        for pattern in self.patterns:
            if pattern.fallback and suggestions:
                continue
            if not pattern.matches(match.ambiguous_word, context_lower):
                continue
            matched.append(pattern.name)
            for group in pattern.groups:
                suggestions.extend(group.build())

        logger.debug(
            f"Context patterns for '{match.ambiguous_word.value}': "
            f"{', '.join(matched) or 'none'} ({len(suggestions)} candidates)"
        )
        return suggestions


def parse_context_pattern(data: Dict[str, Any]) -> ContextPattern:
    """Build a ContextPattern from a context_patterns.yaml entry."""
    if not isinstance(data, dict):
        raise MappingConfigError(f"Context pattern must be a mapping, got {data!r}")

    name = str(data.get('name', '')).strip()
    if not name:
        raise MappingConfigError(f"Context pattern without a name: {data!r}")

    cues = tuple(parse_word_list(data.get('cues') or [], f"{name}.cues"))
    triggers = tuple(parse_word_list(data.get('triggers') or [], f"{name}.triggers"))
    words = frozenset(
        parse_enum(AmbiguousWord, tag, f"{name}.words") for tag in data.get('words') or []
    )
    if not cues and not words:
        raise MappingConfigError(f"{name}: a context pattern needs cues or words")

    groups = tuple(_parse_group(group, name) for group in data.get('groups') or [])
    if not groups:
        raise MappingConfigError(f"{name}: a context pattern needs at least one group")

    return ContextPattern(
        name=name,
        cues=cues,
        triggers=triggers,
        words=words,
        groups=groups,
        fallback=bool(data.get('fallback', False)),
    )


def _parse_group(data: Dict[str, Any], name: str) -> PhraseGroup:
    try:
        suggestions = tuple(data['suggestions'])
        confidence = float(data['confidence'])
        step = float(data.get('step', 0.0))
        category = parse_enum(SuggestionCategory, data['category'], name)
    except (KeyError, TypeError, ValueError) as e:
        raise MappingConfigError(f"{name}: invalid phrase group: {e}") from e

    if not suggestions or not all(isinstance(text, str) and text.strip() for text in suggestions):
        raise MappingConfigError(f"{name}: phrase groups need non-empty phrases")
    if not 0.0 <= confidence <= 1.0 or step < 0.0:
        raise MappingConfigError(f"{name}: confidence must be in [0, 1] and step non-negative")
    return PhraseGroup(suggestions=suggestions, confidence=confidence, step=step, category=category)
