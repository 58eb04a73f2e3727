"""
Ambiguity Suggestion Engine

Ranked replacement phrases for ambiguous referring expressions
("this one", "over there") found in document text.

Usage:
    from ambiguity import SuggestionGenerator, AmbiguousMatch, AmbiguousWord, SourceLocation
    from config import Config

    Config.init_logging()
    generator = SuggestionGenerator()
    match = AmbiguousMatch(
        ambiguous_word=AmbiguousWord.THIS_ONE,
        location=SourceLocation(unit_id='1:23'),
        surrounding_text='Click this one to continue',
    )
    suggestions = generator.generate_suggestions(match)
"""

from .base_suggester import BaseSuggester, ContextClassifier
from .errors import InvalidRuleError, MappingConfigError
from .knowledge_base import KnowledgeEntry, SuggestionDatabase
from .quality import evaluate_suggestion_quality
from .ranking import rank_suggestions, remove_duplicate_suggestions
from .rule_engine import RuleEngine, SuggestionRule
from .suggestion_generator import SuggestionGenerator
from .types import (
    ActionHint,
    ActionType,
    AmbiguousMatch,
    AmbiguousWord,
    ContextAnalysis,
    ContextType,
    DetectionResult,
    ElementType,
    LayoutInfo,
    ProcessingStatus,
    SourceLocation,
    Suggestion,
    SuggestionCategory,
    TextUnit,
    UIElementHint,
)

__all__ = [
    # Engine
    'SuggestionGenerator',
    'RuleEngine',
    'SuggestionRule',
    'SuggestionDatabase',
    'KnowledgeEntry',
    'rank_suggestions',
    'remove_duplicate_suggestions',
    'evaluate_suggestion_quality',

    # Collaborator interfaces
    'BaseSuggester',
    'ContextClassifier',

    # Errors
    'InvalidRuleError',
    'MappingConfigError',

    # Types
    'ActionHint',
    'ActionType',
    'AmbiguousMatch',
    'AmbiguousWord',
    'ContextAnalysis',
    'ContextType',
    'DetectionResult',
    'ElementType',
    'LayoutInfo',
    'ProcessingStatus',
    'SourceLocation',
    'Suggestion',
    'SuggestionCategory',
    'TextUnit',
    'UIElementHint',
]

__version__ = '1.0.0'
