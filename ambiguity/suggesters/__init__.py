"""
Candidate streams for the suggestion engine.
"""

from .context_pattern_suggester import ContextPatternSuggester
from .contextual_suggester import ContextualSuggester
from .generic_suggester import GenericSuggester
from .layout_suggester import LayoutSuggester

__all__ = [
    'ContextPatternSuggester',
    'ContextualSuggester',
    'GenericSuggester',
    'LayoutSuggester',
]
