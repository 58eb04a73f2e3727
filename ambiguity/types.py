"""
Ambiguity Suggestion Types
Core data structures shared by the suggestion engine, its suggesters and the
external collaborators (document scanner, context classifier).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class AmbiguousWord(Enum):
    """Closed set of referring expressions the engine can resolve."""
    THIS_ONE = "this-one"
    THAT_ONE = "that-one"
    THAT_ONE_OVER_THERE = "that-one-over-there"
    THIS_WAY = "this-way"
    THAT_WAY = "that-way"
    THAT_WAY_OVER_THERE = "that-way-over-there"
    HERE = "here"
    THERE = "there"
    OVER_THERE = "over-there"

    @classmethod
    def from_value(cls, value: str) -> 'AmbiguousWord':
        """Parse a tag such as 'this-one'. Raises ValueError for unknown tags."""
        return cls(value.strip().lower())


class ContextType(Enum):
    UI_ACTION = "ui_action"
    CONTENT = "content"
    NAVIGATION = "navigation"
    GENERIC = "generic"


class ElementType(Enum):
    BUTTON = "button"
    LINK = "link"
    PAGE = "page"
    IMAGE = "image"
    FILE = "file"


class ActionType(Enum):
    SAVE = "save"
    DELETE = "delete"
    EDIT = "edit"
    SEND = "send"


class SuggestionCategory(Enum):
    UI_ELEMENT = "ui_element"
    ACTION = "action"
    CONTENT = "content"
    GENERIC = "generic"


class ProcessingStatus(Enum):
    PENDING = "pending"
    REPLACED = "replaced"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SourceLocation:
    """Where a text unit lives inside the document tree."""
    unit_id: str
    page_name: str = ""
    layer_name: str = ""
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class LayoutInfo:
    """Structural position of a text unit: its parent layer and ancestry."""
    parent_name: str = ""
    parent_type: str = ""
    is_component: bool = False
    component_name: Optional[str] = None
    layer_hierarchy: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TextUnit:
    """A text unit as emitted by the document scanner."""
    id: str
    content: str
    location: SourceLocation
    layout: Optional[LayoutInfo] = None


@dataclass(frozen=True)
class AmbiguousMatch:
    """One occurrence of an ambiguous referring expression."""
    ambiguous_word: AmbiguousWord
    location: SourceLocation
    surrounding_text: str = ""
    original_text: str = ""
    start_index: int = 0
    end_index: int = 0
    layout: Optional[LayoutInfo] = None


@dataclass(frozen=True)
class UIElementHint:
    element_type: ElementType
    confidence: float


@dataclass(frozen=True)
class ActionHint:
    action_type: ActionType
    confidence: float


@dataclass(frozen=True)
class ContextAnalysis:
    """Classification of the text around a match, produced by a ContextClassifier."""
    context_type: ContextType = ContextType.GENERIC
    ui_element_hints: Tuple[UIElementHint, ...] = ()
    action_hints: Tuple[ActionHint, ...] = ()
    before_context: str = ""
    after_context: str = ""
    related_keywords: Tuple[str, ...] = ()
    confidence: float = 0.0

    @classmethod
    def empty(cls) -> 'ContextAnalysis':
        """Analysis with no hints and a GENERIC context type."""
        return cls()


@dataclass(frozen=True)
class Suggestion:
    """A candidate replacement phrase."""
    replacement_text: str
    confidence: float
    category: SuggestionCategory

    def __post_init__(self):
        if not self.replacement_text or not self.replacement_text.strip():
            raise ValueError("replacement_text must be a non-empty string")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0.0 and 1.0, got {self.confidence}")


@dataclass
class DetectionResult:
    """A match together with its ranked suggestions, awaiting an editor's decision."""
    id: str
    unit_id: str
    original_text: str
    match: AmbiguousMatch
    location: SourceLocation
    suggestions: List[Suggestion] = field(default_factory=list)
    status: ProcessingStatus = ProcessingStatus.PENDING
    # Button labels are replaced whole, other text only at the match span
    is_button_text: bool = False


def clamp_confidence(value: float) -> float:
    """Clamp a combined score into [0, 1]."""
    return max(0.0, min(value, 1.0))
