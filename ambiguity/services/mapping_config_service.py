"""
Mapping Configuration Service

Loads the YAML tables behind the suggestion engine: contextual mappings,
knowledge-base seed weights, default rules, layout patterns and context
patterns.
Tables are parsed into the closed vocabularies of ambiguity.types so that an
unknown tag or a missing hint type is caught when the file is loaded, not
when a request silently finds nothing.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Dict, Any, List, Optional, Set, Type

import yaml

from ..errors import MappingConfigError
from ..types import AmbiguousWord, ActionType, ContextType, ElementType

logger = logging.getLogger(__name__)

CONTEXTUAL_MAPPINGS_FILE = 'contextual_mappings.yaml'
KNOWLEDGE_BASE_FILE = 'knowledge_base.yaml'
SUGGESTION_RULES_FILE = 'suggestion_rules.yaml'
LAYOUT_PATTERNS_FILE = 'layout_patterns.yaml'
CONTEXT_PATTERNS_FILE = 'context_patterns.yaml'

WordTable = Dict[AmbiguousWord, List[str]]


class MappingConfigService:
    """
    Cached access to the suggestion engine's YAML tables.

    Features:
    - Lazy loading with a per-file cache
    - Exhaustiveness checks for element, action and context types
    - Runtime reloads
    """

    def __init__(self, config_dir: Optional[str] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"

        self.config_dir = Path(config_dir)
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _load_yaml_file(self, filename: str) -> Dict[str, Any]:
        """Load and cache a YAML file. Missing or unreadable files are configuration errors."""
        with self._lock:
            if filename in self._cache:
                return self._cache[filename]

            file_path = self.config_dir / filename
            if not file_path.exists():
                raise MappingConfigError(f"Mapping file {file_path} not found")

            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except (yaml.YAMLError, IOError) as e:
                raise MappingConfigError(f"Could not load {file_path}: {e}") from e

            if not isinstance(data, dict):
                raise MappingConfigError(f"{file_path} must contain a mapping at the top level")

            self._cache[filename] = data
            logger.info(f"Loaded suggestion mappings: {filename}")
            return data

    def reload(self, filename: str) -> None:
        """Drop one cached file and load it again."""
        with self._lock:
            self._cache.pop(filename, None)
        self._load_yaml_file(filename)

    def reload_all(self) -> None:
        """Drop every cached file; they are reloaded on next access."""
        with self._lock:
            self._cache.clear()

    # === CONTEXTUAL MAPPINGS ===

    def get_ui_element_mappings(self) -> Dict[ElementType, WordTable]:
        section = self._get_section(CONTEXTUAL_MAPPINGS_FILE, 'ui_elements')
        return self._parse_typed_tables(section, ElementType, 'ui_elements')

    def get_action_mappings(self) -> Dict[ActionType, WordTable]:
        section = self._get_section(CONTEXTUAL_MAPPINGS_FILE, 'actions')
        return self._parse_typed_tables(section, ActionType, 'actions')

    def get_context_type_mappings(self) -> Dict[ContextType, WordTable]:
        section = self._get_section(CONTEXTUAL_MAPPINGS_FILE, 'context_types')
        return self._parse_typed_tables(section, ContextType, 'context_types')

    def get_generic_mappings(self) -> WordTable:
        section = self._get_section(CONTEXTUAL_MAPPINGS_FILE, 'generic')
        return self._parse_word_table(section, 'generic')

    # === KNOWLEDGE BASE ===

    def get_knowledge_base(self) -> Dict[str, Any]:
        """Raw knowledge-base sections; SuggestionDatabase validates the entries."""
        config = self._load_yaml_file(KNOWLEDGE_BASE_FILE)
        return {
            'ui_elements': config.get('ui_elements') or {},
            'actions': config.get('actions') or {},
            'generic': config.get('generic') or {},
        }

    def get_stop_words(self) -> Set[str]:
        config = self._load_yaml_file(KNOWLEDGE_BASE_FILE)
        tokenizer = config.get('tokenizer') or {}
        return set(parse_word_list(tokenizer.get('stop_words', []), 'tokenizer.stop_words'))

    # === RULES AND LAYOUT ===

    def get_default_rules(self) -> List[Dict[str, Any]]:
        config = self._load_yaml_file(SUGGESTION_RULES_FILE)
        rules = config.get('rules') or []
        if not isinstance(rules, list):
            raise MappingConfigError(f"{SUGGESTION_RULES_FILE}: 'rules' must be a list")
        return rules

    def get_layout_patterns(self) -> Dict[str, Any]:
        return self._load_yaml_file(LAYOUT_PATTERNS_FILE)

    def get_context_patterns(self) -> List[Dict[str, Any]]:
        config = self._load_yaml_file(CONTEXT_PATTERNS_FILE)
        patterns = config.get('patterns') or []
        if not isinstance(patterns, list):
            raise MappingConfigError(f"{CONTEXT_PATTERNS_FILE}: 'patterns' must be a list")
        return patterns

    # === PARSING HELPERS ===

    def _get_section(self, filename: str, name: str) -> Dict[str, Any]:
        config = self._load_yaml_file(filename)
        section = config.get(name)
        if not isinstance(section, dict):
            raise MappingConfigError(f"{filename}: section '{name}' is missing or not a mapping")
        return section

    def _parse_typed_tables(self, section: Dict[str, Any], enum_cls: Type[Enum],
                            section_name: str) -> Dict[Any, WordTable]:
        """Parse {type tag: word table} and require every member of enum_cls to be present."""
        tables = {}
        for tag, word_table in section.items():
            member = parse_enum(enum_cls, tag, section_name)
            tables[member] = self._parse_word_table(word_table or {}, f"{section_name}.{tag}")

        missing = [member.value for member in enum_cls if member not in tables]
        if missing:
            raise MappingConfigError(
                f"{section_name}: no table for {', '.join(missing)}"
            )
        return tables

    def _parse_word_table(self, table: Dict[str, Any], section_name: str) -> WordTable:
        if not isinstance(table, dict):
            raise MappingConfigError(f"{section_name} must be a mapping of ambiguous word to phrases")

        parsed = {}
        for word_tag, phrases in table.items():
            word = parse_enum(AmbiguousWord, word_tag, section_name)
            if not isinstance(phrases, list) or not all(isinstance(p, str) and p.strip() for p in phrases):
                raise MappingConfigError(f"{section_name}.{word_tag} must be a list of non-empty phrases")
            parsed[word] = list(phrases)
        return parsed


def parse_word_list(words: Any, section_name: str) -> List[str]:
    """
    Lower-cased list of plain words.

    Unquoted YAML 1.1 booleans such as `on` or `no` load as bool, not str,
    and are rejected here instead of silently becoming 'true'/'false'.
    """
    if not isinstance(words, list):
        raise MappingConfigError(f"{section_name} must be a list of words")
    for word in words:
        if not isinstance(word, str) or not word.strip():
            raise MappingConfigError(f"{section_name}: {word!r} is not a word (quote it in YAML)")
    return [word.strip().lower() for word in words]


def parse_enum(enum_cls: Type[Enum], tag: Any, section_name: str):
    """Map a YAML tag onto an enum member or raise MappingConfigError."""
    try:
        return enum_cls(str(tag).strip().lower())
    except ValueError:
        raise MappingConfigError(f"{section_name}: unknown {enum_cls.__name__} '{tag}'") from None
