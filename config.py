"""
Configuration for the Ambiguity Suggestion Engine.
"""

import os
import logging
from dotenv import load_dotenv
from typing import Dict, Any

# Load environment variables (optional - only if .env file exists)
load_dotenv()


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).strip().lower() == 'true'


class Config:
    """Engine configuration."""

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Directory holding the YAML mapping tables, knowledge base seed and default rules
    SUGGESTION_CONFIG_DIR = os.environ.get('SUGGESTION_CONFIG_DIR') or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), 'ambiguity', 'config'
    )

    # Learning Feedback
    LEARNING_INCREMENT = float(os.environ.get('LEARNING_INCREMENT', 0.05))

    # Pipeline Selection
    # Extended route adds the rule engine and the knowledge base to the default streams
    ENABLE_EXTENDED_SUGGESTIONS = _env_flag('ENABLE_EXTENDED_SUGGESTIONS')
    # Keep only the highest-priority matching rule's phrases
    STRICT_RULE_OVERRIDE = _env_flag('STRICT_RULE_OVERRIDE')

    # Result Limits (0 = unlimited)
    MAX_SUGGESTIONS = int(os.environ.get('MAX_SUGGESTIONS', 0))
    DETECTION_RESULT_SUGGESTIONS = int(os.environ.get('DETECTION_RESULT_SUGGESTIONS', 5))

    @classmethod
    def init_logging(cls, level: str = None):
        """Install a stream handler on the root logger if none is configured."""
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
            )
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)
        root_logger.setLevel((level or cls.LOG_LEVEL).upper())

    @classmethod
    def get_suggestion_config(cls) -> Dict[str, Any]:
        """Get suggestion engine configuration."""
        return {
            'config_dir': cls.SUGGESTION_CONFIG_DIR,
            'learning_increment': cls.LEARNING_INCREMENT,
            'enable_extended_suggestions': cls.ENABLE_EXTENDED_SUGGESTIONS,
            'strict_rule_override': cls.STRICT_RULE_OVERRIDE,
            'max_suggestions': cls.MAX_SUGGESTIONS,
            'detection_result_suggestions': cls.DETECTION_RESULT_SUGGESTIONS,
        }


# For testing only
class TestingConfig(Config):
    """Testing configuration: default tables, default pipeline, no truncation."""
    LOG_LEVEL = 'DEBUG'
    SUGGESTION_CONFIG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'ambiguity', 'config')
    LEARNING_INCREMENT = 0.05
    ENABLE_EXTENDED_SUGGESTIONS = False
    STRICT_RULE_OVERRIDE = False
    MAX_SUGGESTIONS = 0
    DETECTION_RESULT_SUGGESTIONS = 5
