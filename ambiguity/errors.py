"""
Errors raised by the suggestion engine.
"""


class MappingConfigError(ValueError):
    """A YAML mapping table is missing, malformed or does not cover a closed vocabulary."""


class InvalidRuleError(ValueError):
    """A custom suggestion rule has no usable pattern, no phrases or a priority outside [0, 1]."""
