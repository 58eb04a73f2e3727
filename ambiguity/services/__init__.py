"""
Configuration services for the suggestion engine.
"""

from .mapping_config_service import MappingConfigService

__all__ = ['MappingConfigService']
