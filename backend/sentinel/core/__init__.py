from sentinel.core.config import Settings, get_settings, settings
from sentinel.core.logging import PipelineLogger, get_logger

__all__ = ["Settings", "get_settings", "settings", "PipelineLogger", "get_logger"]
