"""유틸리티"""

from .logger import setup_logger, logger
from .settings import SettingsManager

__all__ = ['setup_logger', 'logger', 'SettingsManager']
