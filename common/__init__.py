from .config import ConfigLoader, ConfigurationError, NotionConfig, mask_secret
from .logger import LoggerManager

__all__ = [
    'ConfigLoader',
    'ConfigurationError',
    'NotionConfig',
    'mask_secret',
    'LoggerManager',
]
