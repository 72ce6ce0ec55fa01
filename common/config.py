import configparser
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import logging

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = 'https://api.notion.com/v1'
DEFAULT_NOTION_VERSION = '2022-06-28'
DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 10

class ConfigurationError(Exception):
    pass


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask all but the last few characters of a secret for logging"""
    if not value:
        return ''
    if len(value) <= visible:
        return '*' * len(value)
    return '*' * (len(value) - visible) + value[-visible:]


@dataclass(frozen=True)
class NotionConfig:
    """Immutable connection settings for one database query run"""
    token: str
    database_id: str
    api_base_url: str = DEFAULT_API_BASE_URL
    notion_version: str = DEFAULT_NOTION_VERSION
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = DEFAULT_TIMEOUT

    @property
    def query_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/databases/{self.database_id}/query"

    def __repr__(self) -> str:
        return (f"NotionConfig(token='{mask_secret(self.token)}', database_id='{self.database_id}', "
                f"api_base_url='{self.api_base_url}', notion_version='{self.notion_version}', "
                f"page_size={self.page_size}, timeout={self.timeout})")


class ConfigLoader:
    REQUIRED_CREDENTIALS: tuple[str, ...] = ('notion_token', 'notion_database_id')

    def __init__(self, credentials_path: str, settings_path: Optional[str] = None) -> None:
        self.credentials: dict[str, str] = self._load_credentials(credentials_path)
        self.settings: configparser.ConfigParser = configparser.ConfigParser(delimiters=('=',), interpolation=None)
        # property names are case sensitive on the remote side
        self.settings.optionxform = str

        if settings_path:
            if not Path(settings_path).exists():
                raise ConfigurationError(f"Settings file not found: {settings_path}")

            try:
                self.settings.read(settings_path, encoding='utf-8')
            except configparser.Error as e:
                raise ConfigurationError(f"Failed to parse {settings_path}: {e}") from e
            logger.info(f"Loaded settings from {settings_path}")
        else:
            logger.info("No settings file given, using defaults")

    def _load_credentials(self, credentials_path: str) -> dict[str, str]:
        path: Path = Path(credentials_path)

        try:
            raw: str = path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(f"Failed to read {credentials_path}: {e}") from e

        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse {credentials_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{credentials_path} must contain a JSON object")

        credentials: dict[str, str] = {}
        for key in self.REQUIRED_CREDENTIALS:
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{key} is missing in {credentials_path}")
            credentials[key] = value.strip()

        logger.info(f"Loaded credentials from {credentials_path}")
        logger.debug(f"Notion token: {mask_secret(credentials['notion_token'])}")
        logger.debug(f"Database ID: {credentials['notion_database_id']}")
        return credentials

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> str:
        value: str = self.settings.get(section, key, fallback=fallback)
        return value

    def getint(self, section: str, key: str, fallback: Optional[int] = None) -> int:
        try:
            value: int = self.settings.getint(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {key} must be an integer: {e}") from e
        return value

    def getfloat(self, section: str, key: str, fallback: Optional[float] = None) -> float:
        try:
            value: float = self.settings.getfloat(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {key} must be a number: {e}") from e
        return value

    def getboolean(self, section: str, key: str, fallback: Optional[bool] = None) -> bool:
        try:
            value: bool = self.settings.getboolean(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {key} must be a boolean: {e}") from e
        return value

    def get_section(self, section: str) -> dict[str, str]:
        if not self.settings.has_section(section):
            return {}

        return {key: self.settings.get(section, key) for key in self.settings.options(section)}

    def get_notion_config(self) -> NotionConfig:
        page_size: int = self.getint('api', 'page_size', fallback=DEFAULT_PAGE_SIZE)
        if not 1 <= page_size <= 100:
            raise ConfigurationError(f"[api] page_size must be between 1 and 100, got {page_size}")

        config = NotionConfig(
            token=self.credentials['notion_token'],
            database_id=self.credentials['notion_database_id'],
            api_base_url=self.get('api', 'base_url', fallback=DEFAULT_API_BASE_URL),
            notion_version=self.get('api', 'notion_version', fallback=DEFAULT_NOTION_VERSION),
            page_size=page_size,
            timeout=self.getfloat('api', 'timeout', fallback=DEFAULT_TIMEOUT),
        )
        logger.debug(f"Notion API URL: {config.query_url}")
        return config

    def get_field_mappings(self) -> dict[str, tuple[str, str]]:
        """
        Parse [fields] section and return field mappings.

        Config format: column = Property Name:kind
        Returns: {column: (property_name, kind)}
        """
        mappings: dict[str, tuple[str, str]] = {}

        for column, value in self.get_section('fields').items():
            # property names may themselves contain colons
            property_name, sep, kind = value.rpartition(':')
            if not sep or not property_name.strip() or not kind.strip():
                raise ConfigurationError(f"Invalid field mapping for {column}: {value}")

            mappings[column] = (property_name.strip(), kind.strip().lower())

        return mappings
