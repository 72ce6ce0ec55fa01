import logging
from pathlib import Path
from datetime import datetime
from typing import Optional
import sys


class LoggerManager:
    """Manages application logging configuration with a console and a dated log file"""

    def __init__(self, config: 'ConfigLoader', script_name: Optional[str] = None) -> None:
        """
        Initialise logger manager

        Args:
            config: ConfigLoader instance
            script_name: Override script name (auto-detected if None)
        """
        self.config: 'ConfigLoader' = config
        self.script_name: str = script_name or self._detect_script_name()
        self.log_path: Path = Path(config.get('paths', 'base_log_path', fallback='logs'))
        self.log_path.mkdir(parents=True, exist_ok=True)

        self._configured: bool = False

    def _detect_script_name(self) -> str:
        """Auto-detect script name from main module"""
        import __main__
        if hasattr(__main__, '__file__') and __main__.__file__ is not None:
            return Path(__main__.__file__).stem
        return 'notion_export'

    def _build_log_filename(self, pattern: str) -> str:
        """
        Build log filename from pattern

        Args:
            pattern: Filename pattern with {script_name}, {date}, {time} placeholders

        Returns:
            Formatted filename
        """
        now: datetime = datetime.now()
        replacements: dict[str, str] = {
            'script_name': self.script_name,
            'date': now.strftime('%Y%m%d'),
            'time': now.strftime('%H%M%S')
        }
        return pattern.format(**replacements)

    def configure_application_logger(self) -> Path:
        """Configure root logger with file and console handlers, returns the log file path"""
        log_pattern: str = self.config.get('logging', 'log_filename_pattern',
                                           fallback='{script_name}_{date}.log')
        log_file: Path = self.log_path / self._build_log_filename(log_pattern)

        if self._configured:
            return log_file

        root_logger: logging.Logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.setLevel(logging.DEBUG)

        console_level: str = self.config.get('logging', 'console_log_level', fallback='INFO').upper()
        file_level: str = self.config.get('logging', 'file_log_level', fallback='DEBUG').upper()

        console_formatter: logging.Formatter = logging.Formatter(
            fmt='%(asctime)s\t%(levelname)-8s%(module)-20s:%(lineno)-4d\t%(message)s',
            datefmt='%H:%M:%S'
        )
        console_handler: logging.StreamHandler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, console_level, logging.INFO))
        console_handler.setFormatter(console_formatter)

        file_formatter: logging.Formatter = logging.Formatter(
            fmt='%(asctime)s.%(msecs)03d | %(levelname)-8s | %(message)s | Logger:%(name)-30s | Mod:%(module)-20s:%(lineno)-4d | Func:%(funcName)-30s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler: logging.FileHandler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(getattr(logging, file_level, logging.DEBUG))
        file_handler.setFormatter(file_formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

        # keep per-request connection chatter out of the console
        logging.getLogger('urllib3').setLevel(logging.WARNING)

        self._configured = True

        logger: logging.Logger = logging.getLogger(__name__)
        logger.info(f"Application logger configured: {log_file}")
        logger.info(f"Console level: {console_level}, File level: {file_level}")
        return log_file

    def cleanup_old_logs(self, days_to_keep: Optional[int] = None) -> int:
        """
        Remove log files older than specified days

        Args:
            days_to_keep: Number of days to retain (from config if None)

        Returns:
            Number of files removed
        """
        if days_to_keep is None:
            days_to_keep = self.config.getint('logging', 'log_retention_days', fallback=30)

        cutoff_time: float = datetime.now().timestamp() - (days_to_keep * 86400)
        removed_count: int = 0
        logger: logging.Logger = logging.getLogger(__name__)

        log_file: Path
        for log_file in self.log_path.glob('*.log'):
            if log_file.stat().st_mtime < cutoff_time:
                try:
                    log_file.unlink()
                    removed_count += 1
                except OSError as e:
                    logger.warning(f"Could not remove old log {log_file}: {e}")

        if removed_count > 0:
            logger.info(f"Cleaned up {removed_count} old log files")

        return removed_count
