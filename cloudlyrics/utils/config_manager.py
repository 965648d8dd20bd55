"""Configuration manager for cloudlyrics."""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
import yaml

from cloudlyrics.core.errors import ConfigurationError


@dataclass(frozen=True)
class LyricsCardConfig:
    """
    歌词卡片配置

    entity 是唯一必填项，缺失时在配置阶段立即失败。
    """
    entity: str
    show_header: bool = True
    show_cover: bool = True
    show_translation: bool = True
    offset_step: float = 0.5

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]], offset_step: float = 0.5) -> "LyricsCardConfig":
        """
        从配置字典构建卡片配置

        Args:
            config: 卡片配置字典
            offset_step: 偏移量调整步长（秒）

        Returns:
            LyricsCardConfig 实例

        Raises:
            ConfigurationError: 未配置 entity（媒体播放器实体）
        """
        config = config or {}
        entity = config.get('entity')
        if not entity or not str(entity).strip():
            raise ConfigurationError("请配置 entity（媒体播放器实体）")

        return cls(
            entity=str(entity).strip(),
            show_header=bool(config.get('show_header', True)),
            show_cover=bool(config.get('show_cover', True)),
            show_translation=bool(config.get('show_translation', True)),
            offset_step=float(offset_step),
        )


class ConfigManager:
    """
    Configuration manager for cloudlyrics.

    Handles loading and accessing configuration values from the config file.
    """

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize the ConfigManager.

        Args:
            config_path: Path to the configuration file

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        self.logger = logging.getLogger("cloudlyrics.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """
        Load the configuration from the config file.

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        if not os.path.exists(self.config_path):
            example_path = f"{self.config_path}.example"
            if os.path.exists(example_path):
                self.logger.error(
                    f"Configuration file {self.config_path} not found. "
                    f"Please copy {example_path} to {self.config_path} and update it."
                )
            else:
                self.logger.error(f"Configuration file {self.config_path} not found.")
            raise FileNotFoundError(f"Configuration file {self.config_path} not found")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as config_file:
                self.config = yaml.safe_load(config_file) or {}
                self.logger.debug(f"Loaded configuration from {self.config_path}")
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing configuration file: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key (dot notation for nested keys)
            default: Default value to return if the key is not found

        Returns:
            The configuration value or the default value if not found
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                self.logger.debug(f"Configuration key '{key}' not found, using default: {default}")
                return default

        return value

    def get_home_assistant_url(self) -> str:
        """
        Get the Home Assistant base URL.

        Returns:
            The Home Assistant base URL without a trailing slash

        Raises:
            ConfigurationError: If the URL is not set
        """
        url = self.get('home_assistant.url')
        if not url or not str(url).strip():
            self.logger.error("Home Assistant URL not set in configuration")
            raise ConfigurationError("Home Assistant URL not set in configuration")
        return str(url).strip().rstrip('/')

    def get_home_assistant_token(self) -> Optional[str]:
        """
        Get the Home Assistant long-lived access token.

        Returns:
            The token or None if not set
        """
        token = self.get('home_assistant.token', '')
        if not token or token == "YOUR_LONG_LIVED_ACCESS_TOKEN_HERE":
            return None
        return str(token).strip()

    def get_card_config(self) -> LyricsCardConfig:
        """
        Get the lyrics card configuration.

        Returns:
            The validated card configuration

        Raises:
            ConfigurationError: If the media player entity is not set
        """
        return LyricsCardConfig.from_dict(self.get('card', {}), offset_step=self.get_offset_step())

    def get_lyrics_api_base_url(self) -> str:
        """
        Get the base URL of the lyrics API.

        Returns:
            The lyrics API base URL (defaults to the Home Assistant URL)
        """
        url = self.get('lyrics.api_base_url')
        if url and str(url).strip():
            return str(url).strip().rstrip('/')
        return self.get_home_assistant_url()

    def get_request_timeout(self) -> float:
        """
        Get the HTTP request timeout in seconds.

        Returns:
            The request timeout
        """
        return float(self.get('lyrics.request_timeout', 10))

    def get_offset_step(self) -> float:
        """
        Get the offset adjustment step in seconds.

        Returns:
            The offset step
        """
        return float(self.get('lyrics.offset_step', 0.5))

    def get_tick_interval(self) -> float:
        """
        Get the display tick interval in seconds.

        Returns:
            The tick interval (about one frame at 30 fps by default)
        """
        return float(self.get('sync.tick_interval', 0.033))

    def get_poll_interval(self) -> float:
        """
        Get the playback state polling interval in seconds.

        Returns:
            The polling interval
        """
        return float(self.get('sync.poll_interval', 1.0))

    def get_offset_file(self) -> str:
        """
        Get the path of the offset storage file.

        Returns:
            The offset file path
        """
        return self.get('storage.offset_file', 'data/lyric_offsets.json')

    def get_discord_webhook_url(self) -> Optional[str]:
        """
        Get the Discord webhook URL used to display lyrics.

        Returns:
            The webhook URL or None if the Discord display is disabled
        """
        url = self.get('display.discord_webhook_url', '')
        return str(url).strip() if url else None

    def get_display_min_update_interval(self) -> float:
        """
        Get the minimum interval between two Discord message edits.

        Returns:
            The minimum interval in seconds
        """
        return float(self.get('display.min_update_interval', 1.0))

    def get_display_window_lines(self) -> int:
        """
        Get the number of lines shown before and after the current line.

        Returns:
            The window size
        """
        return int(self.get('display.window_lines', 2))

    def get_log_level(self) -> str:
        """
        Get the logging level.

        Returns:
            The logging level
        """
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> Optional[str]:
        """
        Get the log file path.

        Returns:
            The log file path or None if not set
        """
        return self.get('logging.file', None)

    def get_log_max_size(self) -> int:
        """
        Get the maximum log file size.

        Returns:
            The maximum log file size in bytes
        """
        return self.get('logging.max_size', 10485760)  # 10 MB

    def get_log_backup_count(self) -> int:
        """
        Get the number of backup log files to keep.

        Returns:
            The number of backup log files
        """
        return self.get('logging.backup_count', 5)
