"""Simple YAML configuration loader for ShapeScribe."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "shapescribe.yaml"
API_KEY_ENV = "GEMINI_API_KEY"


class ShapeScribeConfig:
    """ShapeScribe configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses shapescribe.yaml
                        in the current directory.
        """
        self.config_file = Path(config_path or DEFAULT_CONFIG_FILE)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'output' in config and 'directory' in config['output']:
            out_dir = config['output']['directory']
            if not os.path.isabs(out_dir):
                config['output']['directory'] = str(config_dir / out_dir)

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'gemini.model').

        Args:
            key_path: Dot-separated key path (e.g., 'assembly.proxy_base_url')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'transform.tone')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_api_key(self) -> str:
        """Get the Gemini API key from config or the environment.

        Raises:
            ValueError: If no key is configured anywhere
        """
        api_key = self.get('gemini.api_key') or os.environ.get(API_KEY_ENV)
        if not api_key:
            raise ValueError(f"Gemini API key not configured (gemini.api_key or ${API_KEY_ENV})")
        return api_key

    def get_output_directory(self) -> str:
        """Get output artifact directory path."""
        out_dir = self.get('output.directory', 'output')
        return str(Path(out_dir).absolute())
