"""
Configuration management for topicnews.
"""
import os
import copy
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    "storage": {
        "path": "topicnews.db",
        "key": "preferences"
    },
    "newsapi": {
        "base_url": "https://newsapi.org/v2/everything",
        "language": "en",
        "sort_by": "publishedAt",
        "api_key": None,
        "timeout_seconds": None
    },
    "feed": {
        "sequence_guard": False
    },
    "display": {
        "title": "AI News Preferences App",
        "placeholder": "Add topic (e.g., machine learning)"
    }
}

class Config:
    """
    Configuration manager for topicnews.
    """
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the Config.

        Args:
            config_path: Path to a YAML or JSON configuration file
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            try:
                path = Path(self.config_path)
                if path.exists():
                    if path.suffix.lower() in ['.yaml', '.yml']:
                        with open(path, 'r') as f:
                            user_config = yaml.safe_load(f) or {}
                    elif path.suffix.lower() == '.json':
                        with open(path, 'r') as f:
                            user_config = json.load(f)
                    else:
                        raise ValueError(f"Unsupported config file format: {path.suffix}")

                    self._update_dict(config, user_config)
                else:
                    logger.warning(f"Config file {self.config_path} not found")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error loading config from {self.config_path}: {e}")
                logger.warning("Using default configuration")

        self._override_from_env(config)

        # NEWSAPI_KEY is the variable name NewsAPI's own docs use
        if not config["newsapi"].get("api_key"):
            config["newsapi"]["api_key"] = os.getenv('NEWSAPI_KEY')

        return config

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _resolve_env_path(self, config: Dict, parts: List[str]) -> List[str]:
        """
        Map underscore-split variable parts onto existing config keys.

        ``NEWSAPI_SORT_BY`` resolves to ``['newsapi', 'sort_by']`` because
        ``sort_by`` is a known key; unknown names fall back to one key per part.
        """
        path = []
        current = config
        i = 0
        while i < len(parts):
            match = None
            for j in range(len(parts), i, -1):
                candidate = '_'.join(parts[i:j])
                if isinstance(current, dict) and candidate in current:
                    match = (candidate, j)
                    break
            if match is None:
                path.append(parts[i])
                current = None
                i += 1
            else:
                path.append(match[0])
                current = current[match[0]]
                i = match[1]
        return path

    def _override_from_env(self, config: Dict, prefix: str = 'TOPICNEWS_') -> None:
        """
        Override configuration with environment variables.

        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for key, value in os.environ.items():
            if not key.startswith(prefix) or key == f'{prefix}CONFIG_PATH':
                continue

            parts = self._resolve_env_path(config, key[len(prefix):].lower().split('_'))

            current = config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            try:
                current[parts[-1]] = json.loads(value)
            except json.JSONDecodeError:
                current[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'newsapi.base_url')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        parts = key.split('.')
        current = self.config

        for part in parts:
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value, creating intermediate sections as needed.

        Args:
            key: Dot-separated key path
            value: Value to store
        """
        parts = key.split('.')
        current = self.config
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def save(self, path: Optional[str] = None) -> bool:
        """
        Save the current configuration to a file.

        Args:
            path: Path to save the configuration to

        Returns:
            True if successful, False otherwise
        """
        save_path = path or self.config_path
        if not save_path:
            logger.error("No path specified for saving configuration")
            return False

        try:
            path = Path(save_path)
            if path.suffix.lower() in ['.yaml', '.yml']:
                with open(path, 'w') as f:
                    yaml.dump(self.config, f, default_flow_style=False)
            elif path.suffix.lower() == '.json':
                with open(path, 'w') as f:
                    json.dump(self.config, f, indent=2)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

            return True
        except (OSError, ValueError) as e:
            logger.error(f"Error saving config to {save_path}: {e}")
            return False


# Global configuration instance
config = Config(os.getenv('TOPICNEWS_CONFIG_PATH'))

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value from the global configuration.

    Args:
        key: Dot-separated key path (e.g., 'storage.path')
        default: Default value if key not found

    Returns:
        Configuration value
    """
    return config.get(key, default)
