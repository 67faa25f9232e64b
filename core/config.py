import copy
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_name": "snyk-mcp",
    "snyk_rest_api_url": "https://api.snyk.io/rest",
    "snyk_v1_api_url": "https://api.snyk.io/v1",
    "api_version": "2024-10-15",
    "snyk_token": None,
    "default_org_id": None,
    "http": {
        "timeout": 30.0,
        "max_connections": 50,
        "max_keepalive_connections": 10,
        "keepalive_expiry": 60.0,
    },
    "logging": {
        "dir": "logs",
        "file_name": "server.log",
        "level": "INFO",
    },
}

# environment variable -> config key
ENV_OVERRIDES = {
    "SNYK_TOKEN": "snyk_token",
    "SNYK_ORG_ID": "default_org_id",
    "SNYK_API_VERSION": "api_version",
}


class ConfigLoader:
    _instance = None
    _config = None

    def __new__(cls):
        """
        Create a singleton instance of ConfigLoader.
        Loads configuration from YAML file and the environment on first instantiation.
        """
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._load_config()
        return cls._instance

    @classmethod
    def _load_config(cls):
        """
        Load config.yaml over the built-in defaults, then overlay environment variables.
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        config_path = os.environ.get("SNYK_MCP_CONFIG") or os.path.join(
            os.path.dirname(__file__), "..", "config.yaml"
        )
        config_path = os.path.abspath(config_path)
        if os.path.isfile(config_path):
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            for key, value in loaded.items():
                if isinstance(value, dict) and isinstance(config.get(key), dict):
                    config[key].update(value)
                else:
                    config[key] = value

        load_dotenv()  # Loads variables from .env into the environment
        for env_name, key in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                config[key] = value
        log_level = os.environ.get("SNYK_MCP_LOG_LEVEL")
        if log_level:
            config["logging"]["level"] = log_level

        cls._config = config

    @classmethod
    def reset(cls):
        """
        Drop the loaded configuration so the next access reloads it. Used by tests.
        """
        cls._instance = None
        cls._config = None

    def get_config(self):
        """
        Return the loaded configuration dictionary.
        """
        return self._config


def get_config() -> Dict[str, Any]:
    """
    Helper function to get the singleton configuration instance's config dictionary.
    """
    return ConfigLoader().get_config()


def get_token() -> Optional[str]:
    return get_config().get("snyk_token") or None


def get_default_org_id() -> Optional[str]:
    return get_config().get("default_org_id") or None


def get_api_version() -> str:
    return get_config().get("api_version") or DEFAULT_CONFIG["api_version"]


def get_http_settings() -> Dict[str, Any]:
    return get_config().get("http") or DEFAULT_CONFIG["http"]
