"""
Configuration for the Nexmo client

Credentials can be passed directly, read from a JSON config file or taken
from environment variables.
"""

import os
import json
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional
from urllib.parse import quote, unquote

from .errors import ConfigError

DEFAULT_REST_URL = "https://rest.nexmo.com"
# The messaging endpoint is served over plain HTTP by the upstream API
DEFAULT_SMS_URL = "http://rest.nexmo.com"
DEFAULT_TIMEOUT = 30

# Characters left alone by encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def percent_encode(value: Any) -> str:
    """Percent-encode a value for use as a single URL component"""
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


@dataclass(frozen=True)
class Credentials:
    """API key/secret pair, stored percent-encoded"""
    key: str
    secret: str

    @classmethod
    def encode(cls, key: Any, secret: Any) -> "Credentials":
        """Build credentials from raw values"""
        if not key or not secret:
            raise ConfigError("Invalid config: key and secret are required")
        return cls(percent_encode(key), percent_encode(secret))

    def with_secret(self, new_secret: Any) -> "Credentials":
        """Return a copy carrying a replaced (raw) secret"""
        return replace(self, secret=percent_encode(new_secret))

    @property
    def raw_key(self) -> str:
        return unquote(self.key)

    @property
    def raw_secret(self) -> str:
        return unquote(self.secret)


def default_config_path() -> str:
    """Resolve the config file location"""
    # Try environment variable first
    config_path = os.environ.get("NEXMO_CONFIG")
    if config_path:
        return config_path

    # Use XDG-compliant default path
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return os.path.join(xdg_config_home, "nexmo_client", "config.json")

    home = os.environ.get("HOME")
    if home:
        return os.path.join(home, ".config", "nexmo_client", "config.json")
    return os.path.join(os.getcwd(), ".config", "nexmo_client", "config.json")


class NexmoConfig:
    """Configuration for the Nexmo client"""

    def __init__(self, key: Optional[str] = None, secret: Optional[str] = None,
                 rest_base_url: str = DEFAULT_REST_URL,
                 sms_base_url: str = DEFAULT_SMS_URL,
                 timeout: float = DEFAULT_TIMEOUT,
                 use_cancel_endpoint: bool = False):
        if not key or not secret:
            raise ConfigError("Invalid config: key and secret are required")

        self.key = key
        self.secret = secret
        self.rest_base_url = rest_base_url.rstrip('/')
        self.sms_base_url = sms_base_url.rstrip('/')
        self.timeout = timeout
        # The upstream library cancels numbers through the buy endpoint;
        # this switches to /number/cancel instead
        self.use_cancel_endpoint = use_cancel_endpoint

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NexmoConfig":
        """Build a config from a plain dict such as {'key': ..., 'secret': ...}"""
        known = ('key', 'secret', 'rest_base_url', 'sms_base_url', 'timeout', 'use_cancel_endpoint')
        return cls(**{name: data[name] for name in known if name in data})

    @classmethod
    def from_file(cls, config_path: Optional[str] = None) -> "NexmoConfig":
        """Load configuration from a JSON file"""
        if config_path is None:
            config_path = default_config_path()

        if not os.path.exists(config_path):
            raise ConfigError(f"Config file not found: {config_path}")

        with open(config_path, 'r') as f:
            try:
                config_data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Config file is not valid JSON: {config_path}") from e

        for field in ('key', 'secret'):
            if not config_data.get(field):
                raise ConfigError(f"Missing required config field: {field}")

        return cls.from_mapping(config_data)

    @classmethod
    def from_env(cls) -> "NexmoConfig":
        """Load configuration from environment variables"""
        timeout = os.environ.get("NEXMO_TIMEOUT")
        try:
            timeout = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError as e:
            raise ConfigError(f"NEXMO_TIMEOUT must be a number, got {timeout!r}") from e

        return cls(
            key=os.environ.get("NEXMO_API_KEY"),
            secret=os.environ.get("NEXMO_API_SECRET"),
            rest_base_url=os.environ.get("NEXMO_REST_URL", DEFAULT_REST_URL),
            sms_base_url=os.environ.get("NEXMO_SMS_URL", DEFAULT_SMS_URL),
            timeout=timeout,
        )

    def credentials(self) -> Credentials:
        return Credentials.encode(self.key, self.secret)
