"""Configuration loading, saving and credential resolution."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from cloudy.errors import ConfigError, ConfigNotFoundError, NoCredentialsError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CLOUDY_CONFIG"
CREDENTIALS_ENV_VAR = "CLOUDINARY_URL"
CREDENTIALS_SCHEME = "cloudinary"


class CloudinaryConfig(BaseModel):
    """Cloudinary account credentials."""

    cloud_name: str
    api_key: str
    api_secret: str
    default_folder: str = ""

    @field_validator("cloud_name", "api_key", "api_secret", "default_folder", mode="before")
    @classmethod
    def coerce_str(cls, v: object) -> str:
        """YAML turns numeric-looking keys into ints; keep them as strings."""
        if v is None:
            return ""
        return str(v).strip()


class UploadOptions(BaseModel):
    """Upload tuning options."""

    max_workers: int = 8
    timeout_seconds: float | None = 300

    @field_validator("max_workers")
    @classmethod
    def positive_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_workers must be at least 1")
        return v


class Config(BaseModel):
    """Top-level config file contents."""

    cloudinary: CloudinaryConfig
    options: UploadOptions = UploadOptions()


def config_path() -> Path:
    """Path of the per-user config file (``~/.cloudyrc`` unless overridden)."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return Path.home() / ".cloudyrc"


def load_config(path: Path | None = None) -> Config:
    """Load the config file."""
    path = path or config_path()
    if not path.exists():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} does not contain a mapping")

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write the config file, readable only by the current user."""
    path = path or config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(), f, sort_keys=False)
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"Failed to write config file {path}: {e}") from e
    logger.debug("Wrote config to %s", path)
    return path


def parse_cloudinary_url(value: str) -> CloudinaryConfig | None:
    """
    Parse ``cloudinary://<api_key>:<api_secret>@<cloud_name>``.

    Returns None for anything malformed instead of raising.
    """
    prefix = f"{CREDENTIALS_SCHEME}://"
    if not value.startswith(prefix):
        return None

    parts = value[len(prefix):].split("@")
    if len(parts) != 2:
        return None

    credentials = parts[0].split(":")
    if len(credentials) != 2:
        return None

    api_key, api_secret = credentials
    cloud_name = parts[1]
    if not (api_key and api_secret and cloud_name):
        return None

    return CloudinaryConfig(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret)


def config_from_env() -> Config | None:
    """Build a config from the ``CLOUDINARY_URL`` environment variable."""
    value = os.environ.get(CREDENTIALS_ENV_VAR)
    if not value:
        return None

    cloudinary = parse_cloudinary_url(value.strip())
    if cloudinary is None:
        logger.warning("Ignoring malformed %s", CREDENTIALS_ENV_VAR)
        return None
    return Config(cloudinary=cloudinary)


def resolve_config(path: Path | None = None) -> Config:
    """
    Find credentials: the config file first, then the environment.

    Raises:
        NoCredentialsError: If neither source has usable credentials
    """
    try:
        return load_config(path)
    except ConfigNotFoundError as e:
        logger.debug("Config file unavailable (%s), trying %s", e, CREDENTIALS_ENV_VAR)
    except ConfigError as e:
        logger.warning("Ignoring config file: %s", e)

    config = config_from_env()
    if config is None:
        raise NoCredentialsError(
            "No configuration found. Run 'cloudy init' first "
            f"or set the {CREDENTIALS_ENV_VAR} environment variable."
        )
    return config


def mask_secret(secret: str) -> str:
    """Hide all but the last four characters of a secret."""
    visible = 4
    if len(secret) <= visible:
        return "*" * len(secret)
    hidden = len(secret) - visible
    return "*" * hidden + secret[hidden:]
