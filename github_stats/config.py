"""Configuration for the commit statistics collector."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError, field_validator
from tomli_w import dump as toml_dump

from .constants import COLLECTION_DEFAULTS, DEFAULT_API_URL, DEFAULT_INTERVAL
from .exceptions import ConfigurationError
from .models import RepositoryTarget
from .utils import mask_token, parse_duration, validate_url

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "github_stats"
CONFIG_FILE = CONFIG_DIR / "config.toml"
CONFIG_VERSION = "1.0.0"


class ServerConfig(BaseModel):
    """Server connection details for GitHub or GitHub Enterprise."""

    api_url: str = DEFAULT_API_URL

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate API URL format."""
        if not validate_url(v):
            raise ValueError(f"api_url must be a valid HTTP(S) URL, got: {v}")
        return v.rstrip("/")


class APIConfig(BaseModel):
    """Configuration for API requests."""

    timeout: float = 0

    @field_validator("timeout")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"timeout must not be negative, got {v}")
        return v

    @property
    def request_timeout(self) -> Optional[float]:
        """Timeout to hand to requests; None keeps the transport default."""
        return self.timeout or None


class CollectionConfig(BaseModel):
    """How each collection cycle runs."""

    interval: str = COLLECTION_DEFAULTS["interval"]
    log_file: str = ""
    max_workers: int = COLLECTION_DEFAULTS["max_workers"]
    strict_decode: bool = COLLECTION_DEFAULTS["strict_decode"]

    @field_validator("max_workers")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        """Validate that numeric fields are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v


class OrgConfig(BaseModel):
    """An organization, its access token and the repositories to collect."""

    name: str
    token: str = ""
    repos: List[str] = []

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("organization name cannot be empty")
        return v.strip()


@dataclass(slots=True)
class Config:
    """Top-level configuration container."""

    version: str = CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    api: APIConfig = field(default_factory=APIConfig)
    collection: CollectionConfig = field(default_factory=CollectionConfig)
    orgs: List[OrgConfig] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path = CONFIG_FILE) -> "Config":
        """Load configuration data from disk.

        Args:
            path: Optional override for the configuration file path.

        Returns:
            Config: The loaded configuration object, or defaults when the
            file does not exist.

        Raises:
            ConfigurationError: If configuration file is corrupted or invalid.
        """

        if not path.exists():
            return cls()

        try:
            with path.open("rb") as handle:
                raw: Dict[str, Any] = tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to parse configuration file {path}: {exc}") from exc

        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Config":
        """Build a configuration from already parsed TOML data.

        Raises:
            ConfigurationError: If a section fails validation.
        """
        try:
            server = ServerConfig(**raw.get("server", {}))
            api = APIConfig(**raw.get("api", {}))
            collection = CollectionConfig(**raw.get("collection", {}))
            orgs = [OrgConfig(**org) for org in raw.get("orgs", [])]
        except (TypeError, ValidationError) as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

        return cls(
            version=raw.get("version", CONFIG_VERSION),
            server=server,
            api=api,
            collection=collection,
            orgs=orgs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "server": self.server.model_dump(),
            "api": self.api.model_dump(),
            "collection": self.collection.model_dump(),
            "orgs": [org.model_dump() for org in self.orgs],
        }

    def dump(self, path: Path = CONFIG_FILE) -> None:
        """Persist the configuration to disk.

        Args:
            path: Path to save the configuration file.
        """

        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            toml_dump(self.to_dict(), handle)

    def masked(self) -> Dict[str, Any]:
        """Configuration as a dict with tokens hidden, for display."""
        payload = self.to_dict()
        for org in payload["orgs"]:
            org["token"] = mask_token(org["token"])
        return payload

    @property
    def interval(self) -> timedelta:
        """Active interval; an invalid or non-positive value falls back to 1h."""
        try:
            interval = parse_duration(self.collection.interval)
        except ValueError as exc:
            logger.warning(f"{exc}; using {DEFAULT_INTERVAL}")
            return DEFAULT_INTERVAL

        if interval <= timedelta(0):
            logger.warning(
                f"interval must be positive, got {self.collection.interval!r}; "
                f"using {DEFAULT_INTERVAL}"
            )
            return DEFAULT_INTERVAL
        return interval

    @property
    def log_file(self) -> Optional[Path]:
        value = self.collection.log_file.strip()
        return Path(value).expanduser() if value else None

    def repository_targets(self) -> List[RepositoryTarget]:
        """Create one collection target per configured repository.

        Returns:
            Targets in configuration order, each pointing at
            ``{api_url}/repos/{org}/{repo}``.
        """
        interval = self.interval
        targets: List[RepositoryTarget] = []
        for org in self.orgs:
            for repo in org.repos:
                targets.append(
                    RepositoryTarget(
                        org=org.name,
                        name=repo,
                        url=f"{self.server.api_url}/repos/{org.name}/{repo}",
                        token=org.token,
                        interval=interval,
                    )
                )
        return targets

    def validate_required_fields(self) -> None:
        """Validate that the configuration can drive a collection cycle.

        Raises:
            ConfigurationError: If any required field is missing.
        """
        errors = []
        if not self.orgs:
            errors.append("No organizations configured. Run 'github-stats init' first.")
        for org in self.orgs:
            if not org.token:
                errors.append(f"Organization '{org.name}' has no token.")
            if not org.repos:
                errors.append(f"Organization '{org.name}' lists no repositories.")

        if errors:
            raise ConfigurationError("Configuration incomplete:\n" + "\n".join(f"  - {e}" for e in errors))
