"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
from typing import Optional

from drimefs.auth import AuthInfo
from drimefs.logger import log
from drimefs.util.urls import DEFAULT_API_PATH, DEFAULT_BASE_URL


@dataclass
class DrimeConfig:
    """Service endpoint, credentials and behaviour of the filesystem."""

    base_url: str = DEFAULT_BASE_URL
    api_path: str = DEFAULT_API_PATH
    root: str = ""
    timeout: float = 30.0
    hard_delete: bool = True

    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @staticmethod
    def load(section: SectionProxy) -> DrimeConfig:
        """Load overridden variables from a section within a config file."""
        config = DrimeConfig()

        config.base_url = section.get("base_url", fallback=config.base_url)
        config.api_path = section.get("api_path", fallback=config.api_path)
        config.root = section.get("root", fallback=config.root)
        config.timeout = section.getfloat("timeout", fallback=config.timeout)
        config.hard_delete = section.getboolean("hard_delete", fallback=config.hard_delete)

        config.token = section.get("token", fallback=None) or None
        config.email = section.get("email", fallback=None) or None
        config.password = section.get("password", fallback=None) or None

        return config

    def auth_info(self) -> AuthInfo:
        return AuthInfo(token=self.token, email=self.email, password=self.password)

    def __repr__(self) -> str:
        return (
            f"DrimeConfig(base_url={self.base_url!r}, api_path={self.api_path!r}, "
            f"root={self.root!r}, timeout={self.timeout!r}, "
            f"hard_delete={self.hard_delete!r}, token={'***' if self.token else None}, "
            f"email={self.email!r}, password={'***' if self.password else None})"
        )


@dataclass
class PacerConfig:
    """Configuration variables related to request pacing and retries."""

    min_sleep: float = 0.01
    max_sleep: float = 2.0
    decay_constant: int = 2
    attack_constant: int = 1
    retries: int = 10

    @staticmethod
    def load(section: SectionProxy) -> PacerConfig:
        """Load overridden variables from a section within a config file."""
        config = PacerConfig()

        config.min_sleep = section.getfloat("min_sleep", fallback=config.min_sleep)
        config.max_sleep = section.getfloat("max_sleep", fallback=config.max_sleep)
        config.decay_constant = section.getint(
            "decay_constant", fallback=config.decay_constant
        )
        config.attack_constant = section.getint(
            "attack_constant", fallback=config.attack_constant
        )
        config.retries = section.getint("retries", fallback=config.retries)

        return config


@dataclass
class MkdirConfig:
    """Configuration variables for folder-creation reconciliation."""

    reconcile_attempts: int = 3
    reconcile_delay: float = 0.5

    @staticmethod
    def load(section: SectionProxy) -> MkdirConfig:
        """Load overridden variables from a section within a config file."""
        config = MkdirConfig()

        config.reconcile_attempts = section.getint(
            "reconcile_attempts", fallback=config.reconcile_attempts
        )
        config.reconcile_delay = section.getfloat(
            "reconcile_delay", fallback=config.reconcile_delay
        )

        return config


@dataclass
class Config:
    """Configuration variables."""

    drime: DrimeConfig = field(default_factory=DrimeConfig)
    pacer: PacerConfig = field(default_factory=PacerConfig)
    mkdir: MkdirConfig = field(default_factory=MkdirConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(filename, "r") as f:
                parser.read_string(f.read(), filename)

            if "drime" in parser:
                config.drime = DrimeConfig.load(parser["drime"])
            if "pacer" in parser:
                config.pacer = PacerConfig.load(parser["pacer"])
            if "mkdir" in parser:
                config.mkdir = MkdirConfig.load(parser["mkdir"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.info(f"loaded config: {config}")

        return config
