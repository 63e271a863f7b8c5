"""
MQM CI Bridge — Configuration
Loads .env automatically, then reads all settings from environment variables.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from mqm.errors import ConfigurationError

_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)

DEFAULT_CLIENT_TYPE = "HPE_CI_CLIENT"


@dataclass(frozen=True)
class MqmConnectionConfig:
    """Where the MQM server lives and how to sign in to it."""
    location: str
    shared_space: str
    username: str = ""
    password: str = ""
    client_type: str = DEFAULT_CLIENT_TYPE
    timeout: float = 30.0

    def validate(self) -> None:
        missing = [
            name
            for name in ("location", "shared_space", "client_type")
            if not str(getattr(self, name) or "").strip()
        ]
        if missing:
            raise ConfigurationError(missing)


@dataclass(frozen=True)
class JenkinsConfig:
    """Jenkins remote-access credentials."""
    base_url: str
    username: str
    api_token: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    host: str
    port: int
    debug: bool
    mqm: MqmConnectionConfig
    jenkins: JenkinsConfig


def load_config() -> AppConfig:
    return AppConfig(
        host=os.getenv("APP_HOST", "0.0.0.0"),
        port=int(os.getenv("APP_PORT", "8000")),
        debug=os.getenv("APP_DEBUG", "false").lower() == "true",
        mqm=MqmConnectionConfig(
            location=os.getenv("MQM_LOCATION", ""),
            shared_space=os.getenv("MQM_SHARED_SPACE", ""),
            username=os.getenv("MQM_USERNAME", ""),
            password=os.getenv("MQM_PASSWORD", ""),
            client_type=os.getenv("MQM_CLIENT_TYPE", DEFAULT_CLIENT_TYPE),
            timeout=float(os.getenv("MQM_TIMEOUT", "30")),
        ),
        jenkins=JenkinsConfig(
            base_url=os.getenv("JENKINS_URL", "http://localhost:8080"),
            username=os.getenv("JENKINS_USER", ""),
            api_token=os.getenv("JENKINS_API_TOKEN", ""),
        ),
    )


def validate_config(cfg: AppConfig) -> None:
    """Fail fast if the MQM connection is not configured."""
    missing: list[str] = []
    try:
        cfg.mqm.validate()
    except ConfigurationError as exc:
        missing.extend(f"MQM_{name.upper()}" for name in exc.missing)
    if not cfg.jenkins.api_token:
        missing.append("JENKINS_API_TOKEN")
    if missing:
        print(
            f"\n  ERROR: Missing bridge settings: {', '.join(missing)}\n"
            f"  Copy backend/.env.example → backend/.env and fill in the values.\n",
            file=sys.stderr,
        )
        sys.exit(1)
