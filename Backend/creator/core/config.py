# creator/core/config.py
"""
Application configuration - single source of truth for all settings.
"""
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


FAIL_FAST = "fail_fast"
COLLECT = "collect"


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class OrchestratorSettings:
    """Orchestration run configuration."""
    # Seconds per engine call. 0 disables the timeout.
    task_timeout: float = field(default_factory=lambda: float(os.getenv("CREATOR_TASK_TIMEOUT", "60")))
    # fail_fast: cancel siblings on first failure
    # collect: let the layer finish, then abort before the next one
    failure_policy: str = field(default_factory=lambda: os.getenv("CREATOR_FAILURE_POLICY", FAIL_FAST).lower())
    placeholder_markers: List[str] = field(default_factory=lambda: _env_list("CREATOR_PLACEHOLDER_MARKERS", "TODO"))
    history_limit: int = field(default_factory=lambda: int(os.getenv("CREATOR_HISTORY_LIMIT", "100")))

    def __post_init__(self):
        if self.failure_policy not in (FAIL_FAST, COLLECT):
            raise ValueError(
                f"Unknown failure policy '{self.failure_policy}' (expected '{FAIL_FAST}' or '{COLLECT}')"
            )


@dataclass
class ServerSettings:
    """HTTP / WebSocket surface configuration."""
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "4000")))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))


@dataclass
class Settings:
    """Main application settings."""
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")


# Singleton instance
settings = Settings()
