# creator/core/logging.py
import sys
import os
from datetime import datetime
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# LOG FILTERING
# ═══════════════════════════════════════════════════════════════════════════════
# Only these scopes are shown at INFO level
# Everything else is gated behind DEBUG

INFO_SCOPES = {
    "ORCHESTRATOR",  # Run lifecycle
    "PLANNER",       # Strategy selection
    "SCHEDULER",     # Layering
    "EXECUTOR",      # Layer dispatch, failures, timeouts
    "API",           # HTTP surface
}

# DEBUG-only scopes (hidden by default)
DEBUG_SCOPES = {
    "VALIDATOR",
    "ASSEMBLER",
    "ENGINE",
    "LIBRARY",
    "WS",
    "MONITORING",
}

# Check if DEBUG mode is enabled
DEBUG_MODE = os.getenv("CREATOR_DEBUG", "false").lower() == "true"


def _prefix(scope: str, creation_id: Optional[str] = None) -> str:
    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"
    if creation_id:
        prefix += f" [{creation_id[:8]}]"
    return prefix


def log(scope: str, message: str, data: Any = None, creation_id: Optional[str] = None) -> None:
    """
    Unified logging function for the creation service.

    Only INFO_SCOPES are shown by default.
    Set CREATOR_DEBUG=true to see all scopes.
    """
    if not DEBUG_MODE and scope not in INFO_SCOPES:
        return

    print(f"{_prefix(scope, creation_id)} {message}")

    if data:
        print(f"  Data: {data}")

    sys.stdout.flush()


def log_section(scope: str, title: str, creation_id: Optional[str] = None) -> None:
    """
    Log a section header with visual separator.
    """
    print(f"\n{'='*60}")
    print(f"{_prefix(scope, creation_id)} {title}")
    print(f"{'='*60}")
    sys.stdout.flush()
