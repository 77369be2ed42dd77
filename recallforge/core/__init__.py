"""
Core Infrastructure for RecallForge.

Architecture Position
---------------------
    CLI (outermost)
      └── Study engine (models, weights, sampler, scheduler, engine)
            └── Storage (repository interface and backends)
                  └── **Core** (innermost - you are here)

Core has no dependencies on other RecallForge modules.

Components
----------
**Configuration (config.py)**
    Nested dataclasses with YAML loading, ${VAR_NAME} expansion and
    RECALLFORGE_* environment overrides.

**Logging (logging.py)**
    Structured logging with key=value fields and context binding.

**Exceptions (exceptions.py)**
    RecallForgeError hierarchy with "why it happened" / "how to fix" guidance.
"""

from recallforge.core.config import Config, load_config
from recallforge.core.exceptions import RecallForgeError
from recallforge.core.logging import configure_logging, get_logger

__all__ = [
    "Config",
    "load_config",
    "RecallForgeError",
    "configure_logging",
    "get_logger",
]
