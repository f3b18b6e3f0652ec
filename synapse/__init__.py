"""Main package for Synapse."""

__version__ = "0.1.0"

from synapse.config import Config, load_config, setup_logging
from synapse.models import Identity, UserStats
from synapse.security import AuthGate, Unauthenticated
from synapse.usage import UsageMeter

__all__ = [
    "Config",
    "load_config",
    "setup_logging",
    "Identity",
    "UserStats",
    "AuthGate",
    "Unauthenticated",
    "UsageMeter",
    "__version__",
]
