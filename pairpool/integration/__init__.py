"""
Integration layer: deadline framing and configuration loading.
"""

from .config import RouterConfig, load_config
from .router import Router, TxResult, build_router

__all__ = [
    "RouterConfig",
    "load_config",
    "Router",
    "TxResult",
    "build_router",
]
