from .alpha_service import AlphaService, get_alpha_service
from .signal_engine import SIGNAL_THRESHOLDS, SignalThresholds, build_alpha_signals
from .source_result import SourceResult, gather_sources

__all__ = [
    "AlphaService",
    "get_alpha_service",
    "SIGNAL_THRESHOLDS",
    "SignalThresholds",
    "build_alpha_signals",
    "SourceResult",
    "gather_sources",
]
