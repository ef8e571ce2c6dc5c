"""
Core module containing data models, numeric utilities, decoding and the
analysis engine.

Uses lazy imports for modules with heavy dependencies (librosa).
"""

# Models are lightweight - import directly
from sonicprint.core.models import (
    Analysis,
    AnalysisIndexV1,
    AnalysisIndexV2,
    DecodedSong,
    FeaturesVersion,
    Song,
)

__all__ = [
    # Models (always available)
    "Analysis",
    "AnalysisIndexV1",
    "AnalysisIndexV2",
    "DecodedSong",
    "FeaturesVersion",
    "Song",
    # Heavy modules (lazy loaded)
    "Decoder",
    "LibrosaDecoder",
    "create_decoder",
    "AnalysisEngine",
    "AnalysisOptions",
    "create_analysis_engine",
    "BatchProcessor",
    "BatchResult",
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    if name in ("Decoder", "LibrosaDecoder", "create_decoder"):
        from sonicprint.core.decoder import Decoder, LibrosaDecoder, create_decoder
        return {"Decoder": Decoder, "LibrosaDecoder": LibrosaDecoder, "create_decoder": create_decoder}[name]
    elif name in ("AnalysisEngine", "AnalysisOptions", "create_analysis_engine"):
        from sonicprint.core.engine import AnalysisEngine, AnalysisOptions, create_analysis_engine
        return {
            "AnalysisEngine": AnalysisEngine,
            "AnalysisOptions": AnalysisOptions,
            "create_analysis_engine": create_analysis_engine,
        }[name]
    elif name in ("BatchProcessor", "BatchResult"):
        from sonicprint.core.batch_processor import BatchProcessor, BatchResult
        return BatchProcessor if name == "BatchProcessor" else BatchResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
