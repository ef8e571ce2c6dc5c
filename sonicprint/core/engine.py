"""
Analysis engine for sonicprint.

Runs the five descriptor analyzers concurrently over one sample buffer and
assembles their outputs into an Analysis. Also analyzes files and batches
of files through a Decoder.
"""

import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np

from sonicprint.analyzers import (
    BPMDesc,
    ChromaAnalyzer,
    ChromaDesc,
    LoudnessAnalyzer,
    LoudnessDesc,
    SpectralAnalyzer,
    SpectralDesc,
    TempoAnalyzer,
    ZeroCrossingRateAnalyzer,
)
from sonicprint.core.decoder import Decoder, LibrosaDecoder, create_decoder
from sonicprint.core.descriptor_base import Analyzer
from sonicprint.core.models import Analysis, FeaturesVersion, Song
from sonicprint.utils.errors import AnalysisError, ConfigurationError, SonicprintError
from sonicprint.utils.logging import create_logger_with_context

SAMPLE_RATE: int = 22050

# Order in which analyzer results are joined; the first failure in this order wins
JOIN_ORDER: Tuple[str, ...] = ('tempo', 'chroma', 'spectral', 'loudness', 'zcr')
# Order in which analyzer outputs are concatenated into the Analysis
FEATURE_ORDER: Tuple[str, ...] = ('tempo', 'zcr', 'spectral', 'loudness', 'chroma')

# Shortest buffer every descriptor can process
MIN_SAMPLES: int = max(
    BPMDesc.WINDOW_SIZE,
    SpectralDesc.WINDOW_SIZE,
    LoudnessDesc.WINDOW_SIZE,
    ChromaDesc.WINDOW_SIZE,
)


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Options for analyzing songs.

    Attributes:
        features_version: Layout of the produced Analysis
        number_cores: Songs analyzed concurrently by analyze_paths()
    """

    features_version: FeaturesVersion = FeaturesVersion.LATEST
    number_cores: int = field(default_factory=lambda: os.cpu_count() or 1)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'features_version', FeaturesVersion(self.features_version))
        if self.number_cores < 1:
            raise ValueError(f"number_cores must be at least 1, got {self.number_cores}")


def create_descriptor_analyzers(
    sample_rate: int, features_version: FeaturesVersion
) -> Dict[str, Analyzer]:
    """Default analyzer for each feature family."""
    return {
        'tempo': TempoAnalyzer(sample_rate),
        'zcr': ZeroCrossingRateAnalyzer(sample_rate),
        'spectral': SpectralAnalyzer(sample_rate),
        'loudness': LoudnessAnalyzer(sample_rate),
        'chroma': ChromaAnalyzer(sample_rate, features_version),
    }


class AnalysisEngine:
    """
    Orchestrates the descriptor analyzers.

    Design:
    - Dependency Injection: decoder and analyzers can be replaced
    - Fork-join: one worker per feature family for every analyze() call,
      all joined before returning
    - Errors: the first failure in JOIN_ORDER is raised after every
      worker has finished
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        options: Optional[AnalysisOptions] = None,
        decoder: Optional[Decoder] = None,
        analyzers: Optional[Dict[str, Analyzer]] = None,
    ):
        """
        Initialize analysis engine.

        Args:
            sample_rate: Sample rate of every buffer passed to analyze()
            options: Features version and path-analysis concurrency
            decoder: Decoder used by song_from_path() and analyze_paths()
            analyzers: Analyzer per feature family (keys of FEATURE_ORDER)
        """
        self.sample_rate = sample_rate
        self.options = options or AnalysisOptions()
        self.decoder = decoder or LibrosaDecoder(target_sr=sample_rate)
        self.analyzers = analyzers or create_descriptor_analyzers(
            sample_rate, self.options.features_version
        )

        missing = set(FEATURE_ORDER) - set(self.analyzers)
        if missing:
            raise ConfigurationError(
                f"Missing analyzers: {', '.join(sorted(missing))}",
                config_key="analyzers"
            )

        self.executor = ThreadPoolExecutor(
            max_workers=self.options.number_cores,
            thread_name_prefix="song",
        )
        self.logger = logging.getLogger('engine')

    @property
    def features_version(self) -> FeaturesVersion:
        return self.options.features_version

    def analyze(self, samples: np.ndarray) -> Analysis:
        """
        Compute the Analysis of a mono sample buffer.

        Args:
            samples: Mono samples at ``self.sample_rate``

        Returns:
            Analysis: Fingerprint in the layout of ``self.features_version``

        Raises:
            AnalysisError: Buffer too short, an analyzer failed, or the
                feature count does not match the features version
        """
        samples = np.array(samples, dtype=np.float32)
        if samples.ndim != 1:
            raise AnalysisError(f"expected a mono buffer, got shape {samples.shape}")
        if samples.size < MIN_SAMPLES:
            raise AnalysisError("empty or too short song.")
        samples.flags.writeable = False

        start_time = time.time()
        with ThreadPoolExecutor(
            max_workers=len(self.analyzers),
            thread_name_prefix="descriptor",
        ) as pool:
            futures: Dict[str, Future] = {
                name: pool.submit(analyzer.analyze, samples)
                for name, analyzer in self.analyzers.items()
            }

        results = self._join(futures)

        features: List[float] = []
        for name in FEATURE_ORDER:
            features.extend(results[name])

        if len(features) != self.features_version.feature_count():
            raise AnalysisError(
                "Too many or too little features were provided at the end of "
                f"the analysis: expected {self.features_version.feature_count()}, "
                f"got {len(features)}"
            )

        self.logger.debug(f"Analyzed {samples.size} samples in {time.time() - start_time:.3f}s")
        return Analysis(features, self.features_version)

    def _join(self, futures: Dict[str, Future]) -> Dict[str, List[float]]:
        """Collect every result; raise the first error in JOIN_ORDER."""
        results: Dict[str, List[float]] = {}
        first_error: Optional[AnalysisError] = None

        for name in JOIN_ORDER:
            try:
                results[name] = futures[name].result()
            except AnalysisError as e:
                self.logger.error(f"{name} failed: {e}")
                first_error = first_error or e
            except Exception as e:
                self.logger.error(f"{name} failed: {e}")
                first_error = first_error or AnalysisError(
                    f"{name} analysis failed: {e}",
                    analyzer_name=name,
                    original_error=e
                )

        if first_error is not None:
            raise first_error
        return results

    def song_from_path(self, path: Union[str, Path]) -> Song:
        """
        Decode and analyze one file.

        Raises:
            DecodingError: If the decoder fails
            AnalysisError: If the analysis fails
        """
        path = Path(path)
        logger = create_logger_with_context('engine', {'path': str(path)})

        logger.info("Decoding song")
        decoded = self.decoder.decode(path)
        if decoded.sample_rate != self.sample_rate:
            raise AnalysisError(
                f"Decoder produced {decoded.sample_rate} Hz samples, "
                f"expected {self.sample_rate} Hz"
            )

        start_time = time.time()
        analysis = self.analyze(decoded.sample_array)
        logger.info(f"Analysis complete in {time.time() - start_time:.3f}s")

        return Song.from_decoded(decoded, analysis)

    def analyze_paths(
        self, paths: Iterable[Union[str, Path]]
    ) -> Iterator[Tuple[Path, Union[Song, SonicprintError]]]:
        """
        Analyze many files concurrently.

        Yields (path, Song) or (path, error) pairs in completion order;
        one failing file never stops the others.

        Args:
            paths: Files to analyze
        """
        futures = {
            self.executor.submit(self.song_from_path, path): Path(path)
            for path in paths
        }
        self.logger.info(
            f"Analyzing {len(futures)} songs on {self.options.number_cores} workers"
        )

        for future in as_completed(futures):
            path = futures[future]
            try:
                yield path, future.result()
            except SonicprintError as e:
                self.logger.error(f"Failed to analyze {path}: {e}")
                yield path, e
            except Exception as e:
                self.logger.error(f"Failed to analyze {path}: {e}")
                yield path, AnalysisError(
                    f"Failed to analyze {path}: {e}", original_error=e
                )

    def shutdown(self) -> None:
        """Shutdown thread pool gracefully."""
        self.logger.debug("Shutting down analysis engine")
        self.executor.shutdown(wait=True)

    def __enter__(self) -> "AnalysisEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()


def create_analysis_engine(config: Dict[str, Any]) -> AnalysisEngine:
    """
    Factory function to create a configured analysis engine.

    Args:
        config: Configuration dict (see get_default_config())

    Returns:
        AnalysisEngine: Configured engine
    """
    analysis_config = config.get('analysis', {})

    try:
        options = AnalysisOptions(
            features_version=FeaturesVersion(
                analysis_config.get('features_version', FeaturesVersion.LATEST)
            ),
            number_cores=analysis_config.get('number_cores') or os.cpu_count() or 1,
        )
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid analysis configuration: {e}", config_key="analysis"
        ) from e

    return AnalysisEngine(
        sample_rate=analysis_config.get('sample_rate', SAMPLE_RATE),
        options=options,
        decoder=create_decoder(config),
    )
