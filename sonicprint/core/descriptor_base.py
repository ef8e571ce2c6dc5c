"""
Descriptor and analyzer interfaces.

A descriptor is the per-run streaming state of one feature family: it is
fed windows with do_() and consumed once by its getter. An analyzer owns
the windowing of a whole sample buffer for one family and returns the
normalized feature values that family contributes to an Analysis.
"""

import logging
import time
from abc import abstractmethod
from typing import Generic, Protocol, TypeVar

import numpy as np

from sonicprint.utils.errors import AnalysisError

T = TypeVar('T')


class Normalize:
    """
    Linear map of a descriptor's declared range onto [-1, 1].

    Classes mixing this in declare MIN_VALUE and MAX_VALUE, as class
    attributes or properties. Values outside the range are not clamped.
    """

    MIN_VALUE: float
    MAX_VALUE: float

    def normalize(self, value: float) -> float:
        return 2 * (value - self.MIN_VALUE) / (self.MAX_VALUE - self.MIN_VALUE) - 1


class Descriptor(Protocol):
    """
    Streaming accumulator for one feature family.

    Created at the start of an analysis, fed windows in order, then read
    exactly once. Instances are never shared between threads.
    """

    def do_(self, chunk: np.ndarray) -> None:
        """Accumulate one window (or hop) of samples."""
        ...


class Analyzer(Protocol[T]):
    """
    Protocol for the per-family analyzers run by the engine.

    This uses structural subtyping: an analyzer only needs the name
    and version properties and an analyze() method.
    """

    @property
    def name(self) -> str:
        """Analyzer name (e.g., 'tempo', 'chroma')."""
        ...

    @property
    def version(self) -> str:
        """Analyzer version for result tracking."""
        ...

    def analyze(self, samples: np.ndarray) -> T:
        """
        Analyze a mono sample buffer.

        Raises:
            AnalysisError: If analysis fails
        """
        ...


class BaseAnalyzer(Generic[T]):
    """
    Base class providing logging, timing and error wrapping.

    Uses Template Method pattern - analyze() provides the template,
    subclasses implement _analyze_impl().
    """

    def __init__(self, name: str, version: str, sample_rate: int):
        """
        Initialize analyzer.

        Args:
            name: Unique analyzer name
            version: Version string for tracking
            sample_rate: Sample rate of the buffers this analyzer receives
        """
        self._name = name
        self._version = version
        self.sample_rate = sample_rate
        self.logger = logging.getLogger(f"analyzer.{name}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    def analyze(self, samples: np.ndarray) -> T:
        """
        Template method with timing and error handling.

        Args:
            samples: Mono float samples at ``self.sample_rate``

        Returns:
            T: Normalized feature values

        Raises:
            AnalysisError: If analysis fails
        """
        start_time = time.time()

        try:
            self.logger.debug(f"Starting analysis of {len(samples)} samples")

            result = self._analyze_impl(samples)

            elapsed = time.time() - start_time
            self.logger.debug(f"Analysis complete in {elapsed:.3f}s")

            return result

        except AnalysisError:
            raise

        except Exception as e:
            self.logger.error(f"Analysis failed: {e}")
            raise AnalysisError(
                f"{self.name} analysis failed: {e}",
                analyzer_name=self.name,
                original_error=e
            ) from e

    @abstractmethod
    def _analyze_impl(self, samples: np.ndarray) -> T:
        raise NotImplementedError
