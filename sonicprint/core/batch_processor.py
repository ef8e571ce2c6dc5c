"""
Batch processor for analyzing folders of songs.

Collects audio files from files and directories and hands them to the
engine's concurrent path analysis, keeping successes and failures apart.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from sonicprint.core.models import Song


@dataclass
class BatchResult:
    """Result of a batch processing operation."""
    successful: Dict[Path, Song] = field(default_factory=dict)
    failed: Dict[Path, str] = field(default_factory=dict)
    total_files: int = 0
    total_time: float = 0.0

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total_files == 0:
            return 0.0
        return (self.success_count / self.total_files) * 100

    @property
    def songs(self) -> List[Song]:
        """Analyzed songs sorted by path."""
        return [self.successful[path] for path in sorted(self.successful)]


class BatchProcessor:
    """
    Analyzes every audio file found in the given inputs.

    Analysis itself is delegated to the engine; this class only finds
    files, reports progress and records per-file outcomes.
    """

    AUDIO_EXTENSIONS = {'.wav', '.mp3', '.flac', '.ogg', '.m4a', '.aiff', '.aif', '.opus'}

    def __init__(
        self,
        engine,
        progress_callback: Optional[Callable[[int, int, Path], None]] = None,
        extensions: Optional[Iterable[str]] = None,
    ):
        """
        Initialize batch processor.

        Args:
            engine: Analysis engine providing analyze_paths()
            progress_callback: Optional callback(current, total, file_path),
                called as each file completes
            extensions: Audio suffixes to collect (defaults to AUDIO_EXTENSIONS)
        """
        self.engine = engine
        self.progress_callback = progress_callback
        self.extensions = {ext.lower() for ext in extensions} if extensions else self.AUDIO_EXTENSIONS
        self.logger = logging.getLogger("batch_processor")

    def process(
        self,
        inputs: Union[Path, List[Path]],
        recursive: bool = False,
        skip: Optional[Iterable[Path]] = None,
    ) -> BatchResult:
        """
        Process one or more audio files or directories.

        Args:
            inputs: Single path or list of paths (files or directories)
            recursive: If True, search directories recursively
            skip: Paths already analyzed, left out of the batch

        Returns:
            BatchResult containing all songs and any errors
        """
        start_time = time.time()

        files = self.collect_files(inputs, recursive)
        if skip:
            skipped = {Path(path).resolve() for path in skip}
            files = [path for path in files if path.resolve() not in skipped]

        if not files:
            self.logger.warning("No audio files found to process")
            return BatchResult(total_files=0, total_time=0.0)

        self.logger.info(f"Processing {len(files)} audio files")

        result = BatchResult(total_files=len(files))
        for processed, (path, outcome) in enumerate(self.engine.analyze_paths(files), start=1):
            if self.progress_callback:
                self.progress_callback(processed, len(files), path)

            if isinstance(outcome, Song):
                result.successful[path] = outcome
                self.logger.debug(f"Successfully processed: {path}")
            else:
                result.failed[path] = str(outcome)

        result.total_time = time.time() - start_time
        self.logger.info(
            f"Batch complete: {result.success_count}/{result.total_files} succeeded "
            f"in {result.total_time:.2f}s"
        )

        return result

    def collect_files(
        self,
        inputs: Union[Path, List[Path]],
        recursive: bool = False
    ) -> List[Path]:
        """Collect all audio files from inputs, deduplicated and sorted."""
        if isinstance(inputs, (str, Path)):
            inputs = [inputs]

        files = []
        for path in inputs:
            path = Path(path)
            if path.is_file():
                if self._is_audio_file(path):
                    files.append(path)
                else:
                    self.logger.warning(f"Skipping non-audio file: {path}")
            elif path.is_dir():
                files.extend(self._scan_directory(path, recursive))
            else:
                self.logger.warning(f"Path not found: {path}")

        return sorted(set(files))

    def _scan_directory(self, directory: Path, recursive: bool) -> List[Path]:
        pattern = "**/*" if recursive else "*"
        return [
            path for path in directory.glob(pattern)
            if path.is_file() and self._is_audio_file(path)
        ]

    def _is_audio_file(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions
