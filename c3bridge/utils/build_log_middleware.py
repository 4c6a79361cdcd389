"""Build log capture middleware for compiler processes."""

import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, TextIO

from c3bridge.utils.stream_process import OutputMiddleware


logger = logging.getLogger(__name__)


class BuildLogCaptureMiddleware(OutputMiddleware[str]):
    """Middleware that tees compiler output to a log file.

    Each entry carries a timestamp and a stream marker. Lines are returned
    unchanged so the middleware can be chained. Writes are serialized with a
    lock because stdout and stderr are drained from separate threads.
    """

    def __init__(
        self,
        log_file_path: Path,
        include_timestamps: bool = True,
        include_stream_type: bool = True,
    ) -> None:
        self.log_file_path = log_file_path
        self.include_timestamps = include_timestamps
        self.include_stream_type = include_stream_type
        self._file_handle: TextIO | None = None
        self._lock = Lock()
        self._initialize_log_file()

    def _initialize_log_file(self) -> None:
        """Open the log file and write its header."""
        try:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = self.log_file_path.open("w", encoding="utf-8")

            timestamp = datetime.now().isoformat()
            self._file_handle.write(f"# Build Log - {timestamp}\n")
            self._file_handle.write("# Format: [timestamp] [stream] output\n\n")
            self._file_handle.flush()

            logger.debug("Initialized build log file: %s", self.log_file_path)

        except OSError as e:
            exc_info = logger.isEnabledFor(logging.DEBUG)
            logger.error(
                "Failed to initialize build log file %s: %s",
                self.log_file_path,
                e,
                exc_info=exc_info,
            )
            self._file_handle = None

    def process(self, line: str, stream_type: str) -> str:
        if self._file_handle is None:
            return line

        parts = []
        if self.include_timestamps:
            parts.append(f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}]")
        if self.include_stream_type:
            parts.append("[STDOUT]" if stream_type == "stdout" else "[STDERR]")
        parts.append(line)

        try:
            with self._lock:
                self._file_handle.write(" ".join(parts) + "\n")
                self._file_handle.flush()
        except OSError as e:
            logger.warning("Failed to write to build log file: %s", e)

        return line

    def close(self) -> None:
        """Close the log file handle."""
        with self._lock:
            if self._file_handle is None:
                return
            try:
                self._file_handle.write(
                    f"\n# Build log completed - {datetime.now().isoformat()}\n"
                )
                self._file_handle.close()
                logger.debug("Closed build log file: %s", self.log_file_path)
            except OSError as e:
                logger.warning("Error closing build log file: %s", e)
            finally:
                self._file_handle = None

    def __enter__(self) -> "BuildLogCaptureMiddleware":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()


def create_build_log_middleware(
    output_dir: Path,
    log_filename: str = "build.log",
) -> BuildLogCaptureMiddleware:
    """Factory function to create a build log capture middleware.

    Args:
        output_dir: Directory where the build log should be saved
        log_filename: Name of the log file

    Returns:
        BuildLogCaptureMiddleware instance; call ``close()`` when done
    """
    return BuildLogCaptureMiddleware(log_file_path=output_dir / log_filename)
