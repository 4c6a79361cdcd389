"""Build session state shared by every compilation of one build script run."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from c3bridge.compilation.artifact_registry import ArtifactRegistry
from c3bridge.core.errors import DuplicateOutputPath
from c3bridge.protocols.toolchain_protocol import ToolchainLocatorProtocol
from c3bridge.toolchain.session import ToolchainSession


class BuildSession:
    """Toolchain state, produced artifacts and in-flight output claims.

    A session lives as long as the host build script. Compilations sharing a
    session may run concurrently as long as they write different paths.
    """

    def __init__(
        self,
        locator: ToolchainLocatorProtocol,
        registry: ArtifactRegistry | None = None,
    ) -> None:
        self.toolchains = ToolchainSession(locator)
        self.registry = registry or ArtifactRegistry()
        self._in_flight: set[Path] = set()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @contextmanager
    def claim_output(self, path: Path) -> Iterator[Path]:
        """Hold an output path for the duration of one compilation.

        Raises:
            DuplicateOutputPath: If another compilation already holds it
        """
        key = path.absolute()
        with self._lock:
            if key in self._in_flight:
                raise DuplicateOutputPath(key)
            self._in_flight.add(key)
        self.logger.debug("Claimed output %s", key)
        try:
            yield key
        finally:
            with self._lock:
                self._in_flight.discard(key)

    @property
    def in_flight(self) -> set[Path]:
        with self._lock:
            return set(self._in_flight)
