"""Session-scoped toolchain state."""

import logging
import threading
from pathlib import Path

from c3bridge.models.toolchain import ToolchainInfo
from c3bridge.protocols.toolchain_protocol import ToolchainLocatorProtocol


class ToolchainSession:
    """Locate the compiler lazily and remember the answer for the session.

    Results are keyed by the preferred path so that a build mixing an
    overridden compiler with the discovered one probes each exactly once.
    Failures are not remembered; the next call searches again.
    """

    def __init__(self, locator: ToolchainLocatorProtocol) -> None:
        self.locator = locator
        self._toolchains: dict[str | None, ToolchainInfo] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get(self, preferred_path: Path | str | None = None) -> ToolchainInfo:
        key = str(preferred_path) if preferred_path is not None else None
        with self._lock:
            info = self._toolchains.get(key)
            if info is None:
                self.logger.debug("Locating toolchain (preferred: %s)", key)
                info = self.locator.locate(preferred_path)
                self._toolchains[key] = info
            return info

    @property
    def located(self) -> list[ToolchainInfo]:
        with self._lock:
            return list(self._toolchains.values())
