"""Registry of artifacts produced during one build session."""

import logging
import threading
from collections.abc import Iterator
from pathlib import Path

from c3bridge.models.artifacts import Artifact


logger = logging.getLogger(__name__)


class ArtifactRegistry:
    """Thread-safe, registration-ordered record of compiled artifacts.

    Artifacts are keyed by absolute path. Registering a path again replaces
    the earlier record and moves it to the end.
    """

    def __init__(self) -> None:
        self._artifacts: dict[Path, Artifact] = {}
        self._lock = threading.Lock()

    def register(self, artifact: Artifact) -> Artifact:
        key = artifact.path.absolute()
        with self._lock:
            replaced = self._artifacts.pop(key, None)
            self._artifacts[key] = artifact
        if replaced is not None:
            logger.debug("Replaced artifact record for %s", key)
        else:
            logger.debug("Registered %s artifact %s", artifact.kind.value, key)
        return artifact

    def discard(self, path: Path | str) -> Artifact | None:
        """Forget the artifact at ``path``, returning the removed record."""
        with self._lock:
            return self._artifacts.pop(Path(path).absolute(), None)

    def get(self, path: Path | str) -> Artifact | None:
        with self._lock:
            return self._artifacts.get(Path(path).absolute())

    @property
    def artifacts(self) -> list[Artifact]:
        """Snapshot of all artifacts in registration order."""
        with self._lock:
            return list(self._artifacts.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, Path | str):
            return False
        return self.get(path) is not None

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self.artifacts)
