"""File-backed implementation of DurableKeyValueStore."""

import os
from pathlib import Path
import re

from aws_lambda_powertools import Logger

from journal_core.repositories.key_value_store import DurableKeyValueStore
from journal_core.utils.constants import ENV_CACHE_DIR

logger = Logger(UTC=True)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileBlobStore(DurableKeyValueStore):
    """Stores each blob as one file under a base directory.

    Writes go to a temporary sibling and are moved into place with
    ``os.replace`` so a reader never sees a half-written blob.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        resolved = base_dir or os.getenv(ENV_CACHE_DIR)
        if not resolved:
            raise RuntimeError(f"{ENV_CACHE_DIR} environment variable is not set")

        self._base_dir = Path(resolved)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self._base_dir / f"{key}.blob"

    def read_blob(self, key: str) -> bytes | None:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def write_blob(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")

        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)

        logger.debug("Blob written", extra={"key": key, "size": len(data)})
