import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from io import StringIO
from typing import IO, Optional

logger = logging.getLogger(__name__)


def get_storage(location: Optional[str] = None) -> "BaseStorage":
    """Create a storage for the given location.

    A directory path gives a FileSystemStorage; None gives a MemoryStorage.
    """
    if location is None:
        return MemoryStorage()
    return FileSystemStorage(location)


class BaseStorage:
    """Key-value store for text files, addressed by file name."""

    def open(self, key: str, mode: str = "r"):
        raise NotImplementedError

    def get(self, key: str) -> str:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list(self) -> Iterator[str]:
        raise NotImplementedError

    def url(self, key: str = "") -> str:
        raise NotImplementedError


class FileSystemStorage(BaseStorage):
    def __init__(self, path: str) -> None:
        self.basedir = path or "."

    def _ensure_dir(self, dirname: str) -> None:
        if not os.path.exists(dirname):
            logger.debug(f"Creating {dirname}")
            os.makedirs(dirname, exist_ok=True)

    @contextmanager
    def open(self, key: str, mode: str = "r") -> Iterator[IO[str]]:
        path = os.path.join(self.basedir, key)
        if mode.startswith("w"):
            self._ensure_dir(os.path.dirname(path))
        with open(path, mode, encoding="utf-8") as f:
            yield f

    def get(self, key: str) -> str:
        with self.open(key) as f:
            return f.read()

    def exists(self, key: str) -> bool:
        return os.path.exists(os.path.join(self.basedir, key))

    def put(self, key: str, value: str) -> None:
        """Write a file atomically.

        The content goes to a temporary file in the same directory first, so
        readers never see a partial file under ``key``.
        """
        path = os.path.join(self.basedir, key)
        dirname = os.path.dirname(path)
        self._ensure_dir(dirname)
        fd, tmp_path = tempfile.mkstemp(dir=dirname, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def delete(self, key: str) -> None:
        os.remove(os.path.join(self.basedir, key))

    def list(self) -> Iterator[str]:
        if not os.path.isdir(self.basedir):
            return
        for path in os.listdir(self.basedir):
            if os.path.isfile(os.path.join(self.basedir, path)):
                yield path

    def url(self, key: str = "") -> str:
        return os.path.abspath(os.path.join(self.basedir, key))


class MemoryStorage(BaseStorage):
    """Storage kept in a dict, for tests and short-lived previews."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}

    @contextmanager
    def open(self, key: str, mode: str = "r") -> Iterator[IO[str]]:
        if mode.startswith("r"):
            yield StringIO(self.files[key])
        elif mode.startswith("w"):
            buffer = StringIO()
            yield buffer
            self.files[key] = buffer.getvalue()
        else:
            raise ValueError(f"Unsupported mode {mode}")

    def get(self, key: str) -> str:
        return self.files[key]

    def exists(self, key: str) -> bool:
        return key in self.files

    def put(self, key: str, value: str) -> None:
        self.files[key] = value

    def delete(self, key: str) -> None:
        del self.files[key]

    def list(self) -> Iterator[str]:
        yield from list(self.files)

    def url(self, key: str = "") -> str:
        return f"memory:{key}"
