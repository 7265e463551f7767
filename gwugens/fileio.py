"""Line-oriented text file access."""

from __future__ import annotations

from typing import IO


class FileCtorException(Exception):
    """Raised when a file cannot be opened."""


class FileReadException(Exception):
    """Raised when no line can be read."""


class FileWriteException(Exception):
    """Raised when text cannot be written."""


class FileIO:
    """Read and write text from and to a file, opened much like ``fopen``."""

    def __init__(self, filename: str, mode: str = "r") -> None:
        try:
            self._file: IO[str] = open(filename, mode, newline="")
        except (OSError, ValueError) as exc:
            raise FileCtorException(f"cannot open {filename!r} with mode {mode!r}") from exc
        self._eof = False

    @property
    def closed(self) -> bool:
        """Whether the file has been closed."""
        return self._file.closed

    def read(self) -> str:
        """Read one line, without its trailing newline."""
        try:
            line = self._file.readline()
        except (OSError, ValueError) as exc:
            raise FileReadException(str(exc)) from exc
        if not line:
            self._eof = True
            raise FileReadException("end of file")
        if line.endswith("\n"):
            return line[:-1]
        self._eof = True
        return line

    def write(self, txt: str) -> None:
        """Write ``txt``; writing nothing counts as a failure."""
        if not txt:
            raise FileWriteException("nothing written")
        try:
            self._file.write(txt)
        except (OSError, ValueError) as exc:
            raise FileWriteException(str(exc)) from exc

    def eof(self) -> bool:
        """True once a read has reached the end of the file."""
        return self._eof

    def flush(self) -> int:
        """Flush buffered output; 0 on success, -1 on failure."""
        try:
            self._file.flush()
        except (OSError, ValueError):
            return -1
        return 0

    def close(self) -> None:
        """Close the file."""
        self._file.close()

    def __enter__(self) -> FileIO:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()