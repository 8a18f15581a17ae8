"""
Server-sent-event parsing and the pull-based delta stream.

A DeltaStream is a lazy, finite, non-restartable sequence of text deltas.
The consumer drives iteration; closing before exhaustion is allowed and
releases the underlying connection.
"""

from collections.abc import Callable, Iterable, Iterator

from pydantic import ValidationError as PydanticValidationError

from api.wire_models import StreamChunk

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def iter_sse_data(lines: Iterable[str]) -> Iterator[str]:
    """
    Yield the payload of each ``data:`` frame until the ``[DONE]`` frame.

    Blank keep-alive lines and non-data fields (``event:``, ``id:``) are ignored.
    """
    for line in lines:
        stripped = line.strip()
        if not stripped.startswith(DATA_PREFIX):
            continue
        data = stripped[len(DATA_PREFIX):].strip()
        if data == DONE_SENTINEL:
            return
        if data:
            yield data


def extract_delta(data: str) -> str | None:
    """Return the content delta of one frame, or None for malformed/empty frames."""
    try:
        chunk = StreamChunk.model_validate_json(data)
    except (PydanticValidationError, ValueError):
        return None
    return chunk.content or None


def iter_content_deltas(lines: Iterable[str]) -> Iterator[str]:
    for data in iter_sse_data(lines):
        delta = extract_delta(data)
        if delta:
            yield delta


class DeltaStream:
    """Iterator over content deltas with explicit, idempotent close()."""

    def __init__(self, deltas: Iterable[str], on_close: Callable[[], None] | None = None):
        self._deltas = iter(deltas)
        self._on_close = on_close
        self._closed = False

    @classmethod
    def from_text(cls, text: str) -> "DeltaStream":
        """Wrap an already-complete string as a single-delta stream."""
        return cls([text] if text else [])

    def __iter__(self) -> "DeltaStream":
        return self

    def __next__(self) -> str:
        if self._closed:
            raise StopIteration
        try:
            return next(self._deltas)
        except StopIteration:
            self.close()
            raise
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close_inner = getattr(self._deltas, "close", None)
        if close_inner is not None:
            close_inner()
        if self._on_close is not None:
            self._on_close()

    @property
    def closed(self) -> bool:
        return self._closed

    def read_all(self) -> str:
        """Drain the remaining deltas into one string."""
        return "".join(self)

    def __enter__(self) -> "DeltaStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
