"""Character staging areas between the decoded source and the consumer."""

from typing import Callable

from full_unicode_xml.shared.config import DEFAULT_CHUNK_SIZE

# Reads up to n characters; returns "" once the source is exhausted
SourceRead = Callable[[int], str]

# Consumed prefix length after which the backing string is compacted
COMPACT_THRESHOLD = 4096


class OutputQueue:
    """FIFO of characters already decided and ready for delivery."""

    def __init__(self) -> None:
        self._text = ""
        self._start = 0

    def __len__(self) -> int:
        return len(self._text) - self._start

    def append(self, text: str) -> None:
        """Append characters to the end of the queue."""
        if self._start:
            self._text = self._text[self._start:]
            self._start = 0
        self._text += text

    def take(self, count: int) -> str:
        """Remove and return up to ``count`` characters from the front."""
        end = min(self._start + count, len(self._text))
        taken = self._text[self._start:end]
        self._start = end
        if self._start == len(self._text):
            self._text = ""
            self._start = 0
        return taken


class LookaheadBuffer:
    """Characters read from the decoded source but not yet classified.

    The buffer is refilled on demand and only shrinks by consumption from
    the front; its content is never reordered.
    """

    def __init__(self, read: SourceRead, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Initialize lookahead buffer.

        Args:
            read: Callable pulling up to n characters from the decoded source
            chunk_size: Minimum number of characters requested per refill
        """
        self._read = read
        self._chunk_size = chunk_size
        self._text = ""
        self._start = 0
        self._exhausted = False
        self.chars_read = 0

    def __len__(self) -> int:
        return len(self._text) - self._start

    @property
    def exhausted(self) -> bool:
        """Whether the source has reported end of stream."""
        return self._exhausted

    def ensure(self, count: int) -> int:
        """Fill the buffer to at least ``count`` characters if the source allows.

        A shorter buffer after this call means the source is exhausted.

        Returns:
            Number of characters available
        """
        while len(self) < count and not self._exhausted:
            chunk = self._read(max(count - len(self), self._chunk_size))
            if not chunk:
                self._exhausted = True
                break
            self.chars_read += len(chunk)
            self._compact()
            self._text += chunk
        return len(self)

    def peek(self, count: int) -> str:
        """Return up to ``count`` leading characters without consuming them."""
        return self._text[self._start:self._start + count]

    def remove(self, count: int) -> str:
        """Consume and return ``count`` leading characters."""
        if count > len(self):
            raise ValueError(
                f"Cannot remove {count} characters from a buffer of {len(self)}"
            )
        removed = self._text[self._start:self._start + count]
        self._start += count
        return removed

    def try_consume(self, candidate: str, queue: OutputQueue) -> bool:
        """Transfer ``candidate`` to ``queue`` if the buffer starts with it.

        On a mismatch, including a buffer too short to compare, both the
        buffer and the queue are left unchanged.
        """
        if self.ensure(len(candidate)) < len(candidate):
            return False
        if not self._text.startswith(candidate, self._start):
            return False
        self._start += len(candidate)
        queue.append(candidate)
        return True

    def _compact(self) -> None:
        if self._start >= COMPACT_THRESHOLD or self._start == len(self._text):
            self._text = self._text[self._start:]
            self._start = 0
