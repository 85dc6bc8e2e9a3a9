"""Mode-stack driven transform engine.

The engine reads characters through a lookahead buffer, tracks the current
grammatical context on an explicit mode stack, and rewrites supplementary
code points into decimal numeric character references while an escaping
mode is on top of the stack. Everything else is copied verbatim.
"""

import logging
from typing import List, Optional, Tuple

from full_unicode_xml.shared.config import DEFAULT_CHUNK_SIZE
from full_unicode_xml.shared.logging import CorrelationLogger, get_logger
from full_unicode_xml.shared.result import TransformStatistics

from .buffers import LookaheadBuffer, OutputQueue, SourceRead
from .grammar import XML_GRAMMAR, Grammar, ParseMode

HIGH_SURROGATE_START = 0xD800
HIGH_SURROGATE_END = 0xDBFF
LOW_SURROGATE_START = 0xDC00
LOW_SURROGATE_END = 0xDFFF
SUPPLEMENTARY_START = 0x10000


def decode_code_point(units: str) -> Tuple[int, int]:
    """Decode the leading code point of ``units``.

    A high surrogate directly followed by a low surrogate is combined into
    one supplementary code point. Lone surrogates decode to themselves.

    Returns:
        Tuple of (code point, number of characters it occupies)
    """
    first = ord(units[0])
    if HIGH_SURROGATE_START <= first <= HIGH_SURROGATE_END and len(units) > 1:
        second = ord(units[1])
        if LOW_SURROGATE_START <= second <= LOW_SURROGATE_END:
            code_point = (
                SUPPLEMENTARY_START
                + ((first - HIGH_SURROGATE_START) << 10)
                + (second - LOW_SURROGATE_START)
            )
            return code_point, 2
    return first, 1


def character_reference(code_point: int) -> str:
    """Format a decimal numeric character reference."""
    return f"&#{code_point};"


class TransformEngine:
    """Single-pass transformer over a decoded character source.

    Not safe for concurrent use; one engine serves exactly one reader.
    """

    def __init__(
        self,
        read: SourceRead,
        grammar: Grammar = XML_GRAMMAR,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize transform engine.

        Args:
            read: Callable pulling up to n characters from the decoded source
            grammar: Parse modes and transitions to apply
            chunk_size: Minimum number of characters requested per refill
            correlation_id: Optional correlation ID for request tracking
        """
        self.grammar = grammar
        self._lookahead = LookaheadBuffer(read, chunk_size)
        self._output = OutputQueue()
        self._modes: List[ParseMode] = [grammar.initial]
        self._statistics = TransformStatistics()
        self.logger: CorrelationLogger = get_logger(
            __name__, correlation_id, "transform_engine"
        )

    @property
    def mode(self) -> ParseMode:
        """Mode on top of the stack."""
        return self._modes[-1]

    @property
    def modes(self) -> Tuple[ParseMode, ...]:
        """Snapshot of the mode stack, base first."""
        return tuple(self._modes)

    @property
    def depth(self) -> int:
        return len(self._modes)

    @property
    def statistics(self) -> TransformStatistics:
        self._statistics.characters_read = self._lookahead.chars_read
        return self._statistics

    @property
    def pending(self) -> int:
        """Characters transformed but not yet delivered."""
        return len(self._output)

    def transform_next(self) -> bool:
        """Move one transition or one code point into the output queue.

        Returns:
            False if the source is exhausted and nothing was produced
        """
        if self._lookahead.ensure(1) == 0:
            return False

        for transition in self.grammar.transitions(self.mode):
            if self._lookahead.try_consume(transition.indicator, self._output):
                self._statistics.transitions_matched += 1
                self._statistics.characters_emitted += len(transition.indicator)
                if transition.is_pop:
                    self._pop(transition.indicator)
                else:
                    self._modes.append(transition.target)
                    if len(self._modes) > self._statistics.max_depth:
                        self._statistics.max_depth = len(self._modes)
                return True

        self._transfer_code_point()
        return True

    def read_char(self) -> Optional[str]:
        """Return the next transformed character, or None at end of stream."""
        if not self._output and not self.transform_next():
            return None
        return self._output.take(1)

    def read(self, size: int) -> str:
        """Return up to ``size`` transformed characters; "" at end of stream."""
        parts = []
        remaining = size
        while remaining > 0:
            if not self._output and not self.transform_next():
                break
            chunk = self._output.take(remaining)
            parts.append(chunk)
            remaining -= len(chunk)
        return "".join(parts)

    def _pop(self, indicator: str) -> None:
        if len(self._modes) == 1:
            # The base mode is permanent; the indicator stays in the output.
            self._statistics.ignored_pops += 1
            self.logger.warning(
                "Ignoring stop indicator outside any nested unit",
                extra={"indicator": indicator, "mode": self.mode.name},
            )
            return
        self._modes.pop()

    def _transfer_code_point(self) -> None:
        # A high surrogate needs its successor to be decoded.
        self._lookahead.ensure(2)
        code_point, width = decode_code_point(self._lookahead.peek(2))
        units = self._lookahead.remove(width)

        if code_point >= SUPPLEMENTARY_START and self.grammar.is_escaping(self.mode):
            escaped = character_reference(code_point)
            self._output.append(escaped)
            self._statistics.code_points_escaped += 1
            self._statistics.characters_emitted += len(escaped)
            if self.logger.is_enabled_for(logging.DEBUG):
                self.logger.debug(
                    "Escaped supplementary code point",
                    extra={"code_point": f"U+{code_point:X}", "mode": self.mode.name},
                )
        else:
            self._output.append(units)
            self._statistics.characters_emitted += width
