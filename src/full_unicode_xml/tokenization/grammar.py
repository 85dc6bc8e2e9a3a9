"""Parse modes and transitions of the attribute-value recognition grammar.

Each mode represents a grammatical unit of an XML document. A mode lists
indicator strings that start a nested unit (push) or end the current one
(pop). XML is restricted enough that a lookahead bounded by the longest
indicator decides every transition.

The grammar is pure data: it holds no buffers and no position state, so one
instance is shared by every engine.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Optional, Tuple


class ParseMode(Enum):
    """Grammatical units recognised by the transform engine."""

    TOP_LEVEL = auto()
    PROCESSING_INSTRUCTION = auto()
    COMMENT = auto()
    CDATA = auto()
    ENTITY = auto()
    TAG = auto()
    SINGLE_QUOTE_ATTRIBUTE = auto()
    DOUBLE_QUOTE_ATTRIBUTE = auto()
    # Declarations inside the internal DTD subset
    TAG_NO_ESCAPE = auto()
    SINGLE_QUOTE_ATTRIBUTE_NO_ESCAPE = auto()
    DOUBLE_QUOTE_ATTRIBUTE_NO_ESCAPE = auto()
    DOCTYPE = auto()


# Target of a transition that ends the current grammatical unit
POP = None


@dataclass(frozen=True)
class Transition:
    """Mode change triggered by an indicator string.

    Attributes:
        indicator: Literal text that triggers the transition
        target: Mode to push, or POP to return to the enclosing mode
    """

    indicator: str
    target: Optional[ParseMode] = POP

    def __post_init__(self) -> None:
        if not self.indicator:
            raise ValueError("Transition indicator cannot be empty")

    @property
    def is_pop(self) -> bool:
        return self.target is POP


def push(indicator: str, target: ParseMode) -> Transition:
    return Transition(indicator, target)


def stop(indicator: str) -> Transition:
    return Transition(indicator, POP)


class Grammar:
    """Immutable table mapping each parse mode to its ordered transitions.

    Transitions are tested in declaration order and the first match wins, so
    a mode offering both ``<!DOCTYPE`` and ``<`` must list the longer one
    first.
    """

    def __init__(
        self,
        initial: ParseMode,
        transitions: Dict[ParseMode, Iterable[Transition]],
        escaping: Iterable[ParseMode] = (),
    ) -> None:
        """Initialize and validate a grammar.

        Args:
            initial: Permanent base mode of every mode stack
            transitions: Ordered transitions per mode
            escaping: Modes in which supplementary code points are escaped

        Raises:
            ValueError: If a push target has no entry in the table
        """
        self.initial = initial
        self._transitions: Dict[ParseMode, Tuple[Transition, ...]] = {
            mode: tuple(mode_transitions)
            for mode, mode_transitions in transitions.items()
        }
        self._escaping = frozenset(escaping)
        self.validate()
        self.max_lookahead = max(
            (len(t.indicator) for ts in self._transitions.values() for t in ts),
            default=1,
        )

    def validate(self) -> None:
        """Check that every reachable mode is defined."""
        if self.initial not in self._transitions:
            raise ValueError(f"Initial mode {self.initial.name} has no transitions")
        for mode, mode_transitions in self._transitions.items():
            for transition in mode_transitions:
                if not transition.is_pop and transition.target not in self._transitions:
                    raise ValueError(
                        f"Mode {mode.name} pushes undefined mode "
                        f"{transition.target.name}"
                    )
        undefined = self._escaping - set(self._transitions)
        if undefined:
            names = sorted(mode.name for mode in undefined)
            raise ValueError(f"Escaping modes are not defined: {names}")

    def transitions(self, mode: ParseMode) -> Tuple[Transition, ...]:
        """Return the ordered transitions of a mode."""
        return self._transitions[mode]

    def is_escaping(self, mode: ParseMode) -> bool:
        """Return whether supplementary code points are escaped in a mode."""
        return mode in self._escaping

    @property
    def modes(self) -> Tuple[ParseMode, ...]:
        return tuple(self._transitions)


XML_GRAMMAR = Grammar(
    initial=ParseMode.TOP_LEVEL,
    transitions={
        ParseMode.PROCESSING_INSTRUCTION: [stop("?>")],
        ParseMode.COMMENT: [stop("-->")],
        ParseMode.CDATA: [stop("]]>")],
        ParseMode.ENTITY: [stop(";")],
        ParseMode.SINGLE_QUOTE_ATTRIBUTE: [stop("'")],
        ParseMode.DOUBLE_QUOTE_ATTRIBUTE: [stop('"')],
        ParseMode.TAG: [
            push("'", ParseMode.SINGLE_QUOTE_ATTRIBUTE),
            push('"', ParseMode.DOUBLE_QUOTE_ATTRIBUTE),
            stop(">"),
        ],
        ParseMode.SINGLE_QUOTE_ATTRIBUTE_NO_ESCAPE: [stop("'")],
        ParseMode.DOUBLE_QUOTE_ATTRIBUTE_NO_ESCAPE: [stop('"')],
        ParseMode.TAG_NO_ESCAPE: [
            push("'", ParseMode.SINGLE_QUOTE_ATTRIBUTE_NO_ESCAPE),
            push('"', ParseMode.DOUBLE_QUOTE_ATTRIBUTE_NO_ESCAPE),
            stop(">"),
        ],
        # Attribute list defaults are real attribute values; other
        # declarations and external identifiers are not.
        ParseMode.DOCTYPE: [
            push("<?", ParseMode.PROCESSING_INSTRUCTION),
            push("<!--", ParseMode.COMMENT),
            push("<!ATTLIST", ParseMode.TAG),
            push("<", ParseMode.TAG_NO_ESCAPE),
            push('"', ParseMode.DOUBLE_QUOTE_ATTRIBUTE_NO_ESCAPE),
            push("'", ParseMode.SINGLE_QUOTE_ATTRIBUTE_NO_ESCAPE),
            stop(">"),
        ],
        ParseMode.TOP_LEVEL: [
            push("<?", ParseMode.PROCESSING_INSTRUCTION),
            push("<!DOCTYPE", ParseMode.DOCTYPE),
            push("<!--", ParseMode.COMMENT),
            push("<![CDATA[", ParseMode.CDATA),
            push("<", ParseMode.TAG),
            push("&", ParseMode.ENTITY),
        ],
    },
    escaping=[
        ParseMode.SINGLE_QUOTE_ATTRIBUTE,
        ParseMode.DOUBLE_QUOTE_ATTRIBUTE,
    ],
)
