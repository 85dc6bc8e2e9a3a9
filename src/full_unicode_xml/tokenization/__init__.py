"""Tokenization layer: grammar, buffers and the transform engine."""

from .buffers import LookaheadBuffer, OutputQueue
from .engine import TransformEngine, character_reference, decode_code_point
from .grammar import POP, XML_GRAMMAR, Grammar, ParseMode, Transition

__all__ = [
    "Grammar",
    "LookaheadBuffer",
    "OutputQueue",
    "ParseMode",
    "POP",
    "Transition",
    "TransformEngine",
    "XML_GRAMMAR",
    "character_reference",
    "decode_code_point",
]
