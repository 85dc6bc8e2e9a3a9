"""Statistics collected while transforming a character stream."""

from dataclasses import asdict, dataclass
from typing import Dict


@dataclass
class TransformStatistics:
    """Counters maintained by the transform engine."""

    characters_read: int = 0
    characters_emitted: int = 0
    code_points_escaped: int = 0
    transitions_matched: int = 0
    max_depth: int = 1
    ignored_pops: int = 0

    @property
    def expansion_ratio(self) -> float:
        """Ratio of emitted to consumed characters."""
        if self.characters_read == 0:
            return 0.0
        return self.characters_emitted / self.characters_read

    def as_dict(self) -> Dict[str, int]:
        """Return the counters as a plain dictionary for logging."""
        return asdict(self)
