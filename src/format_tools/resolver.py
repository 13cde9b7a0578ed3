from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

Namer = Callable[[str], str]


def literal_name(name: str) -> str:
    return name


@dataclass(frozen=True, slots=True)
class Probe:
    root: Path
    namer: Namer = literal_name

    def __call__(self, name: str) -> Path | None:
        candidate = self.root / self.namer(name)
        if candidate.exists():
            return candidate
        return None


class CandidateResolver:
    """Ordered, first-match-wins lookup over a list of probes."""

    def __init__(self, probes: Sequence[Probe]) -> None:
        self._probes = tuple(probes)

    @classmethod
    def from_roots(cls, roots: Iterable[Path], namer: Namer = literal_name) -> "CandidateResolver":
        return cls([Probe(root=Path(root), namer=namer) for root in roots])

    def resolve(self, name: str) -> Path | None:
        for probe in self._probes:
            found = probe(name)
            if found is not None:
                return found
        return None


__all__ = ["CandidateResolver", "Probe", "literal_name"]
