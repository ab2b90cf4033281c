"""Type environments: persistent, scope-chained name -> type mappings."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from l5infer.core.errors import UnboundVariable
from l5infer.core.types import TExp


@dataclass(frozen=True)
class TypeEnv:
    """One frame of the type environment.

    Frames are never mutated: `extend` returns a new frame whose parent is
    this one. The empty environment is a frame with no names and no parent.
    """

    names: tuple[str, ...] = ()
    types: tuple[TExp, ...] = ()
    parent: TypeEnv | None = field(default=None, repr=False)

    @staticmethod
    def empty() -> TypeEnv:
        """Create an empty environment."""
        return TypeEnv()

    def extend(self, names: Sequence[str], types: Sequence[TExp]) -> TypeEnv:
        """Return a new frame binding names to types on top of this one.

        Raises:
            ValueError: If names and types differ in length
        """
        if len(names) != len(types):
            raise ValueError(
                f"Cannot extend environment with {len(names)} names and {len(types)} types"
            )
        return TypeEnv(tuple(names), tuple(types), self)

    def lookup(self, name: str) -> TExp | UnboundVariable:
        """Resolve name innermost-first.

        Within one frame a later binding of the same name wins.
        """
        frame: TypeEnv | None = self
        while frame is not None:
            for i in range(len(frame.names) - 1, -1, -1):
                if frame.names[i] == name:
                    return frame.types[i]
            frame = frame.parent
        return UnboundVariable(name)

    def frames(self) -> Iterator[TypeEnv]:
        frame: TypeEnv | None = self
        while frame is not None:
            yield frame
            frame = frame.parent

    def __len__(self) -> int:
        """Number of frames in the chain, the empty root included."""
        return sum(1 for _ in self.frames())

    def __str__(self) -> str:
        scopes = []
        for frame in self.frames():
            if frame.names:
                scopes.append(", ".join(f"{n}: {t}" for n, t in zip(frame.names, frame.types)))
        return "TypeEnv(" + " | ".join(scopes) + ")"
