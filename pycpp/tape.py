"""
Pending text for the rewrite loop.

The tape is a stack of frames. The bottom frames hold the text being
expanded; every macro expansion pushes its replacement on top so it gets
rescanned before anything that follows it. Each frame carries the set of
macro names that may not expand while the scanner is inside it. Popping an
exhausted frame therefore re-enables exactly the macros whose expansion
has been fully read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple

HideSet = FrozenSet[str]

EMPTY_HIDESET: HideSet = frozenset()


@dataclass(frozen=True)
class Fragment:
    """A piece of text.

    A painted fragment never expands again, wherever it ends up. It is
    either a single identifier that was seen while its macro was disabled
    or a string literal produced by ``#``.
    """
    text: str
    painted: bool = False


class Frame:
    __slots__ = ("text", "pos", "hideset", "painted")

    def __init__(self, text: str, hideset: HideSet = EMPTY_HIDESET, painted: bool = False) -> None:
        self.text = text
        self.pos = 0
        self.hideset = hideset
        self.painted = painted

    @property
    def remaining(self) -> int:
        return len(self.text) - self.pos

    def is_hidden(self, name: str) -> bool:
        return self.painted or name in self.hideset

    def __repr__(self) -> str:
        hidden = ",".join(sorted(self.hideset))
        return f"Frame({self.text[self.pos:]!r}, {{{hidden}}}{', painted' if self.painted else ''})"


class Tape:
    def __init__(self) -> None:
        self._frames: List[Frame] = []
        self._bottom: Optional[Frame] = None

    @classmethod
    def from_text(cls, text: str, hideset: HideSet = EMPTY_HIDESET) -> Tape:
        tape = cls()
        tape.push([Fragment(text)], hideset)
        if tape._frames:
            tape._bottom = tape._frames[0]
        return tape

    @classmethod
    def from_fragments(cls, fragments: Sequence[Fragment], hideset: HideSet = EMPTY_HIDESET) -> Tape:
        tape = cls()
        tape.push(fragments, hideset)
        return tape

    def push(self, fragments: Sequence[Fragment], hideset: HideSet) -> None:
        """Put ``fragments`` in front of everything still pending."""
        for fragment in reversed(fragments):
            if fragment.text:
                self._frames.append(Frame(fragment.text, hideset, fragment.painted))

    def _drop_exhausted(self) -> None:
        frames = self._frames
        while frames and frames[-1].remaining <= 0:
            frames.pop()

    @property
    def at_end(self) -> bool:
        self._drop_exhausted()
        return not self._frames

    @property
    def top(self) -> Frame:
        self._drop_exhausted()
        return self._frames[-1]

    @property
    def depth(self) -> int:
        self._drop_exhausted()
        return len(self._frames)

    @property
    def base_pos(self) -> int:
        """Position reached in the text a tape was created from."""
        return self._bottom.pos if self._bottom is not None else 0

    def chars(self, offset: int = 0) -> Iterator[Tuple[str, Frame]]:
        """Yield pending characters with their frames, without consuming.

        ``offset`` skips characters of the top frame first.
        """
        self._drop_exhausted()
        skip = offset
        for frame in reversed(self._frames):
            text = frame.text
            i = frame.pos + skip
            skip = 0
            while i < len(text):
                yield text[i], frame
                i += 1

    def skip(self, count: int) -> Optional[Frame]:
        """Consume ``count`` characters; return the frame of the last one."""
        last: Optional[Frame] = None
        while count > 0:
            frame = self.top
            take = min(count, frame.remaining)
            frame.pos += take
            count -= take
            last = frame
        self._drop_exhausted()
        return last
