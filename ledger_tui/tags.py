"""Tag normalization and the ordered tag vocabulary."""
from __future__ import annotations

from typing import Iterable, Iterator

OTHER_TAG = "other"


def normalize_tag(label: str | None) -> str:
    """Collapse whitespace and lower-case ``label``; blank becomes ``other``."""
    if label is None:
        return OTHER_TAG
    norm = " ".join(str(label).split()).lower()
    return norm or OTHER_TAG


class TagVocabulary:
    """Fixed, ordered list of category labels.

    Labels are normalized and de-duplicated preserving first occurrence. An
    empty vocabulary falls back to ``[other]`` so every index operation has
    at least one valid target.
    """

    def __init__(self, labels: Iterable[str]):
        seen: list[str] = []
        for label in labels:
            tag = normalize_tag(label)
            if tag not in seen:
                seen.append(tag)
        self._tags: tuple[str, ...] = tuple(seen) or (OTHER_TAG,)

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __getitem__(self, index: int) -> str:
        return self._tags[index]

    def __repr__(self) -> str:
        return f"TagVocabulary({list(self._tags)!r})"

    def resolve(self, index: int) -> str:
        if 0 <= index < len(self._tags):
            return self._tags[index]
        return OTHER_TAG

    def index_of(self, tag: str) -> int | None:
        try:
            return self._tags.index(normalize_tag(tag))
        except ValueError:
            return None

    def successor(self, index: int) -> int:
        return (self.clamp(index) + 1) % len(self._tags)

    def predecessor(self, index: int) -> int:
        return (self.clamp(index) - 1) % len(self._tags)

    def clamp(self, index: int) -> int:
        return min(max(0, index), len(self._tags) - 1)
