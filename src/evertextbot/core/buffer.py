# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded accumulator of game output."""

from __future__ import annotations

from evertextbot.constants import BUFFER_CAP


class RollingBuffer:
    """Append-only text window capped at ``cap`` characters.

    Prompts can arrive split across several frames, so matching always runs
    against the concatenated tail rather than a single chunk. Prompts that
    were acted upon are replaced in place by a sentinel so they never match
    again while the surrounding text stays available as context.
    """

    def __init__(self, cap: int = BUFFER_CAP) -> None:
        if cap <= 0:
            raise ValueError("cap must be positive")
        self.cap = cap
        self._text = ""

    def append(self, chunk: str) -> None:
        self._text += chunk
        overflow = len(self._text) - self.cap
        if overflow > 0:
            # str indexes by code point, so the cut never lands inside a character.
            self._text = self._text[overflow:]

    def consume(self, phrase: str, sentinel: str) -> bool:
        """Replace every occurrence of ``phrase`` with ``sentinel``."""
        if phrase not in self._text:
            return False
        self._text = self._text.replace(phrase, sentinel)
        return True

    def contains_any(self, needles: tuple[str, ...], *, ignore_case: bool = False) -> bool:
        haystack = self._text.lower() if ignore_case else self._text
        return any((n.lower() if ignore_case else n) in haystack for n in needles)

    @property
    def text(self) -> str:
        return self._text

    def clear(self) -> None:
        self._text = ""

    def __contains__(self, phrase: object) -> bool:
        return isinstance(phrase, str) and phrase in self._text

    def __len__(self) -> int:
        return len(self._text)
