# quizbank/cursor.py

from __future__ import annotations

import logging

from errors import InvalidNavigation

logger = logging.getLogger(__name__)


class Cursor:
    """
    Position inside a queue of a given length. Out-of-range moves are ignored;
    only seek() reports them.
    """

    def __init__(self, length: int = 0, index: int = 0):
        self.length = max(0, length)
        self.index = index if 0 <= index < self.length else 0

    @property
    def is_last(self) -> bool:
        # an empty queue counts as "last" (0 >= -1)
        return self.index >= self.length - 1

    def seek(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidNavigation(f"index must be an int, got {index!r}")
        if index < 0 or index >= self.length:
            raise InvalidNavigation(f"index {index} outside [0, {self.length})")
        self.index = index

    def jump_to(self, index: int) -> bool:
        try:
            self.seek(index)
        except InvalidNavigation as e:
            logger.debug("ignored jump: %s", e)
            return False
        return True

    def next(self) -> bool:
        if self.index >= self.length - 1:
            return False
        self.index += 1
        return True

    def prev(self) -> bool:
        if self.length == 0 or self.index <= 0:
            return False
        self.index -= 1
        return True
