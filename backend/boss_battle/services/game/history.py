import copy
from collections import deque

from boss_battle.models import GameState

MAX_HISTORY = 20


class HistoryStore:
    """Bounded undo stack of full state snapshots.

    Oldest snapshots fall off first once ``capacity`` is reached; ``undo``
    always returns the most recent one.
    """

    def __init__(self, capacity: int = MAX_HISTORY):
        self._snapshots = deque(maxlen=max(1, int(capacity)))

    def __len__(self):
        return len(self._snapshots)

    @property
    def capacity(self) -> int:
        return self._snapshots.maxlen

    def snapshot(self, state: GameState) -> None:
        saved = copy.deepcopy(state)
        # lastAction is animation-only; a restored state never replays it
        saved.last_action = None
        self._snapshots.append(saved)

    def undo(self, state: GameState) -> bool:
        if not self._snapshots:
            return False
        state.replace_with(self._snapshots.pop())
        return True

    def clear(self) -> None:
        self._snapshots.clear()
