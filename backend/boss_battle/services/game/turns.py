from collections import namedtuple
from typing import Iterator

from boss_battle.errors import InvalidTarget
from boss_battle.models import STUNNED, AttackEvent, GameState, InfoEvent
from .combat import apply_resurrection
from .history import HistoryStore

# One discrete, already-applied sub-step for observers. ``event`` may be None
# for a bare pause; ``pause`` names the timing the publisher should wait.
Step = namedtuple('Step', ['event', 'pause'])

STUN_SKIP = 'stun_skip'
ROUND_PAUSE = 'round_pause'
AOE_HIT = 'aoe_hit'


def _scan(state: GameState, history: HistoryStore):
    """Step forward to the next living, non-stunned player.

    Generator; its return value is ``(found, wrapped)`` where ``wrapped``
    means the scan passed index 0 on the way.
    """
    count = len(state.players)
    index = state.current_player_index
    wrapped = False
    for _ in range(count * 2):
        index = (index + 1) % count
        if index == 0:
            wrapped = True
        candidate = state.players[index]
        if candidate.is_defeated:
            continue
        if candidate.find_effect(STUNNED) is not None:
            history.snapshot(state)
            candidate.consume_effect(STUNNED)
            yield Step(InfoEvent(
                message=f"{candidate.name}'s turn skipped (Stunned)",
                target_name=candidate.name,
                effect=STUNNED,
            ), STUN_SKIP)
            continue
        state.current_player_index = index
        return True, wrapped
    return False, False


def boss_aoe(state: GameState, history: HistoryStore) -> Iterator[Step]:
    """Boss hits every living player in turn order, one snapshot per hit."""
    damage = state.settings.boss_aoe_damage
    for player in state.players:
        if player.is_defeated:
            continue
        history.snapshot(state)
        player.take_damage(damage)
        resurrected = apply_resurrection(player, state.settings.resurrection_hp)
        yield Step(AttackEvent(
            attacker=state.boss.name,
            target=player.name,
            damage=damage,
            effect='bossAoE',
            resurrected=resurrected,
        ), AOE_HIT)


def advance_turn(state: GameState, history: HistoryStore) -> Iterator[Step]:
    """Hand the turn to the next eligible player.

    Yields a Step after every mutation so the caller can broadcast and pace
    them. A wrap past the end of the order closes the round: the boss sweeps
    everyone (unless the fight is already decided) and ``round`` increments.
    """
    if not state.players:
        return
    found, wrapped = yield from _scan(state, history)
    if not found or not wrapped:
        return
    if state.boss.is_defeated or state.winner:
        return

    yield Step(None, ROUND_PAUSE)
    yield from boss_aoe(state, history)
    state.round += 1

    current = state.current_player
    if current is not None and current.is_defeated and state.living_players():
        # The sweep took out whoever was up; move on within the new round
        yield from _scan(state, history)


def jump_to(state: GameState, index) -> None:
    """Host override: make ``index`` the current player, no round logic."""
    if state.get_player(index) is None:
        raise InvalidTarget(f'no player at index {index!r}')
    state.current_player_index = index
