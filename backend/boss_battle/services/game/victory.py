from typing import Optional

from boss_battle.models import GameState

PLAYERS_WIN = 'Players'


def top_damage_dealer(state: GameState) -> Optional[str]:
    top = None
    for player in state.players:
        # strict > keeps the earliest player on ties
        if top is None or player.damage_dealt > top.damage_dealt:
            top = player
    return top.name if top else None


def check_victory(state: GameState) -> Optional[str]:
    """Latch the winner if the game just ended; returns the new winner.

    Winner is write-once: once set this is a no-op.
    """
    if state.winner:
        return None

    if state.boss.is_defeated:
        state.winner = top_damage_dealer(state) or PLAYERS_WIN
        return state.winner

    if state.players and all(p.is_defeated for p in state.players):
        state.winner = state.boss.name
        return state.winner

    alive = state.living_players()
    if len(alive) == 1:
        # MVP rule: last one standing ends the game, top damage takes the win
        state.winner = top_damage_dealer(state) or alive[0].name
        return state.winner

    return None
