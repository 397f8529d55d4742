import math
from typing import Optional, Tuple

from boss_battle.errors import ActorDefeated, InvalidTarget, NotYourTurn, UnknownAction
from boss_battle.models import (
    BOSS_TARGET,
    DAMAGE_BOOST,
    DISARMED,
    LIFESTEAL,
    REDIRECT,
    RESURRECTION_HP,
    AttackEvent,
    GameState,
    Player,
)
from .abilities import RESURRECTION

ATTACK_BOSS = 'attackBoss'
ATTACK_PLAYER = 'attackPlayer'
SELF_DAMAGE = 'selfDamage'
WRONG_ANSWER = 'wrongAnswer'
ACTIONS = (ATTACK_BOSS, ATTACK_PLAYER, SELF_DAMAGE, WRONG_ANSWER)
ATTACKS = (ATTACK_BOSS, ATTACK_PLAYER)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def as_damage(value) -> int:
    """Coerce a raw action value to a non-negative whole damage amount."""
    try:
        return max(0, round_half_up(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def apply_resurrection(player: Player, revive_hp: int = RESURRECTION_HP) -> bool:
    """Passive check run whenever a player's hp may have hit 0.

    Spends one Resurrection copy and revives the player; returns True if so.
    """
    if player is None or player.hp > 0:
        return False
    if not player.remove_ability(RESURRECTION):
        return False
    player.hp = min(revive_hp, player.max_hp)
    return True


def validate_action(state: GameState, actor_id, kind, target_id=None) -> Tuple[Player, Optional[Player]]:
    """Turn, liveness and target checks; raises before anything is mutated."""
    expected = state.current_player_index
    if actor_id != expected:
        raise NotYourTurn(f'player {actor_id!r} acted out of turn', expected=expected)
    actor = state.get_player(actor_id)
    if actor is None or actor.is_defeated:
        raise ActorDefeated(f'player {actor_id!r} is defeated')
    if kind not in ACTIONS:
        raise UnknownAction(f'unknown action {kind!r}')
    target = None
    if kind == ATTACK_PLAYER:
        target = state.get_player(target_id)
        if target is None or target.is_defeated:
            raise InvalidTarget(f'cannot attack player {target_id!r}')
    return actor, target


def resolve_action(state: GameState, actor_id, kind, value, target_id=None) -> AttackEvent:
    """Apply one offensive or self-damage action and describe it.

    - Disarmed: the effect is spent; attacks deal 0 and stop here, self
      damage still goes through
    - DamageBoost multiplies the base value before it lands
    - attackPlayer follows a Redirect on the target (player or boss)
    - Lifesteal heals the actor by a share of damage actually dealt
    """
    actor, target = validate_action(state, actor_id, kind, target_id)

    if actor.consume_effect(DISARMED) is not None and kind in ATTACKS:
        target_name = state.boss.name if kind == ATTACK_BOSS else target.name
        return AttackEvent(attacker=actor.name, target=target_name, damage=0, effect='disarmed')

    base = as_damage(value)
    boost = actor.consume_effect(DAMAGE_BOOST)
    if boost is not None:
        base = round_half_up(base * boost.multiplier)

    revive_hp = state.settings.resurrection_hp
    if kind == ATTACK_BOSS:
        dealt = state.boss.take_damage(base)
        actor.damage_dealt += dealt
        event = AttackEvent(attacker=actor.name, target=state.boss.name, damage=dealt, effect='slash')
    elif kind == ATTACK_PLAYER:
        event = _attack_player(state, actor, target, base, revive_hp)
    else:
        dealt = actor.take_damage(math.ceil(base / 2))
        resurrected = apply_resurrection(actor, revive_hp)
        event = AttackEvent(attacker=actor.name, target=actor.name, damage=dealt,
                            effect='self', resurrected=resurrected)

    if event.damage > 0 and not actor.is_defeated:
        lifesteal = actor.consume_effect(LIFESTEAL)
        if lifesteal is not None:
            heal = round_half_up(event.damage * lifesteal.ratio)
            actor.heal(heal)
            event.lifesteal_amount = heal
    return event


def _attack_player(state: GameState, actor: Player, target: Player, damage: int, revive_hp: int) -> AttackEvent:
    victim = target
    redirected_from = None
    redirect = target.consume_effect(REDIRECT)
    if redirect is not None:
        if redirect.target == BOSS_TARGET:
            victim = state.boss
        else:
            # Fall back to the original target if the destination is gone
            destination = state.get_player(redirect.target)
            if destination is not None and not destination.is_defeated:
                victim = destination
        if victim is not target:
            redirected_from = target.name

    dealt = victim.take_damage(damage)
    resurrected = False
    if victim is state.boss:
        actor.damage_dealt += dealt
    else:
        actor.damage_dealt += dealt // 2
        resurrected = apply_resurrection(victim, revive_hp)

    return AttackEvent(
        attacker=actor.name,
        target=victim.name,
        damage=dealt,
        effect='slash',
        redirected_from=redirected_from,
        resurrected=resurrected,
    )


def validate_pvp(state: GameState, challenger_id, opponent_id) -> Tuple[Player, Player]:
    challenger = state.get_player(challenger_id)
    opponent = state.get_player(opponent_id)
    if challenger is None or opponent is None or challenger is opponent:
        raise InvalidTarget(f'invalid duel {challenger_id!r} vs {opponent_id!r}')
    return challenger, opponent


def resolve_pvp(state: GameState, challenger_id, opponent_id, opponent_succeeded) -> AttackEvent:
    """Settle a duel: the loser takes the fixed PvP damage.

    Only a winning challenger is credited with damage dealt.
    """
    challenger, opponent = validate_pvp(state, challenger_id, opponent_id)
    damage = state.settings.pvp_damage
    if opponent_succeeded:
        winner, loser = opponent, challenger
    else:
        winner, loser = challenger, opponent
        challenger.damage_dealt += damage

    loser.take_damage(damage)
    resurrected = apply_resurrection(loser, state.settings.resurrection_hp)
    return AttackEvent(attacker=winner.name, target=loser.name, damage=damage,
                       effect='slash', resurrected=resurrected)
