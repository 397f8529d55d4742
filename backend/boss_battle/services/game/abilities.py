from typing import Optional

from boss_battle.errors import AbilityNotHeld, ActorDefeated, NotYourTurn, UnknownAbility
from boss_battle.models import (
    BOSS_TARGET,
    AbilityEvent,
    DamageBoost,
    Disarmed,
    GameState,
    Lifesteal,
    Player,
    Redirect,
    Stunned,
    Target,
)

ANYTIME = 'anytime'
TURN_ONLY = 'turn-only'
PASSIVE = 'passive'

REDIRECT_DAMAGE = 'Redirect Damage'
DISARM = 'Disarm'
STUN = 'Stun'
INCREASED_DAMAGE = 'Increased Damage'
LIFESTEAL = 'Lifesteal'
RESURRECTION = 'Resurrection'

ABILITIES = {
    REDIRECT_DAMAGE: {
        "timing": ANYTIME,
        "target": "player_or_boss",
        "description": "The next attack aimed at you hits the chosen player or the boss instead.",
    },
    DISARM: {
        "timing": ANYTIME,
        "target": "player",
        "description": "The target's next attack deals no damage.",
    },
    STUN: {
        "timing": ANYTIME,
        "target": "player",
        "description": "The target skips their next turn.",
    },
    INCREASED_DAMAGE: {
        "timing": TURN_ONLY,
        "target": None,
        "multiplier": 1.5,
        "description": "Your next damaging action deals 50% more damage.",
    },
    LIFESTEAL: {
        "timing": TURN_ONLY,
        "target": None,
        "ratio": 0.5,
        "description": "Your next damaging action heals you for half the damage dealt.",
    },
    RESURRECTION: {
        "timing": PASSIVE,
        "target": None,
        "description": "When your HP would reach 0, come back with a few HP instead.",
    },
}


def effect_tag(ability_name: str) -> str:
    return ability_name.lower().replace(' ', '')


def normalize_target(raw) -> Optional[Target]:
    """Map a raw select value to a player id, the boss marker, or None.

    Form selects send strings, so digit-only strings become player ids.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, str):
        value = raw.strip()
        if value.lower() == BOSS_TARGET:
            return BOSS_TARGET
        if value.isdigit():
            return int(value)
    return None


def validate_cast(state: GameState, player_id, ability_name) -> Player:
    player = state.get_player(player_id)
    if player is None or player.is_defeated:
        raise ActorDefeated(f'player {player_id!r} cannot cast')
    config = ABILITIES.get(ability_name)
    if config is None:
        raise UnknownAbility(f'unknown ability {ability_name!r}')
    if config["timing"] == PASSIVE:
        raise UnknownAbility(f'{ability_name} is passive and cannot be cast')
    if config["timing"] == TURN_ONLY and state.current_player_index != player_id:
        raise NotYourTurn(f'{ability_name} can only be used on your turn',
                          expected=state.current_player_index)
    if ability_name not in player.abilities:
        raise AbilityNotHeld(f'{player.name} does not hold {ability_name}')
    return player


def _living_player(state: GameState, target: Optional[Target]) -> Optional[Player]:
    if target == BOSS_TARGET:
        return None
    player = state.get_player(target)
    if player is None or player.is_defeated:
        return None
    return player


def cast_ability(state: GameState, player_id, ability_name, target_id=None) -> Optional[AbilityEvent]:
    """Consume one copy of ``ability_name`` and attach its status effect.

    Callers validate first (``validate_cast``) and snapshot history before
    calling. Returns the event to publish, or None when the ability needed a
    target that did not resolve (the copy is spent either way).
    """
    player = validate_cast(state, player_id, ability_name)
    target = normalize_target(target_id)
    player.remove_ability(ability_name)
    config = ABILITIES[ability_name]
    target_name = player.name

    if ability_name in (STUN, DISARM):
        victim = _living_player(state, target)
        if victim is None:
            return None
        victim.status_effects.append(Stunned() if ability_name == STUN else Disarmed())
        target_name = victim.name
    elif ability_name == INCREASED_DAMAGE:
        player.status_effects.append(DamageBoost(multiplier=config["multiplier"]))
    elif ability_name == LIFESTEAL:
        player.status_effects.append(Lifesteal(ratio=config["ratio"]))
    elif ability_name == REDIRECT_DAMAGE:
        # The shield sits on the caster, so the event names the caster
        if target != BOSS_TARGET and (target == player.id or state.get_player(target) is None):
            return None
        player.status_effects.append(Redirect(target=target))

    return AbilityEvent(
        caster_name=player.name,
        target_name=target_name,
        ability_name=ability_name,
        effect=effect_tag(ability_name),
    )
