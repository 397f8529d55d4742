from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

TEAM_NAMES = ['Team A', 'Team B', 'Team C', 'Team D', 'Team E']
BOSS_TARGET = 'boss'
DEFAULT_BOSS_NAME = 'Riddlebeast'
DEFAULT_PLAYER_HP = 30
DEFAULT_BOSS_AOE_DAMAGE = 2
DEFAULT_PVP_DAMAGE = 5
RESURRECTION_HP = 10

# Status effect tags (wire names)
STUNNED = 'stunned'
DISARMED = 'disarmed'
DAMAGE_BOOST = 'damageBoost'
LIFESTEAL = 'lifesteal'
REDIRECT = 'redirect'

Target = Union[int, str]


@dataclass
class StatusEffect:
    type = ''

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type}
        for f in fields(self):
            data[f.name] = getattr(self, f.name)
        return data


@dataclass
class Stunned(StatusEffect):
    type = STUNNED


@dataclass
class Disarmed(StatusEffect):
    type = DISARMED


@dataclass
class DamageBoost(StatusEffect):
    multiplier: float = 1.5
    type = DAMAGE_BOOST


@dataclass
class Lifesteal(StatusEffect):
    ratio: float = 0.5
    type = LIFESTEAL


@dataclass
class Redirect(StatusEffect):
    target: Optional[Target] = None     # player id or BOSS_TARGET
    type = REDIRECT


@dataclass
class Player:
    id: int
    name: str
    hp: int
    max_hp: int
    team: str
    damage_dealt: int = 0
    abilities: List[str] = field(default_factory=list)
    status_effects: List[StatusEffect] = field(default_factory=list)

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def take_damage(self, amount: int) -> int:
        """Lower hp by ``amount`` (clamped at 0) and return the actual reduction."""
        before = self.hp
        self.hp = max(0, self.hp - max(0, amount))
        return before - self.hp

    def heal(self, amount: int) -> int:
        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return self.hp - before

    def find_effect(self, effect_type: str) -> Optional[StatusEffect]:
        for effect in self.status_effects:
            if effect.type == effect_type:
                return effect
        return None

    def consume_effect(self, effect_type: str) -> Optional[StatusEffect]:
        """Remove and return the first pending effect of ``effect_type``."""
        effect = self.find_effect(effect_type)
        if effect is not None:
            self.status_effects.remove(effect)
        return effect

    def remove_ability(self, ability_name: str) -> bool:
        if ability_name not in self.abilities:
            return False
        self.abilities.remove(ability_name)
        return True

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'hp': self.hp,
            'maxHp': self.max_hp,
            'damageDealt': self.damage_dealt,
            'team': self.team,
            'abilities': list(self.abilities),
            'statusEffects': [effect.to_dict() for effect in self.status_effects],
        }


@dataclass
class Boss:
    name: str
    hp: int
    max_hp: int

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def take_damage(self, amount: int) -> int:
        before = self.hp
        self.hp = max(0, self.hp - max(0, amount))
        return before - self.hp

    def to_dict(self):
        return {'name': self.name, 'hp': self.hp, 'maxHp': self.max_hp}


@dataclass
class Settings:
    boss_aoe_damage: int = DEFAULT_BOSS_AOE_DAMAGE
    pvp_damage: int = DEFAULT_PVP_DAMAGE
    resurrection_hp: int = RESURRECTION_HP

    def to_dict(self):
        return {
            'bossAoeDamage': self.boss_aoe_damage,
            'pvpDamage': self.pvp_damage,
            'resurrectionHp': self.resurrection_hp,
        }


# ---- Transient "last action" events (observer animation only) ----

@dataclass
class AttackEvent:
    attacker: str
    target: str
    damage: int
    effect: str
    redirected_from: Optional[str] = None
    resurrected: bool = False
    lifesteal_amount: Optional[int] = None

    def to_dict(self):
        data = {
            'type': 'attack',
            'attacker': self.attacker,
            'target': self.target,
            'damage': self.damage,
            'effect': self.effect,
        }
        if self.redirected_from is not None:
            data['redirectedFrom'] = self.redirected_from
        if self.resurrected:
            data['resurrected'] = True
        if self.lifesteal_amount is not None:
            data['lifestealAmount'] = self.lifesteal_amount
        return data


@dataclass
class AbilityEvent:
    caster_name: str
    target_name: str
    ability_name: str
    effect: str

    def to_dict(self):
        return {
            'type': 'ability',
            'casterName': self.caster_name,
            'targetName': self.target_name,
            'abilityName': self.ability_name,
            'effect': self.effect,
        }


@dataclass
class InfoEvent:
    message: str
    target_name: str
    effect: str

    def to_dict(self):
        return {
            'type': 'info',
            'message': self.message,
            'targetName': self.target_name,
            'effect': self.effect,
        }


LastAction = Union[AttackEvent, AbilityEvent, InfoEvent]


@dataclass
class GameState:
    players: List[Player] = field(default_factory=list)
    boss: Boss = field(default_factory=lambda: Boss(DEFAULT_BOSS_NAME, 75, 75))
    current_player_index: int = 0
    round: int = 1
    settings: Settings = field(default_factory=Settings)
    winner: Optional[str] = None
    last_action: Optional[LastAction] = None

    def get_player(self, player_id) -> Optional[Player]:
        if isinstance(player_id, bool) or not isinstance(player_id, int):
            return None
        if 0 <= player_id < len(self.players):
            return self.players[player_id]
        return None

    @property
    def current_player(self) -> Optional[Player]:
        return self.get_player(self.current_player_index)

    def living_players(self) -> List[Player]:
        return [p for p in self.players if not p.is_defeated]

    def replace_with(self, other: 'GameState') -> None:
        """Overwrite every field with ``other``'s, keeping this object's identity."""
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))

    def to_dict(self):
        return {
            'players': [p.to_dict() for p in self.players],
            'boss': self.boss.to_dict(),
            'currentPlayerIndex': self.current_player_index,
            'round': self.round,
            'settings': self.settings.to_dict(),
            'winner': self.winner,
            'lastAction': self.last_action.to_dict() if self.last_action else None,
        }


def _positive_int(value) -> Optional[int]:
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def default_boss_hp(player_count: int) -> int:
    return max(75, 15 * max(1, player_count))


def build_game_state(players, boss_hp=None, boss_name=None, ability_assignments=None,
                     settings=None, player_hp=DEFAULT_PLAYER_HP) -> GameState:
    """Create a fresh game from the host's setup payload.

    - ``players`` is a list of ``{'name': ...}`` dicts in turn order
    - teams cycle through TEAM_NAMES by join position
    - ``ability_assignments`` maps team name -> starting ability name; every
      member of that team starts holding one copy
    - ``settings`` may override ``bossAoeDamage`` / ``pvpDamage``
    """
    ability_assignments = ability_assignments or {}
    roster = []
    for i, entry in enumerate(players or []):
        entry = entry if isinstance(entry, dict) else {'name': entry}
        team = TEAM_NAMES[i % len(TEAM_NAMES)]
        assigned = ability_assignments.get(team)
        roster.append(Player(
            id=i,
            name=str(entry.get('name') or f'Player {i}'),
            hp=player_hp,
            max_hp=player_hp,
            team=team,
            abilities=[assigned] if assigned else [],
        ))

    hp = _positive_int(boss_hp) or default_boss_hp(len(roster))
    settings = settings or {}
    return GameState(
        players=roster,
        boss=Boss(name=boss_name or DEFAULT_BOSS_NAME, hp=hp, max_hp=hp),
        current_player_index=0,
        round=1,
        settings=Settings(
            boss_aoe_damage=_positive_int(settings.get('bossAoeDamage')) or DEFAULT_BOSS_AOE_DAMAGE,
            pvp_damage=_positive_int(settings.get('pvpDamage')) or DEFAULT_PVP_DAMAGE,
            resurrection_hp=_positive_int(settings.get('resurrectionHp')) or RESURRECTION_HP,
        ),
        winner=None,
        last_action=None,
    )
