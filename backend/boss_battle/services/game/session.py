import logging
import threading
import time
from typing import Callable, Dict, Optional

from boss_battle.errors import ActionRejected, InvalidTarget
from boss_battle.models import (
    DEFAULT_BOSS_NAME,
    DEFAULT_PLAYER_HP,
    AttackEvent,
    AbilityEvent,
    GameState,
    Settings,
    build_game_state,
)
from . import abilities, combat, turns
from .history import MAX_HISTORY, HistoryStore
from .victory import check_victory

ACTION_FLASH = 'action'
DISARM_FLASH = 'disarm'
ABILITY_FLASH = 'ability'

DEFAULT_DELAYS_MS = {
    ACTION_FLASH: 350,
    DISARM_FLASH: 400,
    ABILITY_FLASH: 600,
    turns.STUN_SKIP: 800,
    turns.ROUND_PAUSE: 300,
    turns.AOE_HIT: 600,
}


def _run_inline(fn, *args):
    return fn(*args)


class GameSession:
    """The single authoritative game and the only entry point that mutates it.

    Every operation runs start to finish under one lock, so a second request
    waits until a multi-step sequence (e.g. the boss sweep) has been fully
    published. Collaborators are injected:

    - ``broadcast(payload)`` pushes the full state to every observer
    - ``sleep(seconds)`` paces animation sub-steps
    - ``spawn(fn, *args)`` runs deferred work (clearing an ability flash)
    """

    def __init__(self, broadcast: Callable[[dict], None], sleep: Callable[[float], None] = time.sleep,
                 spawn: Callable = _run_inline, logger: Optional[logging.Logger] = None,
                 delays: Optional[Dict[str, int]] = None, max_history: int = MAX_HISTORY,
                 player_hp: int = DEFAULT_PLAYER_HP, boss_name: str = DEFAULT_BOSS_NAME,
                 default_settings: Optional[Settings] = None):
        self.state = GameState()
        self.history = HistoryStore(max_history)
        self.logger = logger or logging.getLogger('boss_battle')
        self.delays = dict(DEFAULT_DELAYS_MS)
        self.delays.update(delays or {})
        self.player_hp = player_hp
        self.boss_name = boss_name
        self.default_settings = default_settings or Settings()
        self._broadcast = broadcast
        self._sleep = sleep
        self._spawn = spawn
        self._lock = threading.RLock()

    @classmethod
    def from_app(cls, app, socketio):
        cfg = app.config
        # Deferred work runs inline under test for determinism
        spawn = _run_inline if cfg.get('TESTING') else socketio.start_background_task
        return cls(
            broadcast=lambda payload: socketio.emit('state', payload),
            sleep=socketio.sleep,
            spawn=spawn,
            logger=app.logger,
            delays={
                ACTION_FLASH: cfg.get('ACTION_FLASH_MS', 350),
                DISARM_FLASH: cfg.get('DISARM_FLASH_MS', 400),
                ABILITY_FLASH: cfg.get('ABILITY_FLASH_MS', 600),
                turns.STUN_SKIP: cfg.get('STUN_SKIP_MS', 800),
                turns.ROUND_PAUSE: cfg.get('ROUND_PAUSE_MS', 300),
                turns.AOE_HIT: cfg.get('AOE_HIT_MS', 600),
            },
            max_history=cfg.get('MAX_HISTORY', MAX_HISTORY),
            player_hp=cfg.get('DEFAULT_PLAYER_HP', DEFAULT_PLAYER_HP),
            boss_name=cfg.get('DEFAULT_BOSS_NAME', DEFAULT_BOSS_NAME),
            default_settings=Settings(
                boss_aoe_damage=cfg.get('BOSS_AOE_DAMAGE', 2),
                pvp_damage=cfg.get('PVP_DAMAGE', 5),
                resurrection_hp=cfg.get('RESURRECTION_HP', 10),
            ),
        )

    # ---- publication helpers ----

    def state_payload(self) -> dict:
        with self._lock:
            return self.state.to_dict()

    def _publish(self) -> None:
        self._broadcast(self.state.to_dict())

    def _pause(self, key: str) -> None:
        ms = int(self.delays.get(key, 0) or 0)
        if ms > 0:
            self._sleep(ms / 1000.0)

    def _flash(self, event, pause: str) -> None:
        """Publish ``event`` as lastAction, hold it for ``pause``, then clear it."""
        self.state.last_action = event
        self._publish()
        self._pause(pause)
        self.state.last_action = None
        self._publish()

    def _play(self, steps) -> None:
        for step in steps:
            if step.event is None:
                self._pause(step.pause)
            else:
                self._flash(step.event, step.pause)

    def _check_victory(self) -> None:
        winner = check_victory(self.state)
        if winner:
            self.logger.info(f"[victory] winner={winner} round={self.state.round}")

    # ---- operations ----

    def initialize(self, players, boss_hp=None, boss_name=None, ability_assignments=None, settings=None) -> GameState:
        with self._lock:
            assignments = {}
            for team, ability in (ability_assignments or {}).items():
                if ability in abilities.ABILITIES:
                    assignments[team] = ability
                elif ability:
                    self.logger.warning(f"[init] ignoring unknown ability {ability!r} for {team}")

            overrides = {
                'bossAoeDamage': self.default_settings.boss_aoe_damage,
                'pvpDamage': self.default_settings.pvp_damage,
                'resurrectionHp': self.default_settings.resurrection_hp,
            }
            overrides.update({k: v for k, v in (settings or {}).items() if v is not None})

            fresh = build_game_state(
                players,
                boss_hp=boss_hp,
                boss_name=boss_name or self.boss_name,
                ability_assignments=assignments,
                settings=overrides,
                player_hp=self.player_hp,
            )
            self.history.snapshot(self.state)
            self.state.replace_with(fresh)
            self.logger.info(
                f"[init] players={len(self.state.players)} boss={self.state.boss.name} hp={self.state.boss.hp}"
            )
            self._publish()
            return self.state

    def player_action(self, player_id, action, value=None, target=None) -> AttackEvent:
        """Resolve a turn action, advance the turn and check for a winner.

        Raises ActionRejected (state untouched, no history) on validation failure.
        """
        with self._lock:
            try:
                combat.validate_action(self.state, player_id, action, target)
            except ActionRejected as exc:
                self.logger.info(f"[action-rejected] player={player_id} action={action} reason={exc.reason}")
                raise

            self.history.snapshot(self.state)
            event = combat.resolve_action(self.state, player_id, action, value, target)
            self.logger.info(
                f"[action] player={player_id} action={action} target={event.target} "
                f"damage={event.damage} effect={event.effect}"
            )
            self._flash(event, DISARM_FLASH if event.effect == 'disarmed' else ACTION_FLASH)

            self._check_victory()
            self._play(turns.advance_turn(self.state, self.history))
            self._check_victory()
            self._publish()
            return event

    def use_ability(self, player_id, ability, target_id=None) -> Optional[AbilityEvent]:
        """Cast an ability; invalid casts are ignored (logged, nothing sent back)."""
        with self._lock:
            try:
                abilities.validate_cast(self.state, player_id, ability)
            except ActionRejected as exc:
                self.logger.info(f"[ability-ignored] player={player_id} ability={ability} reason={exc.reason}")
                return None

            self.history.snapshot(self.state)
            event = abilities.cast_ability(self.state, player_id, ability, target_id)
            if event is None:
                self.logger.info(f"[ability-fizzled] player={player_id} ability={ability} target={target_id!r}")
                self._publish()
                return None

            self.logger.info(f"[ability] player={player_id} ability={ability} target={event.target_name}")
            self.state.last_action = event
            self._publish()
            self._spawn(self._clear_ability_flash, event)
            return event

    def _clear_ability_flash(self, event) -> None:
        self._pause(ABILITY_FLASH)
        with self._lock:
            # Leave a newer event (or a state restored by undo) alone
            if self.state.last_action is event:
                self.state.last_action = None
                self._publish()

    def resolve_pvp(self, challenger_id, opponent_id, opponent_succeeded) -> AttackEvent:
        with self._lock:
            try:
                combat.validate_pvp(self.state, challenger_id, opponent_id)
            except ActionRejected as exc:
                self.logger.info(f"[pvp-rejected] challenger={challenger_id} opponent={opponent_id} reason={exc.reason}")
                raise

            self.history.snapshot(self.state)
            event = combat.resolve_pvp(self.state, challenger_id, opponent_id, bool(opponent_succeeded))
            self.logger.info(f"[pvp] winner={event.attacker} loser={event.target} damage={event.damage}")
            self._check_victory()
            self._flash(event, ACTION_FLASH)
            return event

    def end_turn(self, next_turn_index=None) -> None:
        """Host override: jump to ``next_turn_index`` or force a normal advance."""
        with self._lock:
            if next_turn_index is not None and self.state.get_player(next_turn_index) is None:
                self.logger.info(f"[end-turn-rejected] index={next_turn_index!r}")
                raise InvalidTarget(f'no player at index {next_turn_index!r}')

            self.history.snapshot(self.state)
            if next_turn_index is not None:
                turns.jump_to(self.state, next_turn_index)
            else:
                self._play(turns.advance_turn(self.state, self.history))
            self.logger.info(f"[end-turn] current={self.state.current_player_index} round={self.state.round}")
            self._check_victory()
            self._publish()

    def undo(self) -> bool:
        with self._lock:
            if not self.history.undo(self.state):
                self.logger.info("[undo] nothing to undo")
                return False
            self.logger.info(f"[undo] restored round={self.state.round} remaining={len(self.history)}")
            self._publish()
            return True
