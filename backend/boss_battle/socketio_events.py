from flask import current_app, request
from flask_socketio import emit

from boss_battle import socketio
from boss_battle.errors import ActionRejected, InvalidTarget
from boss_battle.models import BOSS_TARGET
from boss_battle.services.game.combat import ATTACK_BOSS, ATTACK_PLAYER, WRONG_ANSWER

NAMESPACE = '/'


def _session():
    return current_app.extensions['game_session']


def _as_index(value):
    """Player indexes arrive as numbers or form strings; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_flag(value) -> bool:
    """Booleans may arrive as form strings; only an explicit true counts."""
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return value is True


def _payload(data):
    return data if isinstance(data, dict) else {}


def _reject(exc: ActionRejected) -> None:
    # Only the requester hears about a rejection
    emit('actionRejected', exc.to_dict())


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={request.sid}")
    emit('state', _session().state_payload())


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] sid={request.sid}")


def handle_init_game(data=None):
    data = _payload(data)
    players = data.get('players')
    assignments = data.get('abilityAssignments')
    settings = data.get('settings')
    _session().initialize(
        players=players if isinstance(players, list) else [],
        boss_hp=data.get('bossHp'),
        boss_name=data.get('bossName'),
        ability_assignments=assignments if isinstance(assignments, dict) else None,
        settings=settings if isinstance(settings, dict) else None,
    )


def _player_action(player_id, action, value, target=None):
    try:
        _session().player_action(player_id, action, value, target)
    except ActionRejected as exc:
        _reject(exc)


def handle_player_action(data=None):
    data = _payload(data)
    _player_action(
        _as_index(data.get('playerId')),
        data.get('action'),
        data.get('value'),
        _as_index(data.get('target')),
    )


def handle_correct_answer(data=None):
    data = _payload(data)
    player_id = _as_index(data.get('playerIndex'))
    target = data.get('target')
    if target == BOSS_TARGET:
        _player_action(player_id, ATTACK_BOSS, data.get('value'))
    elif isinstance(target, dict) and target.get('type') == 'player':
        _player_action(player_id, ATTACK_PLAYER, data.get('value'), _as_index(target.get('index')))
    else:
        _reject(InvalidTarget())


def handle_wrong_answer(data=None):
    data = _payload(data)
    _player_action(_as_index(data.get('playerIndex')), WRONG_ANSWER, data.get('value'))


def handle_use_ability(data=None):
    data = _payload(data)
    _session().use_ability(_as_index(data.get('playerId')), data.get('ability'), data.get('targetId'))


def handle_pvp_result(data=None):
    data = _payload(data)
    try:
        _session().resolve_pvp(
            _as_index(data.get('challengerIndex')),
            _as_index(data.get('opponentIndex')),
            _as_flag(data.get('opponentSucceeded')),
        )
    except ActionRejected as exc:
        _reject(exc)


def handle_end_turn(data=None):
    raw = _payload(data).get('nextTurnIndex')
    index = _as_index(raw)
    try:
        if raw is not None and index is None:
            raise InvalidTarget(f'bad nextTurnIndex {raw!r}')
        _session().end_turn(index)
    except ActionRejected as exc:
        _reject(exc)


def handle_undo(data=None):
    _session().undo()


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the default namespace.

    Control and visual screens share one namespace; every ``state`` push is
    a broadcast to all of them.
    """
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('initGame', handle_init_game, namespace=NAMESPACE)
    socketio.on_event('playerAction', handle_player_action, namespace=NAMESPACE)
    socketio.on_event('useAbility', handle_use_ability, namespace=NAMESPACE)
    socketio.on_event('action:pvpResult', handle_pvp_result, namespace=NAMESPACE)
    socketio.on_event('action:correctAnswer', handle_correct_answer, namespace=NAMESPACE)
    socketio.on_event('action:wrongAnswer', handle_wrong_answer, namespace=NAMESPACE)
    socketio.on_event('action:endTurn', handle_end_turn, namespace=NAMESPACE)
    socketio.on_event('undo', handle_undo, namespace=NAMESPACE)
