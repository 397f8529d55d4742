import pytest

from boss_battle.errors import InvalidTarget
from boss_battle.models import AttackEvent, InfoEvent, Stunned
from boss_battle.services.game.turns import AOE_HIT, ROUND_PAUSE, STUN_SKIP, advance_turn, jump_to


def test_advance_skips_defeated_players(make_state, history):
    state = make_state()
    state.players[1].hp = 0
    steps = list(advance_turn(state, history))
    assert steps == []
    assert state.current_player_index == 2
    assert state.round == 1
    assert len(history) == 0


def test_stunned_player_loses_turn_and_stun(make_state, history):
    state = make_state()
    state.players[1].status_effects = [Stunned(), Stunned()]
    steps = list(advance_turn(state, history))
    assert state.current_player_index == 2
    assert len(steps) == 1
    event, pause = steps[0]
    assert isinstance(event, InfoEvent)
    assert pause == STUN_SKIP
    assert event.to_dict() == {
        'type': 'info',
        'message': "Bob's turn skipped (Stunned)",
        'targetName': 'Bob',
        'effect': 'stunned',
    }
    # exactly one stun spent, with its own snapshot
    assert len(state.players[1].status_effects) == 1
    assert len(history) == 1


def test_wrap_triggers_boss_sweep_and_next_round(make_state, history):
    state = make_state()
    state.current_player_index = 2
    steps = list(advance_turn(state, history))
    assert state.current_player_index == 0
    assert state.round == 2
    assert [s.pause for s in steps] == [ROUND_PAUSE, AOE_HIT, AOE_HIT, AOE_HIT]
    assert steps[0].event is None
    hits = [s.event for s in steps[1:]]
    assert all(isinstance(e, AttackEvent) for e in hits)
    assert [e.target for e in hits] == ['Alice', 'Bob', 'Cara']
    assert {e.attacker for e in hits} == {'Riddlebeast'}
    assert {e.effect for e in hits} == {'bossAoE'}
    assert [p.hp for p in state.players] == [28, 28, 28]
    assert len(history) == 3


def test_sweep_skips_defeated_players(make_state, history):
    state = make_state()
    state.players[1].hp = 0
    state.current_player_index = 2
    steps = list(advance_turn(state, history))
    assert [s.event.target for s in steps if s.event] == ['Alice', 'Cara']
    assert state.players[1].hp == 0


@pytest.mark.parametrize('decided', ['winner', 'boss_down'])
def test_no_sweep_once_fight_is_decided(make_state, history, decided):
    state = make_state()
    if decided == 'winner':
        state.winner = 'Alice'
    else:
        state.boss.hp = 0
    state.current_player_index = 2
    steps = list(advance_turn(state, history))
    assert steps == []
    assert state.current_player_index == 0
    assert state.round == 1
    assert [p.hp for p in state.players] == [30, 30, 30]


def test_sweep_uses_configured_damage_and_resurrection(make_state, history):
    state = make_state(settings={'bossAoeDamage': 6})
    alice = state.players[0]
    alice.hp = 4
    alice.abilities = ['Resurrection']
    state.current_player_index = 2
    steps = list(advance_turn(state, history))
    first_hit = steps[1].event
    assert first_hit.damage == 6
    assert first_hit.resurrected is True
    assert alice.hp == 10
    assert alice.abilities == []
    assert state.players[1].hp == 24


def test_sweep_that_fells_the_next_player_moves_turn_on(make_state, history):
    state = make_state()
    state.players[0].hp = 1
    state.current_player_index = 2
    list(advance_turn(state, history))
    assert state.players[0].hp == 0
    assert state.current_player_index == 1
    assert state.round == 2


def test_stunned_first_player_still_closes_round(make_state, history):
    state = make_state()
    state.players[0].status_effects = [Stunned()]
    state.current_player_index = 2
    steps = list(advance_turn(state, history))
    assert state.current_player_index == 1
    assert state.round == 2
    assert steps[0].pause == STUN_SKIP
    assert steps[1].pause == ROUND_PAUSE


def test_single_player_every_turn_is_a_new_round(make_state, history):
    state = make_state(names=('Solo',))
    list(advance_turn(state, history))
    assert state.current_player_index == 0
    assert state.round == 2
    assert state.players[0].hp == 28


def test_no_players_is_a_noop(make_state, history):
    state = make_state(names=())
    assert list(advance_turn(state, history)) == []
    assert state.current_player_index == 0


def test_all_defeated_leaves_index_alone(make_state, history):
    state = make_state()
    for p in state.players:
        p.hp = 0
    state.current_player_index = 1
    assert list(advance_turn(state, history)) == []
    assert state.current_player_index == 1
    assert state.round == 1


def test_jump_to(make_state):
    state = make_state()
    jump_to(state, 2)
    assert state.current_player_index == 2
    with pytest.raises(InvalidTarget):
        jump_to(state, 3)
