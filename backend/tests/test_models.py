from boss_battle.models import (
    DamageBoost,
    GameState,
    Redirect,
    Stunned,
    build_game_state,
    default_boss_hp,
)


def test_build_assigns_teams_and_starting_abilities():
    names = ['P0', 'P1', 'P2', 'P3', 'P4', 'P5']
    state = build_game_state(
        [{'name': n} for n in names],
        ability_assignments={'Team A': 'Stun', 'Team C': 'Lifesteal'},
    )
    teams = [p.team for p in state.players]
    assert teams == ['Team A', 'Team B', 'Team C', 'Team D', 'Team E', 'Team A']
    assert state.players[0].abilities == ['Stun']
    assert state.players[5].abilities == ['Stun']
    assert state.players[2].abilities == ['Lifesteal']
    assert state.players[1].abilities == []
    for i, p in enumerate(state.players):
        assert p.id == i
        assert p.hp == p.max_hp == 30
        assert p.damage_dealt == 0
        assert p.status_effects == []
    assert state.round == 1
    assert state.current_player_index == 0
    assert state.winner is None
    assert state.last_action is None


def test_boss_hp_defaults_scale_with_player_count():
    assert default_boss_hp(0) == 75
    assert default_boss_hp(3) == 75
    assert default_boss_hp(6) == 90
    state = build_game_state([{'name': str(i)} for i in range(8)])
    assert state.boss.hp == state.boss.max_hp == 120
    assert state.boss.name == 'Riddlebeast'


def test_explicit_boss_and_bad_values_fall_back():
    state = build_game_state([{'name': 'A'}], boss_hp='40', boss_name='Sphinx')
    assert state.boss.hp == 40
    assert state.boss.name == 'Sphinx'
    state = build_game_state([{'name': 'A'}], boss_hp='lots')
    assert state.boss.hp == 75
    state = build_game_state([{'name': 'A'}], boss_hp=0)
    assert state.boss.hp == 75
    state = build_game_state([{'name': 'A'}], boss_hp=float('inf'), settings={'pvpDamage': float('inf')})
    assert state.boss.hp == 75
    assert state.settings.pvp_damage == 5


def test_missing_names_and_settings_overrides():
    state = build_game_state([{}, {'name': ''}], settings={'bossAoeDamage': 4})
    assert [p.name for p in state.players] == ['Player 0', 'Player 1']
    assert state.settings.boss_aoe_damage == 4
    assert state.settings.pvp_damage == 5


def test_consume_effect_removes_only_first_instance():
    state = build_game_state([{'name': 'A'}])
    player = state.players[0]
    player.status_effects = [Stunned(), DamageBoost(2.0), Stunned()]
    consumed = player.consume_effect('stunned')
    assert isinstance(consumed, Stunned)
    assert [e.type for e in player.status_effects] == ['damageBoost', 'stunned']
    assert player.consume_effect('lifesteal') is None


def test_take_damage_and_heal_clamp():
    state = build_game_state([{'name': 'A'}], boss_hp=5)
    player = state.players[0]
    assert player.take_damage(50) == 30
    assert player.hp == 0
    assert player.is_defeated
    player.hp = 25
    assert player.heal(20) == 5
    assert player.hp == 30
    assert state.boss.take_damage(9) == 5
    assert state.boss.hp == 0


def test_to_dict_wire_shape():
    state = build_game_state([{'name': 'A'}, {'name': 'B'}], boss_hp=50)
    state.players[0].status_effects.append(Redirect(target='boss'))
    payload = state.to_dict()
    assert payload['boss'] == {'name': 'Riddlebeast', 'hp': 50, 'maxHp': 50}
    assert payload['currentPlayerIndex'] == 0
    assert payload['round'] == 1
    assert payload['winner'] is None
    assert payload['lastAction'] is None
    assert payload['settings']['bossAoeDamage'] == 2
    assert payload['settings']['pvpDamage'] == 5
    first = payload['players'][0]
    assert first['maxHp'] == 30
    assert first['damageDealt'] == 0
    assert first['statusEffects'] == [{'type': 'redirect', 'target': 'boss'}]


def test_replace_with_keeps_identity():
    live = GameState()
    fresh = build_game_state([{'name': 'A'}], boss_hp=12)
    same = live
    live.replace_with(fresh)
    assert same is live
    assert live.boss.hp == 12
    assert live.players[0].name == 'A'
