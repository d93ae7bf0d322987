from yahtzee.errors import WrongPlayerCount


def test_index(client):
    response = client.get('/')
    assert response.status_code == 200
    assert response.get_json() == {'message': 'Welcome to the Yahtzee game server!'}


def test_health_counts_rooms(client, registry):
    assert client.get('/health').get_json() == {'status': 'ok', 'rooms': 0}
    registry.create_room('sid-a', 'Ann')
    assert client.get('/health').get_json()['rooms'] == 1


def test_room_state_not_found(client):
    response = client.get('/api/rooms/ZZZZZZ')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Room not found'}


def test_room_state(client, registry):
    room, ann = registry.create_room('sid-a', 'Ann', 2)
    response = client.get(f'/api/rooms/{room.code.lower()}')
    assert response.status_code == 200
    data = response.get_json()
    assert data['code'] == room.code
    assert data['hostId'] == ann.player_id
    assert data['maxPlayers'] == 2
    assert data['inProgress'] is False
    assert data['players'] == [{'id': ann.player_id, 'name': 'Ann'}]
    assert data['session'] is None

    registry.join_room('sid-b', 'Bob', room.code)
    registry.start_game('sid-a')
    session = client.get(f'/api/rooms/{room.code}').get_json()['session']
    assert [p['name'] for p in session['players']] == ['Ann', 'Bob']
    assert session['rollsLeft'] == 3
    assert session['players'][0]['scores']['chance'] is None
    assert session['players'][0]['totalScore'] == 0


def test_open_room_list(client, registry):
    waiting, _ = registry.create_room('sid-a', 'Ann', 3)
    full, _ = registry.create_room('sid-b', 'Bob', 2)
    registry.join_room('sid-c', 'Cat', full.code)
    data = client.get('/api/rooms').get_json()
    assert [r['code'] for r in data] == [waiting.code]
    assert 'session' not in data[0]


def test_simulate_game_command(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['simulate-game', '--seed', '1'])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert len(lines) == 4
    assert [line.split()[0] for line in lines[:3]] == ['#1', '#2', '#3']
    assert lines[-1].startswith('Winner: Player ')


def test_simulate_game_rejects_player_count(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['simulate-game', '--players', '5'])
    assert result.exit_code == 2
    assert "Invalid value for '--players'" in result.output
    assert not isinstance(result.exception, WrongPlayerCount)


def test_simulate_game_two_players(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['simulate-game', '--players', '2', '--seed', '7'])
    assert result.exit_code == 0, result.output
    assert len(result.output.strip().splitlines()) == 3


def test_rooms_command(flask_app, registry):
    runner = flask_app.test_cli_runner()
    assert runner.invoke(args=['rooms']).output.strip() == 'No active rooms.'
    room, _ = registry.create_room('sid-a', 'Ann')
    registry.join_room('sid-b', 'Bob', room.code)
    output = runner.invoke(args=['rooms']).output.strip()
    assert output == f'{room.code} [lobby] 2/3: Ann, Bob'
