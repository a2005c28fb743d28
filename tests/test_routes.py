import pytest

from quizboard.extensions import active_sessions, db, socketio
from quizboard.models import AnswerRecord, LeaderboardEntry, Player, Question


def register(client, username='alice', name='Alice Doe', phone='555-0101'):
    return client.post('/register', json={'username': username, 'name': name, 'phone': phone})


def correct_option_for(app, question_payload):
    with app.app_context():
        return db.session.get(Question, question_payload['id']).correct_option


def test_register_player(app, client):
    response = register(client, username='  alice  ')

    assert response.status_code == 201
    assert response.get_json()['username'] == 'alice'
    with app.app_context():
        assert db.session.get(Player, 'alice').name == 'Alice Doe'


def test_register_duplicate_username(client):
    register(client)
    response = register(client, name='Someone Else')

    assert response.status_code == 409
    assert 'already taken' in response.get_json()['error']


def test_register_requires_every_field(client):
    response = client.post('/register', json={'username': 'bob', 'name': ' ', 'phone': '1'})

    assert response.status_code == 400
    assert 'name' in response.get_json()['error']


def test_start_requires_registration(client):
    assert client.post('/quiz/start').status_code == 401


def test_start_with_empty_catalog(client):
    register(client)
    response = client.post('/quiz/start')

    assert response.status_code == 503
    assert 'alice' not in active_sessions


def test_full_quiz_flow(app, client, add_questions):
    add_questions(3)
    register(client)

    started = client.post('/quiz/start')
    assert started.status_code == 201
    body = started.get_json()
    assert body['question_count'] == 3
    assert body['remaining_seconds'] == 90
    assert 'correct_option' not in body['question']

    first = body['question']
    answered = client.post('/quiz/answer', json={'option': correct_option_for(app, first)}).get_json()
    assert answered['is_correct']
    assert 10 < answered['points'] <= 20
    assert not answered['finished']

    passed = client.post('/quiz/pass').get_json()
    assert passed['passed'] and passed['points'] == 0

    third = passed['next_question']
    wrong = 1 if correct_option_for(app, third) != 1 else 2
    last = client.post('/quiz/answer', json={'option': wrong}).get_json()
    assert last['finished']
    assert last['outcome']['final_score'] == answered['points'] - 5
    assert last['outcome']['rank'] == 1
    assert last['outcome']['rank_label'] == '1st'

    closed = client.post('/quiz/pass')
    assert closed.status_code == 409
    assert closed.get_json()['outcome']['final_score'] == last['outcome']['final_score']

    outcome = client.get('/quiz/outcome').get_json()
    assert outcome['final_score'] == last['outcome']['final_score']
    assert 'alice' not in active_sessions
    assert client.get('/quiz/outcome').status_code == 404

    with app.app_context():
        assert AnswerRecord.query.count() == 3
        assert db.session.get(LeaderboardEntry, 'alice').score == outcome['final_score']


def test_answer_validation(client, add_questions):
    add_questions(2)
    register(client)
    client.post('/quiz/start')

    assert client.post('/quiz/answer', json={'option': 'b'}).status_code == 400
    assert client.post('/quiz/answer', json={'option': 7}).status_code == 400


def test_second_start_while_in_progress(client, add_questions):
    add_questions(2)
    register(client)
    client.post('/quiz/start')

    response = client.post('/quiz/start')
    assert response.status_code == 409
    assert response.get_json()['state'] == 'in_progress'


def test_play_again_after_finishing(client, add_questions):
    add_questions(1)
    register(client)
    client.post('/quiz/start')
    client.post('/quiz/pass')

    again = client.post('/quiz/start')
    assert again.status_code == 201
    assert client.get('/quiz/outcome').status_code == 409


def test_outcome_before_finish(client, add_questions):
    add_questions(2)
    register(client)
    client.post('/quiz/start')

    assert client.get('/quiz/outcome').status_code == 409
    assert client.get('/quiz/current').get_json()['question_number'] == 1


def test_leaderboard_endpoint(app, client, full_board):
    register(client, username='zed')
    response = client.get('/leaderboard')

    body = response.get_json()
    assert response.status_code == 200
    assert [entry['score'] for entry in body['entries']] == list(range(100, 0, -10))
    assert body['entries'][0]['rank'] == 1
    assert body['your_rank'] is None


def test_socket_stream_reports_finish(app, client, add_questions):
    add_questions(1)
    register(client)
    client.post('/quiz/start')

    socket_client = socketio.test_client(app, flask_test_client=client)
    socket_client.emit('join_quiz', {})
    received = socket_client.get_received()
    assert any(event['name'] == 'tick' for event in received)

    client.post('/quiz/pass')
    names = [event['name'] for event in socket_client.get_received()]
    assert 'quiz_finished' in names
    socket_client.disconnect()


def test_finished_sessions_expire_on_next_start(app, add_questions):
    add_questions(1)
    app.config['FINISHED_SESSION_TTL_SECONDS'] = 0
    alice, bob = app.test_client(), app.test_client()
    register(alice, username='alice')
    register(bob, username='bob')

    alice.post('/quiz/start')
    alice.post('/quiz/pass')
    assert 'alice' in active_sessions

    bob.post('/quiz/start')
    assert 'alice' not in active_sessions
    assert 'bob' in active_sessions


def test_unfinished_sessions_are_never_evicted(app, add_questions):
    add_questions(2)
    app.config['FINISHED_SESSION_TTL_SECONDS'] = 0
    alice, bob = app.test_client(), app.test_client()
    register(alice, username='alice')
    register(bob, username='bob')

    alice.post('/quiz/start')
    bob.post('/quiz/start')

    assert alice.get('/quiz/current').get_json()['state'] == 'in_progress'
