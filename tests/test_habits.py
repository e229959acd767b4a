import pytest
from models import db, User, Habit
from services import habit_store
from werkzeug.security import generate_password_hash

def _other_user():
    other = User(username='other', password_hash=generate_password_hash('password', method='scrypt'))
    db.session.add(other)
    db.session.commit()
    return other

def test_get_habits_empty(auth_client):
    client, _, headers = auth_client
    response = client.get('/api/habits/2024/6', headers=headers)
    assert response.status_code == 200
    assert response.json == []

def test_save_habits(auth_client):
    client, user, headers = auth_client
    response = client.post('/api/habits/2024/6', headers=headers, json={
        'habits': [
            {'name': 'Read', 'completions': {'1': True, '2': True}},
            {'name': 'Run', 'completions': {}}
        ]
    })
    assert response.status_code == 200
    assert [h['name'] for h in response.json] == ['Read', 'Run']
    assert all(h['id'] for h in response.json)
    assert response.json[0]['completions'] == {'1': True, '2': True}
    assert response.json[0]['userId'] == user.id
    assert response.json[0]['year'] == 2024
    assert response.json[0]['month'] == 6

    listed = client.get('/api/habits/2024/6', headers=headers).json
    assert [h['name'] for h in listed] == ['Read', 'Run']

def test_save_replaces_whole_month(auth_client):
    client, _, headers = auth_client
    first = client.post('/api/habits/2024/6', headers=headers, json={
        'habits': [{'name': 'Old', 'completions': {'3': True}}, {'name': 'Older', 'completions': {}}]
    }).json
    second = client.post('/api/habits/2024/6', headers=headers, json={
        'habits': [{'name': 'Read', 'completions': {'1': True, '2': True}}]
    }).json

    assert {h['id'] for h in first}.isdisjoint({h['id'] for h in second})
    listed = client.get('/api/habits/2024/6', headers=headers).json
    assert len(listed) == 1
    assert listed[0]['name'] == 'Read'
    assert listed[0]['completions'] == {'1': True, '2': True}

def test_save_empty_list_clears_month(auth_client):
    client, _, headers = auth_client
    client.post('/api/habits/2024/6', headers=headers, json={'habits': [{'name': 'Read', 'completions': {}}]})
    response = client.post('/api/habits/2024/6', headers=headers, json={'habits': []})
    assert response.json == []
    assert Habit.query.count() == 0

def test_save_drops_false_completions(auth_client):
    client, _, headers = auth_client
    response = client.post('/api/habits/2024/6', headers=headers, json={
        'habits': [{'name': 'Read', 'completions': {'1': True, '2': False}}]
    })
    assert response.json[0]['completions'] == {'1': True}

def test_save_trims_name(auth_client):
    client, _, headers = auth_client
    response = client.post('/api/habits/2024/6', headers=headers, json={'habits': [{'name': '  Read  '}]})
    assert response.json[0]['name'] == 'Read'
    assert response.json[0]['completions'] == {}

def test_save_other_months_untouched(auth_client):
    client, _, headers = auth_client
    client.post('/api/habits/2024/5', headers=headers, json={'habits': [{'name': 'May', 'completions': {}}]})
    client.post('/api/habits/2024/6', headers=headers, json={'habits': [{'name': 'June', 'completions': {}}]})
    client.post('/api/habits/2024/6', headers=headers, json={'habits': []})
    assert [h['name'] for h in client.get('/api/habits/2024/5', headers=headers).json] == ['May']

def test_save_invalid_payloads(auth_client):
    client, _, headers = auth_client
    bad_bodies = [
        {},
        {'habits': 'Read'},
        {'habits': [{'name': ''}]},
        {'habits': [{'name': '   '}]},
        {'habits': [{'completions': {}}]},
        {'habits': [{'name': 'Read', 'completions': []}]},
        {'habits': [{'name': 'Read', 'completions': {'31': True}}]},
        {'habits': [{'name': 'Read', 'completions': {'0': True}}]},
        {'habits': [{'name': 'Read', 'completions': {'x': True}}]},
        {'habits': [{'name': 'Read', 'completions': {'1': 'yes'}}]},
        {'habits': [{'name': 'x' * 201}]},
    ]
    for body in bad_bodies:
        response = client.post('/api/habits/2024/6', headers=headers, json=body)
        assert response.status_code == 400, body
        assert response.json['message']
    assert Habit.query.count() == 0

def test_invalid_payload_keeps_existing_month(auth_client):
    client, _, headers = auth_client
    client.post('/api/habits/2024/6', headers=headers, json={'habits': [{'name': 'Read', 'completions': {}}]})
    client.post('/api/habits/2024/6', headers=headers, json={'habits': [{'name': ''}]})
    assert [h['name'] for h in client.get('/api/habits/2024/6', headers=headers).json] == ['Read']

def test_invalid_month(auth_client):
    client, _, headers = auth_client
    assert client.get('/api/habits/2024/13', headers=headers).status_code == 400
    assert client.get('/api/habits/2024/0', headers=headers).status_code == 400
    response = client.post('/api/habits/2024/13', headers=headers, json={'habits': []})
    assert response.status_code == 400

def test_leap_day_completion(auth_client):
    client, _, headers = auth_client
    ok = client.post('/api/habits/2024/2', headers=headers, json={'habits': [{'name': 'Read', 'completions': {'29': True}}]})
    assert ok.status_code == 200
    bad = client.post('/api/habits/2023/2', headers=headers, json={'habits': [{'name': 'Read', 'completions': {'29': True}}]})
    assert bad.status_code == 400

def test_habits_isolated_per_user(auth_client):
    client, user, headers = auth_client
    other = _other_user()
    habit_store.replace_all(other.id, 2024, 6, [{'name': 'Secret', 'completions': {}}])

    assert client.get('/api/habits/2024/6', headers=headers).json == []
    client.post('/api/habits/2024/6', headers=headers, json={'habits': []})
    assert [h.name for h in habit_store.find(other.id, 2024, 6)] == ['Secret']

def test_yearly_report(auth_client):
    client, _, headers = auth_client
    client.post('/api/habits/2024/1', headers=headers, json={'habits': [{'name': 'Jan', 'completions': {'1': True}}]})
    client.post('/api/habits/2024/3', headers=headers, json={'habits': [{'name': 'Mar A'}, {'name': 'Mar B'}]})
    client.post('/api/habits/2023/3', headers=headers, json={'habits': [{'name': 'Last year'}]})

    response = client.get('/api/habits/report/2024', headers=headers)
    assert response.status_code == 200
    assert [(h['month'], h['name']) for h in response.json] == [(1, 'Jan'), (3, 'Mar A'), (3, 'Mar B')]

def test_yearly_report_requires_token(client):
    assert client.get('/api/habits/report/2024').status_code == 401

def test_store_replace_all_then_find(auth_client):
    _, user, _ = auth_client
    habit_store.replace_all(user.id, 2024, 6, [{'name': 'Old', 'completions': {'5': True}}])
    habit_store.replace_all(user.id, 2024, 6, [{'name': 'Read', 'completions': {'1': True, '2': True}}])

    habits = habit_store.find(user.id, 2024, 6)
    assert len(habits) == 1
    assert habits[0].name == 'Read'
    assert habits[0].completions == {'1': True, '2': True}

def test_store_replace_all_rolls_back_on_failure(auth_client, monkeypatch):
    _, user, _ = auth_client
    habit_store.replace_all(user.id, 2024, 6, [{'name': 'Keep', 'completions': {}}])

    def broken_commit():
        raise RuntimeError('disk full')

    monkeypatch.setattr(db.session, 'commit', broken_commit)
    with pytest.raises(RuntimeError):
        habit_store.replace_all(user.id, 2024, 6, [{'name': 'New', 'completions': {}}])
    monkeypatch.undo()

    assert [h.name for h in habit_store.find(user.id, 2024, 6)] == ['Keep']

def test_store_find_by_year_order(auth_client):
    _, user, _ = auth_client
    habit_store.replace_all(user.id, 2024, 12, [{'name': 'Dec', 'completions': {}}])
    habit_store.replace_all(user.id, 2024, 2, [{'name': 'Feb 1', 'completions': {}}, {'name': 'Feb 2', 'completions': {}}])
    assert [h.name for h in habit_store.find_by_year(user.id, 2024)] == ['Feb 1', 'Feb 2', 'Dec']
