from gymdesk.models import db, Student
from tests.conftest import login


def test_create_and_get_student(client, seeded):
    login(client, 'manager')

    response = client.post('/students/api', json={'firstName': 'Aly', 'lastName': 'Raisman', 'dateOfBirth': '2015-05-25'})
    assert response.status_code == 201
    student = response.get_json()['data']
    assert student['dateOfBirth'] == '2015-05-25'
    assert student['skillLevel'] == 'beginner'

    fetched = client.get(f"/students/api/{student['id']}")
    assert fetched.get_json()['data']['firstName'] == 'Aly'


def test_create_student_validation(client, seeded):
    login(client, 'admin')

    response = client.post('/students/api', json={'firstName': '', 'skillLevel': 'olympic'})

    assert response.status_code == 400
    error = response.get_json()['error']
    assert error['code'] == 'VALIDATION_ERROR'
    assert {d['path'] for d in error['details']} == {'firstName', 'lastName', 'skillLevel'}


def test_coach_cannot_create_student(client, seeded):
    login(client, 'coach')

    response = client.post('/students/api', json={'firstName': 'A', 'lastName': 'B'})

    assert response.status_code == 403
    assert response.get_json()['error']['code'] == 'INSUFFICIENT_PERMISSIONS'


def test_list_is_paginated(client, seeded):
    login(client, 'admin')
    for name in ('Cole', 'Able', 'Bart'):
        client.post('/students/api', json={'firstName': 'Kid', 'lastName': name})

    response = client.get('/students/api?page=1&limit=2')

    data = response.get_json()['data']
    assert data['total'] == 3
    assert [s['lastName'] for s in data['items']] == ['Able', 'Bart']


def test_delete_is_soft_and_admin_only(app, client, seeded):
    login(client, 'admin')
    student_id = client.post('/students/api', json={'firstName': 'Kid', 'lastName': 'Gone'}).get_json()['data']['id']

    assert client.delete(f'/students/api/{student_id}').status_code == 200
    assert client.get(f'/students/api/{student_id}').get_json()['error']['code'] == 'STUDENT_NOT_FOUND'
    with app.app_context():
        assert db.session.get(Student, student_id).deleted_at is not None

    manager = app.test_client()
    login(manager, 'manager')
    assert manager.delete(f'/students/api/{student_id}').status_code == 403
