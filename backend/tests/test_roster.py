from survey_api.models.teacher_student import TeacherStudent
from tests.conftest import auth_headers, create_survey


def _respond(client, created, email, value="Red"):
    resp = client.post(
        f"/api/surveys/{created['surveyId']}/responses",
        json={"answers": [{"questionId": created["questions"][0]["id"], "value": value}]},
        headers=auth_headers(client, email),
    )
    assert resp.status_code == 201, resp.text


def test_students_listed_by_name_with_survey_title(client, seed_users):
    teacher_headers = auth_headers(client, "teacher@example.com")
    created = create_survey(client, teacher_headers, title="Week 1")
    _respond(client, created, "student@example.com")
    _respond(client, created, "student2@example.com")

    resp = client.get("/api/teacher/students", headers=teacher_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [row["name"] for row in data] == ["Another Student", "Student"]
    assert all(row["surveyTitle"] == "Week 1" for row in data)
    assert data[1]["studentId"] == seed_users["student"].user_id


def test_add_by_survey_skips_already_linked(client, db, seed_users):
    teacher_headers = auth_headers(client, "teacher@example.com")
    created = create_survey(client, teacher_headers)
    _respond(client, created, "student@example.com")
    # Drop the automatic link so add-by-survey has work to do for one student.
    db.query(TeacherStudent).delete()
    db.commit()
    _respond(client, created, "student2@example.com")

    resp = client.post(
        "/api/teacher/students/add-by-survey",
        json={"surveyId": created["surveyId"]},
        headers=teacher_headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert [row["email"] for row in body["data"]] == ["student@example.com"]
    assert db.query(TeacherStudent).count() == 2


def test_add_by_survey_without_student_participants(client, seed_users):
    teacher_headers = auth_headers(client, "teacher@example.com")
    created = create_survey(client, teacher_headers)
    _respond(client, created, "teacher2@example.com")

    resp = client.post(
        "/api/teacher/students/add-by-survey",
        json={"surveyId": created["surveyId"]},
        headers=teacher_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NO_PARTICIPANTS"


def test_add_by_survey_of_foreign_survey(client, seed_users):
    created = create_survey(client, auth_headers(client, "teacher2@example.com"))
    resp = client.post(
        "/api/teacher/students/add-by-survey",
        json={"surveyId": created["surveyId"]},
        headers=auth_headers(client, "teacher@example.com"),
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "SURVEY_NOT_FOUND"


def test_remove_student(client, db, seed_users):
    teacher_headers = auth_headers(client, "teacher@example.com")
    created = create_survey(client, teacher_headers)
    _respond(client, created, "student@example.com")
    student_id = seed_users["student"].user_id

    resp = client.delete(f"/api/teacher/students/{student_id}", headers=teacher_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert db.query(TeacherStudent).count() == 0

    resp = client.delete(f"/api/teacher/students/{student_id}", headers=teacher_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "STUDENT_NOT_LINKED"


def test_roster_is_teacher_only(client, seed_users):
    resp = client.get("/api/teacher/students", headers=auth_headers(client, "student@example.com"))
    assert resp.status_code == 403
