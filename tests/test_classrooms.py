def test_list_classrooms_is_public(client, seed):
    r = client.get("/classrooms")
    assert r.status_code == 200, r.text

    rows = r.json()
    assert [c["id"] for c in rows] == [seed.classroom]
    assert rows[0]["title"] == "Algebra"
    assert rows[0]["createdByName"] == "Teacher A"
    assert rows[0]["assignmentCount"] == 1
    assert rows[0]["studentCount"] == 1


def test_classroom_detail_requires_authentication(client, seed):
    r = client.get(f"/classrooms/{seed.classroom}")
    assert r.status_code == 401


def test_garbage_bearer_token_is_unauthenticated(client, seed):
    r = client.get(f"/classrooms/{seed.classroom}", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_classroom_detail_reports_enrollment_for_requester(client, seed, auth):
    enrolled = client.get(f"/classrooms/{seed.classroom}", headers=auth.student_s)
    assert enrolled.status_code == 200, enrolled.text
    body = enrolled.json()
    assert body["isEnrolled"] is True
    assert body["studentCount"] == 1
    assert [a["id"] for a in body["assignments"]] == [seed.assignment]
    assert body["assignments"][0]["hasSubmitted"] is False

    outsider = client.get(f"/classrooms/{seed.classroom}", headers=auth.student_t)
    assert outsider.status_code == 200
    assert outsider.json()["isEnrolled"] is False


def test_classroom_detail_not_found(client, auth):
    r = client.get("/classrooms/9999", headers=auth.teacher_a)
    assert r.status_code == 404


def test_teacher_creates_classroom(client, seed, auth):
    r = client.post(
        "/classrooms",
        headers=auth.teacher_b,
        json={"title": "Geometry", "description": "Shapes"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["createdById"] == seed.teacher_b
    assert body["assignmentCount"] == 0
    assert body["studentCount"] == 0


def test_student_cannot_create_classroom(client, auth):
    r = client.post("/classrooms", headers=auth.student_s, json={"title": "Nope"})
    assert r.status_code == 403


def test_create_classroom_validates_title(client, auth):
    r = client.post("/classrooms", headers=auth.teacher_a, json={"title": ""})
    assert r.status_code == 422


def test_student_joins_classroom_once(client, seed, auth):
    r = client.post(f"/classrooms/{seed.classroom}/join", headers=auth.student_t)
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Successfully joined the classroom"

    again = client.post(f"/classrooms/{seed.classroom}/join", headers=auth.student_t)
    assert again.status_code == 409

    detail = client.get(f"/classrooms/{seed.classroom}", headers=auth.student_t)
    assert detail.json()["isEnrolled"] is True
    assert detail.json()["studentCount"] == 2


def test_teacher_cannot_join_classroom(client, seed, auth):
    r = client.post(f"/classrooms/{seed.classroom}/join", headers=auth.teacher_b)
    assert r.status_code == 403


def test_join_missing_classroom(client, auth):
    r = client.post("/classrooms/9999/join", headers=auth.student_t)
    assert r.status_code == 404


def test_my_classrooms_for_teacher_lists_owned(client, seed, auth):
    mine = client.get("/classrooms/my-classrooms", headers=auth.teacher_a)
    assert mine.status_code == 200
    assert [c["id"] for c in mine.json()] == [seed.classroom]

    other = client.get("/classrooms/my-classrooms", headers=auth.teacher_b)
    assert other.json() == []


def test_my_classrooms_for_student_lists_enrolled(client, seed, auth):
    mine = client.get("/classrooms/my-classrooms", headers=auth.student_s)
    assert [c["id"] for c in mine.json()] == [seed.classroom]

    other = client.get("/classrooms/my-classrooms", headers=auth.student_t)
    assert other.json() == []


def test_my_classrooms_requires_authentication(client):
    r = client.get("/classrooms/my-classrooms")
    assert r.status_code == 401
