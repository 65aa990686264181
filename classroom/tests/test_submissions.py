import os

from fastapi import status

from classroom.models import Submission


def _submit(client, headers, assignment_id, comment=None, file=None):
    data = {"comment": comment} if comment is not None else {}
    files = {"file": file} if file is not None else None
    return client.post(f"/student/assignments/{assignment_id}/submit", data=data, files=files, headers=headers)


def test_submit_comment(client, student, assignment, auth_for):
    response = _submit(client, auth_for(student), assignment.id, comment="  My answers  ")
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["comment"] == "My answers"
    assert data["student_name"] == "Ada Lovelace"
    assert data["status"] == "pending"
    assert data["is_late"] is False
    assert data["file_url"] is None

    detail = client.get(f"/student/assignments/{assignment.id}", headers=auth_for(student)).json()
    assert detail["submitted"] is True
    assert detail["submission"]["id"] == data["id"]


def test_submit_needs_comment_or_file(client, student, assignment, auth_for):
    response = _submit(client, auth_for(student), assignment.id, comment="   ")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "A submission needs a comment or a file"


def test_late_submission_is_flagged(client, student, past_assignment, auth_for):
    response = _submit(client, auth_for(student), past_assignment.id, comment="Sorry, late")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["is_late"] is True


def test_submit_to_foreign_assignment(client, other_student, assignment, auth_for):
    response = _submit(client, auth_for(other_student), assignment.id, comment="Let me in")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_submit_file_too_large(client, student, assignment, auth_for):
    response = _submit(client, auth_for(student), assignment.id, file=("big.pdf", b"x" * 4096, "application/pdf"))
    assert response.status_code == 413


def test_resubmission_replaces_previous_work(client, db_session, student, assignment, auth_for):
    headers = auth_for(student)
    first = _submit(client, headers, assignment.id, file=("answers.pdf", b"%PDF first", "application/pdf")).json()
    assert first["file_url"] == f"/files/submissions/{first['id']}"
    first_path = db_session.get(Submission, first["id"]).file_path
    assert os.path.exists(first_path)

    second = _submit(client, headers, assignment.id, comment="Pasted inline instead")
    assert second.status_code == status.HTTP_201_CREATED
    data = second.json()
    assert data["id"] == first["id"]
    assert data["comment"] == "Pasted inline instead"
    assert data["file_url"] is None
    assert not os.path.exists(first_path)

    db_session.expire_all()
    assert db_session.query(Submission).filter(Submission.assignment_id == assignment.id).count() == 1


def test_submission_file_access(
    client, teacher, other_teacher, student, other_student, assignment, auth_for
):
    submission = _submit(
        client, auth_for(student), assignment.id, file=("answers.txt", b"42", "text/plain")
    ).json()
    url = submission["file_url"]

    own = client.get(url, headers=auth_for(student))
    assert own.status_code == status.HTTP_200_OK
    assert own.content == b"42"
    assert client.get(url, headers=auth_for(teacher)).status_code == status.HTTP_200_OK
    assert client.get(url, headers=auth_for(other_student)).status_code == status.HTTP_404_NOT_FOUND
    assert client.get(url, headers=auth_for(other_teacher)).status_code == status.HTTP_404_NOT_FOUND


def test_teacher_lists_and_grades(client, teacher, student, assignment, auth_for):
    submission_id = _submit(client, auth_for(student), assignment.id, comment="Done").json()["id"]
    headers = auth_for(teacher)

    listed = client.get(f"/teacher/assignments/{assignment.id}/submissions", headers=headers).json()
    assert [s["id"] for s in listed] == [submission_id]

    response = client.patch(
        f"/teacher/submissions/{submission_id}",
        json={"grade": 92.5, "feedback": "Nice work"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "graded"
    assert data["grade"] == 92.5
    assert data["feedback"] == "Nice work"
    assert data["graded_at"]

    overview = client.get(f"/teacher/assignments/{assignment.id}", headers=headers).json()
    assert overview["submission_count"] == 1
    assert overview["graded_count"] == 1

    regraded = client.patch(
        f"/teacher/submissions/{submission_id}",
        json={"grade": 95, "feedback": "Rechecked"},
        headers=headers,
    )
    assert regraded.status_code == status.HTTP_200_OK
    assert regraded.json()["grade"] == 95


def test_grade_validation(client, teacher, student, assignment, auth_for):
    submission_id = _submit(client, auth_for(student), assignment.id, comment="Done").json()["id"]
    headers = auth_for(teacher)
    url = f"/teacher/submissions/{submission_id}"

    assert client.patch(url, json={"grade": 101, "feedback": "Too much"}, headers=headers).status_code == 422
    assert client.patch(url, json={"grade": -1, "feedback": "Too little"}, headers=headers).status_code == 422
    assert client.patch(url, json={"grade": 50, "feedback": ""}, headers=headers).status_code == 422


def test_other_teacher_cannot_grade(client, other_teacher, student, assignment, auth_for):
    submission_id = _submit(client, auth_for(student), assignment.id, comment="Done").json()["id"]
    response = client.patch(
        f"/teacher/submissions/{submission_id}",
        json={"grade": 10, "feedback": "Not mine"},
        headers=auth_for(other_teacher),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_cannot_resubmit_after_grading(client, teacher, student, assignment, auth_for):
    submission_id = _submit(client, auth_for(student), assignment.id, comment="Done").json()["id"]
    client.patch(
        f"/teacher/submissions/{submission_id}",
        json={"grade": 70, "feedback": "Okay"},
        headers=auth_for(teacher),
    )

    response = _submit(client, auth_for(student), assignment.id, comment="Better version")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "Submission already graded"


def test_student_grades(client, teacher, student, assignment, past_assignment, auth_for):
    headers = auth_for(student)
    empty = client.get("/student/grades", headers=headers).json()
    assert empty == {"average_grade": 0.0, "items": []}

    for assignment_id, grade in ((assignment.id, 90), (past_assignment.id, 75)):
        submission_id = _submit(client, headers, assignment_id, comment="Answer").json()["id"]
        client.patch(
            f"/teacher/submissions/{submission_id}",
            json={"grade": grade, "feedback": "Graded"},
            headers=auth_for(teacher),
        )

    data = client.get("/student/grades", headers=headers).json()
    assert data["average_grade"] == 82.5
    assert {item["assignment_title"] for item in data["items"]} == {"Worksheet 1", "Old worksheet"}
    late = next(item for item in data["items"] if item["assignment_id"] == past_assignment.id)
    assert late["is_late"] is True
    assert late["class_name"] == "Algebra I"


def test_teacher_dashboard(client, teacher, assignment, past_assignment, auth_for):
    data = client.get("/teacher/dashboard", headers=auth_for(teacher)).json()
    assert data["total_classes"] == 1
    assert data["total_assignments"] == 2
    assert data["total_students"] == 1
    assert [c["name"] for c in data["recent_classes"]] == ["Algebra I"]
    assert [a["id"] for a in data["upcoming_assignments"]] == [assignment.id]


def test_student_dashboard(client, teacher, student, assignment, past_assignment, auth_for):
    headers = auth_for(student)
    data = client.get("/student/dashboard", headers=headers).json()
    assert data["enrolled_classes"] == 1
    assert data["pending_assignments"] == 1
    assert data["completed_assignments"] == 0
    assert data["graded_assignments"] == 0
    assert [a["id"] for a in data["upcoming_assignments"]] == [assignment.id]

    submission_id = _submit(client, headers, assignment.id, comment="Done").json()["id"]

    # submitted but not graded yet
    data = client.get("/student/dashboard", headers=headers).json()
    assert data["pending_assignments"] == 0
    assert data["completed_assignments"] == 1
    assert data["graded_assignments"] == 0

    client.patch(
        f"/teacher/submissions/{submission_id}",
        json={"grade": 88, "feedback": "Good"},
        headers=auth_for(teacher),
    )

    data = client.get("/student/dashboard", headers=headers).json()
    assert data["pending_assignments"] == 0
    assert data["completed_assignments"] == 1
    assert data["graded_assignments"] == 1
    assert data["average_grade"] == 88.0
    assert data["upcoming_assignments"] == []
