from datetime import timedelta
from decimal import Decimal

from conftest import option_id
from exam_api.models.db.attempt import TestAttempt
from exam_api.utils.time_utils import as_utc, utc_now


def _start(client, test_id: int, headers: dict) -> dict:
    response = client.post(f"/api/tests/{test_id}/start", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["test_attempt"]


def _choose(client, attempt_id: int, question, text: str, headers: dict):
    return client.post(
        f"/api/test-attempts/{attempt_id}/submit-answer",
        json={
            "question_id": question.id,
            "answer": {"kind": "option", "option_id": option_id(question, text)},
        },
        headers=headers,
    )


def test_health(client) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_start_requires_authentication(client, mock_test) -> None:
    response = client.post(f"/api/tests/{mock_test.id}/start")
    assert response.status_code == 401

    response = client.post(
        f"/api/tests/{mock_test.id}/start",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_start_unknown_test(client, auth_headers) -> None:
    response = client.post("/api/tests/999/start", headers=auth_headers)
    assert response.status_code == 404


def test_start_returns_attempt_with_test_summary(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)

    assert attempt["status"] == "created"
    assert attempt["is_completed"] is False
    assert attempt["score"] is None
    assert attempt["total_marks"] == 10
    assert attempt["test"]["duration"] == 10
    assert Decimal(attempt["test"]["negative_marking"]) == Decimal("0.5")

    again = _start(client, mock_test.id, auth_headers)
    assert again["id"] == attempt["id"]


def test_start_and_report_use_snake_case_envelope(client, auth_headers, mock_test) -> None:
    started = client.post(f"/api/tests/{mock_test.id}/start", headers=auth_headers).json()
    assert list(started) == ["test_attempt"]
    attempt = started["test_attempt"]
    for key in ("time_taken", "correct_answers", "incorrect_answers", "unanswered", "percentage"):
        assert key in attempt

    url = f"/api/test-attempts/{attempt['id']}"
    completed = client.post(f"{url}/complete", headers=auth_headers).json()
    assert list(completed) == ["test_attempt"]
    assert completed["test_attempt"]["time_taken"] is not None

    report = client.get(url, headers=auth_headers).json()
    assert set(report) == {"test_attempt", "questions"}
    assert report["test_attempt"]["correct_answers"] == 0


def test_question_list_has_no_answer_key(client, mock_test) -> None:
    response = client.get(f"/api/tests/{mock_test.id}/questions")
    assert response.status_code == 200
    questions = response.json()
    assert [question["question_text"] for question in questions] == ["Q1", "Q2"]
    assert all("options" not in question for question in questions)


def test_question_detail_reveals_key_to_admin_only(client, admin_headers, mock_test) -> None:
    question_id = mock_test.questions[0].id

    public = client.get(f"/api/questions/{question_id}").json()
    assert [option["is_correct"] for option in public["options"]] == [None, None]

    admin_view = client.get(f"/api/questions/{question_id}", headers=admin_headers).json()
    assert [option["is_correct"] for option in admin_view["options"]] == [True, False]


def test_one_correct_one_blank_end_to_end(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    q1 = mock_test.questions[0]

    answer = _choose(client, attempt["id"], q1, "right", auth_headers)
    assert answer.status_code == 200, answer.text
    assert answer.json()["is_correct"] is True

    response = client.post(f"/api/test-attempts/{attempt['id']}/complete", headers=auth_headers)
    assert response.status_code == 200
    result = response.json()["test_attempt"]

    assert result["is_completed"] is True
    assert result["status"] == "completed"
    assert Decimal(result["score"]) == Decimal("5")
    assert result["correct_answers"] == 1
    assert result["incorrect_answers"] == 0
    assert result["unanswered"] == 1
    assert Decimal(result["percentage"]) == Decimal("50")
    assert result["passed"] is True


def test_one_correct_one_wrong_end_to_end(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    q1, q2 = mock_test.questions

    assert _choose(client, attempt["id"], q1, "right", auth_headers).status_code == 200
    wrong = _choose(client, attempt["id"], q2, "wrong", auth_headers)
    assert Decimal(wrong.json()["marks_obtained"]) == Decimal("-2.5")

    result = client.post(
        f"/api/test-attempts/{attempt['id']}/complete", headers=auth_headers
    ).json()["test_attempt"]

    assert Decimal(result["score"]) == Decimal("2.5")
    assert result["correct_answers"] == 1
    assert result["incorrect_answers"] == 1
    assert result["unanswered"] == 0
    assert Decimal(result["percentage"]) == Decimal("25")


def test_complete_twice_returns_same_result(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    _choose(client, attempt["id"], mock_test.questions[0], "right", auth_headers)

    url = f"/api/test-attempts/{attempt['id']}/complete"
    first = client.post(url, headers=auth_headers).json()["test_attempt"]
    second = client.post(url, headers=auth_headers).json()["test_attempt"]

    for key in ("score", "percentage", "ended_at", "time_taken", "correct_answers"):
        assert first[key] == second[key]


def test_other_user_cannot_touch_attempt(client, auth_headers, other_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)

    response = _choose(client, attempt["id"], mock_test.questions[0], "right", other_headers)
    assert response.status_code == 403

    response = client.get(f"/api/test-attempts/{attempt['id']}", headers=other_headers)
    assert response.status_code == 403


def test_unknown_attempt(client, auth_headers) -> None:
    response = client.post("/api/test-attempts/777/complete", headers=auth_headers)
    assert response.status_code == 404


def test_submit_after_complete_conflicts(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    client.post(f"/api/test-attempts/{attempt['id']}/complete", headers=auth_headers)

    response = _choose(client, attempt["id"], mock_test.questions[0], "right", auth_headers)
    assert response.status_code == 409


def test_submit_invalid_answers(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    url = f"/api/test-attempts/{attempt['id']}/submit-answer"
    q1 = mock_test.questions[0]

    wrong_kind = client.post(
        url,
        json={"question_id": q1.id, "answer": {"kind": "text", "text": "right"}},
        headers=auth_headers,
    )
    assert wrong_kind.status_code == 422

    unknown_kind = client.post(
        url,
        json={"question_id": q1.id, "answer": {"kind": "audio", "url": "x"}},
        headers=auth_headers,
    )
    assert unknown_kind.status_code == 422

    foreign_option = client.post(
        url,
        json={
            "question_id": q1.id,
            "answer": {"kind": "option", "option_id": mock_test.questions[1].options[0].id},
        },
        headers=auth_headers,
    )
    assert foreign_option.status_code == 422

    unknown_question = client.post(
        url,
        json={"question_id": 999, "answer": None},
        headers=auth_headers,
    )
    assert unknown_question.status_code == 404


def test_deadline_enforced_on_submit_and_status(client, db, auth_headers, mock_test) -> None:
    started = _start(client, mock_test.id, auth_headers)
    _choose(client, started["id"], mock_test.questions[0], "right", auth_headers)

    attempt = db.get(TestAttempt, started["id"])
    began = utc_now() - timedelta(minutes=10, seconds=1)
    attempt.started_at = began
    db.commit()

    late = _choose(client, started["id"], mock_test.questions[1], "right", auth_headers)
    assert late.status_code == 409

    status = client.get(f"/api/test-attempts/{started['id']}/status", headers=auth_headers)
    assert status.status_code == 200
    assert status.json()["is_completed"] is True
    assert status.json()["remaining_seconds"] == 0

    db.expire_all()
    attempt = db.get(TestAttempt, started["id"])
    assert attempt.is_completed is True
    assert as_utc(attempt.ended_at) == as_utc(began) + timedelta(minutes=10)
    assert attempt.time_taken == 600
    assert attempt.correct_answers == 1
    assert attempt.unanswered == 1


def test_status_of_running_attempt(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    body = client.get(f"/api/test-attempts/{attempt['id']}/status", headers=auth_headers).json()

    assert body["is_completed"] is False
    assert 0 < body["remaining_seconds"] <= 600


def test_report_reveals_key_after_completion(client, auth_headers, mock_test) -> None:
    attempt = _start(client, mock_test.id, auth_headers)
    _choose(client, attempt["id"], mock_test.questions[1], "wrong", auth_headers)
    url = f"/api/test-attempts/{attempt['id']}"

    open_report = client.get(url, headers=auth_headers).json()
    assert open_report["test_attempt"]["status"] == "in_progress"
    assert all(
        option["is_correct"] is None
        for question in open_report["questions"]
        for option in question["options"]
    )

    client.post(f"{url}/complete", headers=auth_headers)
    report = client.get(url, headers=auth_headers).json()

    assert [question["question_text"] for question in report["questions"]] == ["Q1", "Q2"]
    assert report["questions"][0]["user_answer"] is None
    assert report["questions"][1]["user_answer"]["is_correct"] is False
    assert [option["is_correct"] for option in report["questions"][1]["options"]] == [True, False]


def test_list_my_attempts(client, auth_headers, other_headers, mock_test) -> None:
    mine = _start(client, mock_test.id, auth_headers)
    _start(client, mock_test.id, other_headers)

    listed = client.get("/api/users/test-attempts", headers=auth_headers).json()
    assert [attempt["id"] for attempt in listed] == [mine["id"]]

    client.post(f"/api/test-attempts/{mine['id']}/complete", headers=auth_headers)
    open_only = client.get(
        "/api/users/test-attempts", params={"completed": False}, headers=auth_headers
    ).json()
    assert open_only == []
