"""
Test: GET/PATCH /v1/teacher/gradebook
"""
from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from models.gradebook_settings import GradebookSettings

URL = "/v1/teacher/gradebook"


def get_gradebook(client, headers, classroom, **params):
    return client.get(URL, params={"classroom_id": classroom.id, **params}, headers=headers)


def row_for(body, student):
    return next(r for r in body["students"] if r["student_id"] == student.id)


@pytest.fixture
def graded_classroom(classroom, factory):
    """2 assignments + 1 quiz, one fully graded student"""
    student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
    a1 = factory.assignment(classroom, "Journal", position=1, points_possible=30)
    a2 = factory.assignment(classroom, "Interview", position=2, points_possible=20)
    factory.grade(a1, student, 10, 10, 10)
    factory.grade(a2, student, 7, 7, 6)
    quiz = factory.quiz(classroom, "Unit 1", status="closed", points_possible=100, correct_options=[0, 1, 2, 3])
    factory.answer(quiz, student, [0, 1, 2, 0])
    return {"student": student, "assignments": (a1, a2), "quiz": quiz}


class TestGradebookScenarios:
    def test_weighted_scenario(self, client, auth_headers, classroom, factory, graded_classroom):
        factory.settings(classroom, True, 70, 30)
        response = get_gradebook(client, auth_headers, classroom)
        assert response.status_code == 200

        row = row_for(response.json(), graded_classroom["student"])
        assert row["assignments_percent"] == pytest.approx(86.67)
        assert row["quizzes_percent"] == pytest.approx(75.0)
        assert row["final_percent"] == pytest.approx(83.17)

    def test_unweighted_scenario_uses_item_mean(self, client, auth_headers, classroom, graded_classroom):
        body = get_gradebook(client, auth_headers, classroom).json()
        row = row_for(body, graded_classroom["student"])
        assert body["settings"] == {"use_weights": False, "assignments_weight": 70, "quizzes_weight": 30}
        assert row["final_percent"] == pytest.approx(round((100 + 200 / 3 + 75) / 3, 2))

    def test_student_without_graded_items_has_null_final(self, client, auth_headers, classroom, factory):
        graded = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        ungraded = factory.student(classroom, "noah@example.com", "Noah", "Garcia")
        assignment = factory.assignment(classroom, "Journal")
        factory.grade(assignment, graded, 10, 9, 8)

        body = get_gradebook(client, auth_headers, classroom).json()
        assert row_for(body, graded)["final_percent"] == pytest.approx(90.0)
        row = row_for(body, ungraded)
        assert row["assignments_percent"] is None
        assert row["quizzes_percent"] is None
        assert row["final_percent"] is None


class TestExclusionRules:
    def test_incomplete_rubric_is_excluded_not_zero(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "liam@example.com", "Liam", "Patel")
        a1 = factory.assignment(classroom, "Graded", position=1)
        a2 = factory.assignment(classroom, "Half graded", position=2)
        factory.grade(a1, student, 9, 9, 9)
        factory.grade(a2, student, 10, None, 10)

        row = row_for(get_gradebook(client, auth_headers, classroom).json(), student)
        assert row["assignments_percent"] == pytest.approx(90.0)
        assert row["final_percent"] == pytest.approx(90.0)

    def test_quiz_without_scorable_questions_is_excluded(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "liam@example.com", "Liam", "Patel")
        quiz = factory.quiz(classroom, "Survey", correct_options=[None, None])
        factory.answer(quiz, student, [0, 1])

        body = get_gradebook(client, auth_headers, classroom).json()
        assert row_for(body, student)["quizzes_percent"] is None
        assert body["class_summary"]["quizzes"][0]["scored_count"] == 0

    def test_unanswered_scorable_quiz_counts_as_zero(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "liam@example.com", "Liam", "Patel")
        factory.quiz(classroom, "Pop quiz", status="active", points_possible=10, correct_options=[1])

        row = row_for(get_gradebook(client, auth_headers, classroom).json(), student)
        assert row["quizzes_percent"] == 0.0
        assert row["final_percent"] == 0.0

    def test_draft_quiz_ignored(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        active = factory.quiz(classroom, "Active", status="active", points_possible=10, correct_options=[0])
        draft = factory.quiz(classroom, "Draft", status="draft", points_possible=10, correct_options=[0])
        factory.answer(active, student, [0])
        factory.answer(draft, student, [3])

        body = get_gradebook(client, auth_headers, classroom).json()
        assert row_for(body, student)["quizzes_percent"] == 100.0
        assert body["totals"]["quizzes"] == 1

    def test_quiz_not_in_final_ignored(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        quiz = factory.quiz(classroom, "Practice", include_in_final=False, correct_options=[0])
        factory.override(quiz, student, 10)

        assert row_for(get_gradebook(client, auth_headers, classroom).json(), student)["quizzes_percent"] is None

    def test_draft_and_excluded_assignments_ignored(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        counted = factory.assignment(classroom, "Counted", position=1)
        draft = factory.assignment(classroom, "Draft", position=2, is_draft=True)
        practice = factory.assignment(classroom, "Practice", position=3, include_in_final=False)
        factory.grade(counted, student, 6, 6, 6)
        factory.grade(draft, student, 0, 0, 0)
        factory.grade(practice, student, 0, 0, 0)

        body = get_gradebook(client, auth_headers, classroom).json()
        assert row_for(body, student)["assignments_percent"] == pytest.approx(60.0)
        assert body["totals"]["assignments"] == 3

    def test_zero_point_items_rejected_by_schema(self, db_session, classroom, factory):
        with pytest.raises(IntegrityError):
            factory.assignment(classroom, "Worthless", points_possible=0)
        db_session.rollback()
        with pytest.raises(IntegrityError):
            factory.quiz(classroom, "Worthless", points_possible=0)
        db_session.rollback()

    def test_negative_override_rejected_by_schema(self, db_session, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        quiz = factory.quiz(classroom, "Unit 1", correct_options=[0])
        with pytest.raises(IntegrityError):
            factory.override(quiz, student, -1)
        db_session.rollback()

    def test_override_used_verbatim(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        quiz = factory.quiz(classroom, "Unit 2", status="closed", points_possible=20, correct_options=[0, 0])
        factory.answer(quiz, student, [0, 0])
        factory.override(quiz, student, 5)

        body = get_gradebook(client, auth_headers, classroom, student_id=student.id).json()
        assert row_for(body, student)["quizzes_percent"] == pytest.approx(25.0)
        detail = body["selected_student"]["quizzes"][0]
        assert detail["earned"] == 5
        assert detail["is_manual_override"] is True

    def test_null_override_falls_back_to_auto_score(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        quiz = factory.quiz(classroom, "Unit 2", points_possible=10, correct_options=[0, 1])
        factory.answer(quiz, student, [0, 0])
        factory.override(quiz, student, None)

        row = row_for(get_gradebook(client, auth_headers, classroom).json(), student)
        assert row["quizzes_percent"] == pytest.approx(50.0)


class TestGradebookResponseShape:
    def test_students_sorted_by_name_then_email(self, client, auth_headers, classroom, factory):
        factory.student(classroom, "zed@example.com", "Zed", "Young")
        factory.student(classroom, "anon@example.com")
        factory.student(classroom, "ava@example.com", "Ava", "Chen")

        emails = [r["student_email"] for r in get_gradebook(client, auth_headers, classroom).json()["students"]]
        assert emails == ["anon@example.com", "ava@example.com", "zed@example.com"]

    def test_unenrolled_students_not_listed(self, client, auth_headers, classroom, factory):
        factory.student(classroom, "ava@example.com", "Ava", "Chen")
        factory.student(classroom, "outsider@example.com", enroll=False)

        body = get_gradebook(client, auth_headers, classroom).json()
        assert [r["student_email"] for r in body["students"]] == ["ava@example.com"]
        assert body["selected_student"] is None

    def test_selected_student_assignments_in_position_order(self, client, auth_headers, classroom, factory):
        student = factory.student(classroom, "ava@example.com", "Ava", "Chen")
        graded = factory.assignment(classroom, "Graded", position=2, due_at=datetime(2025, 1, 1, 12))
        factory.assignment(classroom, "Ungraded", position=1)
        factory.assignment(classroom, "Draft", position=3, is_draft=True)
        factory.grade(graded, student, 9, 8, 7)

        body = get_gradebook(client, auth_headers, classroom, student_id=student.id).json()
        details = body["selected_student"]["assignments"]
        assert [d["title"] for d in details] == ["Ungraded", "Graded", "Draft"]
        assert details[0]["is_graded"] is False
        assert details[0]["earned"] is None
        assert details[1]["earned"] == 24
        assert details[1]["percent"] == 80
        assert details[1]["is_graded"] is True
        assert details[2]["is_draft"] is True

    def test_selected_student_must_be_enrolled(self, client, auth_headers, classroom, factory):
        outsider = factory.student(classroom, "outsider@example.com", enroll=False)
        response = get_gradebook(client, auth_headers, classroom, student_id=outsider.id)
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Student is not enrolled in this classroom"

    def test_class_summary(self, client, auth_headers, classroom, factory, graded_classroom):
        factory.student(classroom, "noah@example.com", "Noah", "Garcia")
        a1, _ = graded_classroom["assignments"]

        summary = get_gradebook(client, auth_headers, classroom).json()["class_summary"]
        assert summary["total_students"] == 2
        # the ungraded student still gets a 0 on the closed quiz
        assert summary["students_with_final"] == 2
        first = summary["assignments"][0]
        assert first["assignment_id"] == a1.id
        assert first["graded_count"] == 1
        assert first["average_percent"] == 100.0
        assert summary["quizzes"][0]["scored_count"] == 2
        assert summary["quizzes"][0]["average_percent"] == pytest.approx(37.5)

    def test_class_average_uses_unrounded_finals(self, client, auth_headers, classroom, factory):
        quiz = factory.quiz(classroom, "Long quiz", correct_options=[0] * 21)
        for email, correct in (("a@example.com", 7), ("b@example.com", 7), ("c@example.com", 6)):
            student = factory.student(classroom, email)
            factory.answer(quiz, student, [0] * correct + [1] * (21 - correct))

        summary = get_gradebook(client, auth_headers, classroom).json()["class_summary"]
        # finals 33.33.., 33.33.., 28.57..; averaging the rounded values would give 31.74
        assert summary["average_final_percent"] == pytest.approx(31.75)

    def test_empty_classroom(self, client, auth_headers, classroom):
        body = get_gradebook(client, auth_headers, classroom).json()
        assert body["students"] == []
        assert body["class_summary"]["average_final_percent"] is None
        assert body["totals"] == {"assignments": 0, "quizzes": 0}

    def test_latency_header(self, client, auth_headers, classroom):
        assert "x-latency-ms" in get_gradebook(client, auth_headers, classroom).headers


class TestGradebookAccess:
    def test_requires_token(self, client, classroom):
        response = client.get(URL, params={"classroom_id": classroom.id})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_unknown_classroom(self, client, auth_headers, teacher):
        response = client.get(URL, params={"classroom_id": 999}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Classroom not found"

    def test_other_teachers_classroom(self, client, classroom, other_teacher):
        response = client.get(URL, params={"classroom_id": classroom.id},
                              headers={"Authorization": "Bearer other-teacher-token"})
        assert response.status_code == 403


class TestUpdateSettings:
    def test_saves_and_returns_settings(self, client, auth_headers, classroom, db_session):
        response = client.patch(URL, json={
            "classroom_id": classroom.id, "use_weights": True, "assignments_weight": 60, "quizzes_weight": 40,
        }, headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"settings": {"use_weights": True, "assignments_weight": 60, "quizzes_weight": 40}}
        assert db_session.get(GradebookSettings, classroom.id).assignments_weight == 60

    def test_rejects_weights_not_summing_to_100(self, client, auth_headers, classroom, db_session):
        response = client.patch(URL, json={
            "classroom_id": classroom.id, "use_weights": True, "assignments_weight": 60, "quizzes_weight": 30,
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": "VALIDATION_ERROR",
            "message": "assignments_weight + quizzes_weight must equal 100",
        }
        assert db_session.get(GradebookSettings, classroom.id) is None

    def test_allows_non_100_split_when_unweighted(self, client, auth_headers, classroom):
        response = client.patch(URL, json={
            "classroom_id": classroom.id, "use_weights": False, "assignments_weight": 10, "quizzes_weight": 20,
        }, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["settings"]["quizzes_weight"] == 20

    def test_partial_update_uses_defaults(self, client, auth_headers, classroom):
        response = client.patch(URL, json={"classroom_id": classroom.id, "use_weights": True}, headers=auth_headers)
        assert response.json()["settings"] == {"use_weights": True, "assignments_weight": 70, "quizzes_weight": 30}

    def test_forbidden_for_other_teacher(self, client, classroom, other_teacher):
        response = client.patch(URL, json={"classroom_id": classroom.id, "use_weights": True},
                                headers={"Authorization": "Bearer other-teacher-token"})
        assert response.status_code == 403

    def test_settings_change_affects_gradebook(self, client, auth_headers, classroom, graded_classroom):
        client.patch(URL, json={
            "classroom_id": classroom.id, "use_weights": True, "assignments_weight": 70, "quizzes_weight": 30,
        }, headers=auth_headers)
        row = row_for(get_gradebook(client, auth_headers, classroom).json(), graded_classroom["student"])
        assert row["final_percent"] == pytest.approx(83.17)
