"""
Tests for the session-scoped Persistence Gateway.

Each test runs against a fresh in-memory SQLite database.

Run tests with: pytest backend/tests/test_persistence.py -v
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from models import Resume, SkillGap


T1 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(minutes=5)


def insert(engine, row):
    with Session(engine) as session:
        session.add(row)
        session.commit()


class TestSessions:

    def test_ensure_session_creates_then_refreshes(self, persistence):
        first = persistence.ensure_session("session_a")
        second = persistence.ensure_session("session_a")

        assert first.is_ok and second.is_ok
        assert first.data.id == second.data.id
        assert second.data.last_active >= first.data.last_active
        assert persistence.touch_session("session_a").is_ok

    def test_get_session_not_found(self, persistence):
        assert persistence.get_session("nobody").is_not_found

    def test_create_then_get(self, persistence):
        created = persistence.create_session("session_b", {"theme": "dark"})
        fetched = persistence.get_session("session_b")

        assert created.is_ok
        assert fetched.data.user_data == {"theme": "dark"}

    def test_create_duplicate_is_error(self, persistence):
        persistence.create_session("session_c")
        assert persistence.create_session("session_c").is_error

    def test_touch_missing_session(self, persistence):
        assert persistence.touch_session("ghost").is_not_found


class TestLatestRecord:

    def test_latest_resume_is_the_newest(self, engine, persistence):
        insert(engine, Resume(session_id="s1", file_name="old.pdf", created_at=T1))
        insert(engine, Resume(session_id="s1", file_name="new.pdf", created_at=T2))

        latest = persistence.get_latest_resume("s1")

        assert latest.is_ok
        assert latest.data.file_name == "new.pdf"

    def test_latest_ignores_insert_order(self, engine, persistence):
        insert(engine, SkillGap(session_id="s1", target_role="newer", created_at=T2))
        insert(engine, SkillGap(session_id="s1", target_role="older", created_at=T1))

        assert persistence.get_latest_skill_gap("s1").data.target_role == "newer"

    def test_lists_are_newest_first(self, engine, persistence):
        insert(engine, Resume(session_id="s1", file_name="a", created_at=T1))
        insert(engine, Resume(session_id="s1", file_name="b", created_at=T2))

        names = [r.file_name for r in persistence.list_resumes("s1").data]

        assert names == ["b", "a"]

    def test_no_rows_is_not_found(self, persistence):
        assert persistence.get_latest_resume("empty").is_not_found
        assert persistence.list_resumes("empty").data == []


class TestSessionIsolation:

    def test_records_are_scoped_by_session(self, persistence):
        persistence.save_resume("s1", file_name="mine.pdf", parsed_data={"skills": ["Go"]})
        persistence.save_resume("s2", file_name="theirs.pdf")

        assert [r.file_name for r in persistence.list_resumes("s1").data] == ["mine.pdf"]
        assert persistence.get_latest_resume("s2").data.file_name == "theirs.pdf"

    def test_cannot_read_other_sessions_interview(self, persistence):
        interview = persistence.save_mock_interview("s1", "QA", [{"question": "Q1"}]).data

        assert persistence.get_mock_interview("s2", interview.id).is_not_found
        assert persistence.update_mock_interview("s2", interview.id, answers=[{"a": 1}]).is_not_found


class TestJsonRoundTrip:

    def test_parsed_data_is_stored_as_given(self, persistence):
        parsed = {"skills": ["Python"], "experience": [{"title": "Dev", "company": "Acme"}], "n": 1.5}

        saved = persistence.save_resume("s1", file_name="cv.pdf", parsed_data=parsed)

        assert persistence.get_latest_resume("s1").data.parsed_data == parsed
        assert saved.data.id


class TestProgressUpdates:

    def test_answers_can_grow(self, persistence):
        interview = persistence.save_mock_interview("s1", "QA", [{"question": "Q1"}, {"question": "Q2"}]).data

        updated = persistence.update_mock_interview("s1", interview.id, answers=[{"answer": "A1"}])

        assert updated.is_ok
        assert persistence.get_mock_interview("s1", interview.id).data.answers == [{"answer": "A1"}]

    def test_answers_cannot_shrink(self, persistence):
        interview = persistence.save_mock_interview("s1", "QA", [{"question": "Q1"}, {"question": "Q2"}]).data
        persistence.update_mock_interview("s1", interview.id, answers=[{"answer": "A1"}])

        result = persistence.update_mock_interview("s1", interview.id, answers=[])

        assert result.is_error
        assert persistence.get_mock_interview("s1", interview.id).data.answers == [{"answer": "A1"}]

    def test_completed_interview_is_frozen(self, persistence):
        interview = persistence.save_mock_interview("s1", "QA", [{"question": "Q1"}]).data
        persistence.update_mock_interview(
            "s1", interview.id, answers=[{"answer": "A1"}], score=70, completed=True,
        )

        result = persistence.update_mock_interview("s1", interview.id, score=100)

        assert result.is_error
        assert persistence.get_mock_interview("s1", interview.id).data.score == 70

    def test_completed_assessment_is_frozen(self, persistence):
        assessment = persistence.save_skill_assessment("s1", "SQL", [{"question": "Q", "correctAnswer": "A"}]).data
        done = persistence.update_skill_assessment(
            "s1", assessment.id, answers=[{"answer": "A", "isCorrect": True}],
            results={"score": 100}, score=100, completed=True,
        )
        assert done.is_ok and done.data.completed

        assert persistence.update_skill_assessment("s1", assessment.id, answers=[{}, {}]).is_error

    def test_missing_record(self, persistence):
        assert persistence.update_skill_assessment("s1", "nope", score=1).is_not_found


class TestJobMatches:

    def test_ordered_by_score_then_newest(self, persistence):
        persistence.save_job_matches("s1", [
            {"job_title": "Low", "compatibility_score": 50},
            {"job_title": "High", "compatibility_score": 95},
            {"job_title": "Unscored"},
        ])

        titles = [m.job_title for m in persistence.list_job_matches("s1").data]

        assert titles == ["High", "Low", "Unscored"]

    def test_limit(self, persistence):
        persistence.save_job_matches("s1", [
            {"job_title": f"Job {i}", "compatibility_score": i} for i in range(30)
        ])

        assert len(persistence.list_job_matches("s1").data) == 20
        assert len(persistence.list_job_matches("s1", limit=5).data) == 5

    def test_match_details_round_trip(self, persistence):
        details = {"type": "Full-time", "salary": "10-15 LPA", "applyUrl": "https://example.com/1"}
        persistence.save_job_matches("s1", [{"job_title": "Dev", "match_details": details}])

        assert persistence.list_job_matches("s1").data[0].match_details == details


class TestFailures:

    def test_database_errors_become_error_results(self, persistence):
        with patch("services.persistence.Session.exec", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
            result = persistence.get_latest_resume("s1")

        assert result.is_error
        assert "get_latest_resume failed" in result.error
