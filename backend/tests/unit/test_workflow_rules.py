"""Pure rules that need no database: enums, transition tables, slot overlap, error codes."""

from datetime import datetime, timezone

import pytest

from maestro.core.enums import CourseStatus, ReviewDecision, ReviewStatus, UserRole
from maestro.core.exceptions import (
    AlreadyMemberException,
    AlreadyRespondedException,
    AlreadyReviewedException,
    CapacityExceededException,
    DuplicateRequestException,
    InvalidTransitionException,
    SchedulingConflictException,
)
from maestro.models.course import COURSE_TRANSITIONS, EDITABLE_COURSE_STATES
from maestro.models.mentorship import MentorshipSession
from maestro.models.schedule import Schedule
from maestro.principal import CallerContext


def test_review_decision_maps_to_status():
    assert ReviewDecision.APPROVE.resulting_status is ReviewStatus.APPROVED
    assert ReviewDecision.REJECT.resulting_status is ReviewStatus.REJECTED


def test_str_enums_compare_with_stored_values():
    assert CourseStatus.PENDING == "pending"
    assert UserRole("mentor") is UserRole.MENTOR


class TestCourseTransitions:
    def test_every_target_is_reachable_from_its_sources_only(self):
        assert COURSE_TRANSITIONS["submit"] == (
            frozenset({CourseStatus.DRAFT, CourseStatus.REJECTED}),
            CourseStatus.PENDING,
        )
        assert COURSE_TRANSITIONS["publish"][0] == frozenset({CourseStatus.APPROVED})
        assert COURSE_TRANSITIONS["archive"][0] == frozenset({CourseStatus.PUBLISHED})

    def test_nothing_leaves_archived(self):
        for sources, _target in COURSE_TRANSITIONS.values():
            assert CourseStatus.ARCHIVED not in sources

    def test_editable_states(self):
        assert EDITABLE_COURSE_STATES == {CourseStatus.DRAFT, CourseStatus.REJECTED}


class TestScheduleOverlap:
    @pytest.fixture
    def slot(self):
        return Schedule(start_time="09:00", end_time="10:00")

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            ("09:30", "10:30", True),
            ("08:30", "09:01", True),
            ("09:10", "09:20", True),
            ("10:00", "11:00", False),
            ("08:00", "09:00", False),
        ],
    )
    def test_half_open_overlap(self, slot, start, end, expected):
        assert slot.overlaps(start, end) is expected


def test_session_ends_at():
    session = MentorshipSession(
        scheduled_at=datetime(2030, 1, 7, 9, 0, tzinfo=timezone.utc), duration_minutes=90
    )
    assert session.ends_at == datetime(2030, 1, 7, 10, 30, tzinfo=timezone.utc)


class TestExceptions:
    @pytest.mark.parametrize(
        "exc,status,code",
        [
            (AlreadyMemberException(1, 2), 400, "ALREADY_MEMBER"),
            (DuplicateRequestException("dup"), 400, "DUPLICATE_REQUEST"),
            (CapacityExceededException(10, 10), 409, "CAPACITY_EXCEEDED"),
            (SchedulingConflictException(), 400, "SCHEDULING_CONFLICT"),
            (AlreadyReviewedException("StaffRequest", 3, "approved"), 400, "ALREADY_REVIEWED"),
            (AlreadyRespondedException(4), 400, "ALREADY_RESPONDED"),
        ],
    )
    def test_status_and_code(self, exc, status, code):
        assert exc.status_code == status
        assert exc.code == code

    def test_invalid_transition_details_accept_enums(self):
        exc = InvalidTransitionException("Course", CourseStatus.DRAFT, [CourseStatus.APPROVED])
        assert exc.details == {"entity": "Course", "current": "draft", "required": ["approved"]}
        assert "approved" in exc.message

    def test_already_member_is_a_duplicate(self):
        assert isinstance(AlreadyMemberException(1, 2), DuplicateRequestException)

    def test_response_body(self):
        body = CapacityExceededException(5, 5, message="Classroom is full").to_response_body()
        assert body == {
            "error": "CAPACITY_EXCEEDED",
            "message": "Classroom is full",
            "details": {"capacity": 5, "current": 5},
        }


class TestCallerContext:
    def test_from_user_like_object(self):
        class Row:
            id = 7
            role = "mentor"
            is_master = None

        ctx = CallerContext.from_user(Row())
        assert ctx == CallerContext(user_id=7, role=UserRole.MENTOR, is_master=False)
        assert ctx.is_mentor and not ctx.is_admin and not ctx.is_student
