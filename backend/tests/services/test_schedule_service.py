from __future__ import annotations

import pytest

from maestro.core.enums import EnrollmentStatus, ReviewDecision
from maestro.core.exceptions import (
    CapacityExceededException,
    DuplicateRequestException,
    ForbiddenException,
    NotFoundException,
    SchedulingConflictException,
    ValidationException,
)
from maestro.services.membership_service import MembershipService
from maestro.services.schedule_service import ScheduleService, validate_slot

MONDAY = 1


@pytest.fixture
def service(db) -> ScheduleService:
    return ScheduleService(db)


@pytest.fixture
def piano_basics(service, classroom, master, mentor, as_caller):
    return service.create_schedule(
        as_caller(master),
        classroom_id=classroom.id,
        title="Piano Basics",
        day_of_week=MONDAY,
        start_time="09:00",
        end_time="10:00",
        instructor_id=mentor.id,
    )


class TestAvailability:
    def test_free_instructor_is_available(self, service, mentor):
        assert service.check_availability(mentor.id, MONDAY, "09:00", "10:00") is True

    def test_overlap_and_touching_edges(self, service, piano_basics, mentor):
        assert service.check_availability(mentor.id, MONDAY, "09:30", "10:30") is False
        assert service.check_availability(mentor.id, MONDAY, "10:00", "11:00") is True
        assert service.check_availability(mentor.id, MONDAY, "08:00", "09:00") is True

    @pytest.mark.parametrize(
        "start,end",
        [("08:30", "09:30"), ("09:15", "09:45"), ("08:00", "11:00"), ("09:00", "10:00")],
    )
    def test_any_overlap_is_unavailable(self, service, piano_basics, mentor, start, end):
        assert service.check_availability(mentor.id, MONDAY, start, end) is False

    def test_other_day_and_other_instructor_unaffected(
        self, service, piano_basics, mentor, other_mentor
    ):
        assert service.check_availability(mentor.id, MONDAY + 1, "09:00", "10:00") is True
        assert service.check_availability(other_mentor.id, MONDAY, "09:00", "10:00") is True

    def test_exclude_schedule_ignores_itself(self, service, piano_basics, mentor):
        assert (
            service.check_availability(
                mentor.id, MONDAY, "09:30", "10:30", exclude_schedule_id=piano_basics.id
            )
            is True
        )

    def test_deactivated_schedule_frees_slot(self, service, piano_basics, master, mentor, as_caller):
        service.deactivate_schedule(as_caller(master), piano_basics.id)
        assert service.check_availability(mentor.id, MONDAY, "09:30", "10:30") is True


class TestCreateSchedule:
    def test_defaults(self, piano_basics, classroom, mentor):
        assert piano_basics.classroom_id == classroom.id
        assert piano_basics.instructor_id == mentor.id
        assert piano_basics.max_students == 20
        assert piano_basics.is_active is True

    def test_overlapping_create_conflicts(
        self, service, piano_basics, classroom, master, mentor, as_caller
    ):
        with pytest.raises(SchedulingConflictException) as exc_info:
            service.create_schedule(
                as_caller(master),
                classroom_id=classroom.id,
                title="Theory",
                day_of_week=MONDAY,
                start_time="09:30",
                end_time="10:30",
                instructor_id=mentor.id,
            )
        assert exc_info.value.details["conflicting_schedule_id"] == piano_basics.id
        assert len(service.list_schedules(instructor_id=mentor.id)) == 1

    def test_conflict_spans_classrooms(
        self, service, piano_basics, make_classroom, master, mentor, as_caller
    ):
        other_room = make_classroom(master, title="Second room")
        with pytest.raises(SchedulingConflictException):
            service.create_schedule(
                as_caller(master),
                classroom_id=other_room.id,
                title="Elsewhere",
                day_of_week=MONDAY,
                start_time="09:00",
                end_time="09:30",
                instructor_id=mentor.id,
            )

    def test_active_staff_may_create(self, db, service, classroom, master, mentor, as_caller):
        membership = MembershipService(db)
        request = membership.request_staff(as_caller(mentor), classroom.id)
        membership.review_staff_request(as_caller(master), request.id, ReviewDecision.APPROVE)

        schedule = service.create_schedule(
            as_caller(mentor),
            classroom_id=classroom.id,
            title="Scales",
            day_of_week=3,
            start_time="17:00",
            end_time="18:00",
            instructor_id=mentor.id,
            max_students=8,
        )
        assert schedule.max_students == 8

    def test_outsider_is_forbidden(self, service, classroom, mentor, as_caller):
        with pytest.raises(ForbiddenException):
            service.create_schedule(
                as_caller(mentor),
                classroom_id=classroom.id,
                title="Sneaky",
                day_of_week=2,
                start_time="09:00",
                end_time="10:00",
                instructor_id=mentor.id,
            )

    def test_missing_classroom(self, service, admin, mentor, as_caller):
        with pytest.raises(NotFoundException):
            service.create_schedule(
                as_caller(admin),
                classroom_id=999,
                title="Ghost",
                day_of_week=2,
                start_time="09:00",
                end_time="10:00",
                instructor_id=mentor.id,
            )

    def test_missing_instructor(self, service, classroom, admin, as_caller):
        with pytest.raises(NotFoundException):
            service.create_schedule(
                as_caller(admin),
                classroom_id=classroom.id,
                title="Nobody",
                day_of_week=2,
                start_time="09:00",
                end_time="10:00",
                instructor_id=31337,
            )

    def test_zero_capacity_is_rejected(self, service, classroom, master, mentor, as_caller):
        with pytest.raises(ValidationException):
            service.create_schedule(
                as_caller(master),
                classroom_id=classroom.id,
                title="Empty",
                day_of_week=2,
                start_time="09:00",
                end_time="10:00",
                instructor_id=mentor.id,
                max_students=0,
            )


class TestUpdateAndDeactivate:
    def test_moving_within_own_slot_is_allowed(self, service, piano_basics, master, as_caller):
        updated = service.update_schedule(
            as_caller(master), piano_basics.id, start_time="09:30", end_time="10:30"
        )
        assert (updated.start_time, updated.end_time) == ("09:30", "10:30")

    def test_update_into_conflict_fails(
        self, service, piano_basics, classroom, master, mentor, as_caller
    ):
        later = service.create_schedule(
            as_caller(master),
            classroom_id=classroom.id,
            title="Later",
            day_of_week=MONDAY,
            start_time="11:00",
            end_time="12:00",
            instructor_id=mentor.id,
        )
        with pytest.raises(SchedulingConflictException):
            service.update_schedule(as_caller(master), later.id, start_time="09:45")

    def test_update_validates_times(self, service, piano_basics, master, as_caller):
        with pytest.raises(ValidationException):
            service.update_schedule(as_caller(master), piano_basics.id, end_time="08:00")

    def test_unknown_fields_rejected(self, service, piano_basics, master, as_caller):
        with pytest.raises(ValidationException):
            service.update_schedule(as_caller(master), piano_basics.id, instructor_id=1)

    def test_deactivated_schedule_is_gone(self, service, piano_basics, master, as_caller):
        service.deactivate_schedule(as_caller(master), piano_basics.id)
        assert service.list_schedules(classroom_id=piano_basics.classroom_id) == []
        with pytest.raises(NotFoundException):
            service.deactivate_schedule(as_caller(master), piano_basics.id)


class TestValidateSlot:
    @pytest.mark.parametrize(
        "day,start,end",
        [
            (1, "9:00", "10:00"),
            (1, "09:00", "24:00"),
            (1, "09:60", "10:00"),
            (1, "10:00", "10:00"),
            (1, "11:00", "10:00"),
            (7, "09:00", "10:00"),
            (-1, "09:00", "10:00"),
        ],
    )
    def test_invalid_slots(self, day, start, end):
        with pytest.raises(ValidationException):
            validate_slot(day, start, end)

    def test_valid_slot(self):
        validate_slot(0, "00:00", "23:59")


def _admit(db, classroom, master, user, as_caller):
    memberships = MembershipService(db)
    membership = memberships.request_join(as_caller(user), classroom.id)
    memberships.review_membership(as_caller(master), membership.id, ReviewDecision.APPROVE)


class TestEnrollments:
    @pytest.fixture
    def small_class(self, service, classroom, master, mentor, as_caller):
        return service.create_schedule(
            as_caller(master),
            classroom_id=classroom.id,
            title="Duet Lab",
            day_of_week=MONDAY,
            start_time="14:00",
            end_time="15:00",
            instructor_id=mentor.id,
            max_students=1,
        )

    def test_student_enrolls_and_lists(
        self, db, service, piano_basics, classroom, master, student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)

        enrollment = service.enroll_student(as_caller(student), piano_basics.id)

        assert enrollment.status == EnrollmentStatus.ENROLLED
        assert enrollment.student_id == student.id
        assert [e.id for e in service.list_enrollments(piano_basics.id)] == [enrollment.id]
        assert [e.schedule_id for e in service.list_student_schedules(student.id)] == [
            piano_basics.id
        ]

    def test_full_schedule_rejects_enrollment(
        self, db, service, small_class, classroom, master, student, other_student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)
        _admit(db, classroom, master, other_student, as_caller)
        service.enroll_student(as_caller(student), small_class.id)

        with pytest.raises(CapacityExceededException) as exc_info:
            service.enroll_student(as_caller(other_student), small_class.id)
        assert exc_info.value.details == {"capacity": 1, "current": 1}

    def test_unenroll_frees_the_seat(
        self, db, service, small_class, classroom, master, student, other_student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)
        _admit(db, classroom, master, other_student, as_caller)
        service.enroll_student(as_caller(student), small_class.id)

        left = service.unenroll_student(as_caller(student), small_class.id)
        assert left.status == EnrollmentStatus.UNENROLLED
        assert left.unenrolled_at is not None

        taken = service.enroll_student(as_caller(other_student), small_class.id)
        assert taken.status == EnrollmentStatus.ENROLLED
        assert service.list_student_schedules(student.id) == []

    def test_reenroll_reuses_row(
        self, db, service, piano_basics, classroom, master, student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)
        first = service.enroll_student(as_caller(student), piano_basics.id)
        service.unenroll_student(as_caller(student), piano_basics.id)

        again = service.enroll_student(as_caller(student), piano_basics.id)

        assert again.id == first.id
        assert again.status == EnrollmentStatus.ENROLLED
        assert again.unenrolled_at is None

    def test_double_enrollment_is_duplicate(
        self, db, service, piano_basics, classroom, master, student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)
        service.enroll_student(as_caller(student), piano_basics.id)
        with pytest.raises(DuplicateRequestException):
            service.enroll_student(as_caller(student), piano_basics.id)

    def test_non_member_cannot_enroll(self, service, piano_basics, student, as_caller):
        with pytest.raises(ForbiddenException):
            service.enroll_student(as_caller(student), piano_basics.id)

    def test_master_enrolls_a_student(
        self, db, service, piano_basics, classroom, master, student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)
        enrollment = service.enroll_student(as_caller(master), piano_basics.id, student.id)
        assert enrollment.student_id == student.id

    def test_student_cannot_enroll_someone_else(
        self, db, service, piano_basics, classroom, master, student, other_student, as_caller
    ):
        _admit(db, classroom, master, other_student, as_caller)
        with pytest.raises(ForbiddenException):
            service.enroll_student(as_caller(student), piano_basics.id, other_student.id)

    def test_deactivated_schedule_cannot_be_joined(
        self, db, service, piano_basics, classroom, master, student, as_caller
    ):
        _admit(db, classroom, master, student, as_caller)
        service.deactivate_schedule(as_caller(master), piano_basics.id)
        with pytest.raises(NotFoundException):
            service.enroll_student(as_caller(student), piano_basics.id)

    def test_unenroll_without_seat_is_not_found(self, service, piano_basics, student, as_caller):
        with pytest.raises(NotFoundException):
            service.unenroll_student(as_caller(student), piano_basics.id)

    def test_capacity_cannot_shrink_below_enrolled(
        self, db, service, piano_basics, classroom, master, student, other_student, as_caller
    ):
        for user in (student, other_student):
            _admit(db, classroom, master, user, as_caller)
            service.enroll_student(as_caller(user), piano_basics.id)

        with pytest.raises(ValidationException):
            service.update_schedule(as_caller(master), piano_basics.id, max_students=1)
        assert service.update_schedule(
            as_caller(master), piano_basics.id, max_students=2
        ).max_students == 2
