from __future__ import annotations

import pytest

from maestro.core.enums import MembershipRole, MembershipStatus, ReviewDecision, ReviewStatus
from maestro.core.exceptions import (
    AlreadyMemberException,
    AlreadyReviewedException,
    CapacityExceededException,
    DuplicateRequestException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)
from maestro.models.classroom import ClassroomMembership
from maestro.repositories.factory import RepositoryFactory
from maestro.schemas.classroom import ClassroomCreate
from maestro.services.membership_service import MembershipService


def _active_masters(db, classroom_id: int) -> int:
    return RepositoryFactory.create_membership_repository(db).count_active_masters(classroom_id)


def _memberships(db, user_id: int, classroom_id: int):
    return (
        db.query(ClassroomMembership)
        .filter_by(user_id=user_id, classroom_id=classroom_id)
        .all()
    )


class TestCreateClassroom:
    def test_master_creates_classroom_with_single_master_membership(
        self, db, master, as_caller
    ):
        service = MembershipService(db)
        classroom = service.create_classroom(
            as_caller(master),
            ClassroomCreate(title="Jazz Club", subject="piano", level="advanced"),
        )

        assert classroom.master_id == master.id
        assert classroom.max_students == 50
        assert classroom.is_active is True
        memberships = _memberships(db, master.id, classroom.id)
        assert len(memberships) == 1
        assert memberships[0].role == MembershipRole.MASTER
        assert memberships[0].status == MembershipStatus.ACTIVE
        assert _active_masters(db, classroom.id) == 1

    def test_admin_can_create_classroom(self, db, admin, as_caller):
        classroom = MembershipService(db).create_classroom(
            as_caller(admin), ClassroomCreate(title="Strings", subject="violin", level="beginner")
        )
        assert classroom.master_id == admin.id

    @pytest.mark.parametrize("fixture_name", ["student", "mentor"])
    def test_non_master_cannot_create_classroom(self, db, request, as_caller, fixture_name):
        user = request.getfixturevalue(fixture_name)
        with pytest.raises(ForbiddenException):
            MembershipService(db).create_classroom(
                as_caller(user), ClassroomCreate(title="Nope", subject="drums", level="beginner")
            )

    def test_duplicate_slug_is_rejected(self, db, master, make_classroom):
        make_classroom(master, custom_slug="jazz")
        with pytest.raises(DuplicateRequestException):
            make_classroom(master, custom_slug="jazz")


class TestJoinRequests:
    def test_join_creates_pending_student_membership(self, db, classroom, student, as_caller):
        membership = MembershipService(db).request_join(
            as_caller(student), classroom.id, "Please let me in"
        )

        assert membership.role == MembershipRole.STUDENT
        assert membership.status == MembershipStatus.PENDING
        assert membership.message == "Please let me in"

    def test_missing_classroom_is_not_found(self, db, student, as_caller):
        with pytest.raises(NotFoundException):
            MembershipService(db).request_join(as_caller(student), 9999)

    def test_inactive_classroom_is_not_found(self, db, classroom, student, as_caller):
        classroom.is_active = False
        db.commit()
        with pytest.raises(NotFoundException):
            MembershipService(db).request_join(as_caller(student), classroom.id)

    def test_second_pending_join_is_duplicate(self, db, classroom, student, as_caller):
        service = MembershipService(db)
        service.request_join(as_caller(student), classroom.id)
        with pytest.raises(DuplicateRequestException):
            service.request_join(as_caller(student), classroom.id)
        assert len(_memberships(db, student.id, classroom.id)) == 1

    def test_active_member_cannot_join_again(self, db, classroom, master, student, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)
        service.review_membership(as_caller(master), membership.id, ReviewDecision.APPROVE)

        with pytest.raises(AlreadyMemberException):
            service.request_join(as_caller(student), classroom.id)

    def test_removed_membership_cannot_be_revived(self, db, classroom, master, student, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)
        service.review_membership(as_caller(master), membership.id, ReviewDecision.REJECT)

        with pytest.raises(InvalidTransitionException):
            service.request_join(as_caller(student), classroom.id)

    def test_full_classroom_rejects_join(
        self, db, make_classroom, master, student, other_student, as_caller
    ):
        service = MembershipService(db)
        small = make_classroom(master, max_students=1)
        first = service.request_join(as_caller(student), small.id)
        service.review_membership(as_caller(master), first.id, ReviewDecision.APPROVE)

        with pytest.raises(CapacityExceededException) as exc_info:
            service.request_join(as_caller(other_student), small.id)
        assert exc_info.value.details == {"capacity": 1, "current": 1}


class TestReviewMembership:
    def test_master_approves_pending_membership(self, db, classroom, master, student, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)

        reviewed = service.review_membership(
            as_caller(master), membership.id, ReviewDecision.APPROVE
        )

        assert reviewed.status == MembershipStatus.ACTIVE
        assert reviewed.reviewed_by == master.id
        assert reviewed.reviewed_at is not None

    def test_reject_moves_membership_to_removed(self, db, classroom, admin, student, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)

        reviewed = service.review_membership(as_caller(admin), membership.id, ReviewDecision.REJECT)

        assert reviewed.status == MembershipStatus.REMOVED
        assert reviewed.removed_at is not None

    def test_active_staff_can_review(self, db, classroom, master, mentor, student, as_caller):
        service = MembershipService(db)
        staff_request = service.request_staff(as_caller(mentor), classroom.id)
        service.review_staff_request(as_caller(master), staff_request.id, ReviewDecision.APPROVE)
        membership = service.request_join(as_caller(student), classroom.id)

        reviewed = service.review_membership(
            as_caller(mentor), membership.id, ReviewDecision.APPROVE
        )
        assert reviewed.status == MembershipStatus.ACTIVE

    def test_outsider_cannot_review(self, db, classroom, student, other_student, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)
        with pytest.raises(ForbiddenException):
            service.review_membership(
                as_caller(other_student), membership.id, ReviewDecision.APPROVE
            )

    def test_only_pending_memberships_can_be_reviewed(
        self, db, classroom, master, student, as_caller
    ):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)
        service.review_membership(as_caller(master), membership.id, ReviewDecision.APPROVE)

        with pytest.raises(InvalidTransitionException) as exc_info:
            service.review_membership(as_caller(master), membership.id, ReviewDecision.REJECT)
        assert exc_info.value.details["current"] == "active"
        db.refresh(membership)
        assert membership.status == MembershipStatus.ACTIVE

    def test_approval_rechecks_capacity(
        self, db, make_classroom, master, student, other_student, as_caller
    ):
        service = MembershipService(db)
        small = make_classroom(master, max_students=1)
        first = service.request_join(as_caller(student), small.id)
        second = service.request_join(as_caller(other_student), small.id)
        service.review_membership(as_caller(master), first.id, ReviewDecision.APPROVE)

        with pytest.raises(CapacityExceededException):
            service.review_membership(as_caller(master), second.id, ReviewDecision.APPROVE)
        db.refresh(second)
        assert second.status == MembershipStatus.PENDING

    def test_unknown_membership_is_not_found(self, db, master, as_caller):
        with pytest.raises(NotFoundException):
            MembershipService(db).review_membership(as_caller(master), 404, ReviewDecision.APPROVE)


class TestRemoveMember:
    def test_master_removes_active_student(self, db, classroom, master, student, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)
        service.review_membership(as_caller(master), membership.id, ReviewDecision.APPROVE)

        removed = service.remove_member(as_caller(master), membership.id)

        assert removed.status == MembershipStatus.REMOVED
        assert removed.removed_at is not None
        with pytest.raises(InvalidTransitionException):
            service.remove_member(as_caller(master), membership.id)

    def test_master_membership_cannot_be_removed(self, db, classroom, master, admin, as_caller):
        service = MembershipService(db)
        master_membership = _memberships(db, master.id, classroom.id)[0]

        with pytest.raises(ForbiddenException):
            service.remove_member(as_caller(admin), master_membership.id)
        assert _active_masters(db, classroom.id) == 1

    def test_non_master_cannot_remove(self, db, classroom, master, student, mentor, as_caller):
        service = MembershipService(db)
        membership = service.request_join(as_caller(student), classroom.id)
        service.review_membership(as_caller(master), membership.id, ReviewDecision.APPROVE)

        with pytest.raises(ForbiddenException):
            service.remove_member(as_caller(mentor), membership.id)


class TestStaffRequests:
    def test_create_then_approve_yields_one_active_staff_membership(
        self, db, classroom, master, mentor, as_caller
    ):
        service = MembershipService(db)
        request = service.request_staff(as_caller(mentor), classroom.id, "I teach scales")
        assert request.status == ReviewStatus.PENDING

        approved = service.review_staff_request(
            as_caller(master), request.id, ReviewDecision.APPROVE, "Welcome"
        )

        assert approved.status == ReviewStatus.APPROVED
        assert approved.reviewed_by == master.id
        assert approved.reviewed_at is not None
        assert approved.admin_notes == "Welcome"
        memberships = _memberships(db, mentor.id, classroom.id)
        assert len(memberships) == 1
        assert memberships[0].role == MembershipRole.STAFF
        assert memberships[0].status == MembershipStatus.ACTIVE
        assert _active_masters(db, classroom.id) == 1

    def test_second_decision_fails_and_first_stands(
        self, db, classroom, master, admin, mentor, as_caller
    ):
        service = MembershipService(db)
        request = service.request_staff(as_caller(mentor), classroom.id)
        service.review_staff_request(as_caller(master), request.id, ReviewDecision.APPROVE)

        with pytest.raises(AlreadyReviewedException):
            service.review_staff_request(as_caller(admin), request.id, ReviewDecision.REJECT)

        db.refresh(request)
        assert request.status == ReviewStatus.APPROVED
        assert request.reviewed_by == master.id
        assert len(_memberships(db, mentor.id, classroom.id)) == 1

    def test_lost_race_reports_already_reviewed(self, db, classroom, master, mentor, as_caller):
        service = MembershipService(db)
        request = service.request_staff(as_caller(mentor), classroom.id)
        # Another reviewer decided between our read and our write
        service.staff_requests.repository.transition_status = lambda *args, **kwargs: False

        with pytest.raises(AlreadyReviewedException):
            service.review_staff_request(as_caller(master), request.id, ReviewDecision.APPROVE)
        assert _memberships(db, mentor.id, classroom.id) == []

    def test_reject_creates_no_membership(self, db, classroom, master, mentor, as_caller):
        service = MembershipService(db)
        request = service.request_staff(as_caller(mentor), classroom.id)

        rejected = service.review_staff_request(
            as_caller(master), request.id, ReviewDecision.REJECT
        )

        assert rejected.status == ReviewStatus.REJECTED
        assert _memberships(db, mentor.id, classroom.id) == []

    def test_students_cannot_request_staff(self, db, classroom, student, as_caller):
        with pytest.raises(ForbiddenException):
            MembershipService(db).request_staff(as_caller(student), classroom.id)

    def test_duplicate_pending_request(self, db, classroom, mentor, as_caller):
        service = MembershipService(db)
        service.request_staff(as_caller(mentor), classroom.id)
        with pytest.raises(DuplicateRequestException):
            service.request_staff(as_caller(mentor), classroom.id)

    def test_active_member_cannot_request_staff(self, db, classroom, master, as_caller):
        with pytest.raises(AlreadyMemberException):
            MembershipService(db).request_staff(as_caller(master), classroom.id)

    def test_only_master_or_admin_reviews(self, db, classroom, mentor, other_mentor, as_caller):
        service = MembershipService(db)
        request = service.request_staff(as_caller(mentor), classroom.id)
        with pytest.raises(ForbiddenException):
            service.review_staff_request(as_caller(other_mentor), request.id, ReviewDecision.APPROVE)

    def test_unknown_request_is_not_found(self, db, admin, as_caller):
        with pytest.raises(NotFoundException):
            MembershipService(db).review_staff_request(as_caller(admin), 77, ReviewDecision.APPROVE)

    def test_mentor_is_staff_in_one_classroom_at_a_time(
        self, db, make_classroom, master, mentor, as_caller
    ):
        service = MembershipService(db)
        first = make_classroom(master, title="First")
        second = make_classroom(master, title="Second")
        req_one = service.request_staff(as_caller(mentor), first.id)
        req_two = service.request_staff(as_caller(mentor), second.id)
        service.review_staff_request(as_caller(master), req_one.id, ReviewDecision.APPROVE)

        with pytest.raises(DuplicateRequestException):
            service.review_staff_request(as_caller(master), req_two.id, ReviewDecision.APPROVE)
        db.refresh(req_two)
        assert req_two.status == ReviewStatus.PENDING

    def test_approval_promotes_pending_join_row(
        self, db, classroom, master, mentor, as_caller
    ):
        service = MembershipService(db)
        service.request_join(as_caller(mentor), classroom.id)
        request = service.request_staff(as_caller(mentor), classroom.id)

        service.review_staff_request(as_caller(master), request.id, ReviewDecision.APPROVE)

        memberships = _memberships(db, mentor.id, classroom.id)
        assert len(memberships) == 1
        assert memberships[0].role == MembershipRole.STAFF
        assert memberships[0].status == MembershipStatus.ACTIVE

    def test_list_staff_requests_filters_by_status(
        self, db, classroom, master, mentor, other_mentor, as_caller
    ):
        service = MembershipService(db)
        first = service.request_staff(as_caller(mentor), classroom.id)
        service.request_staff(as_caller(other_mentor), classroom.id)
        service.review_staff_request(as_caller(master), first.id, ReviewDecision.REJECT)

        pending = service.list_staff_requests(classroom.id, ReviewStatus.PENDING)
        assert [r.mentor_id for r in pending] == [other_mentor.id]
        assert len(service.list_staff_requests(classroom.id)) == 2


class TestResignations:
    def _make_staff(self, db, classroom, master, mentor, as_caller):
        service = MembershipService(db)
        request = service.request_staff(as_caller(mentor), classroom.id)
        service.review_staff_request(as_caller(master), request.id, ReviewDecision.APPROVE)
        return service

    def test_approved_resignation_removes_staff_membership(
        self, db, classroom, master, mentor, as_caller
    ):
        service = self._make_staff(db, classroom, master, mentor, as_caller)
        resignation = service.request_resignation(as_caller(mentor), classroom.id, "Moving away")
        assert resignation.status == ReviewStatus.PENDING

        approved = service.review_resignation(
            as_caller(master), resignation.id, ReviewDecision.APPROVE
        )

        assert approved.status == ReviewStatus.APPROVED
        membership = _memberships(db, mentor.id, classroom.id)[0]
        assert membership.status == MembershipStatus.REMOVED
        assert membership.removed_at is not None

    def test_rejected_resignation_keeps_membership(self, db, classroom, master, mentor, as_caller):
        service = self._make_staff(db, classroom, master, mentor, as_caller)
        resignation = service.request_resignation(as_caller(mentor), classroom.id, "Tired")

        service.review_resignation(as_caller(master), resignation.id, ReviewDecision.REJECT)

        assert _memberships(db, mentor.id, classroom.id)[0].status == MembershipStatus.ACTIVE

    def test_non_staff_cannot_resign(self, db, classroom, mentor, as_caller):
        with pytest.raises(InvalidTransitionException):
            MembershipService(db).request_resignation(as_caller(mentor), classroom.id, "Bye")

    def test_duplicate_pending_resignation(self, db, classroom, master, mentor, as_caller):
        service = self._make_staff(db, classroom, master, mentor, as_caller)
        service.request_resignation(as_caller(mentor), classroom.id, "Bye")
        with pytest.raises(DuplicateRequestException):
            service.request_resignation(as_caller(mentor), classroom.id, "Bye again")

    def test_resigned_mentor_cannot_request_staff_again(
        self, db, classroom, master, mentor, as_caller
    ):
        service = self._make_staff(db, classroom, master, mentor, as_caller)
        resignation = service.request_resignation(as_caller(mentor), classroom.id, "Moving away")
        service.review_resignation(as_caller(master), resignation.id, ReviewDecision.APPROVE)

        with pytest.raises(InvalidTransitionException):
            service.request_staff(as_caller(mentor), classroom.id)
        assert len(service.list_staff_requests(classroom.id, ReviewStatus.PENDING)) == 0


class TestListings:
    def test_list_memberships_by_status(self, db, classroom, master, student, other_student, as_caller):
        service = MembershipService(db)
        first = service.request_join(as_caller(student), classroom.id)
        service.request_join(as_caller(other_student), classroom.id)
        service.review_membership(as_caller(master), first.id, ReviewDecision.APPROVE)

        pending = service.list_memberships(classroom.id, MembershipStatus.PENDING)
        assert [m.user_id for m in pending] == [other_student.id]
        assert len(service.list_memberships(classroom.id)) == 3

    def test_list_memberships_unknown_classroom(self, db):
        with pytest.raises(NotFoundException):
            MembershipService(db).list_memberships(12345)

    def test_public_classrooms_only(self, db, make_classroom, master):
        make_classroom(master, title="Open")
        make_classroom(master, title="Hidden", is_public=False)
        titles = [c.title for c in MembershipService(db).list_public_classrooms()]
        assert titles == ["Open"]
