from __future__ import annotations

import pytest


@pytest.fixture
def accepted_request(client, student, mentor, headers_for):
    created = client.post(
        "/api/mentorship-requests",
        json={"mentor_id": mentor.id, "message": "Could you help me with sight reading?"},
        headers=headers_for(student),
    )
    assert created.status_code == 201
    request_id = created.json()["id"]
    accepted = client.patch(
        f"/api/mentorship-requests/{request_id}/status",
        json={"status": "accepted", "mentor_response": "Happy to"},
        headers=headers_for(mentor),
    )
    assert accepted.status_code == 200
    return accepted.json()


class TestMentorshipRoutes:
    def test_short_message_is_rejected(self, client, student, mentor, headers_for):
        response = client.post(
            "/api/mentorship-requests",
            json={"mentor_id": mentor.id, "message": "hi"},
            headers=headers_for(student),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_second_response_refused(self, client, accepted_request, mentor, headers_for):
        assert accepted_request["status"] == "accepted"
        assert accepted_request["accepted_at"] is not None

        response = client.patch(
            f"/api/mentorship-requests/{accepted_request['id']}/status",
            json={"status": "rejected"},
            headers=headers_for(mentor),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ALREADY_RESPONDED"

    def test_student_cancels_pending(self, client, student, other_mentor, headers_for):
        created = client.post(
            "/api/mentorship-requests",
            json={"mentor_id": other_mentor.id, "message": "Looking for a vocal coach"},
            headers=headers_for(student),
        ).json()

        cancelled = client.patch(
            f"/api/mentorship-requests/{created['id']}/status",
            json={"status": "cancelled"},
            headers=headers_for(student),
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

    def test_listing_depends_on_role(self, client, accepted_request, student, mentor, headers_for):
        as_student = client.get("/api/mentorship-requests", headers=headers_for(student)).json()
        as_mentor = client.get(
            "/api/mentorship-requests",
            params={"status_filter": "accepted"},
            headers=headers_for(mentor),
        ).json()
        assert [r["id"] for r in as_student] == [accepted_request["id"]]
        assert [r["id"] for r in as_mentor] == [accepted_request["id"]]

    def test_conversation(self, client, accepted_request, student, mentor, headers_for):
        base = f"/api/mentorship-requests/{accepted_request['id']}/conversations"
        sent = client.post(base, json={"message": "When are you free?"}, headers=headers_for(student))
        assert sent.status_code == 201

        read = client.patch(
            f"/api/mentorship-requests/conversations/{sent.json()['id']}/read",
            headers=headers_for(mentor),
        )
        assert read.json()["is_read"] is True

        history = client.get(base, headers=headers_for(mentor)).json()
        assert [m["message"] for m in history] == ["When are you free?"]

    def test_outsider_cannot_read_request(
        self, client, accepted_request, other_student, headers_for
    ):
        response = client.get(
            f"/api/mentorship-requests/{accepted_request['id']}", headers=headers_for(other_student)
        )
        assert response.status_code == 403

    def test_sessions(self, client, accepted_request, student, mentor, headers_for):
        payload = {
            "mentorship_request_id": accepted_request["id"],
            "title": "Sight reading 1",
            "scheduled_at": "2030-01-07T09:00:00Z",
            "duration_minutes": 60,
        }
        first = client.post("/api/mentorship-sessions", json=payload, headers=headers_for(mentor))
        assert first.status_code == 201
        assert first.json()["status"] == "scheduled"

        clash = client.post(
            "/api/mentorship-sessions",
            json={**payload, "title": "Clash", "scheduled_at": "2030-01-07T09:30:00Z"},
            headers=headers_for(student),
        )
        assert clash.status_code == 400
        assert clash.json()["error"] == "SCHEDULING_CONFLICT"

        back_to_back = client.post(
            "/api/mentorship-sessions",
            json={**payload, "title": "Next", "scheduled_at": "2030-01-07T10:00:00Z"},
            headers=headers_for(mentor),
        )
        assert back_to_back.status_code == 201

        session_id = first.json()["id"]
        bad_rating = client.post(
            f"/api/mentorship-sessions/{session_id}/complete",
            json={"rating": 6},
            headers=headers_for(mentor),
        )
        assert bad_rating.status_code == 400

        completed = client.post(
            f"/api/mentorship-sessions/{session_id}/complete",
            json={"rating": 5, "feedback": "Great"},
            headers=headers_for(mentor),
        )
        assert completed.json()["status"] == "completed"

        listed = client.get("/api/mentorship-sessions", headers=headers_for(student)).json()
        assert len(listed) == 2


class TestScheduleRoutes:
    def test_availability_and_conflict(self, client, classroom, master, mentor, headers_for):
        slot = {"instructor_id": mentor.id, "day_of_week": 1, "start_time": "09:00", "end_time": "10:00"}
        created = client.post(
            "/api/schedules",
            json={"classroom_id": classroom.id, "title": "Piano Basics", **slot},
            headers=headers_for(master),
        )
        assert created.status_code == 201

        overlapping = {**slot, "start_time": "09:30", "end_time": "10:30"}
        adjacent = {**slot, "start_time": "10:00", "end_time": "11:00"}
        assert client.post("/api/schedules/check-availability", json=overlapping).json() == {
            "available": False
        }
        assert client.post("/api/schedules/check-availability", json=adjacent).json() == {
            "available": True
        }

        conflict = client.post(
            "/api/schedules",
            json={"classroom_id": classroom.id, "title": "Theory", **overlapping},
            headers=headers_for(master),
        )
        assert conflict.status_code == 400
        assert conflict.json()["details"]["conflicting_schedule_id"] == created.json()["id"]

        removed = client.delete(f"/api/schedules/{created.json()['id']}", headers=headers_for(master))
        assert removed.json()["is_active"] is False
        assert client.post("/api/schedules/check-availability", json=overlapping).json() == {
            "available": True
        }

    def test_enrollment_flow(
        self, client, classroom, master, mentor, student, other_student, headers_for
    ):
        created = client.post(
            "/api/schedules",
            json={
                "classroom_id": classroom.id,
                "title": "Duet Lab",
                "instructor_id": mentor.id,
                "day_of_week": 3,
                "start_time": "14:00",
                "end_time": "15:00",
                "max_students": 1,
            },
            headers=headers_for(master),
        ).json()
        for user in (student, other_student):
            joined = client.post(
                f"/api/classrooms/{classroom.id}/join", headers=headers_for(user)
            ).json()
            client.patch(
                f"/api/classrooms/memberships/{joined['id']}/status",
                json={"decision": "approve"},
                headers=headers_for(master),
            )
        path = f"/api/schedules/{created['id']}/enrollments"

        enrolled = client.post(path, headers=headers_for(student))
        assert enrolled.status_code == 201
        assert enrolled.json()["status"] == "enrolled"

        full = client.post(path, headers=headers_for(other_student))
        assert full.status_code == 409
        assert full.json()["error"] == "CAPACITY_EXCEEDED"

        assert [e["student_id"] for e in client.get(path).json()] == [student.id]
        mine = client.get(f"/api/schedules/students/{student.id}/enrollments").json()
        assert [e["schedule_id"] for e in mine] == [created["id"]]

        forbidden = client.delete(f"{path}/{student.id}", headers=headers_for(other_student))
        assert forbidden.status_code == 403

        left = client.delete(f"{path}/{student.id}", headers=headers_for(student))
        assert left.json()["status"] == "unenrolled"
        assert client.post(path, headers=headers_for(other_student)).status_code == 201

    def test_bad_time_format(self, client, mentor):
        response = client.post(
            "/api/schedules/check-availability",
            json={"instructor_id": mentor.id, "day_of_week": 1, "start_time": "9am", "end_time": "10:00"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestCourseRoutes:
    def test_publication_flow(self, client, mentor, admin, headers_for):
        course = client.post(
            "/api/courses",
            json={"title": "Jazz Harmony", "category": "piano", "level": "intermediate"},
            headers=headers_for(mentor),
        ).json()
        path = f"/api/courses/{course['id']}"

        assert client.post(f"{path}/submit", headers=headers_for(mentor)).json()["status"] == "pending"
        rejected = client.post(
            f"{path}/reject", json={"admin_notes": "Needs audio"}, headers=headers_for(admin)
        ).json()
        assert rejected["admin_notes"] == "Needs audio"

        resubmitted = client.post(f"{path}/submit", headers=headers_for(mentor)).json()
        assert resubmitted["resubmission_count"] == 1

        client.post(f"{path}/approve", headers=headers_for(admin))
        published = client.post(
            f"{path}/publish", json={"admin_notes": "Live for spring"}, headers=headers_for(admin)
        ).json()
        assert published["status"] == "published"
        assert published["admin_notes"] == "Live for spring"

        invalid = client.post(f"{path}/submit", headers=headers_for(mentor))
        assert invalid.status_code == 400
        assert invalid.json()["error"] == "INVALID_TRANSITION"

        listed = client.get("/api/courses", params={"status_filter": "published"}).json()
        assert [c["id"] for c in listed] == [course["id"]]

    def test_delete_returns_hidden_course(self, client, mentor, headers_for):
        course = client.post(
            "/api/courses",
            json={"title": "Rhythm", "category": "drums", "level": "beginner"},
            headers=headers_for(mentor),
        ).json()

        response = client.delete(f"/api/courses/{course['id']}", headers=headers_for(mentor))
        assert response.status_code == 200
        assert response.json()["id"] == course["id"]
        assert response.json()["is_active"] is False
        assert client.get(f"/api/courses/{course['id']}").status_code == 404


class TestAdminReviewRoutes:
    def test_master_role_flow(self, client, mentor, admin, headers_for):
        created = client.post(
            "/api/master-role-requests", json={"reason": "Opening a studio"}, headers=headers_for(mentor)
        )
        assert created.status_code == 201

        assert client.get("/api/master-role-requests", headers=headers_for(mentor)).status_code == 403
        pending = client.get(
            "/api/master-role-requests", params={"status_filter": "pending"}, headers=headers_for(admin)
        ).json()
        assert [r["id"] for r in pending] == [created.json()["id"]]

        reviewed = client.patch(
            f"/api/master-role-requests/{created.json()['id']}/status",
            json={"decision": "approve"},
            headers=headers_for(admin),
        )
        assert reviewed.json()["status"] == "approved"

        again = client.patch(
            f"/api/master-role-requests/{created.json()['id']}/status",
            json={"decision": "reject"},
            headers=headers_for(admin),
        )
        assert again.status_code == 400
        assert again.json()["error"] == "ALREADY_REVIEWED"

    def test_staff_request_flow(self, client, classroom, master, mentor, headers_for):
        created = client.post(
            "/api/staff-requests", json={"classroom_id": classroom.id}, headers=headers_for(mentor)
        )
        assert created.status_code == 201

        reviewed = client.patch(
            f"/api/staff-requests/{created.json()['id']}/status",
            json={"decision": "approve", "notes": "Welcome aboard"},
            headers=headers_for(master),
        )
        assert reviewed.json()["status"] == "approved"

        resignation = client.post(
            "/api/resignation-requests",
            json={"classroom_id": classroom.id, "reason": "Moving abroad"},
            headers=headers_for(mentor),
        )
        assert resignation.status_code == 201


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"


def test_metrics_endpoint_exposes_http_counters(client):
    client.get("/api/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "maestro_http_requests_total" in response.text
