from .admin_review import (
    MasterRoleRequestCreate,
    MasterRoleRequestResponse,
    MentorApplicationCreate,
    MentorApplicationResponse,
)
from .classroom import (
    ClassroomCreate,
    ClassroomResponse,
    JoinRequest,
    MembershipResponse,
    MembershipReviewRequest,
    ResignationRequestCreate,
    ResignationRequestResponse,
    StaffRequestCreate,
    StaffRequestResponse,
)
from .common import ErrorResponse, ReviewDecisionRequest
from .course import CourseCreate, CourseResponse, CourseReviewRequest, CourseUpdate
from .mentorship import (
    ConversationMessageCreate,
    ConversationMessageResponse,
    MentorshipRequestCreate,
    MentorshipRequestResponse,
    MentorshipRequestStatusUpdate,
    MentorshipSessionCreate,
    MentorshipSessionResponse,
    SessionCompleteRequest,
)
from .schedule import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)

__all__ = [
    "AvailabilityCheckRequest",
    "AvailabilityCheckResponse",
    "ClassroomCreate",
    "ClassroomResponse",
    "ConversationMessageCreate",
    "ConversationMessageResponse",
    "CourseCreate",
    "CourseResponse",
    "CourseReviewRequest",
    "CourseUpdate",
    "ErrorResponse",
    "JoinRequest",
    "MasterRoleRequestCreate",
    "MasterRoleRequestResponse",
    "MembershipResponse",
    "MembershipReviewRequest",
    "MentorApplicationCreate",
    "MentorApplicationResponse",
    "MentorshipRequestCreate",
    "MentorshipRequestResponse",
    "MentorshipRequestStatusUpdate",
    "MentorshipSessionCreate",
    "MentorshipSessionResponse",
    "ResignationRequestCreate",
    "ResignationRequestResponse",
    "ReviewDecisionRequest",
    "ScheduleCreate",
    "ScheduleResponse",
    "ScheduleUpdate",
    "SessionCompleteRequest",
]
