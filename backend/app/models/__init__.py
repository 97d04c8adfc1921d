from app.models.access_log import AccessLog  # noqa: F401
from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.attendance import AttendanceRecord, AttendanceStatus  # noqa: F401
from app.models.leave_request import LeaveRequest, LeaveSession, LeaveStatus, LeaveType  # noqa: F401
from app.models.notification import Notification, NotificationType  # noqa: F401
from app.models.schedule_assignment import AssignmentStatus, ScheduleAssignment  # noqa: F401
from app.models.staff import Staff  # noqa: F401
from app.models.timetable import TimetableSlot  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
