from app.models.attendance import Attendance, AttendanceStatus  # noqa: F401
from app.models.employee import AccessRole, Employee, Role  # noqa: F401
from app.models.leave import Leave, LeaveStatus, LeaveType, OfficialHoliday  # noqa: F401
from app.models.resignation import Resignation, ResignationStatus  # noqa: F401
from app.models.tickets import Ticket, TicketStatus  # noqa: F401
