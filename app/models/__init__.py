from .user import User
from .profile import StudentProfile, TeacherProfile
from .academic import Career, Speciality, Cycle, Subject, SubjectAssignment, StudentSubject
from .audit_log import AuditLog
