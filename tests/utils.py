from app.core.security import create_access_token
from app.models.academic import Career, Cycle, Speciality, Subject, SubjectAssignment
from app.models.user import UserRole, UserStatus
from app.repositories.user import user_repository
from datetime import date
from sqlalchemy.orm import Session

PASSWORD = "Secret123"

def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=user.email)}"}

class Factory:
    """Builds committed rows for integration tests."""

    def __init__(self, db: Session):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def career(self, name=None, **kwargs):
        n = self._next()
        return self._save(Career(name=name or f"Career {n}", code=f"C{n}", **kwargs))

    def speciality(self, name=None):
        return self._save(Speciality(name=name or f"Speciality {self._next()}"))

    def cycle(self, year=2025, period=1, is_active=False, **kwargs):
        return self._save(Cycle(
            name=kwargs.pop("name", f"{year}-{period}"),
            year=year,
            period=period,
            start_date=kwargs.pop("start_date", date(year, 3, 1)),
            end_date=kwargs.pop("end_date", date(year, 7, 31)),
            is_active=is_active,
            **kwargs
        ))

    def subject(self, career, max_quota=30, available_quota=None, cycle=None, name=None):
        n = self._next()
        return self._save(Subject(
            name=name or f"Subject {n}",
            code=f"S{n}",
            credits=4,
            career_id=career.id,
            cycle_id=cycle.id if cycle else None,
            max_quota=max_quota,
            available_quota=max_quota if available_quota is None else available_quota,
        ))

    def user(self, role=UserRole.ADMIN, status=UserStatus.ACTIVE, first_name=None, last_name="Tester",
             career=None, speciality=None, email=None):
        n = self._next()
        user = user_repository.create_user(self.db, {
            "email": email or f"user{n}@example.com",
            "password": PASSWORD,
            "first_name": first_name or f"User{n:03d}",
            "last_name": last_name,
            "role": role,
            "status": status,
            "career_id": career.id if career else None,
            "current_cycle": 1,
            "speciality_id": speciality.id if speciality else None,
        })
        self.db.commit()
        self.db.refresh(user)
        return user

    def admin(self, **kwargs):
        return self.user(role=UserRole.ADMIN, **kwargs)

    def student(self, career, **kwargs):
        return self.user(role=UserRole.STUDENT, career=career, **kwargs)

    def teacher(self, speciality=None, career=None, **kwargs):
        return self.user(role=UserRole.TEACHER, speciality=speciality, career=career, **kwargs)

    def assign(self, teacher, subject):
        return self._save(SubjectAssignment(
            teacher_profile_id=teacher.teacher_profile.id,
            subject_id=subject.id,
        ))
