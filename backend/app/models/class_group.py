"""Class model; only the schedule fields matter to billing."""

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class ClassGroup(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    course_name = Column(String, nullable=True)
    # Compact day-code string, e.g. "18:00-19:30 T2, T4"
    schedule = Column(String, nullable=True)
    # [{"day_of_week": "2"}, {"day_of_week": "CN"}]
    schedule_details = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    students = relationship("Student", back_populates="class_group")
