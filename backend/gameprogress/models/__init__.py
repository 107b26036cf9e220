from gameprogress.models.student import Student
from gameprogress.models.badge import Badge

__all__ = ["Student", "Badge"]
