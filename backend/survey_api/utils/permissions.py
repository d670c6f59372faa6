"""Role helpers shared by the auth gate and the services."""

from survey_api.models.user import User


TEACHER = "teacher"
STUDENT = "student"

ALL_ROLES = (TEACHER, STUDENT)


def is_teacher(user: User) -> bool:
    return user.role == TEACHER


def is_student(user: User) -> bool:
    return user.role == STUDENT


def is_owner(user: User, owner_id: int) -> bool:
    return int(user.user_id) == int(owner_id)
