from __future__ import annotations

from portal_chat.domain.entities.profile import Profile
from portal_chat.domain.value_objects.enums import Role
from portal_chat.domain.value_objects.identity import Identity
from portal_chat.infrastructure.db.models.profile import AdminModel, FacultyModel, StudentModel

ProfileModel = StudentModel | FacultyModel | AdminModel

MODEL_BY_ROLE: dict[Role, type[ProfileModel]] = {
    Role.STUDENT: StudentModel,
    Role.FACULTY: FacultyModel,
    Role.ADMIN: AdminModel,
}


def model_to_entity(model: ProfileModel, role: Role) -> Profile:
    return Profile(
        identity=Identity(model.id, role),
        name=model.name,
        email=model.email,
        branch=getattr(model, "branch", None),
    )
