"""Role-conditional profile payloads.

Each role carries its own field set; ``ProfileDetails`` is a tagged union
discriminated on ``role``.
"""

from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, Field, TypeAdapter

from app.models.user import Role
from app.schemas.base import BaseSchema


def _alias(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class StudentDetails(BaseSchema):
    role: Literal["student"] = "student"
    student_id: str = Field("", validation_alias=_alias("student_id", "studentId"))
    grade_level: Optional[int] = Field(None, validation_alias=_alias("grade_level", "gradeLevel"))
    graduation_year: Optional[int] = Field(
        None, validation_alias=_alias("graduation_year", "graduationYear")
    )
    enrollment_status: str = "active"


class TeacherDetails(BaseSchema):
    role: Literal["teacher"] = "teacher"
    employee_id: str = Field("", validation_alias=_alias("employee_id", "employeeId"))
    teaching_subjects: List[str] = Field(
        default_factory=list, validation_alias=_alias("teaching_subjects", "teachingSubjects")
    )
    qualifications: List[str] = Field(default_factory=list)
    office_hours: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=_alias("office_hours", "officeHours")
    )


class CounselorDetails(BaseSchema):
    role: Literal["counselor"] = "counselor"
    employee_id: str = Field("", validation_alias=_alias("employee_id", "employeeId"))
    specialization: str = ""
    license_number: str = Field("", validation_alias=_alias("license_number", "licenseNumber"))
    available_hours: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=_alias("available_hours", "availableHours")
    )


def _default_admin_permissions() -> Dict[str, bool]:
    return {
        "user_management": True,
        "system_settings": True,
        "reports": True,
        "security": True,
    }


class AdminDetails(BaseSchema):
    role: Literal["admin"] = "admin"
    employee_id: str = Field("", validation_alias=_alias("employee_id", "employeeId"))
    admin_level: str = Field("standard", validation_alias=_alias("admin_level", "adminLevel"))
    permissions: Dict[str, bool] = Field(default_factory=_default_admin_permissions)


class SpecialistDetails(BaseSchema):
    role: Literal["specialist"] = "specialist"
    employee_id: str = Field("", validation_alias=_alias("employee_id", "employeeId"))
    specialization: str = ""


ProfileDetails = Annotated[
    Union[
        StudentDetails,
        TeacherDetails,
        CounselorDetails,
        AdminDetails,
        SpecialistDetails,
    ],
    Field(discriminator="role"),
]

_profile_details_adapter: TypeAdapter = TypeAdapter(ProfileDetails)


def build_profile_details(role: Role, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate role-specific fields and return the JSON-ready variant.

    Empty strings are dropped so CSV blanks fall back to the variant defaults.
    Raises pydantic.ValidationError on bad values.
    """
    payload = {k: v for k, v in data.items() if v != ""}
    payload["role"] = role.value
    details = _profile_details_adapter.validate_python(payload)
    return details.model_dump(mode="json")


class ProfileResponse(BaseSchema):
    user_id: str
    role: Role
    department: str
    phone_number: str
    photo_url: str
    details: Dict[str, Any]
