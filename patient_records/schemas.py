"""Input models for patient records using Pydantic validation.

Each create/update payload is parsed through one of these models before it
reaches a repository. Validators trim whitespace, lower-case emails and raise
``ValueError`` with a message naming the violated rule.
"""

import re
from datetime import date
from enum import Enum

import pydantic
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .exceptions import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MAX_NAME_LENGTH = 255
MIN_AGE = 0
MAX_AGE = 150
MAX_NOTE_TITLE_LENGTH = 500
MAX_NOTE_CONTENT_LENGTH = 50_000
MIN_FULL_NAME_LENGTH = 2


class MaritalStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"
    SEPARATED = "separated"
    NOT_SPECIFIED = "not_specified"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"
    NOT_SPECIFIED = "not_specified"


class SexualOrientation(str, Enum):
    HETEROSEXUAL = "heterosexual"
    HOMOSEXUAL = "homosexual"
    BISEXUAL = "bisexual"
    PANSEXUAL = "pansexual"
    ASEXUAL = "asexual"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class PatientStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    MEDICAL_DISCHARGE = "medical_discharge"
    ABANDONED = "abandoned"


# Human-readable labels for display
MARITAL_STATUS_LABELS = {
    MaritalStatus.SINGLE: "Single",
    MaritalStatus.MARRIED: "Married",
    MaritalStatus.DIVORCED: "Divorced",
    MaritalStatus.WIDOWED: "Widowed",
    MaritalStatus.SEPARATED: "Separated",
    MaritalStatus.NOT_SPECIFIED: "Not specified",
}

GENDER_LABELS = {
    Gender.MALE: "Male",
    Gender.FEMALE: "Female",
    Gender.OTHER: "Other",
    Gender.PREFER_NOT_TO_SAY: "Prefer not to say",
    Gender.NOT_SPECIFIED: "Not specified",
}

SEXUAL_ORIENTATION_LABELS = {
    SexualOrientation.HETEROSEXUAL: "Heterosexual",
    SexualOrientation.HOMOSEXUAL: "Homosexual",
    SexualOrientation.BISEXUAL: "Bisexual",
    SexualOrientation.PANSEXUAL: "Pansexual",
    SexualOrientation.ASEXUAL: "Asexual",
    SexualOrientation.OTHER: "Other",
    SexualOrientation.PREFER_NOT_TO_SAY: "Prefer not to say",
}

PATIENT_STATUS_LABELS = {
    PatientStatus.ACTIVE: "Active",
    PatientStatus.PAUSED: "Paused",
    PatientStatus.MEDICAL_DISCHARGE: "Medical Discharge",
    PatientStatus.ABANDONED: "Abandoned",
}


def label_for(value: Enum | str, labels: dict) -> str:
    """Return the display label for an enum value, or the raw value."""
    for member, label in labels.items():
        if value == member or value == member.value:
            return label
    return value.value if isinstance(value, Enum) else str(value)


# Shared checks

def _required_text(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


def _check_email(value: str | None) -> str:
    email = _required_text(value, "Email is required").lower()
    if not EMAIL_RE.match(email):
        raise ValueError("Invalid email format")
    return email


def _check_past_date(value: str | None, label: str) -> str:
    text = _required_text(value, f"{label} is required")
    if not DATE_RE.match(text):
        raise ValueError(f"Invalid {label.lower()} format. Expected YYYY-MM-DD")
    try:
        parsed = date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid {label.lower()}")
    if parsed > date.today():
        raise ValueError(f"{label} cannot be in the future")
    return text


def _check_optional_date(value: str | None, label: str) -> str | None:
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    if not DATE_RE.match(text):
        raise ValueError(f"Invalid {label.lower()} format. Expected YYYY-MM-DD")
    try:
        date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid {label.lower()}")
    return text


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _check_name(value: str | None) -> str:
    name = _required_text(value, "Patient name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"Patient name must be less than {MAX_NAME_LENGTH} characters")
    return name


def _check_age(value: int | None) -> int:
    if value is None or value < MIN_AGE or value > MAX_AGE:
        raise ValueError(f"Age must be between {MIN_AGE} and {MAX_AGE}")
    return value


def _check_children(value: int | None) -> int:
    if value is None or value < 0:
        raise ValueError("Number of children must be a positive number")
    return value


def _check_full_name(value: str | None) -> str:
    full_name = _required_text(value, "Full name is required")
    if len(full_name) < MIN_FULL_NAME_LENGTH:
        raise ValueError(f"Full name must be at least {MIN_FULL_NAME_LENGTH} characters")
    return full_name


def _check_title(value: str | None, message: str) -> str:
    title = _required_text(value, message)
    if len(title) > MAX_NOTE_TITLE_LENGTH:
        raise ValueError(f"Note title must be at most {MAX_NOTE_TITLE_LENGTH} characters")
    return title


def _check_content(value: str | None, message: str) -> str:
    content = _required_text(value, message)
    if len(content) > MAX_NOTE_CONTENT_LENGTH:
        raise ValueError(f"Note content must be at most {MAX_NOTE_CONTENT_LENGTH:,} characters")
    return content


def _check_patient_id(value: int | None) -> int:
    if value is None or value <= 0:
        raise ValueError("Valid patient ID is required")
    return value


class InputModel(BaseModel):
    """Base for payloads: accepts camelCase keys or snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def parse(cls, data):
        """Validate a payload, raising ValidationError with the first rule broken."""
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data or {})
        except pydantic.ValidationError as e:
            raise ValidationError(validation_message(e)) from e

    def changes(self) -> dict:
        """Fields explicitly supplied on this payload, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


def validation_message(error: pydantic.ValidationError) -> str:
    """Turn a Pydantic error into a single human-readable rule description."""
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    ctx_error = first.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


# Patients

class PatientCreate(InputModel):
    name: str
    age: int
    email: str
    phone_number: str
    birth_date: str
    marital_status: MaritalStatus
    gender: Gender
    sexual_orientation: SexualOrientation = SexualOrientation.PREFER_NOT_TO_SAY
    educational_level: str
    profession: str
    lives_with: str
    children: int
    previous_psychological_experience: str | None = None
    first_appointment_date: str | None = None
    status: PatientStatus = PatientStatus.ACTIVE

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator("age")
    @classmethod
    def validate_age(cls, v):
        return _check_age(v)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("phone_number", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return _required_text(v, "Phone number is required")

    @field_validator("birth_date", mode="before")
    @classmethod
    def validate_birth_date(cls, v):
        return _check_past_date(v, "Birth date")

    @field_validator("educational_level", "profession", "lives_with", mode="before")
    @classmethod
    def strip_text(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("children")
    @classmethod
    def validate_children(cls, v):
        return _check_children(v)

    @field_validator("previous_psychological_experience", mode="before")
    @classmethod
    def strip_optional(cls, v):
        return _optional_text(v)

    @field_validator("first_appointment_date", mode="before")
    @classmethod
    def validate_first_appointment(cls, v):
        return _check_optional_date(v, "First appointment date")


class PatientUpdate(InputModel):
    """Partial patient update; only fields that were supplied are written."""

    name: str | None = None
    age: int | None = None
    email: str | None = None
    phone_number: str | None = None
    birth_date: str | None = None
    marital_status: MaritalStatus | None = None
    gender: Gender | None = None
    sexual_orientation: SexualOrientation | None = None
    educational_level: str | None = None
    profession: str | None = None
    lives_with: str | None = None
    children: int | None = None
    previous_psychological_experience: str | None = None
    first_appointment_date: str | None = None
    status: PatientStatus | None = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator("age", mode="before")
    @classmethod
    def validate_age(cls, v):
        if v is None:
            raise ValueError(f"Age must be between {MIN_AGE} and {MAX_AGE}")
        return v

    @field_validator("age")
    @classmethod
    def validate_age_range(cls, v):
        return _check_age(v)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("phone_number", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return _required_text(v, "Phone number is required")

    @field_validator("birth_date", mode="before")
    @classmethod
    def validate_birth_date(cls, v):
        return _check_past_date(v, "Birth date")

    @field_validator("educational_level", "profession", "lives_with", mode="before")
    @classmethod
    def strip_text(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("children", mode="before")
    @classmethod
    def validate_children_present(cls, v):
        if v is None:
            raise ValueError("Number of children must be a positive number")
        return v

    @field_validator("children")
    @classmethod
    def validate_children(cls, v):
        return _check_children(v)

    @field_validator("previous_psychological_experience", mode="before")
    @classmethod
    def strip_optional(cls, v):
        return _optional_text(v)

    @field_validator("first_appointment_date", mode="before")
    @classmethod
    def validate_first_appointment(cls, v):
        return _check_optional_date(v, "First appointment date")

    @field_validator("marital_status", "gender", "sexual_orientation", "status", mode="before")
    @classmethod
    def reject_null_enum(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name.replace('_', ' ').capitalize()} cannot be empty")
        return v


# Notes

class NoteCreate(InputModel):
    patient_id: int
    title: str
    content: str

    @field_validator("patient_id", mode="before")
    @classmethod
    def validate_patient_id_present(cls, v):
        if v is None:
            raise ValueError("Valid patient ID is required")
        return v

    @field_validator("patient_id")
    @classmethod
    def validate_patient_id(cls, v):
        return _check_patient_id(v)

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v, "Note title is required")

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v):
        return _check_content(v, "Note content is required")


class NoteUpdate(InputModel):
    title: str | None = None
    content: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v, "Note title cannot be empty")

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v):
        return _check_content(v, "Note content cannot be empty")


# Emergency contacts and legal tutors

class EmergencyContactCreate(InputModel):
    patient_id: int
    full_name: str
    phone_number: str
    relation: str
    email: str
    address: str | None = None

    @field_validator("patient_id", mode="before")
    @classmethod
    def validate_patient_id_present(cls, v):
        if v is None:
            raise ValueError("Valid patient ID is required")
        return v

    @field_validator("patient_id")
    @classmethod
    def validate_patient_id(cls, v):
        return _check_patient_id(v)

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, v):
        return _check_full_name(v)

    @field_validator("phone_number", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return _required_text(v, "Phone number is required")

    @field_validator("relation", mode="before")
    @classmethod
    def validate_relation(cls, v):
        return _required_text(v, "Relation is required")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("address", mode="before")
    @classmethod
    def strip_address(cls, v):
        return _optional_text(v)


class EmergencyContactUpdate(InputModel):
    full_name: str | None = None
    phone_number: str | None = None
    relation: str | None = None
    email: str | None = None
    address: str | None = None


class LegalTutorCreate(EmergencyContactCreate):
    birth_date: str

    @field_validator("birth_date", mode="before")
    @classmethod
    def validate_birth_date(cls, v):
        return _check_past_date(v, "Birth date")


class LegalTutorUpdate(EmergencyContactUpdate):
    birth_date: str | None = None
