"""
Schemas Module - Pydantic data models for the application.
==========================================================

Defines the data contracts shared across the application:
- Course records loaded from the schedule CSV
- Instructor alias registry entries
- Question intents used to pick a system prompt
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class Intent(str, Enum):
    """What a question is mainly asking about."""

    INSTRUCTOR_LOOKUP = "instructor_lookup"
    DEPARTMENT_LOOKUP = "department_lookup"
    LOCATION_LOOKUP = "location_lookup"
    GENERAL = "general"


# ─────────────────────────────────────────────────────────────────────────────
# Course Data Models
# ─────────────────────────────────────────────────────────────────────────────


# Field order of the schedule CSV and of every rendering; labels are the
# display names used by the formatters and the indexed documents.
COURSE_FIELD_LABELS: tuple[tuple[str, str], ...] = (
    ("subject", "Subject"),
    ("course_number", "Course Number"),
    ("section", "Section"),
    ("crn", "CRN"),
    ("schedule_type_code", "Schedule Type Code"),
    ("campus_code", "Campus Code"),
    ("title", "Title Short Desc"),
    ("instruction_mode_desc", "Instruction Mode Desc"),
    ("meeting_type_codes", "Meeting Type Codes"),
    ("meet_days", "Meet Days"),
    ("begin_time", "Begin Time"),
    ("end_time", "End Time"),
    ("meet_start", "Meet Start"),
    ("meet_end", "Meet End"),
    ("building", "Building"),
    ("room", "Room"),
    ("actual_enrollment", "Actual Enrollment"),
    ("instructor_first_name", "Instructor First Name"),
    ("instructor_last_name", "Instructor Last Name"),
    ("instructor_email", "Instructor Email"),
    ("college", "College"),
)

COURSE_FIELDS: tuple[str, ...] = tuple(name for name, _ in COURSE_FIELD_LABELS)


class Course(BaseModel):
    """
    One section of a course from the class schedule.

    All values are kept as the strings found in the CSV; blank cells become
    empty strings. Instances are immutable once loaded.
    """

    model_config = ConfigDict(frozen=True)

    subject: str = Field(default="", description="Subject code (e.g., 'CS')")
    course_number: str = Field(default="", description="Course number (e.g., '110')")
    section: str = Field(default="", description="Section number")
    crn: str = Field(default="", description="Course registration number")
    schedule_type_code: str = Field(default="", description="Schedule type (LEC, LAB, ...)")
    campus_code: str = Field(default="", description="Campus code")
    title: str = Field(default="", description="Short course title")
    instruction_mode_desc: str = Field(default="", description="Instruction mode")
    meeting_type_codes: str = Field(default="", description="Meeting type codes")
    meet_days: str = Field(default="", description="Meeting days (e.g., 'MWF')")
    begin_time: str = Field(default="", description="Begin time (HHMM)")
    end_time: str = Field(default="", description="End time (HHMM)")
    meet_start: str = Field(default="", description="First meeting date")
    meet_end: str = Field(default="", description="Last meeting date")
    building: str = Field(default="", description="Building code")
    room: str = Field(default="", description="Room number")
    actual_enrollment: str = Field(default="", description="Actual enrollment")
    instructor_first_name: str = Field(default="", description="Instructor first name")
    instructor_last_name: str = Field(default="", description="Instructor last name")
    instructor_email: str = Field(default="", description="Instructor email")
    college: str = Field(default="", description="College code")

    @computed_field
    @property
    def instructor_name(self) -> str:
        """Instructor full name as it appears in the schedule."""
        return f"{self.instructor_first_name} {self.instructor_last_name}".strip()

    def field_values(self) -> list[tuple[str, str]]:
        """(label, value) pairs in schedule order."""
        return [(label, getattr(self, name)) for name, label in COURSE_FIELD_LABELS]


class Instructor(BaseModel):
    """An instructor with the alternate spellings that refer to them."""

    model_config = ConfigDict(frozen=True)

    canonical_name: str = Field(..., description="Authoritative display name")
    aliases: frozenset[str] = Field(default_factory=frozenset, description="Known variants")

    def all_names(self) -> list[str]:
        """Canonical name followed by the aliases, longest first."""
        names = {self.canonical_name, *self.aliases}
        return sorted((n for n in names if n.strip()), key=len, reverse=True)
