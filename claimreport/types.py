from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class ExportStatus(str, Enum):
    empty = 'empty'
    rendering = 'rendering'
    serialized = 'serialized'
    delivered = 'delivered'


class ReportKind(str, Enum):
    admin = 'admin'
    partner = 'partner'


class Project(BaseModel):
    name: str
    start_date: date | None = None
    end_date: date | None = None
    project_reference: str | None = None


class Submission(BaseModel):
    id: str | None = None
    organisation_name: str
    country_code: str
    contact_name: str | None = None
    contact_email: str | None = None
    submitted_at: datetime | None = None
    account_holder: str | None = None
    iban: str | None = None
    bic: str | None = None


class Participant(BaseModel):
    id: str | None = None
    full_name: str
    is_green_travel: bool | None = None


class Ticket(BaseModel):
    id: str | None = None
    from_location: str
    to_location: str
    amount_eur: float | None = None
    file_url: str | None = None
    assigned_participants: list[str] = Field(default_factory=list)


class Rates(BaseModel):
    standard: float | None = None
    green: float | None = None


class SubmissionBundle(BaseModel):
    """Everything one report needs, as handed over by the intake forms."""

    submission: Submission
    project: Project | None = None
    participants: list[Participant] = Field(default_factory=list)
    tickets: list[Ticket] = Field(default_factory=list)
    rates: Rates | None = None
