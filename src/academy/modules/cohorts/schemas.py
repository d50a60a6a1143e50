"""
Cohorts Schemas

Pydantic schemas for session generation responses.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict

from academy.modules.cohorts.models import CohortSessionStatus


class CohortGenerationResultSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cohort_id: str
    cohort_name: str
    sessions_generated: int
    error: str | None = None


class GenerateSessionsResponse(BaseModel):
    success: bool = True
    result: CohortGenerationResultSchema


class GenerateAllSessionsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool = True
    total_cohorts: int
    successful: int
    failed: int
    total_sessions_generated: int
    results: list[CohortGenerationResultSchema]


class CohortSessionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_number: int
    session_date: date
    status: CohortSessionStatus


class CohortSessionsResponse(BaseModel):
    cohort_id: str
    cohort_name: str
    start_date: date | None = None
    end_date: date | None = None
    total: int
    sessions: list[CohortSessionItem]
