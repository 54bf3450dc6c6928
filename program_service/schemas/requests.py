from pydantic import Field

from .assessment import Assessment
from .blueprint import PlanBlueprint
from .common import CamelModel


class AssessmentRequest(CamelModel):
    assessment: Assessment


class BlueprintRequest(CamelModel):
    assessment: Assessment
    blueprint: PlanBlueprint


class DayTypeDetailsRequest(BlueprintRequest):
    day_type_ids: list[str] = Field(min_length=1)
