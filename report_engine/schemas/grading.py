"""Grading scale schemas."""

from pydantic import Field, model_validator

from report_engine.schemas.common import BaseSchema


class GradeBandSchema(BaseSchema):
    """Grade band as configured on a scale."""

    name: str = Field(..., min_length=1, max_length=20)
    lower_bound: float = Field(..., ge=0, le=100)
    upper_bound: float = Field(..., ge=0, le=100)
    value: int
    comment: str | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> "GradeBandSchema":
        if self.lower_bound > self.upper_bound:
            raise ValueError("lower_bound must not exceed upper_bound")
        return self


class DivisionBandSchema(BaseSchema):
    """Division band as configured on a scale."""

    name: str = Field(..., min_length=1, max_length=50)
    min_aggregate: int = Field(..., ge=0)
    max_aggregate: int = Field(..., ge=0)


class GradingScaleResponse(BaseSchema):
    """Grading scale response schema."""

    id: int
    school_id: int
    name: str
    fail_value: int
    grades: list[GradeBandSchema]
    divisions: list[DivisionBandSchema]
