"""
LoadTestSpec data models.

These models define the canonical, executable load test description that
both the heuristic extraction cascade and the AI-assisted interpreter must
produce. Field names serialize in camelCase (testType, loadPattern,
virtualUsers, ...) to match the wire format consumed by the execution engine;
snake_case names are accepted on input as well.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from loadspec.models.enums import DurationUnit, HttpMethod, LoadPatternType, TestType

_SECONDS_PER_UNIT = {
    DurationUnit.SECONDS: 1,
    DurationUnit.MINUTES: 60,
    DurationUnit.HOURS: 3600,
}


class _SpecModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Duration(_SpecModel):
    """A positive amount of time."""

    value: int = Field(..., ge=1, description="Amount of time in `unit`")
    unit: DurationUnit = Field(default=DurationUnit.SECONDS, description="Time unit")

    @property
    def total_seconds(self) -> int:
        return self.value * _SECONDS_PER_UNIT[self.unit]


class RequestSpec(_SpecModel):
    """
    A single HTTP request exercised by the load test.

    `body` is kept as the raw string found in the description (JSON when
    possible) so that it can be replayed byte-for-byte.
    """

    method: HttpMethod = Field(default=HttpMethod.GET, description="HTTP method")
    url: str = Field(..., min_length=1, description="Absolute target URL")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    body: Optional[str] = Field(default=None, description="Raw request body")


class LoadPattern(_SpecModel):
    """How virtual users are applied over the test duration."""

    type: LoadPatternType = Field(default=LoadPatternType.CONSTANT, description="Pattern shape")
    virtual_users: Optional[int] = Field(default=None, ge=1, description="Concurrent virtual users")
    requests_per_second: Optional[int] = Field(default=None, ge=1, description="Target request rate")
    ramp_up: Optional[Duration] = Field(default=None, description="Ramp-up period (ramp-up pattern)")


class LoadTestSpec(_SpecModel):
    """
    Structured, executable load test description.

    Invariants:
    - requests is never empty
    - loadPattern is always present (defaults to a constant pattern)
    """

    id: str = Field(
        default_factory=lambda: f"spec_{uuid.uuid4().hex[:12]}",
        description="Unique spec identifier",
    )
    name: str = Field(default="Interpreted load test", description="Human-readable test name")
    description: str = Field(default="", description="Source description (truncated)")
    test_type: TestType = Field(default=TestType.BASELINE, description="Test intent")
    duration: Duration = Field(
        default_factory=lambda: Duration(value=60, unit=DurationUnit.SECONDS),
        description="Total test duration",
    )
    requests: list[RequestSpec] = Field(..., min_length=1, description="Requests in execution order")
    load_pattern: LoadPattern = Field(default_factory=LoadPattern, description="Load shape")
