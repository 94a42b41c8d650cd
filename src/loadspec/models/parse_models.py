"""
Outcome model for the heuristic extraction cascade.
"""

from pydantic import BaseModel, Field

from loadspec.models.enums import ParseMethod
from loadspec.models.spec_models import LoadTestSpec


class ParseResult(BaseModel):
    """
    Result of parsing free-form text into a LoadTestSpec.

    Always fully populated: the cascade never returns a partial result.
    `confidence` is an honest signal of how much of the spec was actually
    read from the input rather than defaulted.
    """

    spec: LoadTestSpec = Field(..., description="Assembled load test spec")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Trust in the interpretation")
    method: ParseMethod = Field(..., description="Tier that produced the spec")
    warnings: list[str] = Field(default_factory=list, description="Defaults applied, repairs made")
