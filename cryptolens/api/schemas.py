"""
API request/response models - Pydantic schemas

Every API input and output is defined here, giving type safety and
generated documentation.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

from cryptolens.domain.models import QueryResult


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ==================== Request models ====================

class QueryRequest(BaseModel):
    """Free-text market query"""
    query: str = Field(
        ...,
        max_length=1000,
        description="Question such as 'pump.fun tokens above $19k in the last hour' or 'SOL price'"
    )

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Reject blank queries"""
        v = v.strip()
        if not v:
            raise ValueError('query must not be empty')
        return v


# ==================== Response models ====================

class QueryMetadataData(BaseModel):
    """What the answer is based on"""
    kind: str = Field(..., description="Record variant of the primary results")
    sources: List[str] = Field(default_factory=list, description="Provenance tags, 'synthetic' for generated data")
    total_results: int = Field(..., description="Number of records returned")


class QueryResponse(BaseModel):
    """Answer to one query"""
    success: bool = Field(default=True)
    request_id: Optional[str] = Field(default=None, description="Request trace ID")
    query: str = Field(..., description="The query as received")
    answer: str = Field(..., description="Natural-language answer")
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Records, each tagged with its 'kind'")
    metadata: QueryMetadataData
    intent: Dict[str, Any] = Field(default_factory=dict, description="Resolved intent")
    resolution: str = Field(..., description="'parsed' (language model) or 'fallback' (rules)")
    elapsed_ms: int = Field(..., description="Aggregation time in milliseconds")
    timestamp: datetime = Field(default_factory=_now)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check time")
    version: str = Field(..., description="API version")
    services: Dict[str, bool] = Field(default_factory=dict, description="Which data services are configured")
    capabilities: List[str] = Field(default_factory=list, description="Supported query categories")


class ErrorResponse(BaseModel):
    """Error response"""
    success: bool = Field(default=False)
    error_code: str = Field(..., description="Error code")
    error_message: str = Field(..., description="Error message")
    details: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = Field(default=None, description="Request ID")
    timestamp: datetime = Field(default_factory=_now)


# ==================== Conversion ====================

def query_result_to_response(result: QueryResult, request_id: Optional[str] = None) -> QueryResponse:
    """
    Convert a QueryResult into the API response

    Args:
        result: domain result
        request_id: trace ID echoed back to the client

    Returns:
        QueryResponse: API response object
    """
    payload = result.to_dict()
    return QueryResponse(
        request_id=request_id,
        query=payload["query"],
        answer=payload["answer"],
        data=payload["data"],
        metadata=QueryMetadataData(**payload["metadata"]),
        intent=payload["intent"],
        resolution=payload["resolution"],
        elapsed_ms=payload["elapsed_ms"],
        timestamp=result.timestamp,
    )
