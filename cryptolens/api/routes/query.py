"""
Query routes - the core business API
"""

from fastapi import APIRouter, Depends, Request

from cryptolens.api.schemas import (
    ErrorResponse,
    QueryRequest,
    QueryResponse,
    query_result_to_response,
)
from cryptolens.api.dependencies import get_orchestrator
from cryptolens.orchestrator import QueryOrchestrator


router = APIRouter(prefix="/api/v1", tags=["Query"])


@router.post(
    "/query",
    response_model=QueryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or blank query"},
        500: {"model": ErrorResponse, "description": "Unexpected internal failure"},
    },
    summary="Answer a market query",
    description="""
    Resolves the query's intent, gathers data through the provider fallback
    chains and writes an answer.

    Example queries:
    - "How many pump.fun tokens launched in the last hour are above $19,000 market cap?"
    - "What's the SOL price?"
    - "Compare pump.fun and bonk launches today"
    - "Top DeFi protocols on Solana by TVL"
    - "Best yield farms on Ethereum"
    """
)
async def query(
    body: QueryRequest,
    request: Request,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
) -> QueryResponse:
    """Answer one query; InvalidInputError and InternalFailure go to the app's handlers"""
    result = await orchestrator.handle_query(body.query)
    return query_result_to_response(result, request_id=request.headers.get("X-Request-ID"))
