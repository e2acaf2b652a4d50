"""
FastAPI application for the proposal voting API.

Hosts an in-memory ProposalRegistry and supplies what the ledger leaves to
its host: voter identity from the request body and the current time from
the server clock.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from ..ledger import (
    DuplicateVote,
    InvalidCapacity,
    InvalidDeadline,
    ProposalNotFound,
    ProposalRegistry,
    UnauthorizedCreator,
    VoteChoice,
    VoteRejected,
    VotingLedger,
)
from .config import settings
from .models import (
    ProposalCreateRequest,
    VoteRequest,
    ProposalResponse,
    RegistryResponse,
    HealthResponse,
    ErrorResponse,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Prometheus metrics
vote_counter = Counter(
    "votes_cast_total",
    "Total number of accepted votes",
    ["vote_choice"]
)
vote_rejections = Counter(
    "vote_rejections_total",
    "Total number of rejected votes",
    ["reason"]
)
vote_errors = Counter(
    "vote_errors_total",
    "Total number of API errors",
    ["error_type"]
)
proposals_created = Counter(
    "proposals_created_total",
    "Total number of proposals created"
)
request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"]
)

# Rate limiter
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"Starting {settings.SERVICE_NAME} service...")

    app.state.registry = ProposalRegistry(
        owner=settings.REGISTRY_OWNER,
        max_votes=settings.MAX_VOTES
    )
    logger.info(
        f"{settings.SERVICE_NAME} started successfully "
        f"(max_votes={settings.MAX_VOTES}, owner={'set' if settings.REGISTRY_OWNER else 'none'})"
    )

    yield

    logger.info(f"Shutting down {settings.SERVICE_NAME} service...")


# Create FastAPI app
app = FastAPI(
    title="Proposal Voting API",
    description="API for creating proposals and casting yes/no votes",
    version=settings.API_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.middleware("http")
async def prometheus_middleware(request: Request, call_next):
    """Middleware to track request duration."""
    start_time = time.perf_counter()
    response = await call_next(request)

    # Label by route template so path parameters do not create new series
    route = request.scope.get("route")
    endpoint = route.path if route is not None else "unmatched"

    request_duration.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code
    ).observe(time.perf_counter() - start_time)

    return response


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_registry(request: Request) -> ProposalRegistry:
    return request.app.state.registry


def proposal_response(ledger: VotingLedger, now: datetime) -> ProposalResponse:
    return ProposalResponse.from_state(ledger.get_state(), ledger.status(now))


@app.post(
    f"{settings.api_prefix}/proposals",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid deadline or capacity"},
        403: {"model": ErrorResponse, "description": "Caller is not the registry owner"},
        500: {"model": ErrorResponse, "description": "Internal server error"}
    }
)
async def create_proposal(
    request: Request,
    proposal: ProposalCreateRequest,
    x_owner_id: Optional[str] = Header(default=None)
) -> ProposalResponse:
    """
    Create a new proposal.

    - **deadline**: Time after which votes are rejected (must be in the future)
    - **max_votes**: Optional capacity, defaults to the configured MAX_VOTES

    When REGISTRY_OWNER is configured, the X-Owner-Id header must match it.
    """
    registry = get_registry(request)
    now = utc_now()

    try:
        ledger = registry.create_proposal(
            deadline=proposal.deadline,
            now=now,
            max_votes=proposal.max_votes,
            creator=x_owner_id
        )
        proposals_created.inc()
        return proposal_response(ledger, now)

    except UnauthorizedCreator as e:
        vote_errors.labels(error_type="unauthorized").inc()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except (InvalidDeadline, InvalidCapacity) as e:
        vote_errors.labels(error_type="validation_error").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        vote_errors.labels(error_type="internal_error").inc()
        logger.error(f"Error creating proposal: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@app.get(
    f"{settings.api_prefix}/proposals",
    response_model=list[ProposalResponse]
)
async def list_proposals(request: Request) -> list[ProposalResponse]:
    """Get the current state of all proposals, in creation order."""
    registry = get_registry(request)
    now = utc_now()
    return [
        proposal_response(registry.get(state.id), now)
        for state in registry.list_states()
    ]


@app.get(
    f"{settings.api_prefix}/proposals/{{proposal_id}}",
    response_model=ProposalResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Proposal not found"}
    }
)
async def get_proposal(request: Request, proposal_id: int) -> ProposalResponse:
    """
    Get vote results for a specific proposal.

    Returns yes/no counts, the deadline and whether voting is still open.
    """
    try:
        ledger = get_registry(request).get(proposal_id)
    except ProposalNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return proposal_response(ledger, utc_now())


@app.post(
    f"{settings.api_prefix}/proposals/{{proposal_id}}/votes",
    response_model=ProposalResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Voting closed or capacity reached"},
        404: {"model": ErrorResponse, "description": "Proposal not found"},
        409: {"model": ErrorResponse, "description": "Voter has already voted"},
        429: {"description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"}
    }
)
@limiter.limit(settings.RATE_LIMIT)
async def submit_vote(request: Request, proposal_id: int, vote: VoteRequest) -> ProposalResponse:
    """
    Cast a vote on a proposal.

    - **voter_id**: Unique voter identity
    - **vote**: true for yes, false for no

    Returns the updated tally.
    """
    registry = get_registry(request)
    now = utc_now()

    try:
        ledger = registry.get(proposal_id)
        state = ledger.cast_vote(vote.voter_id, vote.vote, now)

        vote_counter.labels(vote_choice=VoteChoice.from_bool(vote.vote).value).inc()
        return ProposalResponse.from_state(state, ledger.status(now))

    except ProposalNotFound as e:
        vote_errors.labels(error_type="not_found").inc()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateVote as e:
        vote_rejections.labels(reason=e.reason.value).inc()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except VoteRejected as e:
        vote_rejections.labels(reason=e.reason.value).inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        vote_errors.labels(error_type="internal_error").inc()
        logger.error(f"Error submitting vote on proposal {proposal_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@app.get(
    f"{settings.api_prefix}/registry",
    response_model=RegistryResponse
)
async def get_registry_summary(request: Request) -> RegistryResponse:
    """Get the id the next created proposal will receive and the proposal count."""
    registry = get_registry(request)
    return RegistryResponse(
        next_proposal_id=registry.next_proposal_id,
        proposals=len(registry)
    )


@app.get(
    f"{settings.api_prefix}/health",
    response_model=HealthResponse
)
async def health_check(request: Request) -> HealthResponse:
    """Check health of the service."""
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        return HealthResponse(status="unhealthy", proposals=0)
    return HealthResponse(status="healthy", proposals=len(registry))


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.API_VERSION,
        "status": "running",
        "endpoints": {
            "create_proposal": f"{settings.api_prefix}/proposals",
            "get_proposal": f"{settings.api_prefix}/proposals/{{proposal_id}}",
            "registry": f"{settings.api_prefix}/registry",
            "submit_vote": f"{settings.api_prefix}/proposals/{{proposal_id}}/votes",
            "health": f"{settings.api_prefix}/health",
            "metrics": "/metrics"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.voting_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
