"""Pydantic models for request/response validation."""
from datetime import datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, Field, validator

from ..ledger import ProposalState, ProposalStatus


class ProposalCreateRequest(BaseModel):
    """Proposal creation request model."""

    deadline: datetime = Field(..., description="Time after which votes are rejected")
    max_votes: Optional[int] = Field(default=None, description="Maximum number of votes accepted")

    @validator("deadline")
    def validate_deadline(cls, v):
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "deadline": "2026-01-15T10:30:00Z",
                "max_votes": 100
            }
        }


class VoteRequest(BaseModel):
    """Vote submission request model."""

    voter_id: str = Field(..., description="Unique voter identity")
    vote: bool = Field(..., description="Vote choice: true for yes, false for no")

    @validator("voter_id")
    def validate_voter_id(cls, v):
        """Validate voter_id is not empty."""
        if not v or not v.strip():
            raise ValueError("Voter ID cannot be empty")
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "voter_id": "voter-001",
                "vote": True
            }
        }


class ProposalResponse(BaseModel):
    """Proposal state response model."""

    id: int = Field(..., description="Proposal identifier")
    deadline: datetime = Field(..., description="Voting deadline")
    yes_count: int = Field(..., description="Count of 'yes' votes")
    no_count: int = Field(..., description="Count of 'no' votes")
    total_votes: int = Field(..., description="Total number of votes")
    max_votes: int = Field(..., description="Maximum number of votes accepted")
    creator: Optional[str] = Field(default=None, description="Identity that created the proposal")
    status: ProposalStatus = Field(..., description="Whether the proposal still accepts votes")

    @classmethod
    def from_state(cls, state: ProposalState, status: ProposalStatus) -> 'ProposalResponse':
        return cls(status=status, **state.to_dict())

    class Config:
        json_schema_extra = {
            "example": {
                "id": 0,
                "deadline": "2026-01-15T10:30:00Z",
                "yes_count": 3,
                "no_count": 2,
                "total_votes": 5,
                "max_votes": 100,
                "creator": "master",
                "status": "open"
            }
        }


class RegistryResponse(BaseModel):
    """Proposal registry summary response model."""

    next_proposal_id: int = Field(..., description="Id the next created proposal will receive")
    proposals: int = Field(..., description="Number of registered proposals")

    class Config:
        json_schema_extra = {
            "example": {
                "next_proposal_id": 2,
                "proposals": 2
            }
        }


class HealthResponse(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall health status")
    proposals: int = Field(..., description="Number of registered proposals")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp"
    )


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Error message")

    class Config:
        json_schema_extra = {
            "example": {
                "detail": "You have already voted"
            }
        }
