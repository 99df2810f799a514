"""Pydantic models for payloads exchanged with remote services."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    error: Optional[str] = None


class TokenResponse(BaseModel):
    token: str


class UploadResponse(BaseModel):
    upload_url: str


class JobResponse(BaseModel):
    id: str


class UtterancePayload(BaseModel):
    speaker: str
    text: str
    start: int = 0
    end: int = 0
    confidence: float = 0.0


class StatusResponse(BaseModel):
    """Job status as reported by ``/api/assembly-status``."""
    status: str
    text: Optional[str] = None
    utterances: Optional[List[UtterancePayload]] = Field(default=None)
    error: Optional[str] = None


class RealtimeMessage(BaseModel):
    """Message pushed by the realtime diarization socket."""
    message_type: Optional[str] = None
    text: Optional[str] = None
