"""
Assistant schemas.
"""
from typing import Optional
from pydantic import BaseModel, Field


class AssistantRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)
    session_id: Optional[str] = Field(None, alias="sessionId", max_length=128)

    class Config:
        populate_by_name = True


class AssistantMetadata(BaseModel):
    rate_limited: bool = Field(False, alias="rateLimited")
    requires_login: bool = Field(False, alias="requiresLogin")
    fallback: bool = False
    remaining: Optional[int] = None

    class Config:
        populate_by_name = True


class AssistantResponse(BaseModel):
    success: bool = True
    response: str
    metadata: AssistantMetadata
