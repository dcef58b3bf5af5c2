"""Assistant endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from wastewise.assistant.responses import GREETING, QUICK_ACTIONS, reply

router = APIRouter(prefix="/api/v1/assistant", tags=["Assistant"])


class AssistantMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class AssistantMessageResponse(BaseModel):
    reply: str
    quick_actions: list[str]


@router.get("/greeting", response_model=AssistantMessageResponse)
async def greeting():
    """Opening message and quick actions."""
    return AssistantMessageResponse(reply=GREETING, quick_actions=QUICK_ACTIONS)


@router.post("/messages", response_model=AssistantMessageResponse)
async def send_message(body: AssistantMessageRequest):
    """Reply to a user message from the canned response table."""
    return AssistantMessageResponse(reply=reply(body.content), quick_actions=QUICK_ACTIONS)
