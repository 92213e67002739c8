"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from microlend_gateway.infrastructure.clients.assistant import AssistantClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_assistant_client() -> AssistantClient:
    """Provide generative-text assistant client instance"""
    return AssistantClient()
