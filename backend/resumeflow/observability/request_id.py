"""Correlation ids for log records.

Request ids follow an HTTP request; document ids follow the background
transfer and analysis work done for one document. Both live in context
variables, so they propagate into tasks spawned from the current context.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
document_id_var: ContextVar[Optional[str]] = ContextVar("document_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request"""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_document_id() -> Optional[str]:
    return document_id_var.get()


def set_document_id(document_id: Optional[str]) -> None:
    document_id_var.set(document_id)
