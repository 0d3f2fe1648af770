"""Context variables for structured logging."""

from contextvars import ContextVar, Token
from typing import Dict, Optional

_call_id: ContextVar[str] = ContextVar("call_id", default="")
_client_name: ContextVar[str] = ContextVar("client_name", default="")
_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def set_log_context(
    call_id: Optional[str] = None,
    client_name: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> None:
    if call_id is not None:
        _call_id.set(call_id)
    if client_name is not None:
        _client_name.set(client_name)
    if trace_id is not None:
        _trace_id.set(trace_id)


def get_log_context() -> Dict[str, str]:
    return {
        "call_id": _call_id.get(),
        "client_name": _client_name.get(),
        "trace_id": _trace_id.get(),
    }


def clear_log_context() -> None:
    _call_id.set("")
    _client_name.set("")
    _trace_id.set("")


def bind_call_id(call_id: str) -> Token:
    """Set the call id and return a token for reset_call_id()."""
    return _call_id.set(call_id)


def reset_call_id(token: Token) -> None:
    """Restore the call id that was current before bind_call_id()."""
    _call_id.reset(token)
