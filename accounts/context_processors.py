from .session import get_session_state


def session(request):
    """Expose the resolved session to the shared header."""
    return {"session_state": get_session_state(request)}
