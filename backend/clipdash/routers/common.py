"""Helpers shared by the routers."""

from contextlib import contextmanager
from fastapi import HTTPException
from typing import Optional

from clipdash.platforms.errors import ProviderError, map_provider_error


def raise_for_error(error: Optional[str]):
    """Turn a service error message into an HTTP error: 404 for missing rows, 400 otherwise."""
    if not error:
        return
    if error.lower().endswith("not found"):
        raise HTTPException(status_code=404, detail=error)
    raise HTTPException(status_code=400, detail=error)


@contextmanager
def provider_errors(provider: str = ""):
    """
    Answer any failure inside a provider call as a ``ProviderError``.

    Unexpected exceptions are classified by ``map_provider_error`` so the
    app-level handler replies with ``{success: false, error}`` and the
    mapped status instead of a bare 500.
    """
    try:
        yield
    except (HTTPException, ProviderError):
        raise
    except Exception as e:
        status_code, message = map_provider_error(e)
        raise ProviderError(message, provider, status_code=status_code) from e
