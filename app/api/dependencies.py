"""
app/api/dependencies.py

Shared FastAPI dependencies and response helpers.
"""

from __future__ import annotations

from fastapi import Response

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def no_store(response: Response) -> Response:
    """
    Mark a response as never cacheable by browsers or intermediaries.
    """

    response.headers.update(NO_STORE_HEADERS)
    return response
