"""HTTP surface: submit a library for testing and list supported languages.

Request body for ``POST /``::

    {"library": "/path/to/dir", "language": "Python", "test_count": 100}
"""
from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from . import __version__
from . import constants as C
from .errors import InvocationError, LoadError
from .libraries import SupportedLanguage, registry
from .testing import random_tests

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Solver Harness",
    description="Differentially test foreign solver libraries against a reference solver.",
    version=__version__,
)


class LibraryProposal(BaseModel):
    library: str
    language: SupportedLanguage
    test_count: int | None = Field(default=None, gt=0)

    @field_validator("language", mode="before")
    @classmethod
    def _parse_language(cls, value: Any) -> SupportedLanguage:
        return SupportedLanguage.parse(value)


@app.get("/supported", summary="List supported languages")
def supported() -> list[str]:
    return [language.value for language in registry.supported()]


@app.post("/", summary="Test a library against the reference solver")
def index(proposal: LibraryProposal) -> list[dict[str, Any]]:
    """Load the proposed library, run the random tests and return every outcome.

    A library that cannot be loaded is rejected with 400; one that faults or
    returns unusable values while being tested is rejected with 422.
    """
    test_count = proposal.test_count or C.DEFAULT_TEST_COUNT
    try:
        library = registry.load(proposal.language, proposal.library)
    except LoadError as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict()) from exc
    with library:
        try:
            outcomes = random_tests(library, test_count)
        except InvocationError as exc:
            raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    return [outcome.to_dict() for outcome in outcomes]


def serve(host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    if host is None:
        host = os.environ.get(C.HOST_ENV, C.DEFAULT_HOST)
    if port is None:
        port = int(os.environ.get(C.PORT_ENV, C.DEFAULT_PORT))
    logger.info("[solver-harness] serving on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


__all__ = ["app", "LibraryProposal", "serve"]
