from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from transit_resolver.adapters.api.controllers.operators import (
    router as operators_router,
)
from transit_resolver.adapters.api.controllers.vehicles import router as vehicles_router

app = FastAPI(title="Transit Resolver")
app.include_router(operators_router)
app.include_router(vehicles_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep API errors JSON so map clients can show them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = (os.getenv("TRANSIT_RESOLVER_REVEAL_ERRORS") or "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    if reveal or isinstance(exc, (RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def serve() -> None:
    """Run the API with uvicorn.

    Env vars:
      - TRANSIT_RESOLVER_HOST (default 127.0.0.1)
      - TRANSIT_RESOLVER_PORT (default 8000)
    """

    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    uvicorn.run(
        app,
        host=os.getenv("TRANSIT_RESOLVER_HOST", "127.0.0.1"),
        port=int(os.getenv("TRANSIT_RESOLVER_PORT", "8000")),
    )


if __name__ == "__main__":
    serve()
