"""
Mock random-number service with failure injection.

Serves ``GET /random`` like the upstream the game service depends on. The
admin routes make it fail on demand so retries and the local fallback can be
exercised against a real HTTP server.
"""

import random
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field
import sys
import os

# Add shared directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.logging import get_logger


class FailureMode(BaseModel):
    """Failure injection settings."""
    failures_remaining: int = Field(0, ge=0, description="Requests to fail before recovering")
    status_code: int = Field(503, ge=400, le=599, description="Status returned while failing")
    malformed_body: bool = Field(False, description="Answer 200 with a body that is not a number")


class MockRandomServer:
    """Mock random-number service implementation."""

    def __init__(self, port: int = 8090, seed: Optional[int] = None,
                 min_number: int = 1, max_number: int = 100):
        self.port = port
        self.logger = get_logger("mock.random_service")
        self.app = FastAPI(title="Mock Random Service", version="1.0.0")

        self.rng = random.Random(seed)
        self.min_number = min_number
        self.max_number = max_number
        self.failure = FailureMode()
        self.requests_served = 0

        self._setup_routes()

    def _setup_routes(self):
        """Set up mock routes."""

        @self.app.get("/random")
        async def get_random():
            """Random integer in the configured range."""
            self.requests_served += 1

            if self.failure.failures_remaining > 0:
                self.failure.failures_remaining -= 1
                self.logger.info(
                    "Injected failure",
                    status_code=self.failure.status_code,
                    remaining=self.failure.failures_remaining
                )
                return JSONResponse(status_code=self.failure.status_code, content={"error": "injected"})

            if self.failure.malformed_body:
                return PlainTextResponse("not-a-number")

            number = self.rng.randint(self.min_number, self.max_number)
            return {"random_number": number}

        @self.app.post("/admin/failures")
        async def set_failures(mode: FailureMode):
            """Configure failure injection."""
            self.failure = mode
            self.logger.info("Failure mode updated", **mode.model_dump())
            return {"success": True, "failure": mode.model_dump()}

        @self.app.delete("/admin/failures")
        async def clear_failures():
            """Disable failure injection."""
            self.failure = FailureMode()
            return {"success": True}

        @self.app.get("/admin/stats")
        async def stats(reset: bool = Query(False, description="Reset counters after reading")):
            """Request counters."""
            served = self.requests_served
            if reset:
                self.requests_served = 0
            return {"requests_served": served}


def create_app(seed: Optional[int] = None):
    """Create mock random-number application."""
    server = MockRandomServer(seed=seed)
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
