"""
Game service for RPSSL (Rock, Paper, Scissors, Lizard, Spock).
"""

from typing import List, Optional

from fastapi import Query
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.logging import set_user_context

from .adapters.random_client import RandomNumberClient
from .persistence.postgres import ResultStore
from .rules.models import Choice, ChoiceResponse, PlayRequest, PlayResponse, ResultResponse
from .services.choices import RandomChoiceProvider
from .services.play import PlayService
from .services.result import ApplicationErrorType

SERVICE_NAME = "game"
SERVICE_PORT = 8020


class GameService(BaseService):
    """Game service implementation."""

    def __init__(self,
                 config: Optional[ServiceConfig] = None,
                 random_client: Optional[RandomNumberClient] = None,
                 store: Optional[ResultStore] = None):
        config = config or get_config(SERVICE_NAME, SERVICE_PORT)
        super().__init__(SERVICE_NAME, SERVICE_PORT, config=config)

        self.random_client = random_client or RandomNumberClient(
            self.config.random_service_url,
            timeout=self.config.random_service_timeout,
            metrics=self.metrics
        )
        self.store = store or ResultStore(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool_size,
            max_size=self.config.postgres_max_pool_size,
            metrics=self.metrics
        )
        self.choices = RandomChoiceProvider(self.random_client)
        self.play_service = PlayService(
            self.choices,
            self.store,
            latest_results_count=self.config.latest_results_count,
            metrics=self.metrics
        )

        self._setup_game_routes()

    def _setup_game_routes(self):
        """Set up game-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "RPSSL - Game Service",
                "version": "1.0.0",
                "choices": len(Choice)
            }

        @self.app.get("/choices", response_model=List[ChoiceResponse])
        async def get_choices():
            """All possible choices."""
            return self.choices.get_all_choices()

        @self.app.get("/random", response_model=ChoiceResponse)
        async def get_random_choice():
            """A random choice, resolved like the computer's move."""
            return await self.choices.get_random_choice()

        @self.app.post("/play", response_model=PlayResponse)
        async def play(request: PlayRequest):
            """Play a round against the computer."""
            set_user_context(request.username)

            result = await self.play_service.play(request.username, Choice(request.player_choice))
            if not result.succeeded:
                return JSONResponse(
                    status_code=422,
                    content={"detail": "Unable to save play result on scoreboard"}
                )

            return PlayResponse.from_outcome(result.value)

        @self.app.delete("/play")
        async def reset_results(username: Optional[str] = Query(None, description="Reset only this user")):
            """Reset stored results for one user or for everyone."""
            set_user_context(username)

            result = await self.play_service.reset_results(username)
            if result.succeeded:
                return {"success": True}

            if result.error.kind == ApplicationErrorType.NOT_FOUND:
                return JSONResponse(status_code=400, content={"detail": "Username not found"})

            return JSONResponse(status_code=422, content={"detail": "Unable to delete all results"})

        @self.app.get("/results", response_model=List[ResultResponse], response_model_by_alias=True)
        async def get_latest_results():
            """Latest results, newest first."""
            return await self.play_service.get_latest_results()

    async def _check_dependencies(self):
        """Check game service dependencies."""
        dependencies = {}

        dependencies["postgres"] = "ok" if await self.store.health_check() else "error"
        dependencies["random_service"] = "ok" if await self.random_client.health_check() else "error"

        return dependencies

    async def start(self):
        """Start game service components."""
        await self.store.start()
        self.logger.info("Game service started", latest_results_count=self.config.latest_results_count)

    async def stop(self):
        """Stop game service components."""
        await self.store.stop()
        self.logger.info("Game service stopped")


def create_app():
    """Create game service application."""
    service = GameService()
    return service.app


if __name__ == "__main__":
    service = GameService()
    service.run()
