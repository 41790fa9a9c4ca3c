"""
FastAPI Application - REST API for the view layer.

Endpoints:
    POST   /api/v1/sessions                 Create a session and deal
    GET    /api/v1/sessions                 List active sessions
    GET    /api/v1/sessions/{id}            Get session status
    DELETE /api/v1/sessions/{id}            End session
    GET    /api/v1/sessions/{id}/state      Get game state
    POST   /api/v1/sessions/{id}/start      Restart the game
    POST   /api/v1/sessions/{id}/play       Play a card
    POST   /api/v1/sessions/{id}/draw       Draw a card
    POST   /api/v1/sessions/{id}/suit       Call a suit after an 8
    WS     /api/v1/sessions/{id}/ws         Push state after every change

Opponent Flow:
    After a human command hands the turn to the computer, the opponent
    move runs on the event loop after EIGHTS_OPPONENT_DELAY seconds.
    Clients either poll /state or listen on the WebSocket.

Bodies in both directions are Pydantic models from .schemas.
"""

from typing import Union
import asyncio
import json
import logging

from ..config import ALLOWED_ORIGINS
from ..engine_core.errors import EngineError

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Build the FastAPI app around an APIService.

    Tests pass a service backed by ManualScheduler sessions; the default
    service runs opponent moves on the server's event loop.
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect
        from fastapi.encoders import jsonable_encoder
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        PlayCardRequest,
        ChooseSuitRequest,
        # Response models
        SessionResponse,
        GameStateResponse,
        CommandResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Eights Engine API",
        description="""
Crazy Eights against a computer opponent.

## Opponent Flow

Commands that end the human's turn schedule the opponent's reply after a
short "thinking" delay. Poll `GET /state` or open the WebSocket to see it.

## Rejected Moves

Illegal moves are answered with `success=false` and an `error_code`
(`WRONG_STATUS`, `NOT_YOUR_TURN`, `CARD_NOT_IN_HAND`, `ILLEGAL_MOVE`,
`GAME_OVER`). State is unchanged.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_CARD` | card_id is not a standard card |
| `INVALID_SUIT` | suit is not a standard suit |
| `VALIDATION_ERROR` | Request body is malformed (HTTP 422) |
| `INTERNAL_ERROR` | Engine invariant broken (HTTP 500) |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.INVALID_CARD: 400,
        ErrorCode.INVALID_SUIT: 400,
        ErrorCode.VALIDATION_ERROR: 422,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Map an ErrorResponse to its HTTP status."""
        return JSONResponse(
            status_code=status_codes.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(ErrorResponse(
            error="Request body is malformed",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"errors": jsonable_encoder(exc.errors())},
        ))

    @app.exception_handler(EngineError)
    async def engine_error_handler(request, exc: EngineError) -> JSONResponse:
        logger.error("Engine error on %s %s: %s", request.method, request.url.path, exc)
        return make_error_response(ErrorResponse(
            error=str(exc),
            error_code=ErrorCode.INTERNAL_ERROR,
        ))

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session() -> SessionResponse:
        """Create a session; the first deal lands after the dealing delay."""
        return api_service.create_session()

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a session; pending opponent moves are cancelled."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.get_game_state(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/start",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Restart the game",
    )
    async def start_game(session_id: str) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.start_game(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/play",
        response_model=CommandResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown card id"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Play a card",
    )
    async def play_card(session_id: str, body: PlayCardRequest) -> Union[CommandResponse, JSONResponse]:
        """
        Play a card from the human's hand.

        **Request Body:**
        ```json
        {"card_id": "8-spades"}
        ```
        """
        return respond(api_service.play_card(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/draw",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Draw a card",
    )
    async def draw_card(session_id: str) -> Union[CommandResponse, JSONResponse]:
        """Draw one card; the turn always passes afterwards."""
        return respond(api_service.draw_card(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/suit",
        response_model=CommandResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown suit"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Call a suit after playing an 8",
    )
    async def choose_suit(session_id: str, body: ChooseSuitRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.choose_suit(session_id, body))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        Push a state_update after every change to the game.

        The current state is sent on connect. Opponent moves arrive here
        without polling. The client may send {"type": "ping"} and gets a
        pong back; an unknown session gets one error message and a close.
        """
        await websocket.accept()

        session = api_service.session_manager.get_session(session_id)
        if not session:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": f"Session {session_id} not found"},
            })
            await websocket.close()
            return

        session.touch()
        updates: asyncio.Queue = asyncio.Queue()
        unsubscribe = session.game_loop.subscribe(updates.put_nowait)

        async def push_updates():
            while True:
                view = await updates.get()
                await websocket.send_json({
                    "type": "state_update",
                    "payload": api_service.view_to_response(session_id, view).model_dump(),
                })

        await websocket.send_json({
            "type": "state_update",
            "payload": api_service.view_to_response(session_id, session.game_loop.view()).model_dump(),
        })
        pusher = asyncio.create_task(push_updates())

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if message.get("type") == "ping":
                        await websocket.send_json({"type": "pong"})
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            unsubscribe()
            pusher.cancel()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Eights Engine API",
            "version": "1.0.0",
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn eights.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
