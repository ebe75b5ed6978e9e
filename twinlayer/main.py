"""
Twinlayer Rules Service - FastAPI Application
Stateless HTTP surface over GameEngine: every request carries the full
GameState and every response returns a complete successor or rejection.
The service never stores a game.
"""

import time
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from .board_manager import BoardManager
from .config import load_settings
from .core.logging_config import configure_third_party_loggers, setup_logging
from .errors import InvalidStateError
from .game_engine import GameEngine
from .metrics import SUBMIT_LATENCY, observe_move_result
from .models import GameState, Move, MoveResult, Player, Position, RuleSet

settings = load_settings()

# Configure logging
logger = setup_logging("twinlayer", level=settings.log_level)
configure_third_party_loggers(quiet=True)

# Create FastAPI app
app = FastAPI(
    title="Twinlayer Rules Service",
    description="Stateless move validation for the two-layer board game",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class NewGameRequest(BaseModel):
    """Request model for a fresh game"""
    starting_player: Optional[Player] = Field(None, alias="startingPlayer")

    class Config:
        populate_by_name = True


class SubmitMoveRequest(BaseModel):
    """Request model for move submission"""
    game_state: GameState = Field(alias="gameState")
    move: Move
    rules: Optional[RuleSet] = None

    class Config:
        populate_by_name = True


class LegalDestinationsRequest(BaseModel):
    """Request model for step destination highlighting"""
    game_state: GameState = Field(alias="gameState")
    from_pos: Position = Field(alias="from")
    rules: Optional[RuleSet] = None

    class Config:
        populate_by_name = True


class LegalDestinationsResponse(BaseModel):
    """Response model for step destination highlighting"""
    destinations: List[Position]


class ValidMovesRequest(BaseModel):
    """Request model for move enumeration"""
    game_state: GameState = Field(alias="gameState")
    rules: Optional[RuleSet] = None

    class Config:
        populate_by_name = True


class ValidMovesResponse(BaseModel):
    """Response model for move enumeration"""
    moves: List[Move]
    has_legal_step: bool = Field(alias="hasLegalStep")
    state_hash: str = Field(alias="stateHash")

    class Config:
        populate_by_name = True


def _checked_state(state: GameState) -> GameState:
    try:
        GameEngine.check_invariants(state)
    except InvalidStateError as e:
        logger.warning("Rejected inconsistent game state: %s", e)
        raise HTTPException(status_code=422, detail=e.to_dict())
    return state


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "service": "Twinlayer Rules Service",
        "status": "running",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Health check for container orchestration"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.post("/rules/new_game", response_model=GameState)
async def new_game(request: NewGameRequest):
    """Return the initial GameState."""
    return GameEngine.create_initial_state(
        request.starting_player or settings.starting_player
    )


@app.post("/rules/submit_move", response_model=MoveResult)
async def submit_move(request: SubmitMoveRequest):
    """
    Validate and apply a move.

    Rejections (including ``CaptureRequired``) are normal 200 responses
    carrying a ``rejection``; only malformed payloads or inconsistent
    states produce error statuses.
    """
    state = _checked_state(request.game_state)
    try:
        start = time.perf_counter()
        result = GameEngine.submit_move(
            state, request.move, request.rules or settings.rules
        )
        SUBMIT_LATENCY.observe(time.perf_counter() - start)
        observe_move_result(request.move.type, result)
        return result
    except Exception as e:
        logger.error(
            "Error in /rules/submit_move: %s",
            str(e),
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=str(e))


@app.post(
    "/rules/legal_destinations", response_model=LegalDestinationsResponse
)
async def legal_destinations(request: LegalDestinationsRequest):
    """Cells the piece at ``from`` may step to."""
    state = _checked_state(request.game_state)
    destinations = GameEngine.legal_destinations(
        state, request.from_pos, request.rules or settings.rules
    )
    return LegalDestinationsResponse(
        destinations=BoardManager.sort_positions(destinations)
    )


@app.post("/rules/valid_moves", response_model=ValidMovesResponse)
async def valid_moves(request: ValidMovesRequest):
    """Every bare legal move for the active player."""
    state = _checked_state(request.game_state)
    rules = request.rules or settings.rules
    return ValidMovesResponse(
        moves=GameEngine.get_valid_moves(state, rules),
        hasLegalStep=GameEngine.has_legal_step(
            state, state.active_player, rules
        ),
        stateHash=BoardManager.hash_game_state(state),
    )
