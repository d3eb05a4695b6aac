import logging
from typing import Optional
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import CORS_ORIGINS, PORT, HOST, DEBUG, LOG_LEVEL, DATABASE_URL, STORAGE_BACKEND, CLAIM_MAX_RETRIES
from constants import (
    PLAYERS_COUNT_DEFAULT, PLAYERS_COUNT_MIN, PLAYERS_COUNT_MAX, ROSTER_SIZE, LINK_TTL_HOURS,
    TEAM_A_NAME_DEFAULT, TEAM_B_NAME_DEFAULT, TEAM_A_COLOR_DEFAULT, TEAM_B_COLOR_DEFAULT,
)
from errors import ErrorCode, HTTP_STATUS, MESSAGES, LineupError, StorageError
from models import (
    LineupCreate, LineupCreated,
    LineupView, LineupResponse,
    ClaimRequest, UnclaimRequest, RosterResponse,
)
from service import LineupService
from store import MemoryLineupStore, build_store

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lineup Sheet API",
    version="1.0.0",
    docs_url="/api/docs" if DEBUG else None,
    redoc_url="/api/redoc" if DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(request: Request, code: ErrorCode, message: Optional[str] = None):
    return JSONResponse(
        status_code=HTTP_STATUS[code],
        content={"error": code.value, "status_code": HTTP_STATUS[code], "message": message or MESSAGES[code], "path": str(request.url.path)}
    )


@app.exception_handler(LineupError)
async def lineup_exception_handler(request: Request, exc: LineupError):
    return error_response(request, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(request, ErrorCode.BAD_REQUEST)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Only unknown paths get a lineup error code; other framework errors keep the generic shape
    error = ErrorCode.NOT_FOUND.value if exc.status_code == 404 else True
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error, "status_code": exc.status_code, "message": exc.detail, "path": str(request.url.path)}
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s: %s", request.url.path, exc)
    return error_response(request, ErrorCode.DB_ERROR)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(request, ErrorCode.INTERNAL_ERROR)


@app.on_event("startup")
def startup():
    if getattr(app.state, "lineups", None) is None:
        store = build_store(STORAGE_BACKEND, DATABASE_URL)
        app.state.lineups = LineupService(store, max_retries=CLAIM_MAX_RETRIES)
    app.state.lineups.purge_expired()


def get_lineups(request: Request) -> LineupService:
    return request.app.state.lineups


# ============ LINEUPS ============

@app.post("/api/lineups", response_model=LineupCreated)
def create_lineup(payload: Optional[LineupCreate] = None, lineups: LineupService = Depends(get_lineups)):
    return LineupCreated(id=lineups.create(payload))


@app.get("/api/lineups/{lineup_id}", response_model=LineupResponse)
def get_lineup(lineup_id: str, lineups: LineupService = Depends(get_lineups)):
    lineup = lineups.read(lineup_id)
    return LineupResponse(data=LineupView.from_lineup(lineup))


@app.post("/api/lineups/{lineup_id}/claim", response_model=RosterResponse)
def claim_slot(lineup_id: str, claim: ClaimRequest, lineups: LineupService = Depends(get_lineups)):
    roster = lineups.claim(lineup_id, claim)
    return RosterResponse(players=roster)


@app.post("/api/lineups/{lineup_id}/unclaim", response_model=RosterResponse)
def unclaim_slot(lineup_id: str, unclaim: UnclaimRequest, lineups: LineupService = Depends(get_lineups)):
    roster = lineups.unclaim(lineup_id, unclaim)
    return RosterResponse(players=roster)


# ============ CONFIGURATION ============

@app.get("/api/config")
def get_config():
    return {
        "players_count": {"default": PLAYERS_COUNT_DEFAULT, "min": PLAYERS_COUNT_MIN, "max": PLAYERS_COUNT_MAX},
        "roster_size": ROSTER_SIZE,
        "team_defaults": {
            "A": {"name": TEAM_A_NAME_DEFAULT, "color": TEAM_A_COLOR_DEFAULT},
            "B": {"name": TEAM_B_NAME_DEFAULT, "color": TEAM_B_COLOR_DEFAULT},
        },
        "link_ttl_hours": LINK_TTL_HOURS,
    }


# ============ HEALTH CHECK ============

@app.get("/api/health")
def health_check(lineups: LineupService = Depends(get_lineups)):
    storage = lineups.store.name
    return {
        "status": "ok",
        "storage": storage,
        "memoryFallback": isinstance(lineups.store, MemoryLineupStore) and STORAGE_BACKEND != "memory",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=DEBUG)
