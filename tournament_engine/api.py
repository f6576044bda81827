"""
REST API for the tournament engine.
Thin wrappers around the analysis service and the result repository.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from tournament_engine.auth import TokenClaims, authenticate, create_access_token, decode_token
from tournament_engine.config import EngineConfig
from tournament_engine.insights import ScenarioInsights, explain_scenarios
from tournament_engine.persistence import (
    DuplicateResultError,
    InvalidScoreError,
    ResultNotFoundError,
    ResultRepository,
    UnknownMatchError,
    load_tournament,
)
from tournament_engine.services.analysis_service import (
    AnalysisService,
    GroupNotFoundError,
    RoundNotFoundError,
    TeamNotFoundError,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------- Data directory and service ----------
def _data_dir() -> Path:
    return Path(os.environ.get("TOURNAMENT_DATA_DIR", "data"))


_service: AnalysisService | None = None
_repo: ResultRepository | None = None
_loaded_dir: Path | None = None


def _load(data_dir: str | Path | None = None) -> tuple[AnalysisService, ResultRepository]:
    global _service, _repo, _loaded_dir
    directory = Path(data_dir) if data_dir is not None else _data_dir()
    data = load_tournament(directory)
    _loaded_dir = directory
    _service = AnalysisService(data, EngineConfig.from_env())
    _repo = ResultRepository(data)
    return _service, _repo


def reset_service(data_dir: str | Path | None = None) -> AnalysisService:
    """(Re)load tournament data; used at startup and by tests."""
    service, _ = _load(data_dir)
    return service


def get_service() -> AnalysisService:
    return _service if _service is not None else reset_service()


def get_repository() -> ResultRepository:
    return _repo if _repo is not None else _load()[1]


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    reset_service()
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Tournament Engine API",
    description="Standings, what-if scenarios and season forecasts for group-stage tournaments",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

security = HTTPBearer(auto_error=False)


# ---------- Request models ----------


class LoginRequest(BaseModel):
    username: str
    password: str


class AddResultRequest(BaseModel):
    match_id: str = Field(..., min_length=1)
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)


class EditScoresRequest(BaseModel):
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)


class InsightsRequest(BaseModel):
    group_id: str
    team_id: str


# ---------- Auth dependencies ----------


def _get_claims(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> TokenClaims | None:
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


def _require_admin(claims: TokenClaims | None = Depends(_get_claims)) -> TokenClaims:
    if claims is None:
        raise HTTPException(status_code=401, detail="Login required")
    if not claims.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required to submit results")
    return claims


def _not_found(e: ValueError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


# ---------- Endpoints ----------


@app.post("/login")
def login(req: LoginRequest, service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    claims = authenticate(service.data.users, req.username, req.password)
    if claims is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {
        "username": claims.username,
        "role": claims.role,
        "token": create_access_token(claims.username, claims.role),
    }


@app.get("/groups")
def list_groups(service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    data = service.data
    return {
        "default_group_id": data.default_group_id,
        "groups": [g.to_dict() for g in data.groups],
    }


@app.get("/groups/{group_id}")
def get_group(group_id: str, service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    """Group status plus its teams."""
    try:
        status = service.group_status(group_id)
    except GroupNotFoundError as e:
        raise _not_found(e)
    status["teams"] = [t.to_dict() for t in service.data.teams_in(group_id)]
    return status


@app.get("/groups/{group_id}/standings")
def get_standings(
    group_id: str,
    exclude_round: int | None = Query(None, description="Leave this round out (table before it)"),
    service: AnalysisService = Depends(get_service),
) -> dict[str, Any]:
    try:
        rows = service.standings(group_id, exclude_round=exclude_round)
    except GroupNotFoundError as e:
        raise _not_found(e)
    return {
        "group_id": group_id,
        "exclude_round": exclude_round,
        "standings": [dict(r.to_dict(), position=i) for i, r in enumerate(rows, start=1)],
    }


@app.get("/groups/{group_id}/next-round")
def get_next_round(group_id: str, service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    try:
        rnd = service.next_round(group_id)
    except GroupNotFoundError as e:
        raise _not_found(e)
    return {"group_id": group_id, "next_round": rnd.to_dict() if rnd else None}


@app.get("/groups/{group_id}/scenarios/{team_id}")
async def get_scenarios(
    group_id: str,
    team_id: str,
    gap: int | None = Query(None, ge=0, description="Points gap limit; default from config"),
    service: AnalysisService = Depends(get_service),
) -> dict[str, Any]:
    """What-if scenarios for the team's next round, computed off the event loop."""
    try:
        scenarios = await service.scenarios_async(group_id, team_id, points_gap_limit=gap)
    except (GroupNotFoundError, TeamNotFoundError) as e:
        raise _not_found(e)
    return {
        "group_id": group_id,
        "team_id": team_id,
        "points_gap_limit": gap if gap is not None else service.config.points_gap_limit,
        "scenarios": [s.to_dict() for s in scenarios],
    }


@app.get("/groups/{group_id}/predictions")
def get_predictions(
    group_id: str,
    round: int | None = Query(None, description="Round number; default is the current round"),
    service: AnalysisService = Depends(get_service),
) -> dict[str, Any]:
    try:
        return service.predict_round(group_id, round).to_dict()
    except (GroupNotFoundError, RoundNotFoundError) as e:
        raise _not_found(e)


@app.get("/groups/{group_id}/forecast")
def get_forecast(group_id: str, service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    try:
        return service.forecast(group_id).to_dict()
    except GroupNotFoundError as e:
        raise _not_found(e)


@app.get("/groups/{group_id}/scorers")
def get_scorers(group_id: str, service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    try:
        table = service.scorers(group_id)
    except GroupNotFoundError as e:
        raise _not_found(e)
    return {"group_id": group_id, "scorers": [s.to_dict() for s in table]}


@app.post("/results")
def add_result(
    req: AddResultRequest,
    claims: TokenClaims = Depends(_require_admin),
    repo: ResultRepository = Depends(get_repository),
) -> dict[str, Any]:
    try:
        result = repo.add(req.match_id, req.home_score, req.away_score)
    except UnknownMatchError as e:
        raise _not_found(e)
    except DuplicateResultError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidScoreError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Result %s added by %s", req.match_id, claims.username)
    return {"result": result.to_dict(), "added": True}


@app.put("/results/{match_id}")
def edit_result(
    match_id: str,
    req: EditScoresRequest,
    claims: TokenClaims = Depends(_require_admin),
    repo: ResultRepository = Depends(get_repository),
) -> dict[str, Any]:
    try:
        result = repo.edit_scores(match_id, req.home_score, req.away_score)
    except ResultNotFoundError as e:
        raise _not_found(e)
    except InvalidScoreError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Result %s edited by %s", match_id, claims.username)
    return {"result": result.to_dict(), "updated": True}


@app.get("/results/export")
def export_results(repo: ResultRepository = Depends(get_repository)) -> list[dict[str, Any]]:
    """All results in the results.json layout."""
    return repo.export_records()


@app.post("/results/export")
def write_results(
    claims: TokenClaims = Depends(_require_admin),
    repo: ResultRepository = Depends(get_repository),
) -> dict[str, Any]:
    """Overwrite results.json in the data directory."""
    path = repo.export(_loaded_dir or _data_dir())
    logger.info("results.json written by %s", claims.username)
    return {"path": str(path), "written": True}


@app.post("/insights/scenarios")
def scenario_insights(req: InsightsRequest, service: AnalysisService = Depends(get_service)) -> dict[str, Any]:
    """Advisory narrative; returns a stub when no LLM key is configured."""
    try:
        insights: ScenarioInsights = explain_scenarios(service, req.group_id, req.team_id)
    except (GroupNotFoundError, TeamNotFoundError) as e:
        raise _not_found(e)
    return insights.to_dict()
