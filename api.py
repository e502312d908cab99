"""
FastAPI server exposing the quiz game and role search.
Endpoints:
- GET /health: basic health check
- GET /genres: major/minor genre split for filter controls
- GET /search?q=...&age_lower=..&age_upper=..: role search by text and age
- POST /games: start a game (players + filters), returns the first events
- POST /games/{game_id}/next: advance (round intro -> question, feedback -> next)
- POST /games/{game_id}/answer: submit the current player's answer
- GET /games/{game_id}: scores, phase and the open question

Startup loads the CSV tables from CINEQUIZ_DATA_DIR (default: data/).
"""

# Import standard libraries for environment settings, ids and timing
import os  # env-based settings
import random  # per-game seeded generators
import time  # measure startup latency
import uuid  # game ids
from dataclasses import asdict  # dataclass -> dict for JSON payloads
from typing import Any, Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for request/response models
from fastapi import FastAPI, HTTPException, Query  # FastAPI primitives
from pydantic import BaseModel, Field  # schema definitions

# Import our internal modules for data loading and the game
from cinequiz.data_loader import DataLoader  # loads and normalizes the CSV tables
from cinequiz.filters import FilterContext, derive_year_bounds  # year/genre/franchise filters
from cinequiz.models import Dataset, MultipleChoiceQuestion, OrderingQuestion, SliderQuestion
from cinequiz.search import RoleSearch  # role lookup by text and age
from cinequiz.session import (
	ROUND_SETS,
	AnswerScored,
	AnswerSubmitted,
	ConfigurationError,
	GameFinished,
	GameOrchestrator,
	GenerationFailed,
	InvalidTransition,
	NextRequested,
	QuestionIssued,
	RoundStarted,
)

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="CineQuiz API", version="1.0.0")  # web app

DATA_DIR = os.getenv('CINEQUIZ_DATA_DIR', 'data')  # where the CSV tables live

# Globals that hold the loaded dataset, running games and measured startup time
DATASET: Optional[Dataset] = None  # set at startup
GAMES: Dict[str, GameOrchestrator] = {}  # game id -> orchestrator
STARTUP_TIME_S: float = 0.0  # measures how long startup took


# Request body for starting a game
class NewGameRequest(BaseModel):
	players: List[str]  # player names, unique
	min_year: Optional[int] = None  # defaults to the earliest release year
	max_year: Optional[int] = None  # defaults to the latest release year
	genres: List[str] = Field(default_factory=list)  # genre ids; empty = all
	franchises: List[str] = Field(default_factory=list)  # franchise labels; empty = all
	rounds: str = 'default'  # 'default' (6 rounds) or 'classic' (5 rounds)
	questions_per_round: int = 1  # per player
	seed: Optional[int] = None  # reproducible games


# Request body for an answer: choice index, slider value or list of item ids
class AnswerRequest(BaseModel):
	answer: Any


class PlayerOut(BaseModel):
	name: str
	color: str
	score: int


class GameResponse(BaseModel):
	game_id: str
	phase: str
	round_number: int
	current_player: Optional[str] = None
	players: List[PlayerOut]
	events: List[Dict[str, Any]] = Field(default_factory=list)


def question_payload(question, reveal: bool = False) -> Dict[str, Any]:
	"""Serialize a question; answers stay hidden until `reveal`."""
	data = asdict(question)
	if reveal:
		return data
	if isinstance(question, MultipleChoiceQuestion):
		data.pop('correct_index', None)
		data['choices'] = [{'label': c.label} for c in question.choices]
	elif isinstance(question, SliderQuestion):
		data.pop('correct_value', None)
	elif isinstance(question, OrderingQuestion):
		data.pop('correct_order', None)
		data['items'] = [{'id': i.id, 'label': i.label, 'poster': i.poster} for i in question.items]
	data.pop('key', None)
	return data


def event_payload(event, game: GameOrchestrator) -> Dict[str, Any]:
	"""Convert an orchestrator event into a JSON-friendly dict."""
	if isinstance(event, RoundStarted):
		return {'type': 'round_started', 'round': asdict(event.round), 'total_rounds': event.total_rounds}
	if isinstance(event, QuestionIssued):
		return {
			'type': 'question',
			'player': event.player,
			'round_number': event.round_number,
			'question_number': event.question_number,
			'question': question_payload(event.question),
		}
	if isinstance(event, GenerationFailed):
		return {'type': 'generation_failed', 'round_number': event.round_number, 'reason': event.reason}
	if isinstance(event, AnswerScored):
		return {
			'type': 'answer_scored',
			'player': event.player,
			'points': event.result.points,
			'correct': event.result.correct,
			'detail': event.result.detail,
			'total': event.total,
			'question': question_payload(game.session.current_question, reveal=True),
		}
	if isinstance(event, GameFinished):
		return {'type': 'game_finished', 'ranking': [asdict(p) for p in event.ranking]}
	return {'type': type(event).__name__}


def game_response(game_id: str, game: GameOrchestrator, events) -> GameResponse:
	session = game.session
	return GameResponse(
		game_id=game_id,
		phase=session.phase.value,
		round_number=session.current_round.number,
		current_player=session.current_player.name,
		players=[PlayerOut(name=p.name, color=p.color, score=p.score) for p in session.players],
		events=[event_payload(e, game) for e in events],
	)


def require_dataset() -> Dataset:
	if DATASET is None:  # data must be ready to serve
		logger.warning("[API] Request received but dataset not loaded")  # guard log
		raise HTTPException(status_code=503, detail="Dataset not loaded")
	return DATASET


def require_game(game_id: str) -> GameOrchestrator:
	game = GAMES.get(game_id)
	if game is None:
		raise HTTPException(status_code=404, detail=f"Unknown game '{game_id}'")
	return game


# FastAPI startup hook to load the tables once
@app.on_event("startup")
async def startup_event():
	"""Load the CSV tables and log how long it took."""
	global DATASET, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency
	logger.info(f"[API] Startup: loading tables from '{DATA_DIR}'...")  # log intent
	DATASET = DataLoader().load_dataset(DATA_DIR)  # read dataset
	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s with {len(DATASET.roles)} roles.")  # summary


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"dataset_ready": DATASET is not None,  # True if tables loaded
		"games": len(GAMES),  # running games
		"startup_seconds": round(STARTUP_TIME_S, 2)  # startup latency
	}


@app.get("/genres")
async def genres():
	"""Genres split into major and minor groups for the filter controls."""
	dataset = require_dataset()
	major, minor = DataLoader().classify_genres(dataset)
	lo, hi = derive_year_bounds(dataset.productions)
	return {
		"major": [asdict(g) for g in major],
		"minor": [asdict(g) for g in minor],
		"franchises": sorted(dataset.franchises()),
		"year_bounds": [lo, hi],
	}


@app.get("/search")
async def search(
	q: str = Query('', description="Matches actor, character, franchise or title"),
	age_lower: Optional[int] = None,
	age_upper: Optional[int] = None,
	sort_by: str = 'actor_name',
	order: str = 'asc',
):
	"""Role search by free text and age during filming."""
	dataset = require_dataset()
	try:
		results = RoleSearch(dataset).search(q, age_lower, age_upper, sort_by=sort_by, order=order)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	logger.info(f"[API] /search q='{q}' served {len(results)} results")  # summary
	return {"query": q, "results": [dict(asdict(r), age_display=r.age_display) for r in results]}


@app.post("/games", response_model=GameResponse)
async def new_game(body: NewGameRequest):
	"""Create a game and return its first round intro."""
	dataset = require_dataset()
	rounds = ROUND_SETS.get(body.rounds)
	if rounds is None:
		raise HTTPException(status_code=400, detail=f"Unknown round set '{body.rounds}'")

	filters = FilterContext.for_productions(
		dataset.productions,
		min_year=body.min_year,
		max_year=body.max_year,
		genres=body.genres,
		franchises=body.franchises,
	)
	try:
		game = GameOrchestrator(
			dataset, filters, rounds=rounds,
			questions_per_round=body.questions_per_round,
			rng=random.Random(body.seed),
		)
		events = game.setup(body.players)
	except ConfigurationError as e:
		raise HTTPException(status_code=400, detail=str(e))

	game_id = uuid.uuid4().hex
	GAMES[game_id] = game
	logger.info(f"[API] Game {game_id} started for {len(body.players)} players")
	return game_response(game_id, game, events)


@app.post("/games/{game_id}/next", response_model=GameResponse)
async def next_step(game_id: str):
	game = require_game(game_id)
	try:
		events = game.handle(NextRequested())
	except InvalidTransition as e:
		raise HTTPException(status_code=409, detail=str(e))
	return game_response(game_id, game, events)


@app.post("/games/{game_id}/answer", response_model=GameResponse)
async def answer(game_id: str, body: AnswerRequest):
	game = require_game(game_id)
	try:
		events = game.handle(AnswerSubmitted(body.answer))
	except InvalidTransition as e:
		raise HTTPException(status_code=409, detail=str(e))
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	return game_response(game_id, game, events)


@app.get("/games/{game_id}")
async def game_state(game_id: str):
	"""Scores, phase and the open question (answers hidden)."""
	game = require_game(game_id)
	response = game_response(game_id, game, []).model_dump()
	question = game.session.current_question
	response['question'] = question_payload(question) if question is not None and game.session.phase.value == 'question' else None
	return response
