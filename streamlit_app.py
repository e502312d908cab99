"""
Streamlit UI for CineQuiz.
Runs the game locally: the page turns button presses into orchestrator intents
and renders the events it gets back.

Run API (optional):   uvicorn api:app --reload
Run UI:                streamlit run streamlit_app.py
"""

# Environment settings and randomness
import os  # data directory override
import random  # seeded games
# HTTP client to call the API when role search runs in API mode
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Optional  # indicates values can be None

# Local game imports
from cinequiz.data_loader import DataLoader  # load the CSV tables
from cinequiz.filters import FilterContext, derive_year_bounds  # filter constraints
from cinequiz.models import Dataset, MultipleChoiceQuestion, OrderingQuestion, PlaceholderQuestion, SliderQuestion
from cinequiz.search import RoleSearch  # role lookup
from cinequiz.session import (
	ROUND_SETS,
	AnswerScored,
	AnswerSubmitted,
	ConfigurationError,
	GameFinished,
	GameOrchestrator,
	GenerationFailed,
	NextRequested,
	Phase,
)

DATA_DIR = os.getenv('CINEQUIZ_DATA_DIR', 'data')  # where the CSV tables live

# Default URL where the FastAPI server is expected to run locally
DEFAULT_API_URL = os.getenv('CINEQUIZ_API_URL', "http://localhost:8000")  # default API base URL

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="CineQuiz", layout="wide")  # wide layout

# Main page title
st.title("🎬 CineQuiz – Movie & Actor Trivia")  # friendly header


# Cache the dataset so we only parse the CSVs once per server
@st.cache_resource(show_spinner=True)
def load_dataset() -> Optional[Dataset]:
	"""Load the CSV tables; show the error in the UI if that fails."""
	try:
		return DataLoader().load_dataset(DATA_DIR)  # read dataset
	except Exception as e:
		st.error(f"Failed to load data from '{DATA_DIR}': {e}")
		return None  # signal failure


def apply(events) -> None:
	"""Remember the latest feedback/notice from a batch of events."""
	for event in events:
		if isinstance(event, AnswerScored):
			st.session_state['feedback'] = event
		elif isinstance(event, GenerationFailed):
			st.session_state['notice'] = event.reason
		elif isinstance(event, GameFinished):
			st.session_state['feedback'] = None


def send(intent) -> None:
	game: GameOrchestrator = st.session_state['game']
	try:
		apply(game.handle(intent))
		st.session_state['warning'] = None
	except ValueError as e:  # malformed answer: keep the question open
		st.session_state['warning'] = str(e)  # shown after the rerun


dataset = load_dataset()
if dataset is None:
	st.stop()

loader = DataLoader()
lo, hi = derive_year_bounds(dataset.productions)

# Sidebar contains game setup and the role search
with st.sidebar:
	st.header("New game")  # section label
	names_text = st.text_area("Players (one per line)", "Player 1\nPlayer 2")
	years = st.slider("Release years", min_value=lo, max_value=hi, value=(lo, hi))
	major, minor = loader.classify_genres(dataset)
	genre_names = {g.name: g.id for g in major + minor}
	picked_genres = st.multiselect("Genres", [g.name for g in major] + [g.name for g in minor])
	picked_franchises = st.multiselect("Franchises", sorted(dataset.franchises()))
	round_set = st.radio("Rounds", list(ROUND_SETS), horizontal=True)
	if st.button("Start game", type="primary"):
		filters = FilterContext(
			lo, hi, min_year=years[0], max_year=years[1],
			genres=[genre_names[n] for n in picked_genres],
			franchises=picked_franchises,
		)
		game = GameOrchestrator(dataset, filters, rounds=ROUND_SETS[round_set], rng=random.Random())
		try:
			game.setup([n for n in names_text.splitlines() if n.strip()])
			st.session_state['game'] = game
			st.session_state['feedback'] = None
			st.session_state['notice'] = None
			st.session_state['warning'] = None
		except ConfigurationError as e:
			st.error(str(e))  # blocks until corrected

	st.markdown("---")  # separator
	st.header("Role search")
	query = st.text_input("Actor, character or title")
	ages = st.slider("Age while filming", min_value=0, max_value=100, value=(0, 100))
	use_api = st.toggle("Search via API", value=False, help="Query a running CineQuiz API instead of the local tables.")
	api_url = st.text_input("API URL", DEFAULT_API_URL) if use_api else DEFAULT_API_URL
	if query.strip():
		try:
			if use_api:
				# API mode: let the server run the search
				resp = requests.get(
					f"{api_url}/search",
					params={"q": query, "age_lower": ages[0], "age_upper": ages[1], "sort_by": "age_at_start"},
					timeout=10,
				)
				resp.raise_for_status()  # raise error if server responded with an error code
				rows = resp.json().get('results', [])
			else:
				results = RoleSearch(dataset).search(query, ages[0], ages[1], sort_by='age_at_start')
				rows = [dict(actor_name=r.actor_name, character=r.character, production_title=r.production_title, age_display=r.age_display) for r in results]
			for r in rows[:20]:
				st.write(f"**{r['actor_name']}** was {r['age_display']} as *{r['character']}* in {r['production_title']}")
		except requests.RequestException as e:  # network/API errors
			st.error(f"API request failed: {e}")

game: Optional[GameOrchestrator] = st.session_state.get('game')
if game is None:
	st.info("Set up the players and filters in the sidebar, then start a game.")
	st.stop()

session = game.session

# Scoreboard
cols = st.columns(len(session.players))
for col, player in zip(cols, session.players):
	with col:
		st.markdown(f"<span style='color:{player.color}'>■</span> **{player.name}**: {player.score}", unsafe_allow_html=True)
st.divider()

if session.phase == Phase.FINISHED:
	st.header("Final scores")
	for i, player in enumerate(game.final_ranking(), start=1):
		st.write(f"{i}. {player.name} – {player.score} pts")
	st.stop()

current_round = session.current_round
st.subheader(f"Round {current_round.number}/{len(session.rounds)}: {current_round.title} ({current_round.points} pts)")

if session.phase == Phase.ROUND_INTRO:
	if st.button("Start round", type="primary"):
		send(NextRequested())
		st.rerun()

elif session.phase == Phase.QUESTION:
	question = session.current_question
	if st.session_state.get('notice'):
		st.caption(st.session_state['notice'])
	if st.session_state.get('warning'):
		st.warning(st.session_state['warning'])
	st.markdown(f"**{session.current_player.name}**, {question.prompt}")
	if getattr(question, 'poster', None) and not isinstance(question, MultipleChoiceQuestion):
		st.image(question.poster, width=200)  # poster
	if isinstance(question, MultipleChoiceQuestion):
		labels = [c.label for c in question.choices]
		choice = st.radio("Your answer", range(len(labels)), format_func=lambda i: labels[i])
		if st.button("Submit", type="primary"):
			send(AnswerSubmitted(choice))
			st.rerun()
	elif isinstance(question, SliderQuestion):
		value = st.slider("Your answer", question.min_value, question.max_value)
		if st.button("Submit", type="primary"):
			send(AnswerSubmitted(value))
			st.rerun()
	elif isinstance(question, OrderingQuestion):
		labels = {i.id: i.label for i in question.items}
		st.caption("Lowest first: " + " < ".join(question.targets))
		order = []
		for position in range(len(question.items)):
			order.append(st.selectbox(f"Position {position + 1}", question.drag_order, index=position, format_func=lambda i: labels[i], key=f"pos{session.round_index}-{session.questions_in_round}-{position}"))
		if st.button("Submit", type="primary"):
			send(AnswerSubmitted(order))
			st.rerun()
	elif isinstance(question, PlaceholderQuestion):
		if st.button(question.choices[0], type="primary"):
			send(AnswerSubmitted(None))
			st.rerun()

elif session.phase == Phase.FEEDBACK:
	feedback = st.session_state.get('feedback')
	if feedback is not None:
		if feedback.result.correct:
			st.success(f"{feedback.player}: correct! +{feedback.result.points}")
		else:
			st.error(f"{feedback.player}: +{feedback.result.points}")
		question = session.current_question
		if isinstance(question, MultipleChoiceQuestion):
			answer = question.correct_choice
			extra = f" (age {answer.age})" if answer.age is not None and answer.label != str(answer.age) else ""
			st.write(f"Answer: {answer.label}{extra}")
		elif isinstance(question, SliderQuestion):
			st.write(f"Answer: {question.correct_value}")
		elif isinstance(question, OrderingQuestion):
			by_id = {i.id: i for i in question.items}
			st.write(" < ".join(f"{by_id[i].label} ({by_id[i].display})" for i in question.correct_order))
	if st.button("Next", type="primary"):
		st.session_state['notice'] = None
		send(NextRequested())
		st.rerun()
