"""
Streamlit Dashboard for the GameLayer Player Console.

This is an internal tool for:
- Inspecting a player's profile, missions, prizes and awards
- Driving progress (completing events, claiming prizes, taking quizzes)
- Adding players to an account

All state lives in a PlayerConsole kept in the Streamlit session. Its
coroutines run on a background event loop owned by the session, so the
profile poller keeps ticking between reruns.

Run with:
    streamlit run streamlit_app/app.py
"""

import asyncio
import threading
from collections import deque

import pandas as pd
import streamlit as st

from config.console_config import ConsoleConfig
from player_console.console import PlayerConsole
from player_console.notifications import ERROR, SUCCESS, WARNING
from player_console.services.quiz_session import QuizState
from player_console.utils import format_time_remaining

TOAST_ICONS = {SUCCESS: "✅", ERROR: "❌", WARNING: "⚠️"}

PAGES = {
    "Missions": "missions",
    "Prizes": "prizes",
    "Leaderboard": "leaderboard",
    "Awards": "awards",
    "Player": "player",
    "Quizzes": "quizzes",
}


class StreamlitNotifier:
    """
    Queues notifications raised on the background loop.

    Streamlit elements can only be created from the script thread, so the
    queue is drained into toasts on every rerun.
    """

    def __init__(self):
        self.pending = deque()

    def notify(self, kind: str, message: str) -> None:
        self.pending.append((kind, message))

    def flush(self) -> None:
        while self.pending:
            kind, message = self.pending.popleft()
            st.toast(message, icon=TOAST_ICONS.get(kind, "ℹ️"))


def _start_loop() -> asyncio.AbstractEventLoop:
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, name="player-console-loop", daemon=True)
    thread.start()
    return loop


def run(coro):
    """Run a console coroutine on the session loop and wait for its result."""
    return asyncio.run_coroutine_threadsafe(coro, st.session_state.loop).result()


def get_console() -> PlayerConsole:
    if "console" not in st.session_state:
        config = ConsoleConfig.from_file()
        st.session_state.loop = _start_loop()
        st.session_state.notifier = StreamlitNotifier()
        st.session_state.console = PlayerConsole(notifier=st.session_state.notifier, config=config)
        st.session_state.active_page = None
    return st.session_state.console


# Page config
st.set_page_config(
    page_title="GameLayer Player Console",
    page_icon="🎮",
    layout="wide",
    initial_sidebar_state="expanded"
)

console = get_console()

st.title("🎮 GameLayer Player Console")
st.markdown("*Inspect and drive a player's progress*")

# Sidebar
with st.sidebar:
    st.header("Credentials")
    credentials = console.credentials
    account = st.text_input("Account", value=credentials.account)
    api_key = st.text_input("API key", value=credentials.api_key, type="password")
    console.edit_credentials(account=account, api_key=api_key)

    if st.button("Store", use_container_width=True):
        if console.store_credentials():
            run(console.load_directory())
    st.caption("🟢 Stored" if console.store.is_stored else "⚪ Not stored")

    st.markdown("---")
    st.header("Navigation")
    page = st.radio("Select Page", list(PAGES))

    st.markdown("---")
    st.caption("GameLayer Player Console v0.1.0")

if console.store.is_stored and not console.players and "directory_loaded" not in st.session_state:
    st.session_state.directory_loaded = True
    run(console.load_directory())

# ─── Player selection ────────────────

col1, col2 = st.columns([4, 1])
with col1:
    refs = [""] + [p.player_ref for p in console.players]
    names = {p.player_ref: p.name for p in console.players}
    index = refs.index(console.selected_player) if console.selected_player in refs else 0
    selected = st.selectbox(
        "Player",
        refs,
        index=index,
        format_func=lambda ref: f"{names.get(ref, ref)} ({ref})" if ref else "Select a player",
    )
    if selected != console.selected_player:
        console.select_player(selected)
        st.session_state.active_page = None
with col2:
    st.write("")
    if st.button("Go", use_container_width=True, disabled=not console.selected_player):
        run(console.submit_selection())
        # submit_selection already fetched missions
        st.session_state.active_page = "missions" if PAGES[page] == "missions" else None

with st.expander("➕ Add player"):
    with st.form("add_player_form"):
        player_name = st.text_input("Player Name", placeholder="e.g., Ann Lee")
        avatars = console.config.avatar_options
        avatar = st.select_slider(
            "Avatar",
            options=avatars,
            format_func=lambda url: url.rsplit("=", 1)[-1],
        )
        st.image(avatar, width=64)
        if st.form_submit_button("Add Player"):
            run(console.add_player(player_name, avatar))


@st.fragment(run_every=console.config.poll_interval_seconds)
def profile_card():
    profile = console.profile
    if profile is None:
        st.info("Select a player and press Go to load their profile")
        return

    col1, col2 = st.columns([1, 5])
    with col1:
        if profile.avatar_url:
            st.image(profile.avatar_url, width=96)
    with col2:
        st.subheader(profile.name or profile.player_ref)
        if profile.description:
            st.caption(profile.description)
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Level", profile.level.name)
    with col2:
        st.metric("Team", profile.team_name or "-")
    with col3:
        st.metric("Points", profile.points)
    with col4:
        st.metric("Credits", profile.credits)


profile_card()
st.markdown("---")

# Lazy tab activation: fetch only when the page changes
active = PAGES[page]
if st.session_state.active_page != active:
    st.session_state.active_page = active
    run(console.activate_tab(active))

if st.button("🔄 Refresh"):
    run(console.activate_tab(active))

# Main content based on page selection
if page == "Missions":
    st.header("🎯 Missions")
    missions = console.missions.items
    if missions:
        st.dataframe(pd.DataFrame([
            {
                "Mission": m.name,
                "Points": m.points,
                "Credits": m.credits,
                "Status": m.status or "-",
                "Time left": format_time_remaining(m.expires_at) if m.expires_at else "-",
            }
            for m in missions
        ]), hide_index=True, use_container_width=True)
    else:
        st.info("No missions")

    st.subheader("⚡ Complete an event")
    events = {e.id: e.name for e in console.missions.events}
    if events:
        event_id = st.selectbox("Event", list(events), format_func=events.get)
        if st.button("Complete event", disabled=not console.selected_player):
            run(console.complete_event(event_id))
    else:
        st.caption("No events for this account")

elif page == "Prizes":
    st.header("🎁 Prizes")
    prizes = console.prizes.items
    if not prizes:
        st.info("No prizes")
    for prize in prizes:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(f"**{prize.name}**")
            if prize.description:
                st.caption(prize.description)
        with col2:
            st.write(f"{prize.credits} credits")
            if prize.stock_available is not None:
                st.caption(f"{prize.stock_available} left")
            if prize.expires_at:
                st.caption(format_time_remaining(prize.expires_at))
        with col3:
            if st.button("Claim", key=f"claim-{prize.id}", disabled=not prize.in_stock):
                run(console.claim_prize(prize.id))

elif page == "Leaderboard":
    st.header("🏆 Leaderboard")
    entries = console.leaderboard.items
    if entries:
        st.dataframe(pd.DataFrame([
            {
                "Rank": e.rank,
                "Player": f"⭐ {e.name}" if e.is_current else e.name,
                "Points": e.points,
            }
            for e in entries
        ]), hide_index=True, use_container_width=True)
    else:
        st.info("Leaderboard is empty")

elif page == "Awards":
    st.header("🏅 Awards")
    achievements = console.awards.items
    if achievements:
        st.dataframe(pd.DataFrame([
            {
                "Achievement": a.name,
                "Status": a.status or "-",
                "Progress": f"{a.progress}/{a.total}" if a.total else "-",
                "Points": a.points,
            }
            for a in achievements
        ]), hide_index=True, use_container_width=True)
    else:
        st.info("No achievements")

    st.subheader("🔥 Streaks")
    for streak in console.awards.streaks:
        limit = streak.definition.count_limit
        fraction = min(streak.progress.count / limit, 1.0) if limit else 0.0
        st.progress(
            fraction,
            text=f"{streak.definition.name}: {streak.progress.count}/{limit or '-'} ({streak.progress.status})",
        )

elif page == "Player":
    st.header("📜 Player History")
    history = console.history
    if history is None or history.is_empty:
        st.info("No history for this player")
    else:
        for title, rows in (
            ("Missions", history.missions),
            ("Achievements", history.achievements),
            ("Prizes", history.prizes),
            ("Quizzes", history.quizzes),
        ):
            st.subheader(title)
            if not rows:
                st.caption("Nothing yet")
                continue
            st.dataframe(pd.DataFrame([
                {
                    "Name": r.name,
                    "Count": r.count,
                    "First": r.first_display,
                    "Last": r.last_display,
                    "Status": r.status,
                }
                for r in rows
            ]), hide_index=True, use_container_width=True)

elif page == "Quizzes":
    st.header("🧩 Quizzes")
    engine = console.quiz

    if engine.state is QuizState.IN_PROGRESS and engine.session is not None:
        session = engine.session
        question = session.current_question
        st.caption(f"Question {session.current_index + 1} of {len(session.questions)}")
        st.markdown(f"**{question.text or question.id}**")

        labels = {c.id: c.label for c in question.choices}
        current = session.answers.get(question.id)
        choice = st.radio(
            "Answer",
            list(labels),
            index=list(labels).index(current) if current in labels else None,
            format_func=labels.get,
            key=f"answer-{session.quiz_id}-{question.id}",
        )
        if choice is not None and choice != current:
            console.answer_question(question.id, choice)

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            if st.button("◀ Previous", disabled=session.is_first):
                console.previous_question()
                st.rerun()
        with col2:
            if st.button("Next ▶", disabled=session.is_last or not session.is_answered(question.id)):
                console.next_question()
                st.rerun()
        with col3:
            if st.button("Submit", type="primary"):
                run(console.submit_quiz())
                st.rerun()
        with col4:
            if st.button("Cancel"):
                console.cancel_quiz()
                st.rerun()
    else:
        quizzes = console.quizzes.items
        if not quizzes:
            st.info("No quizzes")
        for quiz in quizzes:
            col1, col2 = st.columns([5, 1])
            with col1:
                st.markdown(f"**{quiz.name}**")
                if quiz.description:
                    st.caption(quiz.description)
            with col2:
                if st.button("Start", key=f"start-{quiz.id}", disabled=not console.selected_player):
                    if run(console.start_quiz(quiz.id)) is not None:
                        st.rerun()

st.session_state.notifier.flush()

# Footer
st.markdown("---")
st.caption("Built with Streamlit • Powered by GameLayer")
