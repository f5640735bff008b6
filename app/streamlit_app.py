import streamlit as st
import pandas as pd

from agents.text_service import build_text_service
from app.catalog import DEFAULT_LEVEL, DEFAULT_TOPIC, TOPIC_CATALOG, list_levels
from app.config import get_settings
from app.errors import ConfigurationError, RewriteError
from app.logging_config import configure_logging
from app.session import LessonSession
from app.ui_actions import (
    action_begin_writing,
    action_new_lesson,
    action_next_tier,
    action_retry,
    action_submit,
    action_view,
    plain_text_to_html,
)

st.set_page_config(page_title="ReWrite Coach", layout="wide")

settings = get_settings()
configure_logging(log_level=settings.log_level, environment=settings.environment)


# -------------------------
# Helpers
# -------------------------
@st.cache_resource
def get_service():
    key = settings.mistral_api_key
    if not key:
        try:
            key = st.secrets.get("MISTRAL_API_KEY", "")
        except FileNotFoundError:
            key = ""
    try:
        return build_text_service(settings, api_key=key)
    except ConfigurationError:
        return None


def ensure_ui_state():
    st.session_state.setdefault("view", "selection")
    st.session_state.setdefault("level", DEFAULT_LEVEL.value)
    st.session_state.setdefault("topic", DEFAULT_TOPIC)
    st.session_state.setdefault("lesson_session", None)
    st.session_state.setdefault("editor_round", 0)


def reset_editor():
    # a new widget key gives an empty text area
    st.session_state.editor_round += 1


def run_action(fn, *args):
    try:
        return fn(*args)
    except RewriteError as e:
        st.warning(str(e))
        return None


CSS = """
<style>
.graded p { line-height: 1.9; }
.diff-error { background: #fee2e2; color: #b91c1c; border-radius: 4px; padding: 0 4px; cursor: help; }
</style>
"""


# -------------------------
# Init
# -------------------------
ensure_ui_state()
service = get_service()

if service is None:
    st.warning("Missing MISTRAL_API_KEY (environment, .env or st.secrets). Add it to generate lessons.")

st.markdown(CSS, unsafe_allow_html=True)


# -------------------------
# SELECTION SCREEN
# -------------------------
if st.session_state.view == "selection" or st.session_state.lesson_session is None:
    st.title("ReWrite Coach")
    st.caption("Study a model paragraph, then rebuild it from memory as more of it disappears.")

    levels = list_levels()
    level = st.radio(
        "Proficiency level",
        levels,
        index=[lv.value for lv in levels].index(st.session_state.level),
        format_func=lambda lv: f"{lv.value} · {lv.label}",
        horizontal=True,
    )

    labels, ids = [], []
    for cat in TOPIC_CATALOG:
        for t in cat.topics:
            labels.append(f"{cat.category} • {t.name}")
            ids.append(t.id)
    picked = st.selectbox("Topic", labels, index=ids.index(st.session_state.topic))

    if st.button("Start lesson", type="primary", disabled=service is None):
        st.session_state.level = level.value
        st.session_state.topic = ids[labels.index(picked)]
        with st.spinner("Generating your lesson..."):
            new_session = run_action(action_new_lesson, service, st.session_state.level, st.session_state.topic)
        if new_session is not None:
            st.session_state.lesson_session = new_session
            st.session_state.view = "lesson"
            reset_editor()
            st.rerun()

    st.stop()


# -------------------------
# LESSON SCREEN
# -------------------------
session: LessonSession = st.session_state.lesson_session
view = action_view(session)

with st.sidebar:
    st.markdown("## ReWrite Coach")
    st.caption("Lesson")
    st.write(f"**{view.title}** ({view.level})")
    st.progress(view.tier_number / max(1, view.tier_count), text=f"Level {view.tier_number} of {view.tier_count}")
    st.caption(f"Masking: {view.masking_percentage}%")

    st.divider()
    if st.button("← Back to topics"):
        st.session_state.view = "selection"
        st.rerun()
    if st.button("🔁 New paragraph", disabled=service is None):
        with st.spinner("Generating your lesson..."):
            new_session = run_action(action_new_lesson, service, session.level, session.topic)
        if new_session is not None:
            st.session_state.lesson_session = new_session
            reset_editor()
            st.rerun()

st.markdown(f"## {view.title}")

# ---------- Study panel ----------
if view.study_pending:
    with st.container(border=True):
        st.markdown("### Study this paragraph")
        st.write(session.lesson.reference_text)
        st.caption("Read it carefully. Next you will rewrite it with words hidden.")
        if st.button("Start writing", type="primary"):
            action_begin_writing(session)
            st.rerun()
    st.stop()

# ---------- Prompt ----------
st.markdown(f"### Level {view.tier_number} — {view.masking_percentage}% hidden")
with st.container(border=True):
    st.write(view.masked_text)
    if view.masked_word_count:
        st.caption(f"{view.masked_word_count} words hidden")

# ---------- Completed ----------
if view.completed:
    st.balloons()
    st.success("Lesson complete! You rebuilt the full text from memory.")

# ---------- Editor ----------
if view.can_submit:
    text = st.text_area(
        "Your reconstruction",
        height=220,
        key=f"editor_{view.session_id}_{st.session_state.editor_round}",
        placeholder="Write the full paragraph here...",
    )
    if st.button("Check answers", type="primary"):
        if not text.strip():
            st.warning("Write your reconstruction first.")
        else:
            with st.spinner("Grading..."):
                run_action(action_submit, session, plain_text_to_html(text))
            st.rerun()

# ---------- Feedback ----------
if view.graded_html:
    st.divider()
    st.markdown("### Feedback")

    col_score, col_chart, col_notes = st.columns([1, 2, 3])
    with col_score:
        st.markdown(view.score_ring_svg, unsafe_allow_html=True)
        st.caption("Score")
    with col_chart:
        st.markdown(view.radar_svg, unsafe_allow_html=True)
    with col_notes:
        st.markdown("#### Strengths")
        for s in view.feedback.strengths or ["—"]:
            st.write(f"- {s}")
        st.markdown("#### To improve")
        for s in view.feedback.improvements or ["—"]:
            st.write(f"- {s}")

    st.markdown("#### Your text")
    st.markdown(f'<div class="graded">{view.graded_html}</div>', unsafe_allow_html=True)

    with st.expander("Word-by-word"):
        df = pd.DataFrame([d.model_dump() for d in view.feedback.word_diffs])
        st.dataframe(df, use_container_width=True)
    with st.expander("Proficiency"):
        prof = view.feedback.proficiency.as_mapping()
        st.dataframe(pd.DataFrame({"axis": list(prof), "score": list(prof.values())}), use_container_width=True)

    b1, b2 = st.columns(2)
    if view.can_retry and b1.button("Try again"):
        action_retry(session)
        reset_editor()
        st.rerun()
    if view.can_advance and b2.button("Next level →", type="primary"):
        run_action(action_next_tier, session)
        reset_editor()
        st.rerun()
