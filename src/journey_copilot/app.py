import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import logging
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from journey_copilot import config
from journey_copilot.errors import ConfigurationError, KnowledgeLoadError
from journey_copilot.logging_config import setup_logging
from journey_copilot.models import WorkflowStep
from journey_copilot.orchestrator import build_orchestrator
from journey_copilot.state import build_request, init_session_state, record_turn, reset_conversation

setup_logging()
logger = logging.getLogger("journey.app")

FACT_LABELS = (
    ("extracted_usp", "USP"),
    ("extracted_icp", "ICP"),
    ("identified_vertical", "Vertical"),
    ("current_circle", "Circle of Trust"),
    ("proposed_outcome", "Outcome"),
)


@st.cache_resource
def get_orchestrator():
    """Built once per server process; shared read-only by every session."""
    return build_orchestrator()


st.set_page_config(page_title="Journey Copilot", layout="wide")

try:
    config.validate_config()
    orchestrator = get_orchestrator()
except (ConfigurationError, KnowledgeLoadError) as e:
    logger.error("Startup failed: %s", e)
    st.error(str(e))
    st.stop()

init_session_state()

# --- Sidebar: inferred progress ---
with st.sidebar:
    st.title("Journey Copilot")
    st.metric("Turn", st.session_state.turn_count)

    last = st.session_state.last_response
    step = WorkflowStep(last.workflow_step) if last else WorkflowStep.INTRODUCTION
    st.progress((int(step) + 1) / len(WorkflowStep), text=f"Step {int(step) + 1}: {step.label}")

    st.divider()
    st.subheader("What I know so far")
    shown = False
    if last:
        for field, label in FACT_LABELS:
            value = getattr(last, field)
            if value:
                st.markdown(f"**{label}:** {value}")
                shown = True
    if not shown:
        st.caption("Nothing extracted yet.")

    with st.expander("Custom base instructions"):
        override = st.text_area(
            "Replaces the default persona prompt",
            value=st.session_state.base_system_prompt or "",
            height=200,
        )
        st.session_state.base_system_prompt = override.strip() or None

    st.divider()
    if st.button("New conversation", use_container_width=True):
        reset_conversation()
        st.rerun()

# --- Main Chat ---
st.title("Journey Copilot")

for msg in st.session_state.messages:
    with st.chat_message("user" if msg["role"] == "user" else "assistant"):
        st.markdown(msg["content"])

if user_input := st.chat_input("Tell me about your product, audience, or goal..."):
    with st.chat_message("user"):
        st.markdown(user_input)

    request = build_request(user_input)
    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            response = asyncio.run(
                orchestrator.process_chat_request(request, timeout=config.REQUEST_TIMEOUT)
            )
        st.markdown(response.message)

    record_turn(user_input, response)
    st.rerun()
