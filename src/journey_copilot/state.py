import streamlit as st

from .models import MODEL_ROLE, ChatRequest, ChatResponse


def init_session_state():
    """Call once at app startup. The browser session owns the transcript."""
    if "initialized" not in st.session_state:
        st.session_state.initialized = True
        st.session_state.messages = []  # [{"role": "user"/"model", "content": "..."}]
        st.session_state.turn_count = 0
        st.session_state.last_response = None  # ChatResponse of the latest turn
        st.session_state.base_system_prompt = None  # Optional persona override


def build_request(user_input: str) -> ChatRequest:
    """Request for this turn: prior transcript as history, new input as current message."""
    return ChatRequest(
        current_message=user_input,
        conversation_history=[dict(m) for m in st.session_state.messages],
        base_system_prompt=st.session_state.base_system_prompt,
    )


def record_turn(user_input: str, response: ChatResponse):
    """Append the exchange to the transcript. Failed turns are not replayed next turn."""
    st.session_state.turn_count += 1
    st.session_state.last_response = response
    if response.error:
        return
    st.session_state.messages.append({"role": "user", "content": user_input})
    st.session_state.messages.append({"role": MODEL_ROLE, "content": response.message})


def reset_conversation():
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    init_session_state()
