"""
ShopBot Streamlit App - Product Search Assistant

Run with: streamlit run app.py

Architecture:
- This file: Streamlit UI only
- core/orchestrator.py: Message processing coordination
- handlers/: Intent-specific handlers
- core/: Business logic (parser, filters, search, history)
- llm/: AI-powered features (parsing, intent, responses)
- ui/: UI helpers (state, formatting)
"""

import streamlit as st

from config.settings import Settings
from core.orchestrator import AssistantComponents, process_message
from core.structured_logging import setup_logging, get_logger
from ui.responses import format_price
from ui.state import SessionState


# =============================================================================
# CONFIGURATION
# =============================================================================

settings = Settings.from_env()

setup_logging(
    log_dir=settings.log_dir,
    console_level=10 if settings.debug else 20,
    file_level=10,
    enable_console=True,
    enable_file=True,
    enable_error_log=True,
)
app_logger = get_logger("app")

# Streamlit page config
st.set_page_config(
    page_title="ShopBot - Product Assistant",
    page_icon="🛍️",
    layout="wide"
)


# =============================================================================
# COMPONENT INITIALIZATION
# =============================================================================

def _gsheets_credentials():
    """Service account info from Streamlit secrets (st.secrets["gsheets"])."""
    try:
        if "gsheets" in st.secrets:
            return dict(st.secrets["gsheets"])
    except Exception as e:
        app_logger.warning(f"Google Sheets logging not configured: {e}")
    return None


@st.cache_resource
def get_components() -> AssistantComponents:
    """Initialize components once per server process."""
    return AssistantComponents.from_settings(settings, gsheets_credentials=_gsheets_credentials())


def render_search_details(response) -> None:
    """Facets and pagination for the last search."""
    result = response.data if response else None
    if result is None or result.error:
        return

    with st.sidebar:
        st.header("📊 Last Search")
        page = result.pagination
        st.write(f"**Matches:** {result.count}")
        st.write(f"**Page:** {page.current_page} of {max(page.total_pages, 1)}")

        for facet in result.facets or []:
            counts = facet.get("counts", []) if isinstance(facet, dict) else []
            if not counts:
                continue
            with st.expander(f"By {facet.get('field_name', 'field')}"):
                for item in counts:
                    st.write(f"• **{item.get('value')}:** {item.get('count')}")

        if response.options is not None and response.options.max_price is not None:
            st.caption(f"Price cap: {format_price(response.options.max_price)}")


# =============================================================================
# MAIN APPLICATION
# =============================================================================

def main():
    st.title("🛍️ ShopBot - Product Assistant")
    st.markdown("*Ask for products in plain English: \"wireless headphones under $150 in stock\"*")

    components = get_components()

    # Initialize session state
    if "session" not in st.session_state:
        st.session_state.session = SessionState()

    session = st.session_state.session

    # Sidebar - Suggestions and session
    with st.sidebar:
        st.header("🔎 Quick Lookup")
        partial = st.text_input("Start typing a product name", key="partial_query")
        for suggestion in components.suggestions.suggest(partial):
            st.write(f"• {suggestion}")
        st.markdown("---")

        st.header("💬 Session")
        st.write(f"**Session ID:** `{session.session_id[:16]}...`")
        st.write(f"**Messages:** {session.get_message_count()}")
        st.write(f"**Searches:** {session.search_count}")

        if st.button("🔄 New Session"):
            st.session_state.session = SessionState()
            st.rerun()

    # Display chat history
    for message in session.get_conversation_history():
        with st.chat_message(message.role):
            st.markdown(message.content)

    prompt = st.chat_input("What are you looking for?")

    if prompt:
        session.add_message("user", prompt)
        with st.chat_message("user"):
            st.markdown(prompt)

        with st.chat_message("assistant"):
            with st.spinner("Searching products..."):
                response = process_message(
                    prompt,
                    components,
                    session_id=session.session_id,
                    debug_mode=settings.debug,
                )
                st.markdown(response.text)

                if settings.debug:
                    with st.expander("🔍 Debug Info"):
                        st.write(f"**Intent Detected:** {response.intent}")
                        if response.error:
                            st.write(f"**Error:** {response.error}")

        session.record_response(response)

    render_search_details(session.last_search)


if __name__ == "__main__":
    main()
