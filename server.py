"""Molecular Assay Explorer - Main Streamlit Application

Run with:
    streamlit run server.py

Environment tweaks for resource-constrained dev systems:
- Force Streamlit file watcher to 'poll' to avoid inotify instance exhaustion.
"""

import os
import sys
import weakref
from pathlib import Path

os.environ.setdefault("STREAMLIT_SERVER_FILE_WATCHER_TYPE", "poll")
import streamlit as st

# Add src to path for imports
sys.path.append(str(Path(__file__).parent / "src"))

from utils.config import load_config
from utils.logging_config import configure_logging
from utils.settings import get_settings
from ui.layout.theme import apply_theme
from ui.main_interface import MainInterface

# Configure Streamlit page
st.set_page_config(
    page_title="Molecular Assay Explorer",
    page_icon="🧬",
    layout="wide",
    initial_sidebar_state="collapsed",
    menu_items={
        'About': """
    # Molecular Assay Explorer

    Pick a target protein, inspect its 3D structure and cross-reference
    compound IC50 potency and toxicity.

    **Version:** 1.0.0
    """
    }
)


def initialize_app():
    """Initialize application components once per browser session."""
    if 'app_initialized' not in st.session_state:
        settings = get_settings()
        configure_logging(level=settings.log_level, json_logs=settings.json_logging, log_file=settings.log_file)

        config = load_config()
        st.session_state.config = config

        interface = MainInterface(config)
        # Release the 3D engine when the session state is dropped
        weakref.finalize(interface, interface.viewer.dispose)
        st.session_state.main_interface = interface

        st.session_state.app_initialized = True


def main():
    """Main application entry point."""
    initialize_app()
    apply_theme()
    st.session_state.main_interface.render()


if __name__ == "__main__":
    main()
