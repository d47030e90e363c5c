"""Page styling."""
from __future__ import annotations
import streamlit as st

BASE_CSS = """
<style>
.main > div { padding-top: 2rem; }
.stAlert { margin-top: 1rem; }
h1 { background: linear-gradient(90deg, #2563EB, #7C3AED); -webkit-background-clip: text; color: transparent !important; }
[data-testid="stDataFrame"] { border: 1px solid rgba(0,0,0,0.08); border-radius: 8px; }
</style>
"""


def apply_theme():
    st.markdown(BASE_CSS, unsafe_allow_html=True)
