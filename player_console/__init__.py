"""
Main application package for the GameLayer Player Console.

This is the orchestration core behind the dashboard:
- Credential lifecycle and request header derivation
- Fan-out/fan-in fetching of player resources
- Normalization of upstream response envelopes into read models
- The quiz session state machine

The core can be driven by:
- The Streamlit dashboard (streamlit_app/)
- Scripts (scripts/)
- Tests, through a fake transport
"""

__version__ = "0.1.0"
