"""Streamlit widgets for the actor runner (no business logic here)."""
