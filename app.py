"""Streamlit entry point: `streamlit run app.py`."""
from mealdelivery import ui

ui.run()
