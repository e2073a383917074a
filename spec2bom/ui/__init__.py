"""Headless application state, rendering and notifications."""
