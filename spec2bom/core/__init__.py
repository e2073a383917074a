"""Configuration, logging and shared errors."""
