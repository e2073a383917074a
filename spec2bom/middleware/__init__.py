"""Middleware for the proxy service."""
