"""HTTP routes of the proxy service."""
