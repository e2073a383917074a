"""Test fixture package for spec2bom.

Contains fixtures for:
- The proxy application and an async client bound to it
- An in-memory stand-in for the upstream object store
"""
