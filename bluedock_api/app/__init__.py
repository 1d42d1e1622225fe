"""
Application package initializer.

The API is split into small pieces: ``core`` holds configuration,
logging and database access, ``schemas`` the pydantic payloads,
``services`` the business logic for each resource and
``api/endpoints`` the routers that expose it over HTTP.
"""

from .main import app  # noqa: F401
