"""
Pydantic schema definitions for API payloads.

Schemas are kept apart from the SQL in ``services`` so that the JSON
shape of the API can be read in one place.
"""
