"""Pydantic Schemas — request/response validation and the build file structure.

Invariants:
    - Schemas validate at system boundary (user input, API responses, stored payloads)
"""
