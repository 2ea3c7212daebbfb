"""
blogdesk.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and password hashing.
- The authorization gate (token -> Identity -> rank check).
- FastAPI auth dependencies.
"""

# Package marker.
