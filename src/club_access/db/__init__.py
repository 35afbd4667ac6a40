"""
club_access.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for users,
  revoked tokens and module assignments.
"""

# Package marker.
