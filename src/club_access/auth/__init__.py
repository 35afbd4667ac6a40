"""
club_access.auth

Authentication/authorization package.

Responsibilities:
- JWT issuing, validation and revocation.
- Role and assignment guards, plus their FastAPI dependencies.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Guards here are pure decision functions; `auth.deps` adapts them to FastAPI.
