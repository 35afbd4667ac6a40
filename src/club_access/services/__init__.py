"""
club_access.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Turn credential and assignment operations into domain results or domain errors.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable against a throwaway SQLite file.
