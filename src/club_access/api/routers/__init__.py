"""
club_access.api.routers

HTTP routers: auth, assignments, health.
"""
