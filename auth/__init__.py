"""auth/ -- Credentials, sessions, and access control for the forum.

Layer rule: auth/ imports only core/ + stdlib + third-party libraries.
It does NOT import from api/ or forum/ (dependencies.py may import fastapi).
api/ and forum/ import from auth/, not the other way around.
"""
