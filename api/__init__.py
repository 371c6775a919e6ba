"""api/ -- FastAPI application, routes and HTTP models.

Layer rule: api/ imports from auth/ and core/. Nothing imports from api/.
"""
