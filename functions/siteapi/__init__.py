"""
Site API package.

A FastAPI application backing the marketing website (visitor sessions,
bookings, booking analytics) and the farm records pages (mobs, breeding
events, farm statistics), with a SQL and an in-memory storage backend.
"""
