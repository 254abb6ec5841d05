"""Quiz session services: scoring, leaderboards, rooms and timers.

This package contains the room state machine and its pure helpers. Socket
handlers and HTTP routes call into the session controller, keeping transport
concerns separated from core game mechanics.
"""
