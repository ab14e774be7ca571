"""Game domain services: turn coordination, lobby admission, scoring and timers.

This package contains pure domain logic that is driven by the socket
handlers, keeping transport concerns separated from core game mechanics.
"""
