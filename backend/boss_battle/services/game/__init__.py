"""Game domain services: combat, abilities, turns, victory and undo.

This package contains the authoritative game rules. Socket handlers and
HTTP routes only talk to ``GameSession``, keeping transport concerns
separated from core game mechanics.
"""
