"""
hackhub
Hackathon community platform backend: events, registrations, leaderboards.
"""
__version__ = "1.0.0"
