"""Buzzhub — real-time signal relay for quiz buzzer games.

Buzzer hardware, URL hits and admin actions publish events over plain
HTTP; every connected game display receives them over a Server-Sent
Events stream.
"""

__version__ = "0.1.0"
