"""Real-time infrastructure — in-memory hub + Server-Sent Events.

Learn: Events flow one way:
1. Publish endpoints → hub.broadcast(event)
2. Hub → each subscriber's queue → its SSE response → game display

Everything lives in one process. No broker, no replay: a display that
reconnects only sees events published after it came back.
"""
