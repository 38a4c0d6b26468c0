"""
Salvo - Two-player Battleship room server.

Pairs two remote players in a room, validates their secret fleets,
resolves alternating shots, and sends each player only what they are
allowed to see:
- Room lifecycle and state machine
- Fleet placement validation
- Per-viewer state redaction
- Durable room table
"""

__version__ = "0.1.0"
