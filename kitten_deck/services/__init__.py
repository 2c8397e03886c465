"""Game services: deck lifecycle, draw resolution and session snapshots.

Routers call these; the services own the store adapters and never touch
HTTP concerns.
"""
