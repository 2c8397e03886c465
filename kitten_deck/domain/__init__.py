"""Domain layer (pure logic).

- Keep card rules and deck construction here.
- Avoid I/O: no Redis, no HTTP/FastAPI.
- Randomness is passed in as a `random.Random` so tests stay deterministic.
"""
