"""Domain layer (pure economy logic).

- Keep income, cost, prestige and network rules here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Redis.
- Time and randomness are passed in as arguments.
- Functions take snapshot records and return new ones; inputs are never mutated.
"""
