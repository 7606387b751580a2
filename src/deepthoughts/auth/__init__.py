"""Authentication and authorization.

Learn: There is no server-side session. The only credential is a short-lived
signed JWT carrying {id, username, email}:

1. jwt.py      → sign / verify the identity assertion (binary trust-or-reject)
2. password.py → bcrypt hashing for stored account secrets
3. context.py  → per-request identity resolution (fails open to anonymous)
4. gate.py     → per-operation `require_identity` for anything that needs an actor
"""
