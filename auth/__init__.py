"""
auth — User authentication module.

Provides:
  • Argon2id password hashing and the Pwned Passwords strength check
  • Session tokens, hashed session ids and the session store
  • Register / Login / Me / Logout API routes
  • ``require_session`` / ``require_guest`` FastAPI dependencies
"""
