"""Request authentication and authorization gateway.

Learn: Four pieces, leaves first:
1. jwt.py — credential format, TokenIssuer (mint) and TokenVerifier (check)
2. resolver.py — IdentityResolver maps a verified subject to a live account
3. dependencies.py — the authentication gate (get_current_user) and the
   ownership gate (get_owned_task), wired in as FastAPI dependencies
4. password.py — bcrypt hashing used at register/login

Failures are raised as smarttodo.errors types; smarttodo.api.errors turns
them into the client envelope.
"""
