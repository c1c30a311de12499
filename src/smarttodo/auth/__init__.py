"""Authentication and authorization.

Learn: Three pieces, in the order a request meets them:
1. jwt.TokenCodec → mints and verifies signed, time-bounded tokens
2. dependencies.get_current_user → the gate: bearer token → user → identity
3. ownership.authorize → owner-vs-caller decision inside each task operation
"""
