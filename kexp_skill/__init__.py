"""
KEXP 90.3FM Alexa skill.

Request handling per skill request:
raw body -> parse -> verify (signature, freshness) -> dispatch -> render.

- verifier: proves the request came from Alexa and is not a replay
- dispatcher: pure mapping from request type / intent to one response
- responses: wire format of the Alexa response envelope
- server: FastAPI endpoint tying the pieces together
"""
