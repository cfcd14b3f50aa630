"""
Admin client: forms and shared state driven against the CAD HTTP API.

Client-side validation reuses `app.cad.schemas` as a fast path only; the
server stays the authority for every rule.
"""
