"""ASGI plumbing — request handling, negotiation, and response sending."""
