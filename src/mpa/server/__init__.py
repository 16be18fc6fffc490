"""ASGI plumbing for the dev server."""
