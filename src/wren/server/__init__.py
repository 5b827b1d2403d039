"""ASGI boundary: request handling, response sending, error pipeline."""
