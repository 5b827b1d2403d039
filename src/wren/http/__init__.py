"""HTTP primitives: immutable Request, Response, headers, and query params."""
