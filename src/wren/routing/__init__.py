"""Routing: ordered route registry with first-match dispatch.

Routes are registered during setup, matched in registration order,
and frozen when the app starts serving.
"""
