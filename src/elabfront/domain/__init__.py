"""Domain layer — syntax, environment, messages, and state values.

This layer depends only on stdlib and pydantic.
It must never import from parser, elab, frontend, commands, or config.
"""
