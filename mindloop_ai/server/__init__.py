"""
MindLoop-AI Server Package.

Web control surface for the agent loop.

Subpackages:
    api: FastAPI route definitions.
    core: Configuration and constants.
    services: Runtime wiring and FastAPI dependencies.
"""
