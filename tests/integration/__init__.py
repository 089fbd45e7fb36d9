"""Integration tests for components working together as a system.

Coverage:
    - Relay endpoint through the real FastAPI app
    - Controller talking to the relay over ASGI with a stubbed provider
"""
