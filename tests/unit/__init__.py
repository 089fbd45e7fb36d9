"""Unit tests for individual components in isolation.

Coverage:
    - relay/: Configuration and upstream payload
    - controller/: Send sequence, history loading, session lifecycle
    - store/ and auth/: Backends against stubbed HTTP
    - ui/: Composer state
"""
