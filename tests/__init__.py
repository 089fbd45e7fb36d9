"""Test package for the chat widget.

Structure:
    - unit/: Individual function and class tests
    - integration/: Relay endpoint and controller-to-relay workflows

External services (completion provider, Supabase) are stubbed with
httpx.MockTransport. Uses pytest with pytest-check for soft assertions.
"""
