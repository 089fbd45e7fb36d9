"""FastAPI endpoints for the chat widget.

Hosts the completion relay that forwards conversation history to the
LLM provider.

Endpoints:
    - GET /health: Service health status
    - ANY /functions/v1/chat: Completion relay (OPTIONS answers the CORS preflight)
"""
