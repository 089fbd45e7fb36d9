"""NiceGUI interface - thin visualization layer for the chat widget.

Responsibilities:
    - Sign-in screen while no session exists
    - Message thread rendering with a loading indicator
    - Composer that ignores empty input and locks while a reply is pending

Contains no business logic. Delegates all operations to the conversation
controller.
"""
