"""NiceGUI chat widget: sign-in screen, message thread and composer."""

import logging
import os
import uuid

from fastapi.responses import RedirectResponse
from nicegui import app, ui

from src.auth.provider import AuthError, IdentityProvider
from src.auth.supabase import SupabaseIdentityProvider
from src.controller import create_controller, create_identity_provider, get_widget_config
from src.controller.conversation import ConversationController
from src.models.schemas import SendStatus, Session, SessionUser
from src.ui.composer import Composer

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
CODE_VERIFIER_KEY = "code_verifier"
LOCAL_USER_KEY = "local_user_id"
LOCAL_ACCESS_TOKEN = "local"

PROVIDER_LABELS = {"github": "GitHub", "gitlab": "GitLab", "google": "Google"}

CUSTOM_CSS = """
<style>
    body { background: linear-gradient(135deg, #1e3a8a 0%, #312e81 100%); min-height: 100vh; }

    .thread {
        background: rgba(249, 250, 251, 0.1);
        backdrop-filter: blur(4px);
        border-radius: 12px;
    }

    .message-user {
        background: #2563eb;
        color: white;
        border-radius: 16px;
        box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);
    }

    .message-assistant {
        background: white;
        color: #1f2937;
        border-radius: 16px;
        box-shadow: 0 1px 2px rgba(0, 0, 0, 0.05);
    }
    .message-assistant p { margin: 0; }

    .typing-bubble {
        width: 32px; height: 32px;
        border-radius: 50%;
        background: rgba(255, 255, 255, 0.3);
        animation: pulse 1.5s infinite ease-in-out;
    }

    @keyframes pulse {
        0%, 100% { opacity: 1; }
        50% { opacity: 0.4; }
    }

    .composer { background: white; border-radius: 12px; }
</style>
"""


def render_message(text: str, is_ai: bool) -> None:
    """Render one message bubble.

    Assistant messages sit on the left and are rendered as markdown;
    the user's own messages sit on the right as plain text.
    """
    align = "justify-start" if is_ai else "justify-end"
    bubble = "message-assistant" if is_ai else "message-user"

    with ui.row().classes(f"w-full {align}"):
        with ui.element("div").classes(f"max-w-[80%] px-4 py-2 text-sm {bubble}"):
            if is_ai:
                ui.markdown(text)
            else:
                ui.label(text).classes("whitespace-pre-wrap")


def render_loading_indicator() -> None:
    with ui.row().classes("w-full justify-start"):
        ui.element("div").classes("typing-bubble")


async def _restore_session(identity: IdentityProvider) -> None:
    """Bring back the session stored for this browser, if still valid."""
    storage = app.storage.user
    if isinstance(identity, SupabaseIdentityProvider):
        token = storage.get(ACCESS_TOKEN_KEY)
        if not token:
            return
        try:
            await identity.restore_session(token)
        except AuthError as e:
            logger.warning(f"Stored session rejected: {e}")
            storage.pop(ACCESS_TOKEN_KEY, None)
    elif user_id := storage.get(LOCAL_USER_KEY):
        identity.set_session(
            Session(user=SessionUser(id=user_id), access_token=LOCAL_ACCESS_TOKEN)
        )


@ui.page("/auth/callback")
async def auth_callback(code: str = "") -> RedirectResponse:
    """Finish the OAuth flow and return to the chat."""
    config = get_widget_config()
    identity = create_identity_provider(config)
    verifier = app.storage.user.pop(CODE_VERIFIER_KEY, None)

    if code and verifier and isinstance(identity, SupabaseIdentityProvider):
        try:
            session = await identity.exchange_code_for_session(code, verifier)
            app.storage.user[ACCESS_TOKEN_KEY] = session.access_token
        except AuthError as e:
            logger.error(f"OAuth sign-in failed: {e}")
    else:
        logger.warning("OAuth callback without code or verifier")

    return RedirectResponse("/")


@ui.page("/")
async def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)

    config = get_widget_config()
    identity = create_identity_provider(config)
    await _restore_session(identity)

    controller: ConversationController = create_controller(config, identity)
    composer = Composer()
    client = ui.context.client
    scroll_area: ui.scroll_area | None = None
    rendered_signed_in = False

    def sign_in() -> None:
        if isinstance(identity, SupabaseIdentityProvider):
            redirect = identity.sign_in_with_oauth(
                config.oauth_provider,
                f"{config.ui_base_url.rstrip('/')}/auth/callback",
            )
            app.storage.user[CODE_VERIFIER_KEY] = redirect.code_verifier
            ui.navigate.to(redirect.url)
            return
        user_id = app.storage.user.get(LOCAL_USER_KEY) or f"local-{uuid.uuid4()}"
        app.storage.user[LOCAL_USER_KEY] = user_id
        identity.set_session(
            Session(user=SessionUser(id=user_id), access_token=LOCAL_ACCESS_TOKEN)
        )

    async def sign_out() -> None:
        app.storage.user.pop(ACCESS_TOKEN_KEY, None)
        app.storage.user.pop(LOCAL_USER_KEY, None)
        if isinstance(identity, SupabaseIdentityProvider):
            await identity.sign_out_remote()
        else:
            identity.sign_out()

    async def send_message() -> None:
        text = composer.submit()
        if text is None:
            return
        result = await controller.send(text)
        if result.status is SendStatus.FAILED:
            ui.notify("The assistant did not reply. Please try again.", type="negative")

    @ui.refreshable
    def thread() -> None:
        for message in controller.messages:
            render_message(message.text, message.is_ai)
        if controller.is_loading:
            render_loading_indicator()

    @ui.refreshable
    def view() -> None:
        nonlocal scroll_area, rendered_signed_in
        rendered_signed_in = controller.session is not None

        if not rendered_signed_in:
            scroll_area = None
            with ui.column().classes("w-full h-screen items-center justify-center p-4"):
                with ui.card().classes("rounded-xl p-8 shadow-lg"):
                    ui.label("Please Sign In").classes("mb-4 text-xl font-semibold")
                    provider = PROVIDER_LABELS.get(
                        config.oauth_provider, config.oauth_provider.capitalize()
                    )
                    label = f"Sign In with {provider}" if config.uses_supabase else "Sign In"
                    ui.button(label, on_click=sign_in).props("unelevated color=primary")
            return

        with ui.column().classes("w-full max-w-3xl mx-auto p-4 gap-4").style(
            "height: 100vh"
        ):
            with ui.row().classes("w-full justify-end"):
                ui.button(icon="logout", on_click=sign_out).props("flat round color=white")

            with ui.scroll_area().classes("flex-grow w-full thread") as area:
                with ui.column().classes("w-full p-4 gap-4"):
                    thread()
            scroll_area = area

            with ui.row().classes("w-full composer p-2 gap-2 items-center no-wrap"):
                (
                    ui.input(placeholder="Type your message...")
                    .props("borderless dense")
                    .classes("flex-grow px-2")
                    .bind_value(composer, "value")
                    .bind_enabled_from(composer, "disabled", backward=lambda d: not d)
                    .on("keydown.enter", send_message)
                )
                (
                    ui.button(icon="send", on_click=send_message)
                    .props("unelevated color=primary")
                    .bind_enabled_from(composer, "can_submit")
                )

    def on_controller_change() -> None:
        composer.disabled = controller.is_loading
        if (controller.session is not None) != rendered_signed_in:
            view.refresh()
        else:
            thread.refresh()
        if scroll_area is not None and client.has_socket_connection:
            scroll_area.scroll_to(percent=1.0)

    view()
    controller.on_change(on_controller_change)
    await controller.start()
    client.on_delete(controller.close)


def main() -> None:
    ui.run(
        title="Chat",
        port=8080,
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "chat-widget-secret"),
    )


if __name__ == "__main__":
    main()
