"""Input state for the chat composer."""


class Composer:
    """Free-text field that emits trimmed, non-empty submissions.

    Attributes:
        value: Current field contents.
        disabled: Set while a send is outstanding; blocks submissions.
    """

    def __init__(self) -> None:
        self.value: str = ""
        self.disabled: bool = False

    @property
    def can_submit(self) -> bool:
        return not self.disabled and bool(self.value.strip())

    def submit(self) -> str | None:
        """Take the trimmed text and clear the field.

        Returns:
            The trimmed text, or None when empty, whitespace-only or disabled.
        """
        if not self.can_submit:
            return None
        text = self.value.strip()
        self.value = ""
        return text
