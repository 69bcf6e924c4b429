"""Map auth failures onto form state: inline field errors plus one banner."""

from auth.exceptions import (
    AuthError,
    AuthenticationError,
    FieldValidationError,
    LocalValidationError,
    TransportError,
)


class FormErrors:
    """
    Error state of one form instance.

    field_errors holds inline messages keyed by input name. message is the
    single banner. Clearing one field never touches the others.
    """

    def __init__(self, transport_message: str):
        self._transport_message = transport_message
        self.field_errors: dict[str, list[str]] = {}
        self.message: str | None = None

    def __bool__(self) -> bool:
        return bool(self.field_errors) or self.message is not None

    def apply(self, error: AuthError, default_message: str) -> None:
        """
        Replace current errors with those carried by `error`.

        Field validation fills field_errors only. Local validation may fill
        both. Authentication errors use the backend message, or
        default_message. Transport errors always use the transport wording.
        """
        self.clear()
        if isinstance(error, FieldValidationError):
            self.field_errors = {k: list(v) for k, v in error.field_errors.items()}
        elif isinstance(error, LocalValidationError):
            self.field_errors = {k: list(v) for k, v in error.field_errors.items()}
            if not self.field_errors:
                self.message = str(error)
        elif isinstance(error, TransportError):
            self.message = self._transport_message
        elif isinstance(error, AuthenticationError):
            self.message = str(error) or default_message
        else:
            self.message = default_message

    def set_message(self, message: str) -> None:
        self.message = message

    def clear_field(self, name: str) -> None:
        """User edited `name`: drop its inline error and the banner."""
        self.field_errors.pop(name, None)
        self.message = None

    def clear(self) -> None:
        self.field_errors = {}
        self.message = None

    def first(self, name: str) -> str | None:
        """First message for a field, as shown under the input."""
        messages = self.field_errors.get(name)
        return messages[0] if messages else None
