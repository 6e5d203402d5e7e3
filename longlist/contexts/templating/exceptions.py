"""Custom exceptions for deck generation with part and placeholder references."""

from typing import Optional


class DeckGenerationError(Exception):
    """
    Base class for every failure the deck generator reports.

    Attributes:
        message: Error description
        part_name: Archive part the failure relates to (if any)
        original_error: Underlying exception (if any)
    """

    def __init__(
        self,
        message: str,
        part_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.part_name = part_name
        self.original_error = original_error

        parts = [message]

        if part_name:
            parts.append(f"Part: {part_name}")

        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class TemplateLoadError(DeckGenerationError):
    """
    Raised when the template container is unreadable or a required part is missing.

    Fatal: raised before anything is written.
    """

    pass


class BindingError(DeckGenerationError):
    """
    Raised when a page Binding violates slot coverage.

    Every slot 1..K must be bound on every page, so this signals an internal
    invariant violation rather than bad input.
    """

    pass


class InjectionError(DeckGenerationError):
    """
    Raised when the markup around a placeholder has no recognizable run structure.

    Recoverable: the injector falls back to plain substitution for that one
    placeholder and logs a warning.

    Attributes:
        token: Placeholder text that could not be injected with formatting
        xml_snippet: Markup surrounding the placeholder
    """

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        xml_snippet: Optional[str] = None,
        part_name: Optional[str] = None,
    ):
        self.token = token
        self.xml_snippet = xml_snippet

        if token:
            message = f"{message} (placeholder: {token})"

        if xml_snippet:
            # Truncate snippet if too long
            snippet = xml_snippet[:200] + "..." if len(xml_snippet) > 200 else xml_snippet
            message = f"{message}\nMarkup:\n{snippet}"

        super().__init__(message, part_name=part_name)


class PartValidationError(DeckGenerationError):
    """
    Raised when a rendered part is no longer well-formed XML.

    Fatal: delivering the part would produce a corrupt document.
    """

    pass


class NoContentError(DeckGenerationError):
    """
    Raised when there are zero records to render.

    Distinct from other failures so callers can report "nothing to render"
    instead of emitting a contentless document.
    """

    pass


class SerializationError(DeckGenerationError):
    """Raised when the output container cannot be written."""

    pass
