# app/core/errors.py


class RendererNotConfiguredError(Exception):
    """The PDF renderer is disabled or points at a missing templates directory."""


class TemplateUnavailableError(Exception):
    """A rendering strategy cannot run for this document type; try the next one."""


class RenderError(Exception):
    """Every fallback level failed for one document type."""

    def __init__(self, doc_type: str, message: str):
        super().__init__(f"{doc_type}: {message}")
        self.doc_type = doc_type
