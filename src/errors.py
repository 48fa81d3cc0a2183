"""Error taxonomy for the artifact ingestion pipeline.

Reconciliation has no error type of its own: it substitutes defaults for
missing fields and never raises.
"""


class ArtifactIngestError(Exception):
    """Base class for all pipeline errors."""


class InputError(ArtifactIngestError):
    """The upload was missing or unusable."""


class ProviderError(ArtifactIngestError):
    """An external provider (OCR or language model) call failed."""


class ParseError(ArtifactIngestError):
    """A language model response could not be parsed as a JSON object.

    Args:
        message: Human-readable failure description.
        raw_text: The unparsed model output, kept for diagnostics.
    """

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text
