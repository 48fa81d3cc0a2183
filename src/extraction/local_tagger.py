"""Local linguistic tagger built on spaCy named-entity recognition.

Produces candidate people, places and organizations with a fixed
confidence of 1.0; the statistical model offers no finer nuance.
"""

from typing import Any

import spacy

from src.errors import ProviderError
from src.utils.logger import get_logger

from .models import EntityReference, LocationReference, PersonReference, TaggerResult

logger = get_logger(__name__)

PERSON_LABELS = frozenset({"PERSON"})
PLACE_LABELS = frozenset({"GPE", "LOC", "FAC"})
ORGANIZATION_LABELS = frozenset({"ORG"})

DEFAULT_CONFIDENCE = 1.0


class LocalTagger:
    """spaCy-backed tagger for people, places and organizations.

    Args:
        model_name: Installed spaCy pipeline to load, e.g. ``en_core_web_sm``.
    """

    def __init__(self, model_name: str = "en_core_web_sm") -> None:
        self.model_name = model_name
        self._nlp: Any = None

    def _get_nlp(self) -> Any:
        """Lazily load the spaCy pipeline on first use.

        Raises:
            ProviderError: If the model is not installed.
        """
        if self._nlp is None:
            try:
                self._nlp = spacy.load(
                    self.model_name, disable=["parser", "lemmatizer"]
                )
            except OSError as exc:
                raise ProviderError(
                    f"spaCy model '{self.model_name}' not found. "
                    f"Run: python -m spacy download {self.model_name}"
                ) from exc
            logger.info("Loaded spaCy model %s", self.model_name)
        return self._nlp

    def tag(self, text: str) -> TaggerResult:
        """Tag ``text`` and group named entities by kind.

        Each surface form is reported once per kind, in order of first
        appearance.
        """
        doc = self._get_nlp()(text)

        people: dict[str, PersonReference] = {}
        places: dict[str, LocationReference] = {}
        organizations: dict[str, EntityReference] = {}

        for ent in doc.ents:
            surface = " ".join(ent.text.split())
            if not surface:
                continue
            if ent.label_ in PERSON_LABELS:
                people.setdefault(
                    surface,
                    PersonReference(name=surface, confidence=DEFAULT_CONFIDENCE),
                )
            elif ent.label_ in PLACE_LABELS:
                places.setdefault(
                    surface,
                    LocationReference(
                        location_name=surface, confidence=DEFAULT_CONFIDENCE
                    ),
                )
            elif ent.label_ in ORGANIZATION_LABELS:
                organizations.setdefault(
                    surface,
                    EntityReference(
                        entity_type="Organization",
                        entity_value=surface,
                        confidence=DEFAULT_CONFIDENCE,
                    ),
                )

        logger.info(
            "Local tagger found %d people, %d places, %d organizations",
            len(people),
            len(places),
            len(organizations),
        )
        return TaggerResult(
            people=list(people.values()),
            locations=list(places.values()),
            entities=list(organizations.values()),
        )
