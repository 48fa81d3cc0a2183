"""Cross-referencing of OCR annotations to reconciled people.

An annotation belongs to the first person whose full name contains the
annotation's text. OCR words often capture only part of a name ("Mark"
out of "Mark Duvall"), so substring containment is used; short fragments
can therefore match unrelated names. Each person keeps the first polygon
assigned to them.
"""

from collections.abc import Sequence

from src.utils.logger import get_logger

from .records import Annotation, Person, PersonAnnotation

logger = get_logger(__name__)


def cross_reference_annotations(
    people: Sequence[Person], annotations: Sequence[Annotation]
) -> list[PersonAnnotation]:
    """Assign at most one OCR bounding polygon to each person.

    Args:
        people: Reconciled people, in canonical order.
        annotations: OCR annotations in provider order. The first one is
            the full-page annotation and is ignored.

    Returns:
        One entry per matched person, in order of first discovery.
    """
    names = [(person, person.full_name.strip().lower()) for person in people]
    assigned: dict[int, PersonAnnotation] = {}

    for annotation in annotations[1:]:
        detected = annotation.text.strip().lower()
        match = next((person for person, name in names if detected in name), None)
        if match is None or match.person_id in assigned:
            continue
        assigned[match.person_id] = PersonAnnotation(
            person_id=match.person_id, vertices=list(annotation.vertices)
        )

    logger.info("Single annotation per person. Count: %d", len(assigned))
    return list(assigned.values())
