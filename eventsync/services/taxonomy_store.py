"""
Taxonomy store service for terms attached to records.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from eventsync.models import Record, Term
from eventsync.services.content_store import slugify
from eventsync.services.exceptions import NotFoundError
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")


class TaxonomyStore:
    """
    Service for taxonomy terms and record-term links.

    Usage:
        >>> taxonomies = TaxonomyStore(db_session)
        >>> concert = taxonomies.ensure_term("event_filter", "Concert")
        >>> taxonomies.set_terms(event, "event_filter", [concert.id])
    """

    def __init__(self, db: Session):
        self.db = db

    def ensure_term(
        self,
        taxonomy: str,
        name: str,
        slug: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Term:
        """Get the term with this slug in the taxonomy, creating it if needed."""
        slug = slug or slugify(name) or name
        term = (
            self.db.query(Term)
            .filter(Term.taxonomy == taxonomy, Term.slug == slug)
            .first()
        )
        if term:
            return term

        term = Term(taxonomy=taxonomy, name=name, slug=slug, parent_id=parent_id)
        self.db.add(term)
        self.db.flush()
        logger.debug("Created term", extra={"taxonomy": taxonomy, "slug": slug})
        return term

    def get_taxonomies(self, record: Record) -> List[str]:
        """Taxonomies the record has at least one term in."""
        return sorted({term.taxonomy for term in record.terms})

    def get_terms(self, record: Record, taxonomy: str) -> List[Term]:
        return sorted(
            (term for term in record.terms if term.taxonomy == taxonomy),
            key=lambda term: term.name,
        )

    def get_term_ids(self, record: Record, taxonomy: str) -> List[int]:
        return [term.id for term in self.get_terms(record, taxonomy)]

    def get_term_sets(
        self,
        record: Record,
        exclude: Iterable[str] = (),
    ) -> Dict[str, List[int]]:
        """
        Term IDs per taxonomy, skipping the excluded taxonomies.

        Used when cloning a record's classification onto another record.
        """
        excluded = set(exclude)
        return {
            taxonomy: self.get_term_ids(record, taxonomy)
            for taxonomy in self.get_taxonomies(record)
            if taxonomy not in excluded
        }

    def set_terms(self, record: Record, taxonomy: str, term_ids: Iterable[int]) -> None:
        """Replace the record's terms in one taxonomy."""
        ids = list(dict.fromkeys(term_ids))
        terms = self.db.query(Term).filter(Term.id.in_(ids)).all() if ids else []
        found = {term.id for term in terms}
        missing = [term_id for term_id in ids if term_id not in found]
        if missing:
            raise NotFoundError("Term", missing[0])

        kept = [term for term in record.terms if term.taxonomy != taxonomy]
        record.terms = kept + [term for term in terms if term.taxonomy == taxonomy]
        self.db.flush()

    def set_term_sets(self, record: Record, term_sets: Dict[str, List[int]]) -> None:
        for taxonomy, term_ids in term_sets.items():
            self.set_terms(record, taxonomy, term_ids)

    def clear_terms(self, record: Record, taxonomy: str) -> None:
        self.set_terms(record, taxonomy, [])

