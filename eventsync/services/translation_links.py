"""
Translation link service.

Records that are translations of each other share one term in the reserved
record_translations taxonomy. Each record carries its own language code.
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from eventsync.config.settings import AppSettings, get_settings
from eventsync.models import Record, Taxonomies
from eventsync.services.guid import GuidService
from eventsync.services.taxonomy_store import TaxonomyStore
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")


class TranslationLinkService:
    """
    Service for languages and translation groups.

    Usage:
        >>> links = TranslationLinkService(db_session)
        >>> links.save_translations({"de": event_de.id, "en": event_en.id})
        >>> links.get_translations(event_de)
        {'de': 1, 'en': 2}
    """

    def __init__(
        self,
        db: Session,
        taxonomy_store: Optional[TaxonomyStore] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.db = db
        self.taxonomy_store = taxonomy_store or TaxonomyStore(db)
        self.settings = settings or get_settings()

    def active_languages(self) -> List[str]:
        return self.settings.active_languages_list

    def get_language(self, record: Record) -> Optional[str]:
        return record.language

    def set_language(self, record: Record, language: Optional[str]) -> None:
        record.language = language
        self.db.flush()

    def get_translations(self, record: Record) -> Dict[str, int]:
        """
        Get the translation group of a record: language -> record ID.

        A record without a group maps only its own language to itself.
        """
        group = self._get_group(record)
        if group is None:
            return {record.language: record.id} if record.language else {}

        members = (
            self.db.query(Record)
            .filter(Record.terms.any(id=group.id))
            .order_by(Record.id)
            .all()
        )
        return {member.language: member.id for member in members if member.language}

    def get_translation(self, record: Record, language: str) -> Optional[int]:
        return self.get_translations(record).get(language)

    def save_translations(self, translations: Dict[str, int]) -> None:
        """
        Link the given records as translations of each other.

        An existing group of any member is reused; otherwise a new group
        term is created.
        """
        records = [
            self.db.query(Record).filter(Record.id == record_id).first()
            for record_id in translations.values()
        ]
        records = [record for record in records if record is not None]
        if not records:
            return

        group = next(
            (g for g in (self._get_group(record) for record in records) if g is not None),
            None
        )
        if group is None:
            name = f"translations-{GuidService.generate_uuid().hex}"
            group = self.taxonomy_store.ensure_term(Taxonomies.TRANSLATIONS, name, slug=name)

        for record in records:
            self.taxonomy_store.set_terms(record, Taxonomies.TRANSLATIONS, [group.id])

        logger.debug(
            "Saved translation group",
            extra={"group": group.slug, "translations": dict(translations)}
        )

    def _get_group(self, record: Record):
        terms = self.taxonomy_store.get_terms(record, Taxonomies.TRANSLATIONS)
        return terms[0] if terms else None
