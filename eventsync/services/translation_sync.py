"""
Translation sync service.

Makes sure every visible record of a translatable type has a copy in every
active language. Missing copies are cloned from the saved record (title,
status, publish date, fields and terms) and linked into its translation
group. The clone itself then runs the save pipeline with translations
suppressed, so it gets its own location fields and recurrences.
"""

from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventsync.config.settings import AppSettings, get_settings
from eventsync.models import Record, Taxonomies, translated_title_field
from eventsync.services.content_store import ContentStore
from eventsync.services.exceptions import ServiceError, TranslationCreateFailedError
from eventsync.services.field_store import FieldStore
from eventsync.services.save_context import SaveContext
from eventsync.services.taxonomy_store import TaxonomyStore
from eventsync.services.translation_links import TranslationLinkService
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")

# Called with (clone, context) to run the save pipeline on a new clone
PipelineRunner = Callable[[Record, SaveContext], object]


class TranslationSync:
    """
    Service creating missing translations.

    Usage:
        >>> sync = TranslationSync(db_session, settings=settings, pipeline=orchestrator.run_pipeline)
        >>> sync.create_missing_translations(event_de)
        {'de': 1, 'en': 4}
    """

    def __init__(
        self,
        db: Session,
        content_store: Optional[ContentStore] = None,
        field_store: Optional[FieldStore] = None,
        taxonomy_store: Optional[TaxonomyStore] = None,
        translation_links: Optional[TranslationLinkService] = None,
        settings: Optional[AppSettings] = None,
        pipeline: Optional[PipelineRunner] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.content_store = content_store or ContentStore(db)
        self.field_store = field_store or FieldStore(db)
        self.taxonomy_store = taxonomy_store or TaxonomyStore(db)
        self.translation_links = translation_links or TranslationLinkService(
            db, self.taxonomy_store, self.settings
        )
        self.pipeline = pipeline

    def sync(self, record: Record, context: Optional[SaveContext] = None) -> Dict[str, int]:
        """Run on save: create missing translations unless suppressed."""
        if context is not None and context.suppress_translations:
            return {}
        if record.record_type not in self.settings.translatable_types_set:
            return {}
        return self.create_missing_translations(record, context)

    def create_missing_translations(
        self,
        record: Record,
        context: Optional[SaveContext] = None,
    ) -> Dict[str, int]:
        """
        Clone the record into every active language it has no copy in yet.

        A record without a language is assigned the default language first.
        If a clone fails, the group is still saved with the translations
        created so far and TranslationCreateFailedError propagates.

        Returns:
            The translation group after syncing: language -> record ID
        """
        if not self.settings.translations_enabled or not record.is_visible:
            return {}

        languages = self.translation_links.active_languages()
        if not record.language:
            default = self.settings.default_language or languages[0]
            self.translation_links.set_language(record, default)

        translations = self.translation_links.get_translations(record)
        missing = [language for language in languages if language not in translations]
        if not missing:
            return translations

        nested = (context or SaveContext()).nested(suppress_translations=True)
        try:
            for language in missing:
                clone = self.create_translation(record, language, nested)
                translations[language] = clone.id
        finally:
            self.translation_links.save_translations(translations)

        logger.info(
            "Created missing translations",
            extra={"record_id": record.id, "languages": missing}
        )
        return translations

    def create_translation(
        self,
        record: Record,
        language: str,
        context: Optional[SaveContext] = None,
    ) -> Record:
        """
        Clone a record into one language.

        An existing translation in that language is returned unchanged. The
        clone's title comes from the staged per-language title field when
        set, else the source title.

        Raises:
            TranslationCreateFailedError: If the clone could not be stored
        """
        existing_id = self.translation_links.get_translation(record, language)
        if existing_id is not None:
            existing = self.content_store.find(existing_id)
            if existing is not None:
                return existing

        title = self.field_store.get_value(record, translated_title_field(language)) or record.title
        values = {
            name: value
            for name, value in self.field_store.get_values(record).items()
            if not self.field_store.is_managed(name)
        }
        term_sets = self.taxonomy_store.get_term_sets(
            record, exclude=(Taxonomies.TRANSLATIONS,)
        )

        try:
            clone = self.content_store.create(
                record.record_type,
                title=title,
                status=record.status,
                language=language,
                published_at=record.published_at,
            )
            self.field_store.set_values(clone, values)
            self.taxonomy_store.set_term_sets(clone, term_sets)
        except (SQLAlchemyError, ServiceError) as e:
            logger.error(
                "Translation clone failed",
                extra={"record_id": record.id, "language": language, "error": str(e)}
            )
            raise TranslationCreateFailedError(record.id, language, str(e)) from e

        logger.info(
            "Created translation",
            extra={"record_id": record.id, "clone_id": clone.id, "language": language}
        )

        if self.pipeline is not None:
            self.pipeline(clone, context or SaveContext(suppress_translations=True))
        return clone
