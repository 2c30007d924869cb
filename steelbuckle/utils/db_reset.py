"""
Wipe all site content and restore the defaults. Users and languages survive.
"""
import logging

from steelbuckle.errors import ReseedError, UpstreamError
from steelbuckle.extensions import db
from steelbuckle.models.contact import ContactInfo, PhoneNumber
from steelbuckle.models.media import Media, MediaReference
from steelbuckle.models.project import Project, ProjectTranslation
from steelbuckle.models.seo import SeoMetadata, SeoTranslation
from steelbuckle.models.setting import SiteSetting
from steelbuckle.models.translation import Translation, TranslationKey
from steelbuckle.utils.seed import seed_content

logger = logging.getLogger(__name__)

# Children before parents.
CONTENT_MODELS = (
    SeoTranslation,
    SeoMetadata,
    PhoneNumber,
    ContactInfo,
    MediaReference,
    Media,
    ProjectTranslation,
    Project,
    Translation,
    TranslationKey,
    SiteSetting,
)


class ResetDeleteError(UpstreamError):
    """Deleting content failed; the transaction was rolled back and nothing changed."""


def clear_content():
    try:
        for model in CONTENT_MODELS:
            deleted = db.session.query(model).delete(synchronize_session=False)
            logger.info(f"Deleted {deleted} rows from {model.__tablename__}")
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error("Content delete failed; rolled back", exc_info=True)
        raise ResetDeleteError("Deleting content failed", stage="delete") from e
    db.session.expunge_all()


def reset_content(seed=seed_content, delete_message=None, reseed_message=None):
    """Delete every content table in one transaction, then reseed.

    Raises ResetDeleteError when the delete fails (nothing changed) and
    ReseedError when the delete committed but seeding did not.
    """
    try:
        clear_content()
    except ResetDeleteError as e:
        if delete_message:
            e.message = delete_message
        raise

    try:
        return seed()
    except Exception as e:
        logger.error("Reseeding after content reset failed", exc_info=True)
        raise ReseedError(reseed_message or "Restoring default content failed", stage="reseed") from e
