"""
Default content seeding from the JSON files in `steelbuckle/content/`.

IMPORTANT: Read `DESIGN.md` before making changes.
"""
import json
import logging
from pathlib import Path

from steelbuckle.extensions import db
from steelbuckle.models.contact import ContactInfo
from steelbuckle.models.media import Media, MediaReference
from steelbuckle.models.project import Project, ProjectTranslation
from steelbuckle.models.seo import SeoMetadata
from steelbuckle.models.translation import SUPPORTED_LANGUAGES, Language, Translation
from steelbuckle.utils.media_host import public_id_from_url

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"


def _load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def flatten(obj, prefix=""):
    """Yield (key_path, value) for every leaf of a nested JSON document."""
    items = obj.items() if isinstance(obj, dict) else enumerate(obj)
    for key, value in items:
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, (dict, list)):
            yield from flatten(value, path)
        elif value is not None:
            yield path, value if isinstance(value, str) else str(value)


def _seed_translations(content_dir):
    count = 0
    for lang in SUPPORTED_LANGUAGES:
        path = content_dir / f"{lang}.json"
        if not path.exists():
            logger.warning(f"Content file not found: {path}")
            continue
        for key_path, value in flatten(_load_json(path)):
            Translation.upsert(key_path, lang, value)
            count += 1
    return count


def _seed_media(data):
    base = data.get("media_base_url", "").rstrip("/")
    by_filename = {}
    for item in data.get("media", []):
        path = f"{base}/{item['filename']}" if base else item["filename"]
        media = Media.find_by_path(path)
        if media is None:
            media = Media(path=path, filename=item["filename"])
            db.session.add(media)
        media.filename = item["filename"]
        media.media_type = item.get("mediaType", "image")
        media.alt_text = item.get("altText")
        media.cloudinary_id = public_id_from_url(path)
        by_filename[item["filename"]] = media
    db.session.flush()

    for ref in data.get("references", []):
        media = by_filename.get(ref["filename"])
        if media is None:
            logger.warning(f"Seed reference {ref['key']} points at unknown file {ref['filename']}")
            continue
        MediaReference.point(ref["key"], media)
    return by_filename


def _find_seeded_project(titles):
    english = titles.get("en")
    if not english:
        return None
    match = ProjectTranslation.query.filter_by(language_code="en", title=english).first()
    return match.project if match else None


def _seed_projects(data, media_by_filename):
    for item in data.get("projects", []):
        media = media_by_filename.get(item["image"])
        image = media.path if media is not None else item["image"]
        titles = item.get("translations", {})

        project = _find_seeded_project(titles)
        if project is None:
            project = Project(display_order=Project.next_display_order())
            db.session.add(project)
        project.year = item.get("year", "")
        project.image = image
        for lang, title in titles.items():
            if title:
                project.set_title(lang, title)
        db.session.flush()


def _seed_seo(data):
    for page in data.get("seo", []):
        for lang, fields in page.get("translations", {}).items():
            SeoMetadata.upsert(page["pageKey"], lang, fields)


def _seed_contact(data):
    contact = data.get("contact")
    if not contact or ContactInfo.current() is not None:
        return
    ContactInfo.replace(contact["email"], contact.get("office", {}), contact.get("phones", []))


def seed_content(content_dir=None):
    """Load the default content in one transaction. Safe to run repeatedly."""
    content_dir = Path(content_dir) if content_dir else CONTENT_DIR
    data = _load_json(content_dir / "seed.json")
    try:
        for language in data.get("languages", []):
            Language.upsert(language["code"], language["name"])
        translations = _seed_translations(content_dir)
        media = _seed_media(data)
        _seed_projects(data, media)
        _seed_seo(data)
        _seed_contact(data)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Seeded {translations} translations and {len(media)} media assets")
    return {"translations": translations, "media": len(media)}
