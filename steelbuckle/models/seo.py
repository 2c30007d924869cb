"""
Per-page SEO metadata with per-language texts.
"""
from typing import Dict, Optional

from steelbuckle.extensions import db

SEO_FIELDS = ("title", "metaDescription", "keywords", "ogTitle", "ogDescription")


class SeoMetadata(db.Model):
    __tablename__ = "seo_metadata"

    id = db.Column(db.Integer, primary_key=True)
    page_key = db.Column(db.String(255), unique=True, nullable=False)

    translations = db.relationship(
        "SeoTranslation", backref="metadata_row", cascade="all, delete-orphan", lazy=True
    )

    @classmethod
    def get_by_page_key(cls, page_key: str) -> Optional["SeoMetadata"]:
        return cls.query.filter_by(page_key=page_key).first()

    def translation_for(self, language_code: str) -> Optional["SeoTranslation"]:
        for translation in self.translations:
            if translation.language_code == language_code:
                return translation
        return None

    @classmethod
    def upsert(cls, page_key: str, language_code: str, fields: Dict) -> "SeoTranslation":
        """Create or update one page/language row. Does not commit."""
        metadata = cls.get_by_page_key(page_key)
        if metadata is None:
            metadata = cls(page_key=page_key)
            db.session.add(metadata)

        translation = metadata.translation_for(language_code)
        if translation is None:
            translation = SeoTranslation(language_code=language_code, title=fields.get("title") or "")
            metadata.translations.append(translation)

        translation.title = fields.get("title", translation.title) or ""
        translation.meta_description = fields.get("metaDescription", translation.meta_description)
        translation.keywords = fields.get("keywords", translation.keywords)
        translation.og_title = fields.get("ogTitle", translation.og_title)
        translation.og_description = fields.get("ogDescription", translation.og_description)
        db.session.flush()
        return translation


class SeoTranslation(db.Model):
    __tablename__ = "seo_translations"
    __table_args__ = (db.UniqueConstraint("seo_id", "language_code", name="uq_seo_language"),)

    id = db.Column(db.Integer, primary_key=True)
    seo_id = db.Column(db.Integer, db.ForeignKey("seo_metadata.id", ondelete="CASCADE"), nullable=False)
    language_code = db.Column(db.String(8), nullable=False)
    title = db.Column(db.String(255), nullable=False, default="")
    meta_description = db.Column(db.Text)
    keywords = db.Column(db.Text)
    og_title = db.Column(db.String(255))
    og_description = db.Column(db.Text)

    def to_dict(self, page_key: str) -> Dict:
        return {
            "pageKey": page_key,
            "title": self.title,
            "metaDescription": self.meta_description,
            "keywords": self.keywords,
            "ogTitle": self.og_title,
            "ogDescription": self.og_description,
            "language": self.language_code,
        }
