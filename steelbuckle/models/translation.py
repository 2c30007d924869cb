"""
Language and translation models.
"""
from typing import Dict, List, Optional, Tuple

from steelbuckle.extensions import db

SUPPORTED_LANGUAGES = ("et", "en", "ru", "lv")
DEFAULT_LANGUAGE = "et"


class Language(db.Model):
    __tablename__ = "languages"

    code = db.Column(db.String(8), primary_key=True)
    name = db.Column(db.String(64), nullable=False)

    @classmethod
    def get_all(cls) -> List[Dict]:
        return [{"code": lang.code, "name": lang.name} for lang in cls.query.order_by(cls.name.asc()).all()]

    @classmethod
    def upsert(cls, code: str, name: str) -> "Language":
        language = db.session.get(cls, code)
        if language is None:
            language = cls(code=code, name=name)
            db.session.add(language)
        else:
            language.name = name
        return language


class TranslationKey(db.Model):
    __tablename__ = "translation_keys"

    id = db.Column(db.Integer, primary_key=True)
    key_path = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.String(255))

    translations = db.relationship(
        "Translation", backref="key", cascade="all, delete-orphan", lazy=True
    )


class Translation(db.Model):
    __tablename__ = "translations"
    __table_args__ = (db.UniqueConstraint("key_id", "language_code", name="uq_translation_key_language"),)

    id = db.Column(db.Integer, primary_key=True)
    key_id = db.Column(db.Integer, db.ForeignKey("translation_keys.id", ondelete="CASCADE"), nullable=False)
    language_code = db.Column(db.String(8), nullable=False, index=True)
    value = db.Column(db.Text, nullable=False, default="")

    @classmethod
    def rows_for_language(cls, language_code: str) -> List[Tuple[str, str]]:
        """Flat (key_path, value) rows for one language, ordered by key path."""
        query = (
            db.session.query(TranslationKey.key_path, cls.value)
            .join(cls, cls.key_id == TranslationKey.id)
            .filter(cls.language_code == language_code)
            .order_by(TranslationKey.key_path.asc())
        )
        return [(key_path, value) for key_path, value in query.all()]

    @classmethod
    def upsert(cls, key_path: str, language_code: str, value: str, description: Optional[str] = None) -> "Translation":
        """Create or update the value stored for (key_path, language_code).

        Does not commit; the caller owns the transaction.
        """
        key = TranslationKey.query.filter_by(key_path=key_path).first()
        if key is None:
            key = TranslationKey(key_path=key_path, description=description or f"Auto-created for path: {key_path}")
            db.session.add(key)
            db.session.flush()

        translation = cls.query.filter_by(key_id=key.id, language_code=language_code).first()
        if translation is None:
            translation = cls(key_id=key.id, language_code=language_code, value=value)
            db.session.add(translation)
        else:
            translation.value = value
        db.session.flush()
        return translation
