"""
Media asset and media reference models.

A Media row holds metadata and the canonical URL returned by the remote host.
A MediaReference is a stable logical slot ("about.main_image") pointing at
the currently active asset.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_

from steelbuckle.extensions import db


class Media(db.Model):
    __tablename__ = "media"

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(600), nullable=False, index=True)
    cloudinary_id = db.Column(db.String(255))  # remote public id, when hosted
    media_type = db.Column(db.String(64), nullable=False, default="image")
    alt_text = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @classmethod
    def get_by_id(cls, media_id) -> Optional["Media"]:
        try:
            return db.session.get(cls, int(media_id))
        except (TypeError, ValueError):
            return None

    @classmethod
    def find_by_path(cls, path: str) -> Optional["Media"]:
        return cls.query.filter_by(path=path).first()

    @classmethod
    def find_by_filename_stem(cls, filename: str) -> Optional["Media"]:
        stem = filename.rsplit(".", 1)[0]
        if not stem:
            return None
        return cls.query.filter(cls.filename.contains(stem)).first()

    @classmethod
    def find_by_basename(cls, basename: str) -> Optional["Media"]:
        if not basename:
            return None
        return cls.query.filter(cls.path.endswith(f"/{basename}")).first()

    @classmethod
    def library(cls) -> List["Media"]:
        return cls.query.order_by(cls.updated_at.desc(), cls.id.desc()).all()

    @classmethod
    def remove(cls, media: "Media") -> None:
        """Delete the row; references pointing at it are left dangling."""
        MediaReference.query.filter_by(media_id=media.id).update({"media_id": None})
        db.session.delete(media)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "url": self.path,
            "publicId": self.cloudinary_id,
            "mediaType": self.media_type,
            "altText": self.alt_text,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class MediaReference(db.Model):
    __tablename__ = "media_references"

    id = db.Column(db.Integer, primary_key=True)
    reference_key = db.Column(db.String(255), unique=True, nullable=False)
    media_id = db.Column(db.Integer, db.ForeignKey("media.id", ondelete="SET NULL"), nullable=True)

    media = db.relationship("Media", lazy="joined")

    @classmethod
    def resolve(cls, reference_key: str) -> Optional["MediaReference"]:
        """The reference for a key, or None when missing or dangling."""
        ref = cls.query.filter_by(reference_key=reference_key).first()
        if ref is None or ref.media is None:
            return None
        return ref

    @classmethod
    def resolve_many(cls, reference_keys: Iterable[str]) -> Dict[str, str]:
        keys = [k for k in reference_keys if k]
        if not keys:
            return {}
        refs = cls.query.filter(cls.reference_key.in_(keys)).all()
        return {ref.reference_key: ref.media.path for ref in refs if ref.media is not None}

    @classmethod
    def for_page_prefix(cls, page_prefix: str) -> Dict[str, str]:
        """Every live reference under `<prefix>.` or `<prefix>_page.`."""
        refs = cls.query.filter(
            or_(
                cls.reference_key.startswith(f"{page_prefix}.", autoescape=True),
                cls.reference_key.startswith(f"{page_prefix}_page.", autoescape=True),
            )
        ).all()
        return {ref.reference_key: ref.media.path for ref in refs if ref.media is not None}

    @classmethod
    def point(cls, reference_key: str, media: Media) -> "MediaReference":
        """Create or repoint a reference. Does not commit."""
        ref = cls.query.filter_by(reference_key=reference_key).first()
        if ref is None:
            ref = cls(reference_key=reference_key, media=media)
            db.session.add(ref)
        else:
            ref.media = media
        db.session.flush()
        return ref
