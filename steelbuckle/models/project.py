"""
Project model with per-language titles.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func

from steelbuckle.extensions import db

PLACEHOLDER_IMAGE = "/images/placeholder.jpg"


class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    year = db.Column(db.String(64), nullable=False, default="")
    image = db.Column(db.String(600), nullable=False, default=PLACEHOLDER_IMAGE)
    display_order = db.Column(db.Integer, nullable=False, default=0, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    translations = db.relationship(
        "ProjectTranslation", backref="project", cascade="all, delete-orphan", lazy=True
    )

    @classmethod
    def get_by_id(cls, project_id) -> Optional["Project"]:
        if not project_id:
            return None
        return db.session.get(cls, str(project_id))

    @classmethod
    def next_display_order(cls) -> int:
        highest = db.session.query(func.max(cls.display_order)).scalar()
        return 0 if highest is None else highest + 1

    @classmethod
    def list_for_language(cls, language_code: str) -> List[Dict]:
        """All projects in display order with their title in one language."""
        projects = cls.query.order_by(cls.display_order.asc(), cls.created_at.asc()).all()
        return [project.to_dict(language_code) for project in projects]

    def title_for(self, language_code: str) -> str:
        for translation in self.translations:
            if translation.language_code == language_code:
                return translation.title
        return ""

    def set_title(self, language_code: str, title: str) -> "ProjectTranslation":
        for translation in self.translations:
            if translation.language_code == language_code:
                translation.title = title
                return translation
        translation = ProjectTranslation(language_code=language_code, title=title)
        self.translations.append(translation)
        return translation

    def titles(self) -> Dict[str, str]:
        return {t.language_code: t.title for t in self.translations}

    def to_dict(self, language_code: str) -> Dict:
        return {
            "id": self.id,
            "title": self.title_for(language_code),
            "year": self.year,
            "image": self.image,
            "displayOrder": self.display_order,
        }


class ProjectTranslation(db.Model):
    __tablename__ = "project_translations"
    __table_args__ = (db.UniqueConstraint("project_id", "language_code", name="uq_project_language"),)

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    language_code = db.Column(db.String(8), nullable=False)
    title = db.Column(db.String(500), nullable=False, default="")
