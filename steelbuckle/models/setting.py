"""
Key/value site settings stored as JSON text.
"""
import json
from datetime import datetime

from steelbuckle.extensions import db


class SiteSetting(db.Model):
    __tablename__ = "site_settings"

    key = db.Column(db.String(120), primary_key=True)
    value = db.Column(db.Text, nullable=False, default="null")
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @classmethod
    def get_value(cls, key, default=None):
        setting = db.session.get(cls, key)
        if setting is None:
            return default
        try:
            return json.loads(setting.value)
        except ValueError:
            return default

    @classmethod
    def set_value(cls, key, value):
        """Store `value` as JSON under `key`. Does not commit."""
        setting = db.session.get(cls, key)
        if setting is None:
            setting = cls(key=key)
            db.session.add(setting)
        setting.value = json.dumps(value)
        setting.updated_at = datetime.utcnow()
        return setting
