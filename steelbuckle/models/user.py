"""
User model for admin authentication.
"""
import logging
import uuid

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from steelbuckle.extensions import db

logger = logging.getLogger(__name__)


class User(UserMixin, db.Model):
    """Admin user; the session token carries id, username and role."""

    __tablename__ = "users"

    # Bootstrap credentials used only when the users table is empty and no
    # ADMIN_* environment variables are set. Change immediately after first run.
    _DEFAULT_ADMIN_USERNAME = "default_admin1"
    _DEFAULT_ADMIN_PASSWORD = "default_password1"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="editor")

    @classmethod
    def get_by_id(cls, user_id):
        if not user_id:
            return None
        return db.session.get(cls, str(user_id))

    @classmethod
    def get_by_username(cls, username):
        """Get user by username"""
        if not username:
            return None
        return cls.query.filter_by(username=username).first()

    @classmethod
    def create(cls, username, password=None, password_hash=None, role="admin"):
        if password_hash is None:
            password_hash = generate_password_hash(password)
        user = cls(username=username, password_hash=password_hash, role=role)
        db.session.add(user)
        db.session.commit()
        return user

    @classmethod
    def ensure_bootstrap_admin(cls, username=None, password=None, password_hash=None):
        """Create the first admin account when no users exist.

        Configured credentials are preferred (ADMIN_USERNAME with ADMIN_PASSWORD or
        ADMIN_PASSWORD_HASH); otherwise the default credentials are used.
        """
        if cls.query.first() is not None:
            return None

        username = (username or cls._DEFAULT_ADMIN_USERNAME).strip()

        if password_hash:
            return cls.create(username, password_hash=password_hash)
        if password:
            return cls.create(username, password=password)

        logger.warning("No ADMIN_PASSWORD configured; created bootstrap admin %r with default password", username)
        return cls.create(username, password=cls._DEFAULT_ADMIN_PASSWORD)

    def check_password(self, password):
        """Check if password matches"""
        if not password:
            return False
        return check_password_hash(self.password_hash, password)

    def set_password(self, new_password):
        self.password_hash = generate_password_hash(new_password)

    @property
    def is_admin(self):
        return self.role == "admin"

    def to_summary(self):
        return {"id": self.id, "username": self.username, "role": self.role}
