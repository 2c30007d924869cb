"""
Company contact information (a single record) and its phone numbers.
"""
from typing import Dict, List

from steelbuckle.extensions import db

EMPTY_CONTACT = {
    "phones": [],
    "email": "",
    "office": {"city": "", "postal": "", "street": "", "room": ""},
}


class ContactInfo(db.Model):
    __tablename__ = "contact_info"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, default="")
    office_city = db.Column(db.String(120), nullable=False, default="")
    office_postal = db.Column(db.String(32), nullable=False, default="")
    office_street = db.Column(db.String(255), nullable=False, default="")
    office_room = db.Column(db.String(120))

    phones = db.relationship(
        "PhoneNumber",
        backref="contact_info",
        cascade="all, delete-orphan",
        order_by="PhoneNumber.id",
        lazy=True,
    )

    @classmethod
    def current(cls):
        return cls.query.order_by(cls.id.asc()).first()

    @classmethod
    def replace(cls, email: str, office: Dict, phones: List[Dict]) -> "ContactInfo":
        """Overwrite the contact record and its phone list. Does not commit."""
        info = cls.current()
        if info is None:
            info = cls()
            db.session.add(info)

        info.email = email
        info.office_city = office.get("city", "")
        info.office_postal = office.get("postal", "")
        info.office_street = office.get("street", "")
        info.office_room = office.get("room") or None

        info.phones = [PhoneNumber(number=p["number"], label=p.get("label", "")) for p in phones]
        db.session.flush()
        return info

    def to_dict(self) -> Dict:
        return {
            "phones": [phone.to_dict() for phone in self.phones],
            "email": self.email,
            "office": {
                "city": self.office_city,
                "postal": self.office_postal,
                "street": self.office_street,
                "room": self.office_room or "",
            },
        }


class PhoneNumber(db.Model):
    __tablename__ = "phone_numbers"

    id = db.Column(db.Integer, primary_key=True)
    contact_info_id = db.Column(db.Integer, db.ForeignKey("contact_info.id", ondelete="CASCADE"), nullable=False)
    number = db.Column(db.String(64), nullable=False)
    label = db.Column(db.String(120), nullable=False, default="")

    def to_dict(self) -> Dict:
        return {"id": str(self.id), "number": self.number, "label": self.label}
