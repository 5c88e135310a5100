import re
from datetime import datetime, timezone

from agromart.errors import AppError, Conflict, ValidationFailed
from agromart.extensions import bcrypt, db
from agromart.models import User
from agromart.services.store import transaction

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthService:
    @staticmethod
    def _normalize_phone(phone):
        digits = "".join(ch for ch in (phone or "") if ch.isdigit())
        if digits and not re.fullmatch(r"\d{7,15}", digits):
            raise ValidationFailed("Phone number must have between 7 and 15 digits.")
        return digits

    @staticmethod
    def register_user(full_name, email, password, phone="", role="farmer"):
        if role not in User.ROLES:
            raise ValidationFailed("Invalid role.")

        normalized_email = (email or "").strip().lower()
        full_name = (full_name or "").strip()
        if not full_name or not normalized_email or not password:
            raise ValidationFailed("Name, email, and password are required.")
        if not EMAIL_PATTERN.fullmatch(normalized_email):
            raise ValidationFailed("Invalid email address.")
        if len(password) < 6:
            raise ValidationFailed("Password must be at least 6 characters.")

        if User.query.filter_by(email=normalized_email).first():
            raise Conflict("Email already registered.")

        user = User(
            full_name=full_name,
            email=normalized_email,
            phone=AuthService._normalize_phone(phone),
            role=role,
            password_hash=bcrypt.generate_password_hash(password).decode("utf-8"),
        )
        with transaction("Email already registered.") as session:
            session.add(user)
        return user

    @staticmethod
    def authenticate_user(email, password):
        user = User.query.filter_by(email=(email or "").strip().lower()).first()
        if not user:
            raise AppError("Invalid credentials.", 401)

        try:
            is_valid = bcrypt.check_password_hash(user.password_hash, password or "")
        except ValueError:
            is_valid = False
        if not is_valid:
            raise AppError("Invalid credentials.", 401)

        user.last_login = datetime.now(timezone.utc)
        db.session.commit()
        return user
