# backend/services/user_store.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from models.user_model import User
from schemas.common import StoreResult
from schemas.users import RegisterPayload, UserDetailsUpdate, UserOut, UserProfile
from services.address_resolver import get_or_create_address
from services.base import TransactionalStore
from services.errors import ConflictError, InvalidCredentials, NotFoundError
from services import security

logger = logging.getLogger(__name__)


def _missing_fields(**fields) -> Optional[StoreResult]:
    missing = [name for name, value in fields.items() if value is None or not str(value).strip()]
    if missing:
        return StoreResult.fail("validation", f"Missing required fields: {', '.join(missing)}.")
    return None


class UserStore(TransactionalStore):
    """Registration, lookup, authentication and profile updates."""

    def __init__(self, session_factory: sessionmaker, bcrypt_rounds: int = None):
        super().__init__(session_factory)
        self._bcrypt_rounds = bcrypt_rounds

    # ---------- helpers ----------

    @staticmethod
    def _load(db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found.")
        return user

    @staticmethod
    def _confirm_password(user: User, password: str) -> None:
        if not security.verify_password(password, user.password_hash):
            raise InvalidCredentials("Incorrect password.")

    @staticmethod
    def _check_available(db: Session, username: str, email: str) -> None:
        if db.query(User.id).filter(User.username == username).first():
            raise ConflictError("Username already exists.")
        if db.query(User.id).filter(User.email == email).first():
            raise ConflictError("Email already registered.")

    # ---------- registration ----------

    def create_user(self, payload: RegisterPayload) -> StoreResult:
        missing = _missing_fields(
            username=payload.username,
            password=payload.password,
            email=payload.email,
            street_name=payload.street_name,
            city=payload.city,
            postal_code=payload.postal_code,
        )
        if missing:
            return missing
        if not security.is_valid_email(payload.email):
            return StoreResult.fail("validation", "Invalid email format.")
        if not security.is_strong_password(payload.password):
            return StoreResult.fail(
                "validation",
                "Password must be at least 8 characters and contain upper and lower case letters and a digit.",
            )
        if not security.is_valid_phone(payload.phone_number):
            return StoreResult.fail("validation", "Invalid phone number.")
        if not security.is_valid_role(payload.role):
            return StoreResult.fail("validation", "Invalid role.")

        username = payload.username.strip()
        email = payload.email.strip()

        def work(db: Session) -> StoreResult:
            self._check_available(db, username, email)

            address_id = get_or_create_address(
                db, payload.street_name.strip(), payload.city.strip(),
                payload.postal_code.strip(), payload.number,
            )
            user = User(
                username=username,
                email=email,
                password_hash=security.hash_password(payload.password, self._bcrypt_rounds),
                role=payload.role or "Seeker",
                first_name=payload.first_name,
                last_name=payload.last_name,
                phone_number=payload.phone_number,
                address_id=address_id,
                is_verified=False,
                registration_date=datetime.utcnow(),
            )
            db.add(user)
            db.flush()
            logger.info(f"Registered user {user.id} ({user.role})")
            return StoreResult.ok("User created successfully!", {"user_id": user.id})

        return self._run(
            "create_user", work,
            failure_message="DB error during user creation.",
            conflict_message="Username or email already in use.",
        )

    # ---------- authentication ----------

    def authenticate_user(self, identifier: str, password: str) -> StoreResult:
        """
        Check a username-or-email and password pair.

        Identifiers that parse as an email address are looked up by email,
        anything else by username. Unknown accounts and wrong passwords get
        the same message.
        """
        if not identifier or not password:
            return StoreResult.fail("invalid_credentials", "Invalid credentials.")

        column = User.email if security.is_valid_email(identifier) else User.username

        def work(db: Session) -> StoreResult:
            user = db.query(User).filter(column == identifier).first()
            if not user or not security.verify_password(password, user.password_hash):
                raise InvalidCredentials()
            user.last_login_date = datetime.utcnow()
            db.flush()
            return StoreResult.ok("Authentication successful", UserOut.model_validate(user))

        return self._run("authenticate_user", work, failure_message="Internal error during authentication")

    def update_last_login(self, user_id: int) -> StoreResult:
        def work(db: Session) -> StoreResult:
            updated = (
                db.query(User)
                .filter(User.id == user_id)
                .update({User.last_login_date: datetime.utcnow()}, synchronize_session=False)
            )
            if not updated:
                raise NotFoundError("User not found.")
            return StoreResult.ok("Last login updated.")

        return self._run("update_last_login", work, failure_message="DB error updating last login.")

    # ---------- updates ----------

    def update_password(self, user_id: int, current_password: str, new_password: str) -> StoreResult:
        if not security.is_strong_password(new_password):
            return StoreResult.fail(
                "validation",
                "Password must be at least 8 characters and contain upper and lower case letters and a digit.",
            )

        def work(db: Session) -> StoreResult:
            user = self._load(db, user_id)
            self._confirm_password(user, current_password)
            user.password_hash = security.hash_password(new_password, self._bcrypt_rounds)
            logger.info(f"Password changed for user {user_id}")
            return StoreResult.ok("Password updated successfully.")

        return self._run("update_password", work, failure_message="DB error updating password.")

    def update_verification_status(self, user_id: int, is_verified: bool) -> StoreResult:
        def work(db: Session) -> StoreResult:
            updated = (
                db.query(User)
                .filter(User.id == user_id)
                .update({User.is_verified: bool(is_verified)}, synchronize_session=False)
            )
            if not updated:
                raise NotFoundError("User not found.")
            return StoreResult.ok("Verification status updated.", {"is_verified": bool(is_verified)})

        return self._run("update_verification_status", work, failure_message="DB error updating verification status.")

    def update_user_details(self, user_id: int, details: UserDetailsUpdate) -> StoreResult:
        missing = _missing_fields(email=details.email, current_password=details.current_password)
        if missing:
            return missing
        if not security.is_valid_email(details.email):
            return StoreResult.fail("validation", "Invalid email format.")
        if not security.is_valid_phone(details.phone_number):
            return StoreResult.fail("validation", "Invalid phone number.")

        email = details.email.strip()

        def work(db: Session) -> StoreResult:
            user = self._load(db, user_id)
            self._confirm_password(user, details.current_password)
            taken = db.query(User.id).filter(User.email == email, User.id != user_id).first()
            if taken:
                raise ConflictError("Email already registered.")
            user.first_name = details.first_name
            user.last_name = details.last_name
            user.email = email
            user.phone_number = details.phone_number
            return StoreResult.ok("Account details updated successfully.")

        return self._run(
            "update_user_details", work,
            failure_message="DB error updating account details.",
            conflict_message="Email already registered.",
        )

    def update_profile_picture(self, user_id: int, file_url: str) -> StoreResult:
        missing = _missing_fields(file_url=file_url)
        if missing:
            return missing

        def work(db: Session) -> StoreResult:
            updated = (
                db.query(User)
                .filter(User.id == user_id)
                .update({User.profile_picture_url: file_url}, synchronize_session=False)
            )
            if not updated:
                raise NotFoundError("User not found.")
            return StoreResult.ok("Profile picture updated.", {"file_path": file_url})

        return self._run("update_profile_picture", work, failure_message="DB error updating profile picture.")

    # ---------- lookups ----------

    def _get_by(self, operation: str, criterion) -> StoreResult:
        def work(db: Session) -> StoreResult:
            user = db.query(User).filter(criterion).first()
            if not user:
                raise NotFoundError("User not found.")
            return StoreResult.ok("User found.", UserOut.model_validate(user))

        return self._run(operation, work, failure_message="DB error fetching user.")

    def get_user_by_username(self, username: str) -> StoreResult:
        return self._get_by("get_user_by_username", User.username == username)

    def get_user_by_email(self, email: str) -> StoreResult:
        return self._get_by("get_user_by_email", User.email == email)

    def get_user_by_id(self, user_id: int) -> StoreResult:
        return self._get_by("get_user_by_id", User.id == user_id)

    def get_user_profile(self, user_id: int) -> StoreResult:
        def work(db: Session) -> StoreResult:
            user = self._load(db, user_id)
            profile = UserProfile.model_validate(user)
            if user.address:
                profile.street_name = user.address.street_name
                profile.city = user.address.city
                profile.postal_code = user.address.postal_code
            return StoreResult.ok("Profile loaded.", profile)

        return self._run("get_user_profile", work, failure_message="DB error fetching profile.")
