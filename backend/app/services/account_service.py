"""
Account Provisioning Service
Creates, lists, deactivates and re-credentials portal accounts.

An account is an auth row in `profiles` plus exactly one role row in
`teachers` or `students`. Both rows are written in a single transaction;
the plaintext secret is handed back once and never stored or logged.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, or_
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    DuplicateEmailError,
    DuplicateIdentifierError,
    PartialWriteFailureError,
    PortalError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.security import get_password_hash, verify_password
from app.core.types import generate_uuid
from app.models.profile import Profile, UserRole
from app.models.student import Student
from app.models.teacher import Teacher
from app.schemas.account import (
    ProfileView,
    StudentCreate,
    StudentUpdate,
    StudentView,
    TeacherCreate,
    TeacherUpdate,
    TeacherView,
)
from app.services import credential_policy


@dataclass
class ProvisionedAccount:
    """Result of a create call. plaintext_secret exists only here."""
    account_id: str
    record: Union[StudentView, TeacherView, ProfileView]
    plaintext_secret: str = field(repr=False)
    generated: bool = True


def is_unique_violation(error: Exception) -> bool:
    """Match the store's error text for a uniqueness violation"""
    message = str(getattr(error, "orig", error)).lower()
    return "unique" in message or "duplicate" in message


def like_pattern(search: str) -> str:
    """Substring pattern with LIKE wildcards in the search text taken literally"""
    escaped = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def generate_teacher_uid() -> str:
    return f"T-{secrets.token_hex(3).upper()}"


class AccountProvisioningService:
    """Service for account lifecycle operations"""

    def __init__(self, db: Optional[AsyncSession]):
        self.db = db

    def _require_db(self) -> AsyncSession:
        if self.db is None:
            raise BackendUnavailableError()
        return self.db

    # =====================================================
    # TRANSACTION HELPERS
    # =====================================================

    async def _rollback(self, account_id: str) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            raise PartialWriteFailureError(account_id, str(e)) from e

    async def _flush(self, account_id: str, on_duplicate: PortalError) -> None:
        """Flush pending rows, translating store errors to the portal taxonomy"""
        try:
            await self.db.flush()
        except DBAPIError as e:
            await self._translate_store_error(e, account_id, on_duplicate)

    async def _commit(self, account_id: str = "", on_duplicate: Optional[PortalError] = None) -> None:
        try:
            await self.db.commit()
        except DBAPIError as e:
            await self._translate_store_error(e, account_id, on_duplicate)

    async def _translate_store_error(self, error: DBAPIError, account_id: str,
                                     on_duplicate: Optional[PortalError]) -> None:
        await self._rollback(account_id)
        if isinstance(error, OperationalError):
            raise BackendUnavailableError(f"Database unavailable: {error.orig}") from error
        if on_duplicate is not None and isinstance(error, IntegrityError) and is_unique_violation(error):
            raise on_duplicate from error
        raise PortalError(f"Failed to save account: {error.orig}", code="STORE_ERROR") from error

    def _new_profile(self, account_id: str, role: UserRole, email: str, secret: str) -> Profile:
        return Profile(
            user_id=account_id,
            role=role,
            email=email,
            password_hash=get_password_hash(secret),
            is_active=True,
            must_change_password=settings.REQUIRE_PASSWORD_CHANGE,
        )

    # =====================================================
    # CREATE
    # =====================================================

    async def create_student(self, data: StudentCreate) -> ProvisionedAccount:
        """Create a STUDENT auth record and student profile"""
        db = self._require_db()
        account_id = generate_uuid()
        secret = credential_policy.initial_student_password(data.roll_no)

        profile = self._new_profile(account_id, UserRole.STUDENT, data.email, secret)
        db.add(profile)
        await self._flush(account_id, DuplicateEmailError("student"))

        student = Student(
            user_id=account_id,
            roll_no=data.roll_no,
            full_name=data.full_name,
            phone=data.phone,
            term=data.term,
            session=data.session,
            batch=data.batch,
            section=data.section,
            profile=profile,
        )
        db.add(student)
        duplicate_roll = DuplicateIdentifierError("student", "roll_no", "roll number")
        await self._flush(account_id, duplicate_roll)
        await self._commit(account_id, duplicate_roll)

        logger.log_account_event("created", account_id, role=UserRole.STUDENT.value)

        record = await self.get_student(account_id)
        return ProvisionedAccount(account_id=account_id, record=record, plaintext_secret=secret)

    async def create_teacher(self, data: TeacherCreate) -> ProvisionedAccount:
        """
        Create a TEACHER auth record and teacher profile.

        A supplied password must pass validate_strength; otherwise a 6-digit
        password is generated.
        """
        db = self._require_db()

        if data.password is not None:
            check = credential_policy.validate_strength(data.password)
            if not check.valid:
                raise ValidationError(check.reason, field="password")
            secret, generated = data.password, False
        else:
            secret, generated = credential_policy.generate_teacher_password(), True

        account_id = generate_uuid()
        profile = self._new_profile(account_id, UserRole.TEACHER, data.email, secret)
        db.add(profile)
        await self._flush(account_id, DuplicateEmailError("teacher"))

        teacher = Teacher(
            user_id=account_id,
            teacher_uid=data.teacher_uid or generate_teacher_uid(),
            full_name=data.full_name,
            phone=data.phone,
            designation=data.designation,
            department=data.department or settings.DEPARTMENT_NAME,
            office_room=data.office_room,
            profile=profile,
        )
        db.add(teacher)
        duplicate_uid = DuplicateIdentifierError("teacher", "teacher_uid", "teacher ID")
        await self._flush(account_id, duplicate_uid)
        await self._commit(account_id, duplicate_uid)

        logger.log_account_event(
            "created", account_id, role=UserRole.TEACHER.value, password_generated=generated
        )

        record = await self.get_teacher(account_id)
        return ProvisionedAccount(
            account_id=account_id, record=record, plaintext_secret=secret, generated=generated
        )

    async def create_admin(self, email: str) -> ProvisionedAccount:
        """Create an ADMIN auth record with a generated high-entropy password"""
        db = self._require_db()
        account_id = generate_uuid()
        secret = credential_policy.generate_secure_password()

        profile = self._new_profile(account_id, UserRole.ADMIN, email.strip().lower(), secret)
        db.add(profile)
        await self._flush(account_id, DuplicateEmailError("admin"))
        await self._commit(account_id, DuplicateEmailError("admin"))

        logger.log_account_event("created", account_id, role=UserRole.ADMIN.value)
        return ProvisionedAccount(
            account_id=account_id,
            record=ProfileView.model_validate(profile),
            plaintext_secret=secret,
        )

    # =====================================================
    # READ
    # =====================================================

    async def get_student(self, account_id: str) -> Optional[StudentView]:
        db = self._require_db()
        result = await db.execute(
            select(Student)
            .where(Student.user_id == account_id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()
        return StudentView.model_validate(student) if student else None

    async def get_teacher(self, account_id: str) -> Optional[TeacherView]:
        db = self._require_db()
        result = await db.execute(
            select(Teacher)
            .where(Teacher.user_id == account_id)
            .execution_options(populate_existing=True)
        )
        teacher = result.scalar_one_or_none()
        return TeacherView.model_validate(teacher) if teacher else None

    async def list_students(
        self,
        search: Optional[str] = None,
        include_inactive: bool = True,
        session: Optional[str] = None,
        term: Optional[str] = None,
    ) -> List[StudentView]:
        """
        All students newest first; empty when the store is unavailable.

        Args:
            search: Substring of name, roll number, session or email
            include_inactive: Include deactivated accounts
            session: Exact admission session, e.g. "2021"
            term: Exact year-term, e.g. "2-1"
        """
        if self.db is None:
            logger.warning("[Accounts] Database not configured - returning empty student list")
            return []

        query = select(Student).join(Profile, Student.user_id == Profile.user_id)
        if not include_inactive:
            query = query.where(Profile.is_active.is_(True))
        if session and session.strip():
            query = query.where(Student.session == session.strip())
        if term and term.strip():
            query = query.where(Student.term == term.strip())
        if search and search.strip():
            pattern = like_pattern(search)
            query = query.where(or_(
                Student.full_name.ilike(pattern, escape="\\"),
                Student.roll_no.ilike(pattern, escape="\\"),
                Student.session.ilike(pattern, escape="\\"),
                Profile.email.ilike(pattern, escape="\\"),
            ))
        query = query.order_by(Student.created_at.desc())

        try:
            result = await self.db.execute(query)
            return [StudentView.model_validate(s) for s in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="list_students")
            return []

    async def list_teachers(
        self,
        search: Optional[str] = None,
        include_inactive: bool = True,
    ) -> List[TeacherView]:
        """All teachers newest first; empty when the store is unavailable"""
        if self.db is None:
            logger.warning("[Accounts] Database not configured - returning empty teacher list")
            return []

        query = select(Teacher).join(Profile, Teacher.user_id == Profile.user_id)
        if not include_inactive:
            query = query.where(Profile.is_active.is_(True))
        if search and search.strip():
            pattern = like_pattern(search)
            query = query.where(or_(
                Teacher.full_name.ilike(pattern, escape="\\"),
                Teacher.teacher_uid.ilike(pattern, escape="\\"),
                Profile.email.ilike(pattern, escape="\\"),
            ))
        query = query.order_by(Teacher.created_at.desc())

        try:
            result = await self.db.execute(query)
            return [TeacherView.model_validate(t) for t in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="list_teachers")
            return []

    async def list_accounts(self, role: Optional[UserRole] = None) -> List[ProfileView]:
        """Auth records of every role (or one role), newest first"""
        if self.db is None:
            logger.warning("[Accounts] Database not configured - returning empty account list")
            return []

        query = select(Profile)
        if role is not None:
            query = query.where(Profile.role == role)
        query = query.order_by(Profile.created_at.desc())

        try:
            result = await self.db.execute(query)
            return [ProfileView.model_validate(p) for p in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="list_accounts")
            return []

    async def _get_profile(self, account_id: str) -> Profile:
        db = self._require_db()
        profile = await db.get(Profile, account_id)
        if profile is None:
            raise AccountNotFoundError(account_id)
        return profile

    # =====================================================
    # LIFECYCLE
    # =====================================================

    async def deactivate(
        self,
        account_id: str,
        role: Optional[UserRole] = None,
        actor_id: Optional[str] = None,
    ) -> None:
        """
        Soft-delete an account. Deactivating an inactive account succeeds.

        Args:
            account_id: Account to deactivate
            role: When given, the account must have this role
            actor_id: Caller's own account id; callers cannot deactivate themselves
        """
        profile = await self._get_profile(account_id)
        if role is not None and profile.role != role:
            raise AccountNotFoundError(account_id)
        if actor_id is not None and str(actor_id) == str(account_id):
            raise AuthorizationError("You cannot deactivate your own account")

        if profile.is_active:
            profile.is_active = False
            await self._commit(account_id)
            logger.log_account_event("deactivated", account_id, role=profile.role.value)
        else:
            logger.log_account_event("deactivated", account_id, role=profile.role.value,
                                     reason="already inactive")

    async def reset_password(self, account_id: str) -> str:
        """
        Issue a new 6-digit password for a teacher and return it once.
        The previous password stops verifying immediately.
        """
        profile = await self._get_profile(account_id)
        if profile.role != UserRole.TEACHER:
            raise ValidationError("Password reset is only available for teacher accounts",
                                  field="userId")

        new_password = credential_policy.generate_teacher_password()
        # Guarantee the old secret is invalidated even on a random collision
        while verify_password(new_password, profile.password_hash):
            new_password = credential_policy.generate_teacher_password()

        profile.password_hash = get_password_hash(new_password)
        profile.must_change_password = settings.REQUIRE_PASSWORD_CHANGE
        await self._commit(account_id)

        logger.log_account_event("password_reset", account_id, role=profile.role.value)
        return new_password

    async def update_teacher_profile(self, account_id: str, data: TeacherUpdate) -> Dict[str, Any]:
        """Apply a partial update to the teacher row; returns the changed fields"""
        db = self._require_db()
        teacher = await db.get(Teacher, account_id)
        if teacher is None:
            raise AccountNotFoundError(account_id)
        return await self._apply_updates(teacher, data.model_dump(exclude_none=True), account_id)

    async def update_student_profile(self, account_id: str, data: StudentUpdate) -> Dict[str, Any]:
        """Apply a partial update to the student row; returns the changed fields"""
        db = self._require_db()
        student = await db.get(Student, account_id)
        if student is None:
            raise AccountNotFoundError(account_id)
        return await self._apply_updates(student, data.model_dump(exclude_none=True), account_id)

    async def _apply_updates(self, row: Union[Teacher, Student], updates: Dict[str, Any],
                             account_id: str) -> Dict[str, Any]:
        changes = {}
        for name, value in updates.items():
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            if getattr(row, name) != value:
                changes[name] = value
                setattr(row, name, value)

        if changes:
            await self._commit(account_id)
            logger.log_account_event("profile_updated", account_id, fields=sorted(changes))
        return changes

    # =====================================================
    # AUTHENTICATION
    # =====================================================

    async def authenticate(self, email: str, password: str) -> Profile:
        """Check credentials and record the login"""
        db = self._require_db()
        result = await db.execute(
            select(Profile).where(Profile.email == email.strip().lower())
        )
        profile = result.scalar_one_or_none()

        if profile is None or not verify_password(password, profile.password_hash):
            raise AuthenticationError()
        if not profile.is_active:
            raise AccountInactiveError()

        profile.last_login = datetime.utcnow()
        await self._commit(profile.user_id)
        return profile

    async def change_password(self, account_id: str, current_password: str, new_password: str) -> None:
        """Rotate a password chosen by the account holder"""
        profile = await self._get_profile(account_id)
        if not verify_password(current_password, profile.password_hash):
            raise AuthenticationError("Current password is incorrect")

        check = credential_policy.validate_strength(new_password)
        if not check.valid:
            raise ValidationError(check.reason, field="new_password")

        profile.password_hash = get_password_hash(new_password)
        profile.must_change_password = False
        await self._commit(account_id)
        logger.log_account_event("password_changed", account_id, role=profile.role.value)


def get_account_service(db: Optional[AsyncSession]) -> AccountProvisioningService:
    return AccountProvisioningService(db)
