"""
Submission and Profile Repositories

Row-level access to the ``expenses`` and ``profiles`` tables through
SQLAlchemy Core. Any store error is logged and re-raised as
PersistenceFailure so callers can leave their state untouched.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import PersistenceFailure, SubmissionNotFound
from .models import Fare, Submission, SubmissionStatus, fare_from_dict
from .session import Profile

logger = logging.getLogger(__name__)

metadata = MetaData()

profiles_table = Table(
    "profiles",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("email", String(255), nullable=False, default=""),
    Column("name", String(255), nullable=True),
)

expenses_table = Table(
    "expenses",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("expenses_data", JSON, nullable=False),
    Column("status", String(16), nullable=False, default="pending"),
    Column("created_at", DateTime(timezone=True), nullable=False, index=True),
    Column("approved_at", DateTime(timezone=True), nullable=True),
    Column("rejected_at", DateTime(timezone=True), nullable=True),
)


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to timestamps from drivers that drop the zone."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def create_tables(engine: Engine) -> None:
    """Create the tables if they do not exist yet."""
    metadata.create_all(engine)


class SubmissionRepository:
    """Reads and writes submissions."""

    def __init__(self, engine: Engine):
        """Initialize the repository.

        Args:
            engine: SQLAlchemy engine bound to the store
        """
        self.engine = engine

    def _base_query(self):
        return select(
            expenses_table,
            profiles_table.c.name.label("profile_name"),
            profiles_table.c.email.label("profile_email"),
        ).select_from(
            expenses_table.outerjoin(
                profiles_table,
                expenses_table.c.user_id == profiles_table.c.id,
            )
        )

    def _row_to_submission(self, row) -> Submission:
        return Submission(
            id=row["id"],
            owner_id=row["user_id"],
            created_at=_as_utc(row["created_at"]),
            lines=[fare_from_dict(item) for item in row["expenses_data"] or []],
            status=SubmissionStatus(row["status"]),
            approved_at=_as_utc(row["approved_at"]),
            rejected_at=_as_utc(row["rejected_at"]),
            applicant_name=row["profile_name"],
            applicant_email=row["profile_email"],
        )

    def insert(self, owner_id: str, lines: list[Fare], created_at: datetime) -> Submission:
        """Store a new pending submission.

        Args:
            owner_id: Identity id of the applicant
            lines: Validated fares
            created_at: Creation timestamp

        Returns:
            The stored submission, built from the inserted values. The
            applicant lookup shares the insert's transaction, so a failure
            there leaves nothing stored.
        """
        submission_id = str(uuid.uuid4())

        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(expenses_table).values(
                        id=submission_id,
                        user_id=owner_id,
                        expenses_data=[line.to_dict() for line in lines],
                        status=SubmissionStatus.PENDING.value,
                        created_at=created_at,
                        approved_at=None,
                        rejected_at=None,
                    )
                )
                applicant = conn.execute(
                    select(profiles_table.c.name, profiles_table.c.email)
                    .where(profiles_table.c.id == owner_id)
                ).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert submission for {owner_id}: {e}")
            raise PersistenceFailure(f"登録に失敗しました: {e}") from e

        return Submission(
            id=submission_id,
            owner_id=owner_id,
            created_at=_as_utc(created_at),
            lines=list(lines),
            applicant_name=applicant["name"] if applicant else None,
            applicant_email=applicant["email"] if applicant else None,
        )

    def get(self, submission_id: str) -> Submission:
        """Fetch one submission.

        Raises:
            SubmissionNotFound: If no submission has this id
        """
        query = self._base_query().where(expenses_table.c.id == submission_id)

        try:
            with self.engine.connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch submission {submission_id}: {e}")
            raise PersistenceFailure(f"取得に失敗しました: {e}") from e

        if row is None:
            raise SubmissionNotFound(submission_id)

        return self._row_to_submission(row)

    def find(
        self,
        owner_id: str | None = None,
        status: SubmissionStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        ascending: bool = False,
    ) -> list[Submission]:
        """List submissions with optional filters.

        Args:
            owner_id: Only this applicant's submissions
            status: Only submissions in this status
            created_from: Inclusive lower bound on creation time
            created_to: Inclusive upper bound on creation time
            ascending: Oldest first instead of newest first

        Returns:
            Submissions ordered by creation time
        """
        query = self._base_query()

        if owner_id:
            query = query.where(expenses_table.c.user_id == owner_id)

        if status:
            query = query.where(expenses_table.c.status == status.value)

        if created_from:
            query = query.where(expenses_table.c.created_at >= created_from)

        if created_to:
            query = query.where(expenses_table.c.created_at <= created_to)

        order = expenses_table.c.created_at.asc() if ascending else expenses_table.c.created_at.desc()
        query = query.order_by(order)

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list submissions: {e}")
            raise PersistenceFailure(f"取得に失敗しました: {e}") from e

        return [self._row_to_submission(row) for row in rows]

    def update_status(
        self,
        submission_id: str,
        status: SubmissionStatus,
        approved_at: datetime | None,
        rejected_at: datetime | None,
    ) -> Submission:
        """Overwrite the status fields of a submission."""
        query = (
            update(expenses_table)
            .where(expenses_table.c.id == submission_id)
            .values(status=status.value, approved_at=approved_at, rejected_at=rejected_at)
        )

        try:
            with self.engine.begin() as conn:
                result = conn.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update submission {submission_id}: {e}")
            raise PersistenceFailure(f"更新に失敗しました: {e}") from e

        if result.rowcount == 0:
            raise SubmissionNotFound(submission_id)

        return self.get(submission_id)

    def delete(self, submission_id: str) -> None:
        """Delete a submission."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    delete(expenses_table).where(expenses_table.c.id == submission_id)
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete submission {submission_id}: {e}")
            raise PersistenceFailure(f"削除に失敗しました: {e}") from e

        if result.rowcount == 0:
            raise SubmissionNotFound(submission_id)


class ProfileRepository:
    """Reads and writes profile display names."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, user_id: str) -> Profile | None:
        query = select(profiles_table).where(profiles_table.c.id == user_id)

        try:
            with self.engine.connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch profile {user_id}: {e}")
            raise PersistenceFailure(f"プロファイルの取得に失敗しました: {e}") from e

        if row is None:
            return None

        return Profile(id=row["id"], email=row["email"], name=row["name"])

    def ensure(self, user_id: str, email: str) -> Profile:
        """Return the profile, creating an unnamed one on first sign-in."""
        profile = self.get(user_id)
        if profile is not None:
            return profile

        try:
            with self.engine.begin() as conn:
                conn.execute(insert(profiles_table).values(id=user_id, email=email, name=None))
        except SQLAlchemyError as e:
            logger.error(f"Failed to create profile {user_id}: {e}")
            raise PersistenceFailure(f"プロファイルの作成に失敗しました: {e}") from e

        return Profile(id=user_id, email=email)

    def set_name(self, user_id: str, email: str, name: str) -> Profile:
        """Store a display name for an identity."""
        self.ensure(user_id, email)

        try:
            with self.engine.begin() as conn:
                conn.execute(
                    update(profiles_table)
                    .where(profiles_table.c.id == user_id)
                    .values(name=name)
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to save profile name for {user_id}: {e}")
            raise PersistenceFailure(f"名前の保存に失敗しました: {e}") from e

        return Profile(id=user_id, email=email, name=name)
