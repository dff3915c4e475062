"""SQLAlchemy persistence for roles and users.

This module provides:
- ``RoleRecord`` / ``UserRecord`` tables holding the persisted documents
- ``AclStore``, the persistence collaborator entities save through
"""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from loguru import logger
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    create_engine,
    select,
    text,
)
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from .bindings import UnresolvedRole
from .config import get_settings
from .errors import RoleNotFound
from .registry import RoleRegistry
from .role import ROLE_TYPE, Role
from .schemas import RoleReference
from .user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class RoleRecord(Base):
    """Persisted ACL role."""

    __tablename__ = "acl_roles"

    id = Column(Integer, primary_key=True)
    machine_name = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=True)
    is_super = Column(Boolean, nullable=False, default=False)
    permissions = Column(JSON, nullable=False, default=dict)
    inherit = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<RoleRecord {self.machine_name}>"


class UserRecord(Base):
    """Persisted ACL user; ``roles`` maps machine name -> role reference."""

    __tablename__ = "acl_users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=True)
    password = Column(String(255), nullable=False)
    roles = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<UserRecord {self.email}>"


class AclStore:
    """Role and user persistence with session management."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
    ):
        """Initialize the database connection.

        Args:
            database_url: SQLAlchemy database URL (defaults to ``DATABASE_URL``)
            pool_size: Number of connections to maintain in the pool
            max_overflow: Max number of connections above pool_size
            pool_timeout: Seconds to wait before giving up on getting a connection
            pool_recycle: Recycle connections after this many seconds
            echo: Echo SQL statements (for debugging)
        """
        database_url = database_url or get_settings().database_url

        if database_url.startswith("sqlite:"):
            # SQLite doesn't support connection pooling; in-memory databases
            # must share one connection across sessions.
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in database_url or database_url == "sqlite://":
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(database_url, echo=echo, **kwargs)
        else:
            self.engine = create_engine(
                database_url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=True,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )

    def create_tables(self):
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """Drop all tables (use with caution)."""
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def get_session_context(self):
        """Session scope that commits on success and rolls back on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self):
        self.engine.dispose()

    def health_check(self) -> bool:
        try:
            with self.get_session_context() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"ACL store health check failed: {e}")
            return False

    # -------------------------
    # ROLES
    # -------------------------
    def save_role(self, role: Role) -> None:
        document = role.to_document()
        with self.get_session_context() as session:
            record = session.scalars(
                select(RoleRecord).filter_by(machine_name=document.machineName)
            ).first()
            if record is None:
                record = RoleRecord(machine_name=document.machineName)
                session.add(record)
            record.title = document.title
            record.description = document.description
            record.is_super = document.isSuper
            record.permissions = dict(document.permissions)
            record.inherit = document.inherit
        logger.debug(f"Saved role {document.machineName}")

    def load_role(self, machine_name: str, strict: bool = False) -> Optional[Role]:
        """Load a role together with its inherit chain.

        The chain is loaded eagerly into a private ``RoleRegistry`` so that
        permission checks on the returned role never touch the database.

        Raises:
            RoleNotFound: If ``strict`` and the role does not exist.
        """
        registry = RoleRegistry()
        with self.get_session_context() as session:
            self._load_chain(session, machine_name, registry)

        role = registry.get(machine_name)
        if role is None and strict:
            raise RoleNotFound(machine_name)
        return role

    def delete_role(self, machine_name: str) -> bool:
        with self.get_session_context() as session:
            record = session.scalars(
                select(RoleRecord).filter_by(machine_name=machine_name)
            ).first()
            if record is None:
                return False
            session.delete(record)
        logger.info(f"Deleted role {machine_name}")
        return True

    def _load_chain(self, session, machine_name: Optional[str], registry: RoleRegistry) -> None:
        # Bounded by the inherit depth so a stored cycle cannot loop forever.
        limit = get_settings().max_inherit_depth
        hops = 0
        while machine_name and machine_name not in registry and hops <= limit:
            record = session.scalars(
                select(RoleRecord).filter_by(machine_name=machine_name)
            ).first()
            if record is None:
                break
            registry.add(self._role_from_record(record))
            machine_name = record.inherit
            hops += 1

    def _role_from_record(self, record: RoleRecord) -> Role:
        return Role(
            record.machine_name,
            title=record.title or "",
            description=record.description,
            is_super=bool(record.is_super),
            permissions=record.permissions or {},
            inherit=record.inherit,
            saver=self.save_role,
        )

    # -------------------------
    # USERS
    # -------------------------
    def save_user(self, user: User) -> None:
        document = user.to_document()
        with self.get_session_context() as session:
            record = session.scalars(
                select(UserRecord).filter_by(email=document.email)
            ).first()
            if record is None:
                record = UserRecord(email=document.email)
                session.add(record)
            record.display_name = document.displayName
            record.password = document.password
            record.roles = {
                name: reference.model_dump()
                for name, reference in document.roles.items()
            }
        logger.debug(f"Saved user {document.email}")

    def load_user(self, email: str) -> Optional[User]:
        """Load a user and re-hydrate its role bindings.

        Bindings whose role exists become resolved; the others stay
        placeholders.
        """
        registry = RoleRegistry()
        with self.get_session_context() as session:
            record = session.scalars(select(UserRecord).filter_by(email=email)).first()
            if record is None:
                return None

            roles = {}
            for name, raw in (record.roles or {}).items():
                reference = RoleReference.model_validate(raw)
                roles[name] = UnresolvedRole(
                    reference.machineName, type=reference.type, subtype=reference.subtype
                )
                if reference.type == ROLE_TYPE:
                    self._load_chain(session, reference.machineName, registry)

            user = User(
                record.email,
                display_name=record.display_name,
                password_hash=record.password,
                roles=roles,
                saver=self.save_user,
            )

        registry.resolve(user)
        return user

    def delete_user(self, email: str) -> bool:
        with self.get_session_context() as session:
            record = session.scalars(select(UserRecord).filter_by(email=email)).first()
            if record is None:
                return False
            session.delete(record)
        logger.info(f"Deleted user {email}")
        return True
