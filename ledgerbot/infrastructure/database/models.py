"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from ledgerbot.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(50), nullable=False)
    slug = Column(String(50), unique=True, nullable=False, index=True)
    currency = Column(String(10), nullable=False)
    balance = Column(Integer, nullable=False, default=0)  # minor units
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Transaction(Base):
    __tablename__ = "transactions"
    __mapper_args__ = {"eager_defaults": True}

    # autoincrement id doubles as creation order for replay
    id = Column(Integer, primary_key=True, autoincrement=True)
    account_slug = Column(String(50), ForeignKey("accounts.slug"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False)
    description = Column(String(255))
    source = Column(String(20), nullable=False)  # manual, sync, transfer, cancellation
    balance_after = Column(Integer, nullable=False)
    created_by_id = Column(String(64), nullable=False, index=True)
    created_by_name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    linked_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    transfer_type = Column(String(10), nullable=True)  # outgoing, incoming

    cancelled_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_txn_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)


class FlowSession(Base):
    __tablename__ = "flow_sessions"
    __mapper_args__ = {"eager_defaults": True}

    chat_id = Column(String(64), primary_key=True)
    actor_id = Column(String(64), primary_key=True)
    kind = Column(String(20), nullable=False)
    step = Column(String(30), nullable=False)
    payload = Column(Text, nullable=False, default="{}")
    artifact_ids = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
