from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String

from gatekeeper.db.base import Base


class Goal(Base):
    """A tracked conversion goal with hit and unique-user counters."""

    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    hits = Column(BigInteger, nullable=False, default=0)
    min_hits = Column(BigInteger, nullable=False, default=0)
    max_hits = Column(BigInteger, nullable=False, default=0)
    unique_users = Column(BigInteger, nullable=False, default=0)
    min_unique_users = Column(BigInteger, nullable=False, default=0)
    max_unique_users = Column(BigInteger, nullable=False, default=0)

    start = Column(DateTime(timezone=True), nullable=True)
    stop = Column(DateTime(timezone=True), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Goal {self.key} ({self.name})>"
