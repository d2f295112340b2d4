from sqlalchemy import Column, Integer, String

from gatekeeper.db.base import Base


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    resource = Column(String(100), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    attributes = Column(String(255), nullable=False, default="*")

    def __repr__(self) -> str:
        return f"<Permission {self.action} on {self.resource} ({self.attributes})>"
