import uuid

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from gatekeeper.db.base import Base


role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", String(100), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(100), primary_key=True, default=lambda: uuid.uuid4().hex)
    description = Column(Text, nullable=True)

    # Eager "selectin" loading; async sessions cannot lazy-load on access
    permissions = relationship("Permission", secondary=role_permissions, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Role {self.id}>"
