from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

class Audit(BaseModel):
    __tablename__ = "audits"

    user_id = Column(ForeignKey("usuarios.id"), nullable=False)

    user = relationship("User", backref="audit_logs")

    action = Column(String(64), nullable=False)
    payload_hash = Column(String(128), nullable=False)
