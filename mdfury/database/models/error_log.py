from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from mdfury.database.database_factory import Base
from mdfury.core.utils import create_random_key, utcnow


class ErrorLog(Base):
    __tablename__ = "error_logs"

    id = Column(Integer, primary_key=True, index=True)
    fp = Column(String, unique=True, index=True, nullable=False,
                default=lambda: f"err_{create_random_key()}")
    error_type = Column(String, nullable=False, index=True)
    error_message = Column(Text, nullable=False)
    error_traceback = Column(Text, nullable=True)

    # Where it happened
    component = Column(String, nullable=True, index=True)
    function = Column(String, nullable=True)
    line_number = Column(Integer, nullable=True)

    # Request context if available
    request_id = Column(String, index=True, nullable=True)
    user_fp = Column(String, index=True, nullable=True)
    ip_address = Column(String, nullable=True)
    path = Column(String, nullable=True)
    method = Column(String, nullable=True)

    host = Column(String, nullable=True)
    environment = Column(String, nullable=True)  # development, production
    context_data = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<ErrorLog(id={self.id}, error_type='{self.error_type}', created_at='{self.created_at}')>"
