from sqlalchemy import Column, DateTime, Integer, String, Text

from portfolio_api.core.db import Base


# Таблицы связаны только по file_id, без внешних ключей:
# каскадное удаление выполняет сервис


class File(Base):
    __tablename__ = "files"

    file_id = Column(String(255), primary_key=True)
    file_name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)
    password_hash = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class FileHistory(Base):
    __tablename__ = "file_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(String(255), index=True, nullable=False)
    user_id = Column(String(64), index=True, nullable=False)
    file_name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False)
    saved_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(64), nullable=True)


class FileAccessLog(Base):
    __tablename__ = "file_access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(String(255), index=True, nullable=False)
    action = Column(String(16), nullable=False)
    user_id = Column(String(64), nullable=False)
    file_name = Column(String(255), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    ip_address = Column(String(64), nullable=False, default="unknown")
    user_agent = Column(String(1024), nullable=False, default="unknown")
    browser = Column(String(64), nullable=True)
    browser_version = Column(String(64), nullable=True)
    os = Column(String(64), nullable=True)
    device = Column(String(32), nullable=True)
    referrer = Column(String(1024), nullable=True)
    origin = Column(String(255), nullable=True)
    accept_language = Column(String(255), nullable=True)
    request_method = Column(String(16), nullable=True)
    content_type = Column(String(255), nullable=True)
    content_length = Column(Integer, nullable=True)

    file_size = Column(Integer, nullable=False, default=0)
    length_change = Column(Integer, nullable=True)
