"""AppSettings model: the single system-wide settings row."""

from sqlalchemy import String, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from docdesk.database import Base


class AppSettings(Base):
    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Backup retention policy
    backup_time: Mapped[str] = mapped_column(String(5), nullable=False, default="23:00")  # HH:MM
    backup_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_backups: Mapped[int] = mapped_column(Integer, nullable=False, default=30)

    # Company profile shown on proposals
    company_name: Mapped[str] = mapped_column(String(200), nullable=False, default="Your Company")
    company_logo: Mapped[str] = mapped_column(String(500), nullable=True)
    company_address: Mapped[str] = mapped_column(String(500), nullable=True)
    company_email: Mapped[str] = mapped_column(String(200), nullable=True)
    company_phone: Mapped[str] = mapped_column(String(50), nullable=True)
