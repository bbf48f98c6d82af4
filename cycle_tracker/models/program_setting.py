from sqlalchemy import Column, String, Text

from cycle_tracker.db.database import Base


class ProgramSetting(Base):
    """Key/value preference row (e.g. the program start date)."""

    __tablename__ = "program_settings"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
