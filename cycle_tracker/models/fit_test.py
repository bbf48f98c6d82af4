from sqlalchemy import Column, Date, Integer, Text

from cycle_tracker.db.database import Base


class FitTestResult(Base):
    """Rep counts recorded for one fit test."""

    __tablename__ = "fit_test_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    test_date = Column(Date, nullable=False, index=True)
    test_number = Column(Integer, nullable=False)
    switch_kicks = Column(Integer, nullable=False)
    power_jacks = Column(Integer, nullable=False)
    power_knees = Column(Integer, nullable=False)
    power_jumps = Column(Integer, nullable=False)
    globe_jumps = Column(Integer, nullable=False)
    suicide_jumps = Column(Integer, nullable=False)
    pushup_jacks = Column(Integer, nullable=False)
    low_plank_oblique = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
