"""
SQLAlchemy model for saved games.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text

from .database import Base


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True)  # uuid
    name = Column(String(128), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    status = Column(String(32), nullable=False, default="active")  # active | finished
    game_state = Column(Text, nullable=False)  # JSON string of full game state
    config = Column(Text, nullable=True)  # JSON: num_players, characters, seed
