"""
Snake Logic - Database Models
"""

from datetime import datetime
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, JSON, Index

from .database import Base


# ============================================
# GENERATED LEVELS
# ============================================

class GeneratedLevel(Base):
    """A board produced by the generator, kept for replay by seed."""

    __tablename__ = "generated_levels"

    id = Column(Integer, primary_key=True, index=True)
    level_number = Column(Integer, nullable=False, index=True)
    seed = Column(BigInteger, nullable=False)
    tier = Column(String(16), nullable=False)

    snake_count = Column(Integer, default=0)
    attempts = Column(Integer, default=0)
    snakes = Column(JSON, nullable=False)  # [{id, points, heading, color}, ...]

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_generated_levels_level_seed", "level_number", "seed"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "level": self.level_number,
            "seed": self.seed,
            "tier": self.tier,
            "snake_count": self.snake_count,
            "attempts": self.attempts,
            "created_at": self.created_at,
        }
