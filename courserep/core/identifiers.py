"""Human-readable identifiers: PREFIX-000123, one counter per prefix"""
from sqlalchemy import Column, Integer, String
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import Base

ID_WIDTH = 6


class IdSequence(Base):
    __tablename__ = "id_sequences"

    prefix = Column(String(20), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<IdSequence(prefix='{self.prefix}', last_value={self.last_value})>"


def format_id(prefix: str, value: int) -> str:
    return f"{prefix}-{value:0{ID_WIDTH}d}"


async def generate_id(session: AsyncSession, prefix: str) -> str:
    """
    Next identifier for prefix.

    Runs in the caller's transaction: the counter row stays locked until
    commit and a rollback returns the number to the pool.
    """
    result = await session.execute(
        select(IdSequence).where(IdSequence.prefix == prefix).with_for_update()
    )
    sequence = result.scalar_one_or_none()

    if sequence is None:
        sequence = IdSequence(prefix=prefix, last_value=0)
        session.add(sequence)

    sequence.last_value = (sequence.last_value or 0) + 1
    await session.flush()

    return format_id(prefix, sequence.last_value)
