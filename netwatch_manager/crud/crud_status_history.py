from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from netwatch_manager.models.status_history import DeviceStatusHistory


async def get_device_history(db: AsyncSession, device_id: str, since: datetime):
    """Status transitions of one device since the given time, oldest first."""
    result = await db.execute(
        select(DeviceStatusHistory)
        .filter(DeviceStatusHistory.device_id == device_id, DeviceStatusHistory.timestamp >= since)
        .order_by(DeviceStatusHistory.timestamp.asc())
    )
    return result.scalars().all()
