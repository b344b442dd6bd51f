from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from netwatch_manager.core.constants import SYSTEM_CONFIG_ID
from netwatch_manager.core.security import encrypt
from netwatch_manager.models.system_config import SystemConfig
from netwatch_manager.schemas.system_config import SystemConfigUpdate


async def get_system_config(db: AsyncSession):
    result = await db.execute(select(SystemConfig).filter(SystemConfig.id == SYSTEM_CONFIG_ID))
    return result.scalars().first()


async def upsert_system_config(db: AsyncSession, obj_in: SystemConfigUpdate):
    """Update the singleton row, creating it on first write."""
    obj_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
    if "mikrotik_password" in obj_data:
        obj_data["mikrotik_password"] = encrypt(obj_data["mikrotik_password"])

    db_obj = await get_system_config(db)
    if db_obj is None:
        db_obj = SystemConfig(id=SYSTEM_CONFIG_ID, **obj_data)
    else:
        for field in obj_data:
            setattr(db_obj, field, obj_data[field])

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj
