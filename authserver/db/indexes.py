from motor.motor_asyncio import AsyncIOMotorDatabase

async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    # Users: one account per (lower-cased) email
    await db.users.create_index("email", unique=True, name="uniq_email")
