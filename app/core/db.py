from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

engine = create_async_engine(settings.db_url)


def get_session() -> AsyncSession:
    """Open a standalone session. Readers running concurrently each need their own."""
    return AsyncSession(engine, autoflush=False, expire_on_commit=False)
