import logging

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from verses.auth.viewer import Viewer
from verses.db.models import Like
from verses.db.services import poem_service
from verses.db.services.poem_service import PoemView

logger = logging.getLogger(__name__)


async def has_user_liked(db_session: AsyncSession, user_id: str, poem_id: int) -> bool:
    result = await db_session.execute(
        select(Like.id).where(and_(Like.user_id == user_id, Like.poem_id == poem_id))
    )
    return result.scalar_one_or_none() is not None


async def like_poem(
    db_session: AsyncSession,
    poem_id: int,
    user_id: str,
    drafts_visible: bool = True,
) -> PoemView | None:
    """Like a poem. Liking twice is a no-op.

    Returns None if the poem is missing or is a draft hidden from ``user_id``.
    """
    viewer = Viewer(user_id=user_id)
    if await poem_service.get_poem(db_session, poem_id, viewer, drafts_visible) is None:
        return None

    if not await has_user_liked(db_session, user_id, poem_id):
        db_session.add(Like(user_id=user_id, poem_id=poem_id))
        try:
            await db_session.commit()
        except IntegrityError:
            # A concurrent request inserted the same like first
            await db_session.rollback()
            logger.debug("Duplicate like on poem %s by %s ignored", poem_id, user_id)

    return await poem_service.get_poem(db_session, poem_id, viewer, drafts_visible)


async def unlike_poem(
    db_session: AsyncSession,
    poem_id: int,
    user_id: str,
    drafts_visible: bool = True,
) -> PoemView | None:
    """Remove the caller's like. Unliking twice is a no-op.

    Returns None if the poem is missing or is a draft hidden from ``user_id``.
    """
    viewer = Viewer(user_id=user_id)
    if await poem_service.get_poem(db_session, poem_id, viewer, drafts_visible) is None:
        return None

    await db_session.execute(
        delete(Like).where(and_(Like.user_id == user_id, Like.poem_id == poem_id))
    )
    await db_session.commit()

    return await poem_service.get_poem(db_session, poem_id, viewer, drafts_visible)
