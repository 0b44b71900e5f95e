"""Poem service: CRUD, paging and like aggregation for poems.

Every read is explicit: one query for the poems joined to their authors,
one grouped query for like counts and, for signed-in viewers, one query
for the poems among them the viewer has liked. Results are returned as
plain frozen dataclasses; no ORM object escapes this module.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from verses.auth.viewer import ANONYMOUS, Viewer
from verses.db.base import utcnow
from verses.db.models import Like, Poem, User
from verses.db.services import user_service
from verses.lib import observability

logger = logging.getLogger(__name__)

TOP_POEMS_LIMIT = 10


@dataclass(frozen=True)
class AuthorView:
    id: str
    display_name: str


@dataclass(frozen=True)
class PoemView:
    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime | None
    is_published: bool
    author: AuthorView
    like_count: int
    is_liked_by_current_user: bool


@dataclass(frozen=True)
class PoemPage:
    items: list[PoemView]
    total_count: int
    page: int
    page_size: int


@dataclass(frozen=True)
class UserProfile:
    id: str
    display_name: str
    created_at: datetime
    total_poem_count: int
    top_poems: list[PoemView]


def published_filter():
    """Filter clause matching poems visible in public listings."""
    return Poem.is_published == True


def _newest_first():
    return (Poem.created_at.desc(), Poem.id.desc())


def _poems_with_authors() -> Select:
    return select(Poem, User).join(User, User.id == Poem.user_id)


async def count_likes(db_session: AsyncSession, poem_ids: Sequence[int]) -> dict[int, int]:
    """Map each poem id to its number of likes; poems without likes are absent."""
    if not poem_ids:
        return {}
    result = await db_session.execute(
        select(Like.poem_id, func.count(Like.id))
        .where(Like.poem_id.in_(poem_ids))
        .group_by(Like.poem_id)
    )
    return {poem_id: count for poem_id, count in result.all()}


async def get_liked_poem_ids(db_session: AsyncSession, viewer: Viewer, poem_ids: Sequence[int]) -> set[int]:
    """Return which of ``poem_ids`` the viewer has liked."""
    if not viewer.is_authenticated or not poem_ids:
        return set()
    result = await db_session.execute(
        select(Like.poem_id).where(
            and_(Like.user_id == viewer.user_id, Like.poem_id.in_(poem_ids))
        )
    )
    return set(result.scalars().all())


def _to_view(poem: Poem, author: User, like_count: int, liked: bool) -> PoemView:
    return PoemView(
        id=poem.id,
        title=poem.title,
        content=poem.content,
        created_at=poem.created_at,
        updated_at=poem.updated_at,
        is_published=poem.is_published,
        author=AuthorView(id=author.id, display_name=author.display_name),
        like_count=like_count,
        is_liked_by_current_user=liked,
    )


async def _build_views(
    db_session: AsyncSession,
    rows: Sequence[tuple[Poem, User]],
    viewer: Viewer,
    like_counts: dict[int, int] | None = None,
) -> list[PoemView]:
    poem_ids = [poem.id for poem, _ in rows]
    if like_counts is None:
        like_counts = await count_likes(db_session, poem_ids)
    liked_ids = await get_liked_poem_ids(db_session, viewer, poem_ids)
    return [
        _to_view(poem, author, like_counts.get(poem.id, 0), poem.id in liked_ids)
        for poem, author in rows
    ]


async def _paginate(
    db_session: AsyncSession,
    filters: list,
    page: int,
    page_size: int,
    viewer: Viewer,
) -> PoemPage:
    """Run the count query and the page query for ``filters``, newest first.

    The two queries are not isolated from each other, so a poem inserted in
    between can shift across a page boundary. A page starting past the last
    row is empty and skips the page query.
    """
    with observability.span("poems.paginate", page=page, page_size=page_size):
        total_result = await db_session.execute(
            select(func.count()).select_from(Poem).where(*filters)
        )
        total_count = total_result.scalar_one()

        offset = (page - 1) * page_size
        if offset >= total_count:
            items = []
        else:
            result = await db_session.execute(
                _poems_with_authors()
                .where(*filters)
                .order_by(*_newest_first())
                .offset(offset)
                .limit(page_size)
            )
            items = await _build_views(db_session, result.all(), viewer)
    return PoemPage(items=items, total_count=total_count, page=page, page_size=page_size)


async def create_poem(
    db_session: AsyncSession,
    owner_id: str,
    title: str,
    content: str,
    is_published: bool = True,
) -> PoemView | None:
    """Create a poem owned by ``owner_id``.

    Returns:
        The new poem with zero likes, or None if the owner does not exist
    """
    owner = await user_service.get_user_by_id(db_session, owner_id)
    if owner is None:
        return None

    poem = Poem(
        user_id=owner_id,
        title=title,
        content=content,
        is_published=is_published,
    )
    db_session.add(poem)
    await db_session.commit()
    await db_session.refresh(poem)

    logger.info("Poem %s created by %s (published=%s)", poem.id, owner_id, is_published)
    return _to_view(poem, owner, like_count=0, liked=False)


async def get_poem(
    db_session: AsyncSession,
    poem_id: int,
    viewer: Viewer = ANONYMOUS,
    drafts_visible: bool = True,
) -> PoemView | None:
    """Get a single poem by id, published or not.

    Args:
        db_session: Database session
        poem_id: Poem id
        viewer: Who is asking; drives ``is_liked_by_current_user``
        drafts_visible: When False, drafts are only returned to their owner

    Returns:
        PoemView or None if not found (or hidden)
    """
    result = await db_session.execute(_poems_with_authors().where(Poem.id == poem_id))
    row = result.one_or_none()
    if row is None:
        return None

    poem, _ = row
    if not drafts_visible and not poem.is_published and poem.user_id != viewer.user_id:
        return None

    views = await _build_views(db_session, [row], viewer)
    return views[0]


async def get_feed(
    db_session: AsyncSession,
    page: int,
    page_size: int,
    viewer: Viewer = ANONYMOUS,
) -> PoemPage:
    """Published poems from every author, newest first."""
    return await _paginate(db_session, [published_filter()], page, page_size, viewer)


async def get_user_poems(
    db_session: AsyncSession,
    owner_id: str,
    page: int,
    page_size: int,
    viewer: Viewer = ANONYMOUS,
    include_drafts: bool = True,
) -> PoemPage:
    """Poems of one author, newest first; drafts included unless told otherwise."""
    filters = [Poem.user_id == owner_id]
    if not include_drafts:
        filters.append(published_filter())
    return await _paginate(db_session, filters, page, page_size, viewer)


async def get_public_user_poems(
    db_session: AsyncSession,
    user_id: str,
    page: int,
    page_size: int,
    viewer: Viewer = ANONYMOUS,
) -> PoemPage:
    return await get_user_poems(
        db_session, user_id, page, page_size, viewer, include_drafts=False
    )


async def update_poem(
    db_session: AsyncSession,
    poem_id: int,
    caller_id: str,
    title: str | None = None,
    content: str | None = None,
    is_published: bool | None = None,
) -> PoemView | None:
    """Apply a partial update to a poem owned by ``caller_id``.

    ``None`` leaves a field as it is. ``updated_at`` is stamped on every
    successful call, whether or not a value actually changed.

    Returns:
        Updated PoemView, or None if no poem with that id belongs to the caller
    """
    result = await db_session.execute(
        _poems_with_authors().where(and_(Poem.id == poem_id, Poem.user_id == caller_id))
    )
    row = result.one_or_none()
    if row is None:
        return None

    poem, author = row
    if title is not None:
        poem.title = title
    if content is not None:
        poem.content = content
    if is_published is not None:
        poem.is_published = is_published
    poem.updated_at = utcnow()

    await db_session.commit()
    await db_session.refresh(poem)

    logger.info("Poem %s updated by %s", poem_id, caller_id)
    views = await _build_views(db_session, [(poem, author)], Viewer(user_id=caller_id))
    return views[0]


async def delete_poem(
    db_session: AsyncSession,
    poem_id: int,
    caller_id: str,
) -> bool:
    """Delete a poem owned by ``caller_id`` together with its likes.

    Returns:
        True if deleted, False if not found or not owned by the caller
    """
    result = await db_session.execute(
        select(Poem).where(and_(Poem.id == poem_id, Poem.user_id == caller_id))
    )
    poem = result.scalar_one_or_none()
    if not poem:
        return False

    await db_session.execute(delete(Like).where(Like.poem_id == poem.id))
    await db_session.delete(poem)
    await db_session.commit()

    logger.info("Poem %s deleted by %s", poem_id, caller_id)
    return True


async def get_top_poems(
    db_session: AsyncSession,
    author: User,
    viewer: Viewer = ANONYMOUS,
    limit: int = TOP_POEMS_LIMIT,
) -> list[PoemView]:
    """Most-liked published poems of ``author``.

    Ties are broken by newest first, then by highest id.
    """
    like_count = func.count(Like.id).label("like_count")
    result = await db_session.execute(
        select(Poem, like_count)
        .outerjoin(Like, Like.poem_id == Poem.id)
        .where(and_(Poem.user_id == author.id, published_filter()))
        .group_by(Poem.id)
        .order_by(like_count.desc(), *_newest_first())
        .limit(limit)
    )
    ranked = result.all()
    counts = {poem.id: count for poem, count in ranked}
    return await _build_views(
        db_session, [(poem, author) for poem, _ in ranked], viewer, like_counts=counts
    )


async def get_user_profile(
    db_session: AsyncSession,
    user_id: str,
    viewer: Viewer = ANONYMOUS,
    top_limit: int = TOP_POEMS_LIMIT,
) -> UserProfile | None:
    """Public profile: name, join date, published poem count and top poems."""
    user = await user_service.get_user_by_id(db_session, user_id)
    if user is None:
        return None

    count_result = await db_session.execute(
        select(func.count())
        .select_from(Poem)
        .where(and_(Poem.user_id == user_id, published_filter()))
    )
    total_poem_count = count_result.scalar_one()

    top_poems = await get_top_poems(db_session, user, viewer, limit=top_limit)

    return UserProfile(
        id=user.id,
        display_name=user.display_name,
        created_at=user.created_at,
        total_poem_count=total_poem_count,
        top_poems=top_poems,
    )
