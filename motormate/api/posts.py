"""
Routes Communaute / Community API routes.
Fil public, reactions et signalements. Seul l'auteur modifie ou supprime un post.
Public feed, reactions and reports. Only the author may edit or delete a post.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import String, cast, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.api.deps import get_current_user
from motormate.database import get_db
from motormate.models.post import REPORT_HIDE_THRESHOLD, Post, PostReaction, PostReport, ReactionKind
from motormate.models.user import User
from motormate.schemas.common import ApiResponse, PaginatedResponse
from motormate.schemas.post import PostCreate, PostRead, PostReportCreate, PostUpdate, ReactionResult
from motormate.utils.pagination import paginate

router = APIRouter()

SORT_ORDERS = {
    "newest": (Post.created_at.desc(), Post.id.desc()),
    "oldest": (Post.created_at.asc(), Post.id.asc()),
    "popular": (Post.likes_count.desc(), Post.created_at.desc(), Post.id.desc()),
}


def _visible():
    return select(Post).where(Post.is_hidden == False, Post.is_approved == True)


async def _get_visible_post(db: AsyncSession, post_id: int) -> Post:
    result = await db.execute(_visible().where(Post.id == post_id))
    post = result.scalar_one_or_none()
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


async def _get_own_post(db: AsyncSession, post_id: int, user: User) -> Post:
    post = await db.get(Post, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.author_id != user.id:
        raise HTTPException(status_code=403, detail="Only the author can modify this post")
    return post


async def _refresh_counts(db: AsyncSession, post: Post) -> None:
    """Recompter les reactions / Recount reactions."""
    result = await db.execute(
        select(PostReaction.kind, func.count()).where(PostReaction.post_id == post.id).group_by(PostReaction.kind)
    )
    counts = dict(result.all())
    post.likes_count = counts.get(ReactionKind.LIKE, 0)
    post.dislikes_count = counts.get(ReactionKind.DISLIKE, 0)


@router.get("/", response_model=PaginatedResponse[PostRead])
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    search: str | None = None,
    tag: str | None = None,
    sort: Literal["newest", "oldest", "popular"] = "newest",
    db: AsyncSession = Depends(get_db),
):
    """Fil public / Public feed."""
    query = _visible()
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Post.title.ilike(pattern), Post.content.ilike(pattern)))
    if tag:
        # Tags stockes en JSON / Tags stored as JSON
        query = query.where(func.lower(cast(Post.tags, String)).contains(f'"{tag.strip().lower()}"'))
    query = query.order_by(*SORT_ORDERS[sort])

    posts, total, pages = await paginate(db, query, page, limit)
    return PaginatedResponse(
        data=[PostRead.model_validate(p) for p in posts],
        page=page, pages=pages, total=total, limit=limit, count=len(posts),
    )


@router.get("/my", response_model=ApiResponse[list[PostRead]])
async def my_posts(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Mes posts / My posts."""
    result = await db.execute(select(Post).where(Post.author_id == user.id).order_by(Post.created_at.desc(), Post.id.desc()))
    return ApiResponse(data=[PostRead.model_validate(p) for p in result.scalars().all()])


@router.get("/{post_id}", response_model=ApiResponse[PostRead])
async def get_post(post_id: int, db: AsyncSession = Depends(get_db)):
    """Obtenir un post / Get a post."""
    post = await _get_visible_post(db, post_id)
    return ApiResponse(data=PostRead.model_validate(post))


@router.post("/", response_model=ApiResponse[PostRead], status_code=201)
async def create_post(data: PostCreate, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Publier un post / Publish a post."""
    post = Post(**data.model_dump(), author_id=user.id)
    db.add(post)
    await db.flush()
    await db.refresh(post)
    return ApiResponse(message="Post created successfully", data=PostRead.model_validate(post))


@router.put("/{post_id}", response_model=ApiResponse[PostRead])
async def update_post(
    post_id: int,
    data: PostUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Modifier son post / Update own post."""
    post = await _get_own_post(db, post_id, user)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(post, key, value)
    await db.flush()
    await db.refresh(post)
    return ApiResponse(message="Post updated successfully", data=PostRead.model_validate(post))


@router.delete("/{post_id}", response_model=ApiResponse[None])
async def delete_post(post_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Supprimer son post / Delete own post."""
    post = await _get_own_post(db, post_id, user)
    await db.execute(delete(PostReaction).where(PostReaction.post_id == post.id))
    await db.execute(delete(PostReport).where(PostReport.post_id == post.id))
    await db.delete(post)
    return ApiResponse(message="Post deleted successfully")


async def _react(db: AsyncSession, post_id: int, user: User, kind: ReactionKind) -> ReactionResult:
    """Basculer une reaction; l'autre reaction est retiree / Toggle a reaction; the opposite one is removed."""
    post = await _get_visible_post(db, post_id)
    result = await db.execute(
        select(PostReaction).where(PostReaction.post_id == post.id, PostReaction.user_id == user.id)
    )
    reaction = result.scalar_one_or_none()

    current = None
    if reaction is None:
        db.add(PostReaction(post_id=post.id, user_id=user.id, kind=kind))
        current = kind
    elif reaction.kind == kind:
        await db.delete(reaction)
    else:
        reaction.kind = kind
        current = kind

    await db.flush()
    await _refresh_counts(db, post)
    await db.flush()
    return ReactionResult(
        post_id=post.id, reaction=current, likes_count=post.likes_count, dislikes_count=post.dislikes_count,
    )


@router.post("/{post_id}/like", response_model=ApiResponse[ReactionResult])
async def like_post(post_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Aimer / Like."""
    return ApiResponse(data=await _react(db, post_id, user, ReactionKind.LIKE))


@router.post("/{post_id}/dislike", response_model=ApiResponse[ReactionResult])
async def dislike_post(post_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Ne pas aimer / Dislike."""
    return ApiResponse(data=await _react(db, post_id, user, ReactionKind.DISLIKE))


@router.post("/{post_id}/report", response_model=ApiResponse[None])
async def report_post(
    post_id: int,
    data: PostReportCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Signaler un post / Report a post."""
    post = await _get_visible_post(db, post_id)
    if post.author_id == user.id:
        raise HTTPException(status_code=400, detail="You cannot report your own post")

    existing = await db.execute(
        select(PostReport.id).where(PostReport.post_id == post.id, PostReport.reported_by == user.id)
    )
    if existing.first():
        raise HTTPException(status_code=400, detail="You have already reported this post")

    db.add(PostReport(post_id=post.id, reported_by=user.id, reason=data.reason, description=data.description))
    post.reports_count += 1
    if post.reports_count >= REPORT_HIDE_THRESHOLD:
        post.is_hidden = True
    await db.flush()
    return ApiResponse(message="Post reported successfully")
