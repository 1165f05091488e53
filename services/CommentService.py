import logging
from typing import List, Optional
from sqlalchemy import delete, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models.comments import Comment


logger = logging.getLogger(__name__)


class CommentNotFoundError(Exception):
    def __init__(self, comment_id: str):
        super().__init__(f"Comment {comment_id} not found")
        self.comment_id = comment_id


SORT_ORDERS = {
    "created_asc": Comment.created_at.asc(),
    "created_desc": Comment.created_at.desc(),
    "updated_asc": Comment.updated_at.asc(),
    "updated_desc": Comment.updated_at.desc(),
}

DEFAULT_SORT = "created_desc"


class CommentService:

    @staticmethod
    def _subtree_ids(comment_id: str):
        """Recursive CTE with the id of the comment and of all its descendants"""
        tree = (
            select(Comment.id)
            .where(Comment.id == comment_id)
            .cte(name="comment_tree", recursive=True)
        )
        return tree.union_all(
            select(Comment.id).where(Comment.parent_id == tree.c.id)
        )

    @staticmethod
    async def get_comment_by_id(db: AsyncSession, comment_id: str) -> Comment | None:
        result = await db.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_comment(db: AsyncSession, content: str, parent_id: Optional[str] = None) -> Comment:
        if parent_id is not None:
            parent = await CommentService.get_comment_by_id(db, parent_id)
            if not parent:
                raise CommentNotFoundError(parent_id)

        comment = Comment(content=content, parent_id=parent_id)
        db.add(comment)
        await db.commit()
        await db.refresh(comment)

        logger.info(f"Comment {comment.id} created (parent: {parent_id})")
        return comment

    @staticmethod
    async def get_comments(
        db: AsyncSession,
        parent_id: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = DEFAULT_SORT,
        limit: int = 10,
        offset: int = 0
    ) -> List[Comment]:
        stmt = select(Comment)

        if parent_id is not None:
            stmt = stmt.where(Comment.parent_id == parent_id)

        if search:
            if db.bind.dialect.name == "postgresql":
                stmt = stmt.where(
                    func.to_tsvector('english', Comment.content)
                    .op('@@')(func.plainto_tsquery('english', search))
                )
            else:
                # autoescape keeps % and _ in the search text literal
                stmt = stmt.where(func.lower(Comment.content).contains(search.lower(), autoescape=True))

        order = SORT_ORDERS.get(sort, SORT_ORDERS[DEFAULT_SORT])
        stmt = stmt.order_by(order).limit(limit).offset(offset)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_comment_thread(db: AsyncSession, comment_id: str) -> List[Comment]:
        tree = CommentService._subtree_ids(comment_id)
        result = await db.execute(
            select(Comment)
            .where(Comment.id.in_(select(tree.c.id)))
            .order_by(Comment.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete_comment(db: AsyncSession, comment_id: str) -> int:
        tree = CommentService._subtree_ids(comment_id)
        result = await db.execute(select(tree.c.id))
        ids = list(result.scalars().all())

        if not ids:
            raise CommentNotFoundError(comment_id)

        await db.execute(delete(Comment).where(Comment.id.in_(ids)))
        await db.commit()

        logger.info(f"Comment {comment_id} deleted with {len(ids) - 1} replies")
        return len(ids)
