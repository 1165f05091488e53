import logging
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from schemas.comment import CommentCreate, CommentNode, CommentResponse
from services.CommentService import CommentService, CommentNotFoundError, DEFAULT_SORT
from utils.comments import build_comment_thread, build_comment_tree


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix='/api/comments',
    tags=['comments']
)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def parse_comment_id(value: str, detail: str = "invalid comment id") -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError:
        logger.warning(f"Rejected malformed id: {value!r}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class CommentListParams:
    """Query parameters shared by the flat list and the tree endpoints"""

    def __init__(
        self,
        parent: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = DEFAULT_SORT,
        limit: int = Query(DEFAULT_LIMIT, le=MAX_LIMIT),
        offset: int = 0
    ):
        self.parent_id = parse_comment_id(parent, "invalid parent id") if parent else None
        self.search = search or None
        self.sort = sort
        self.limit = limit if limit > 0 else DEFAULT_LIMIT
        self.offset = max(offset, 0)


async def _list_comments(db: AsyncSession, params: CommentListParams):
    try:
        return await CommentService.get_comments(
            db,
            parent_id=params.parent_id,
            search=params.search,
            sort=params.sort,
            limit=params.limit,
            offset=params.offset
        )
    except Exception as e:
        logger.error(f"Failed to get comments: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error getting comments: {e}"
        )


@router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(data: CommentCreate, db: AsyncSession = Depends(get_db)):
    parent_id = parse_comment_id(data.parent_id, "invalid parent id") if data.parent_id else None
    try:
        return await CommentService.create_comment(db, data.content, parent_id)

    except CommentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent comment not found")
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to create comment: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error while creating comment: {e}"
        )


@router.get("/", response_model=List[CommentResponse], status_code=status.HTTP_200_OK)
async def get_comments(params: CommentListParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await _list_comments(db, params)


@router.get("/tree", response_model=List[CommentNode], status_code=status.HTTP_200_OK)
async def get_comment_tree(params: CommentListParams = Depends(), db: AsyncSession = Depends(get_db)):
    comments = await _list_comments(db, params)
    return build_comment_tree(CommentResponse.model_validate(c) for c in comments)


@router.get("/{comment_id}", response_model=CommentNode, status_code=status.HTTP_200_OK)
async def get_comment(comment_id: str, db: AsyncSession = Depends(get_db)):
    comment_id = parse_comment_id(comment_id)
    try:
        comments = await CommentService.get_comment_thread(db, comment_id)
    except Exception as e:
        logger.error(f"Failed to get thread {comment_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error getting comment: {e}"
        )

    thread = build_comment_thread((CommentResponse.model_validate(c) for c in comments), comment_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return thread


@router.delete("/{comment_id}", status_code=status.HTTP_200_OK)
async def delete_comment(comment_id: str, db: AsyncSession = Depends(get_db)):
    comment_id = parse_comment_id(comment_id)
    try:
        await CommentService.delete_comment(db, comment_id)
        return {"message": "comment deleted"}

    except CommentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to delete comment {comment_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error while deleting comment: {e}"
        )
