import logging
from typing import Optional
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import URL

from config.appsettings import Settings
from config.config import templates_dir
from services.CommentClient import CommentClient, CommentClientError, get_comment_client
from utils.comments import parse_timestamp


logger = logging.getLogger(__name__)

router = APIRouter(
    tags=['pages']
)

templates = Jinja2Templates(directory=str(templates_dir))


def format_timestamp(value) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value or "")
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


templates.env.filters["timestamp"] = format_timestamp
templates.env.globals["reply_limit"] = Settings.REPLIES_INLINE_LIMIT


def safe_next(next_url: Optional[str]) -> str:
    # Only local paths, "//host" would leave the site
    if not next_url or not next_url.startswith("/") or next_url.startswith("//"):
        return "/"
    return next_url


def local_url(url: URL) -> str:
    return f"{url.path}?{url.query}" if url.query else url.path


def redirect_back(next_url: Optional[str], error: Optional[str] = None) -> RedirectResponse:
    url = URL(safe_next(next_url))
    if error:
        url = url.include_query_params(error=error)
    return RedirectResponse(str(url), status_code=status.HTTP_303_SEE_OTHER)


@router.get('/', response_class=HTMLResponse, status_code=status.HTTP_200_OK)
async def comments_page(
    request: Request,
    search: Optional[str] = None,
    page: int = 1,
    error: Optional[str] = None,
    client: CommentClient = Depends(get_comment_client)
):
    page = max(page, 1)
    limit = Settings.PAGE_SIZE
    comments = []

    try:
        comments = await client.get_comments(
            search=search or None,
            limit=limit,
            offset=(page - 1) * limit
        )
    except CommentClientError as e:
        logger.error(f"Failed to fetch comments: {e}")
        error = e.detail

    return templates.TemplateResponse(
        request,
        "comments.html",
        {
            "comments": comments,
            "search": search or "",
            "page": page,
            "has_previous": page > 1,
            "has_next": len(comments) >= limit,
            "error": error,
            "current_url": local_url(request.url.include_query_params(page=page).remove_query_params("error")),
        }
    )


@router.get('/comment/{comment_id}', response_class=HTMLResponse, status_code=status.HTTP_200_OK)
async def thread_page(
    request: Request,
    comment_id: str,
    error: Optional[str] = None,
    client: CommentClient = Depends(get_comment_client)
):
    comment = None
    status_code = status.HTTP_200_OK

    try:
        comment = await client.get_comment(comment_id)
    except CommentClientError as e:
        logger.error(f"Failed to fetch comment {comment_id}: {e}")
        error = e.detail
        if e.status_code in (status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND):
            status_code = status.HTTP_404_NOT_FOUND

    return templates.TemplateResponse(
        request,
        "thread.html",
        {
            "comment": comment,
            "error": error,
            "current_url": request.url.path,
        },
        status_code=status_code
    )


@router.post('/comments', response_class=RedirectResponse)
async def submit_comment(
    content: str = Form(...),
    parent_id: Optional[str] = Form(None),
    next: Optional[str] = Form(None),
    client: CommentClient = Depends(get_comment_client)
):
    try:
        await client.create_comment(content, parent_id or None)
    except CommentClientError as e:
        logger.error(f"Failed to create comment: {e}")
        return redirect_back(next, e.detail)

    return redirect_back(next)


@router.post('/comment/{comment_id}/delete', response_class=RedirectResponse)
async def remove_comment(
    comment_id: str,
    next: Optional[str] = Form(None),
    client: CommentClient = Depends(get_comment_client)
):
    try:
        await client.delete_comment(comment_id)
    except CommentClientError as e:
        logger.error(f"Failed to delete comment {comment_id}: {e}")
        return redirect_back(next, e.detail)

    # The thread page of a deleted comment is gone
    if safe_next(next) == f"/comment/{comment_id}":
        next = "/"
    return redirect_back(next)
