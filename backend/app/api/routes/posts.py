"""GET /posts, /posts/{post_id} and /posts/{post_id}/comments."""

from fastapi import APIRouter, Depends, Query

from backend.app.api.dependencies import get_posts_service
from backend.app.models.posts import Comment, Post
from backend.app.services.posts_service import PostsService

router = APIRouter()


@router.get("/posts", response_model=list[Post])
def list_posts(
    user_id: int | None = Query(default=None, alias="userId"),
    service: PostsService = Depends(get_posts_service),
) -> list[Post]:
    """Return all posts, filtered by ``userId`` when given."""
    return service.list_posts(user_id)


@router.get("/posts/{post_id}", response_model=Post)
def get_post(post_id: str, service: PostsService = Depends(get_posts_service)) -> Post:
    """Return a single post."""
    return service.get_post(post_id)


@router.get("/posts/{post_id}/comments", response_model=list[Comment])
def get_comments(
    post_id: str, service: PostsService = Depends(get_posts_service),
) -> list[Comment]:
    """Return the comments on a post."""
    return service.get_comments(post_id)


@router.get("/posts//comments", response_model=list[Comment], include_in_schema=False)
def get_comments_empty_id(service: PostsService = Depends(get_posts_service)) -> list[Comment]:
    """An empty ``{post_id}`` segment never matches the route above."""
    return service.get_comments("")
