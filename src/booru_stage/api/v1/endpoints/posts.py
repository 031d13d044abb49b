# src/booru_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Booru Stage API.

Handlers only translate between JSON and the post service; errors raised by
the service are mapped to HTTP responses by the handler installed in ``main``.
"""

from fastapi import APIRouter, Response, status

from booru_stage.api.v1.dependencies import PostServiceDep
from booru_stage.schemas.post import PostEditRequest, PostResponse, PostUploadRequest
from booru_stage.schemas.snapshot import SnapshotResponse

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(payload: PostUploadRequest, service: PostServiceDep) -> PostResponse:
    """Upload a new post from base64 content or a remote URL."""
    post = service.create_post(payload.to_form())
    return PostResponse.model_validate(post)


@router.get("/featured", response_model=PostResponse | None)
def get_featured_post(service: PostServiceDep) -> PostResponse | None:
    """Return the featured post, or null when none is featured."""
    post = service.get_featured()
    if post is None:
        return None
    return PostResponse.model_validate(post)


@router.get("/{name_or_id}", response_model=PostResponse)
def get_post(name_or_id: str, service: PostServiceDep) -> PostResponse:
    """Return a post by name or numeric id."""
    return PostResponse.model_validate(service.get_by_name_or_id(name_or_id))


@router.put("/{name_or_id}", response_model=PostResponse)
def update_post(
    name_or_id: str,
    payload: PostEditRequest,
    service: PostServiceDep,
) -> PostResponse:
    """Apply a sparse edit; ``seen_edit_time`` must match the post's last edit."""
    post = service.get_by_name_or_id(name_or_id)
    updated = service.update_post(post, payload.to_form())
    return PostResponse.model_validate(updated)


@router.delete("/{name_or_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(name_or_id: str, service: PostServiceDep) -> Response:
    """Delete a post, keeping its final state in history."""
    post = service.get_by_name_or_id(name_or_id)
    service.delete_post(post)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{name_or_id}/feature", response_model=PostResponse)
def feature_post(name_or_id: str, service: PostServiceDep) -> PostResponse:
    """Make a post the featured post."""
    post = service.get_by_name_or_id(name_or_id)
    return PostResponse.model_validate(service.feature_post(post))


@router.get("/{name_or_id}/history", response_model=list[SnapshotResponse])
def get_post_history(name_or_id: str, service: PostServiceDep) -> list[SnapshotResponse]:
    """Return the post's snapshots, newest first."""
    post = service.get_by_name_or_id(name_or_id)
    return [SnapshotResponse.model_validate(snapshot) for snapshot in service.get_history(post)]
