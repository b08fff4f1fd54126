"""
File attachments for submission comments.

Uploading follows Canvas' three-step flow: ask Canvas for an upload slot,
POST the bytes as multipart form data to the returned URL, then reference
the resulting file id from a comment. Every step goes through the client's
retry policy and concurrency gate.
"""

import logging
import os
import time
from typing import Dict, Optional, Tuple

from constants import UPLOAD_MAX_ATTEMPTS, UPLOAD_RETRY_DELAY

from .client import CanvasClient
from .endpoints import add_comment
from .errors import CanvasAPIError, DeserializationError
from .transport import HttpMethod, Request

logger = logging.getLogger(__name__)


def request_upload_token(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    user_id: int,
    file_name: str,
    file_size: int,
) -> Tuple[str, Dict[str, str]]:
    """Return the upload URL and the form fields Canvas wants posted with the file."""
    endpoint = f"courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}/comments/files"
    response = client.post(endpoint, {"name": file_name, "size": file_size})
    data = client.json_body(response, HttpMethod.POST, endpoint)

    upload_url = data.get("upload_url")
    upload_params = data.get("upload_params")
    if not isinstance(upload_url, str) or not isinstance(upload_params, dict):
        raise DeserializationError(
            f"POST {client.url_for(endpoint)} response is missing upload_url or upload_params",
            method="POST", url=client.url_for(endpoint),
        )
    return upload_url, {key: str(value) for key, value in upload_params.items()}


def upload_bytes(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    user_id: int,
    file_name: str,
    content: bytes,
) -> int:
    """Upload ``content`` as a comment attachment and return the new file id."""
    upload_url, upload_params = request_upload_token(
        client, course_id, assignment_id, user_id, file_name, len(content)
    )
    request = Request(
        method=HttpMethod.POST,
        url=upload_url,
        form=upload_params,
        files={"file": (file_name, content)},
        # The upload URL is pre-signed and lives outside the API
        authenticated=False,
    )
    response = client.send(request)
    try:
        data = response.json()
    except ValueError as e:
        raise DeserializationError(
            f"POST {upload_url} returned a body that is not valid JSON: {e}",
            method="POST", url=upload_url, status=response.status_code,
        ) from e
    file_id = data.get("id") if isinstance(data, dict) else None
    if not isinstance(file_id, int):
        raise DeserializationError(
            f"POST {upload_url} response is missing the file id", method="POST", url=upload_url
        )
    logger.debug("Uploaded %s (%d bytes) as file %d", file_name, len(content), file_id)
    return file_id


def upload_file(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    user_id: int,
    file_path: str,
) -> int:
    file_name = os.path.basename(file_path)
    if not file_name:
        raise ValueError(f"Invalid file name: {file_path!r}")
    with open(file_path, "rb") as f:
        content = f.read()
    return upload_bytes(client, course_id, assignment_id, user_id, file_name, content)


def comment_with_bytes(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    user_id: int,
    text: str,
    file_name: Optional[str] = None,
    content: Optional[bytes] = None,
    max_attempts: int = UPLOAD_MAX_ATTEMPTS,
    retry_delay: float = UPLOAD_RETRY_DELAY,
) -> None:
    """
    Comment on a submission, attaching ``content`` when given.

    The whole upload flow is retried up to ``max_attempts`` times, on top of
    the per-request retries, since a slot handed out by Canvas can expire.
    """
    file_ids = None
    if file_name is not None and content is not None:
        for attempt in range(1, max_attempts + 1):
            try:
                file_ids = [upload_bytes(client, course_id, assignment_id, user_id, file_name, content)]
                break
            except CanvasAPIError as e:
                if attempt == max_attempts:
                    raise
                logger.warning("Upload of %s failed (attempt %d/%d): %s", file_name, attempt, max_attempts, e)
                time.sleep(retry_delay)
    add_comment(course_id, assignment_id, user_id, text, file_ids=file_ids, client=client)


def comment_with_file(
    client: CanvasClient,
    course_id: int,
    assignment_id: int,
    user_id: int,
    text: str,
    file_path: Optional[str] = None,
) -> None:
    file_ids = None
    if file_path is not None:
        file_ids = [upload_file(client, course_id, assignment_id, user_id, file_path)]
    add_comment(course_id, assignment_id, user_id, text, file_ids=file_ids, client=client)


def download_file(client: CanvasClient, file_id: int) -> Tuple[str, bytes]:
    """Fetch a file's metadata, then its content. Returns (display name, bytes)."""
    metadata = client.get(f"files/{file_id}")
    if not isinstance(metadata, dict) or not isinstance(metadata.get("url"), str):
        raise DeserializationError(
            f"GET {client.url_for(f'files/{file_id}')} returned no download url",
            method="GET", url=client.url_for(f"files/{file_id}"),
        )
    name = metadata.get("display_name") or metadata.get("filename") or str(file_id)
    response = client.request(HttpMethod.GET, metadata["url"])
    return name, response.content
