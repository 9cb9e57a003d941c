from __future__ import annotations

import logging
import mimetypes
import random
import string
import time
from typing import Callable, MutableMapping, Optional

from supabase import Client

from config import AppConfig
from data.service import ActionResult, run_action


logger = logging.getLogger(__name__)


class UploadRejected(ValueError):
    pass


def validate_upload(content: bytes, content_type: Optional[str], max_bytes: int) -> None:
    if not content_type or not content_type.startswith("image/"):
        raise UploadRejected("Please choose an image file.")
    if len(content) > max_bytes:
        raise UploadRejected(f"The image is too large (max {max_bytes // (1024 * 1024)} MB).")
    if not content:
        raise UploadRejected("The file is empty.")


def object_path(prefix: str, filename: str, content_type: Optional[str] = None) -> str:
    """`<prefix>/<ms-timestamp>_<7 random chars>.<ext>`, unique per upload."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if not ext and content_type:
        ext = (mimetypes.guess_extension(content_type) or "").lstrip(".")
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    name = f"{int(time.time() * 1000)}_{suffix}"
    return f"{prefix.strip('/')}/{name}.{ext}" if ext else f"{prefix.strip('/')}/{name}"


def upload_image(
    cfg: AppConfig,
    use_mock: bool,
    bucket: str,
    prefix: str,
    filename: str,
    content: bytes,
    content_type: Optional[str],
) -> ActionResult:
    """Stores an image and returns its public URL in `ActionResult.data`."""
    try:
        validate_upload(content, content_type, cfg.max_upload_bytes)
    except UploadRejected as e:
        return ActionResult(ok=False, message=str(e))

    path = object_path(prefix, filename, content_type)

    def _live(client: Client) -> str:
        files = client.storage.from_(bucket)
        files.upload(
            path,
            content,
            {"cache-control": "3600", "upsert": "false", "content-type": content_type or "application/octet-stream"},
        )
        url = files.get_public_url(path)
        if not url:
            raise RuntimeError("Could not get public URL for uploaded image")
        logger.info("Uploaded %s to %s/%s", filename, bucket, path)
        return url.rstrip("?")

    return run_action(cfg, use_mock, _live, "upload image", "Image uploaded")


def upload_once(
    state: MutableMapping, key: str, file_id: str, upload: Callable[[], ActionResult]
) -> Optional[ActionResult]:
    """
    Runs `upload` unless `file_id` is already recorded under `state[key]`.
    Returns None when the file was uploaded before; the id is only recorded on success.
    """
    if state.get(key) == file_id:
        return None
    res = upload()
    if res.ok:
        state[key] = file_id
    return res
