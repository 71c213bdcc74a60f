"""Archive download and extraction for the generate-project flow."""

import asyncio
import hashlib
import logging
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

import httpx

from .errors import DownloadError, ExtractError
from .metadata import USER_AGENT

logger = logging.getLogger(__name__)

TEMP_FOLDER_NAME = "spring-initializr"


def get_temp_folder() -> Path:
    return Path(tempfile.gettempdir()) / TEMP_FOLDER_NAME


async def download_file(
    url: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    temp_folder: Optional[Path] = None,
) -> Path:
    """Stream ``url`` to a temp file named after the URL's md5 digest.

    A previous download of the same URL is replaced.

    Raises:
        DownloadError: On any HTTP or local write failure.
    """
    folder = temp_folder or get_temp_folder()
    target = folder / hashlib.md5(url.encode("utf-8")).hexdigest()
    try:
        folder.mkdir(parents=True, exist_ok=True)
        if target.exists():
            target.unlink()
        async with httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True, headers={"User-Agent": USER_AGENT},
        ) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with open(target, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
    except httpx.HTTPError as e:
        raise DownloadError(f"Unable to download project archive: {e}") from e
    except OSError as e:
        raise DownloadError(f"Unable to save project archive to {target}: {e}") from e
    logger.info("Downloaded %s to %s", url, target)
    return target


def _extract(archive: Path, target_folder: Path) -> None:
    target_folder.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(target_folder)


async def extract_zip(archive: Path, target_folder: Path) -> None:
    """Extract ``archive`` into ``target_folder``, creating it if needed.

    Raises:
        ExtractError: If the archive is corrupt or cannot be written out.
    """
    try:
        await asyncio.to_thread(_extract, archive, target_folder)
    except (zipfile.BadZipFile, OSError) as e:
        raise ExtractError(f"Unable to extract resources: {e}") from e
    logger.info("Extracted %s into %s", archive, target_folder)
