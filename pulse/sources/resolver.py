"""
pulse/sources/resolver.py

Turns Drive/Sheets sharing links into direct-download URLs.

Pure string handling; no network access.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from pulse.sources.errors import ResolutionFailure

logger = logging.getLogger(__name__)

DRIVE_DOWNLOAD_URL = "https://drive.google.com/uc?export=download&id={file_id}"
SHEETS_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{file_id}/export?format=csv"

_FILE_VIEW_PATTERN = re.compile(r"/file/d/([^/?#]+)")
_OPEN_ID_PATTERN = re.compile(r"open\?id=([^&#]+)")
_SPREADSHEET_PATTERN = re.compile(r"/spreadsheets/d/([^/?#]+)")


@dataclass(frozen=True)
class SourceResolution:
    """
    Outcome of resolving one share URL.

    On failure ``download_url`` is the unchanged input and ``failure`` holds
    the reason.
    """

    share_url: str
    download_url: str
    file_id: str | None = None
    failure: ResolutionFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def resolve_source(share_url: str) -> SourceResolution:
    """
    Resolve a sharing link to a fetchable download URL.
    """

    url = (share_url or "").strip()
    if "export=download" in url:
        return SourceResolution(share_url=share_url, download_url=url)

    match = _SPREADSHEET_PATTERN.search(url)
    if match:
        file_id = match.group(1)
        return SourceResolution(
            share_url=share_url,
            download_url=SHEETS_EXPORT_URL.format(file_id=file_id),
            file_id=file_id,
        )

    match = _FILE_VIEW_PATTERN.search(url) or _OPEN_ID_PATTERN.search(url)
    if match:
        file_id = match.group(1)
        return SourceResolution(
            share_url=share_url,
            download_url=DRIVE_DOWNLOAD_URL.format(file_id=file_id),
            file_id=file_id,
        )

    logger.warning("Could not extract a file id from source URL url=%s", share_url)
    return SourceResolution(
        share_url=share_url,
        download_url=share_url,
        failure=ResolutionFailure(f"Could not extract a file id from URL: {share_url}"),
    )


def resolve_download_url(share_url: str) -> str:
    """
    Shortcut returning only the download URL (the input itself on failure).
    """

    return resolve_source(share_url).download_url
