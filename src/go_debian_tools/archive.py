"""Client for the Debian ftp-master API.

Provides the "packaged set" (Go import paths already available as -dev
packages in Debian) and the list of source packages waiting in NEW.
"""

import logging
from typing import Any

import requests
from pydantic import ValidationError

from go_debian_tools.exceptions import ArchiveError
from schemas.archive import DebianPackage, GoImportPathEntry, NewSourceEntry
from schemas.settings import ToolSettings

logger = logging.getLogger(__name__)


def _get_json(url: str, timeout: float, session: requests.Session | None) -> Any:
    """GET a URL and decode its JSON body.

    Raises:
        ArchiveError: On transport errors, non-200 status or invalid JSON
    """
    getter = session.get if session is not None else requests.get
    logger.debug(f"Fetching {url}")
    try:
        response = getter(url, timeout=timeout)
    except requests.RequestException as e:
        raise ArchiveError(f"Getting {url!r} failed: {e}") from e

    if response.status_code != 200:
        raise ArchiveError(
            f"Unexpected HTTP status code from {url!r}: got {response.status_code}, want 200"
        )

    try:
        return response.json()
    except ValueError as e:
        raise ArchiveError(f"Cannot decode JSON from {url!r}: {e}") from e


def parse_golang_binaries(payload: Any) -> dict[str, DebianPackage]:
    """Build the packaged set from a Go-Import-Path listing.

    Only -dev binaries are kept (dbgsym and program packages also carry the
    field). One entry may declare several comma-separated import paths.

    Raises:
        ArchiveError: If the payload does not have the expected shape
    """
    if not isinstance(payload, list):
        raise ArchiveError(f"Expected a JSON list, got {type(payload).__name__}")

    packaged: dict[str, DebianPackage] = {}
    for raw in payload:
        try:
            entry = GoImportPathEntry.model_validate(raw)
        except ValidationError as e:
            raise ArchiveError(f"Malformed Go-Import-Path entry {raw!r}: {e}") from e

        if not entry.binary.endswith("-dev"):
            continue
        for import_path in entry.import_paths():
            packaged[import_path] = DebianPackage(binary=entry.binary, source=entry.source)

    return packaged


def parse_sources_in_new(payload: Any) -> dict[str, str]:
    """Map source package names to the version waiting in NEW.

    Raises:
        ArchiveError: If the payload does not have the expected shape
    """
    if not isinstance(payload, list):
        raise ArchiveError(f"Expected a JSON list, got {type(payload).__name__}")

    try:
        entries = [NewSourceEntry.model_validate(raw) for raw in payload]
    except ValidationError as e:
        raise ArchiveError(f"Malformed NEW entry: {e}") from e

    return {entry.source: entry.version for entry in entries}


def fetch_golang_binaries(
    settings: ToolSettings, session: requests.Session | None = None
) -> dict[str, DebianPackage]:
    """Download the packaged set.

    Args:
        settings: Tool settings (endpoint URL and timeout)
        session: Optional HTTP session

    Returns:
        Mapping of Go import path to Debian package

    Raises:
        ArchiveError: If the listing cannot be fetched or decoded
    """
    payload = _get_json(str(settings.golang_binaries_url), settings.request_timeout, session)
    packaged = parse_golang_binaries(payload)
    logger.info(f"Found {len(packaged)} Go import paths packaged in Debian")
    return packaged


def fetch_sources_in_new(
    settings: ToolSettings, session: requests.Session | None = None
) -> dict[str, str]:
    """Download the list of source packages waiting in NEW.

    Raises:
        ArchiveError: If the listing cannot be fetched or decoded
    """
    payload = _get_json(str(settings.sources_in_new_url), settings.request_timeout, session)
    return parse_sources_in_new(payload)
