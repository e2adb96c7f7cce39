"""Track length lookup: download each track once and read its duration.

Failures never propagate: a track that can't be fetched or decoded is
logged and played with the fallback length instead.
"""
import asyncio
import logging
from io import BytesIO
from typing import Optional

import httpx
from mutagen import File as MutagenFile

from .config import DURATION_RETRIES, FALLBACK_DURATION, FETCH_TIMEOUT

logger = logging.getLogger(__name__)


def parse_duration(payload: bytes) -> Optional[float]:
    """Length in seconds from an in-memory audio file, or None."""
    audio = MutagenFile(BytesIO(payload))
    if audio is None or audio.info is None:
        return None
    length = getattr(audio.info, "length", None)
    if not length or length <= 0:
        return None
    return float(length)


async def fetch_duration(url: str, client: httpx.AsyncClient) -> Optional[float]:
    """GET the track and read its length. Returns None on failure."""
    try:
        r = await client.get(url)
        r.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Error getting duration for %s: %s", url, e)
        return None

    try:
        duration = await asyncio.to_thread(parse_duration, r.content)
    except Exception as e:
        logger.warning("Couldn't decode %s: %s", url, e)
        return None

    if duration is None:
        logger.warning("No duration found for %s", url)
    return duration


async def _lookup(url: str, client: httpx.AsyncClient, retries: int) -> Optional[float]:
    for attempt in range(retries + 1):
        duration = await fetch_duration(url, client)
        if duration is not None:
            return duration
        if attempt < retries:
            logger.info("Retrying %s (%d/%d)", url, attempt + 1, retries)
    return None


async def resolve_duration(
    url: str,
    client: httpx.AsyncClient,
    retries: int = DURATION_RETRIES,
) -> float:
    """Duration for one track, or FALLBACK_DURATION once every attempt has failed.

    Single-track form of the lookup. build_duration_table shares ``_lookup``
    with it but keeps failures out of the table instead of storing the fallback.
    """
    duration = await _lookup(url, client, retries)
    if duration is None:
        logger.warning("Using default %.1f seconds for %s", FALLBACK_DURATION, url)
        return FALLBACK_DURATION
    return duration


async def build_duration_table(
    playlist,
    client: Optional[httpx.AsyncClient] = None,
    retries: int = DURATION_RETRIES,
) -> dict[str, float]:
    """Look up every track, one after another.

    Tracks whose lookup failed are left out of the table; the clock reads a
    missing entry as FALLBACK_DURATION.
    """
    logger.info("Initializing track durations...")
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=FETCH_TIMEOUT, follow_redirects=True)

    table: dict[str, float] = {}
    try:
        for track in playlist:
            duration = await _lookup(track, client, retries)
            if duration is None:
                logger.warning("No usable duration for %s, defaulting to %.1f seconds", track, FALLBACK_DURATION)
                continue
            table[track] = duration
            logger.info("Track duration: %s -> %.2f seconds", track, duration)
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Track durations initialized (%d/%d read)", len(table), len(playlist))
    return table
