"""MusicBrainz disc lookup.

Queries the MusicBrainz web service by disc id and returns the release
title, artist credit, and track titles of the first medium. Lookup is best
effort: any HTTP error, bad JSON, or missing release yields None and the
caller falls back to file names.
"""

import httpx
from loguru import logger

from ..models import DiscMetadata

log = logger.bind(stage="musicbrainz")

DEFAULT_API_BASE = "https://musicbrainz.org/ws/2"
DEFAULT_USER_AGENT = "m4b-merge/0.1 ( https://github.com/m4b-merge/m4b-merge )"


def lookup_disc(
    disc_id: str,
    api_base: str = DEFAULT_API_BASE,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 10.0,
) -> DiscMetadata | None:
    """Look up a disc id. Never raises; returns None when nothing usable came back."""
    log.debug(f"MusicBrainz lookup: disc_id={disc_id!r}")

    try:
        resp = httpx.get(
            f"{api_base.rstrip('/')}/discid/{disc_id}",
            params={"inc": "recordings+artists", "fmt": "json"},
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as e:
        log.warning(f"MusicBrainz API error: {e}")
        return None
    except ValueError as e:
        log.warning(f"MusicBrainz returned invalid JSON: {e}")
        return None

    try:
        return _parse_release(data)
    except (AttributeError, TypeError) as e:
        log.warning(f"Unexpected MusicBrainz response shape: {e}")
        return None


def _parse_release(data) -> DiscMetadata | None:
    """Pick the first release's first medium out of a discid response."""
    if not isinstance(data, dict):
        return None
    releases = data.get("releases") or []
    if not releases:
        log.info("MusicBrainz: no release for this disc")
        return None

    release = releases[0]
    media = release.get("media") or []
    if not media:
        return None

    titles = tuple(t.get("title", "") for t in (media[0].get("tracks") or []))
    if not titles:
        return None

    metadata = DiscMetadata(
        title=release.get("title", "") or "",
        artist=_artist_credit(release.get("artist-credit") or []),
        track_titles=titles,
    )
    log.debug(f"MusicBrainz: {metadata.title!r} with {len(titles)} tracks")
    return metadata


def _artist_credit(credits: list[dict]) -> str:
    """Join an artist-credit list the way MusicBrainz displays it."""
    parts = []
    for credit in credits:
        name = credit.get("name") or (credit.get("artist") or {}).get("name", "")
        parts.append(f"{name}{credit.get('joinphrase', '')}")
    return "".join(parts).strip()
