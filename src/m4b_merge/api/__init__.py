"""External API clients for metadata lookup.

Submodules:
    musicbrainz -- Best-effort MusicBrainz disc id lookup (track titles)
"""
