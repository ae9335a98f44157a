"""m4b-merge -- turn a folder of audio tracks (or a ripped CD) into one chaptered M4B.

Core modules:
    config    -- MergeConfig via pydantic-settings (.env < env vars < kwargs)
                 and loguru setup.
    cli       -- Click CLI: `m4b-merge <folder>` or `m4b-merge --rip-cd <folder> [device]`.
    runner    -- PipelineRunner: transcode -> probe -> chapter metadata -> merge
                 in a private work area, first failure raised as StageError.
    process   -- Subprocess runner appending all tool output to the run log.
    toolchain -- Argument contracts for ffmpeg/ffprobe (swappable adapter).
    ffprobe   -- Duration probing. Raises SpawnError/ExecutionError/ParseError.
    chapters  -- Pure chapter fold and FFMETADATA1 rendering.
    discover  -- Recursive, natural-sorted media discovery.
    ripper    -- cdparanoia ripping and cd-discid disc ids.

Subpackages:
    stages -- transcode, probe, merge
    api    -- MusicBrainz disc lookup (best effort, never raises)
"""
