"""CLI entry point for m4b-merge."""

import sys
from pathlib import Path

import click
from loguru import logger

from .api.musicbrainz import lookup_disc
from .config import MergeConfig
from .discover import collect_media_files
from .errors import ConfigError, NoMediaFilesError, PipelineError, RipError, StageError
from .ffprobe import duration_to_timestamp
from .models import ConversionJob, PipelineState, ProgressEvent
from .ripper import get_disc_id, rip_cd_to_wav
from .runner import PipelineRunner

log = logger.bind(stage="cli")

_STAGE_LABELS = {
    PipelineState.TRANSCODING: "Converting {total} files to AAC...",
    PipelineState.PROBING: "Reading durations...",
    PipelineState.BUILDING_METADATA: "Writing chapter metadata...",
    PipelineState.MERGING: "Merging files into final m4b with chapters...",
}


def _echo_progress(event: ProgressEvent) -> None:
    if event.index == 0:
        label = _STAGE_LABELS.get(event.state)
        if label:
            click.echo(label.format(total=event.total))
        return
    click.echo(f"  [{event.index}/{event.total}] {event.message}")


def _echo_rip_progress(position: int, total: int, track: int) -> None:
    click.echo(f"  [{position}/{total}] Ripping track {track:02d}")


def _convert(job: ConversionJob, config: MergeConfig) -> bool:
    """Run the pipeline for ``job`` and report the outcome. True on success."""
    runner = PipelineRunner(config, progress=_echo_progress)
    try:
        result = runner.run(job)
    except StageError as e:
        click.echo(f"Conversion failed during {e.stage}: {e.cause}", err=True)
        path = getattr(e.cause, "path", None)
        if path is not None:
            click.echo(f"  file: {path}", err=True)
        if e.log_path is not None:
            click.echo(f"FFmpeg log written to: {e.log_path}", err=True)
        return False
    except PipelineError as e:
        click.echo(f"Conversion failed: {e}", err=True)
        return False

    click.echo(
        f"Successfully created {result.output_path} "
        f"({len(result.chapters)} chapters, "
        f"{duration_to_timestamp(result.total_duration)})"
    )
    if result.log_path is not None:
        click.echo(f"FFmpeg log written to: {result.log_path}")
    return True


def _rip_and_convert(
    ctx: click.Context,
    output_folder: Path,
    device: str,
    output: Path | None,
    config: MergeConfig,
) -> None:
    click.echo(f"Ripping CD from device {device}...")
    try:
        wav_files = rip_cd_to_wav(
            output_folder,
            device,
            cdparanoia=config.cdparanoia_bin,
            progress=_echo_rip_progress,
        )
    except RipError as e:
        click.echo(f"CD rip failed: {e}", err=True)
        ctx.exit(1)

    click.echo("Getting disc ID...")
    try:
        disc_id = get_disc_id(device, cd_discid=config.cd_discid_bin)
    except RipError as e:
        click.echo(f"Failed to get disc ID: {e}", err=True)
        ctx.exit(1)

    click.echo("Fetching track names from MusicBrainz...")
    disc = lookup_disc(
        disc_id,
        api_base=config.musicbrainz_url,
        user_agent=config.musicbrainz_user_agent,
        timeout=config.lookup_timeout,
    )
    overrides = None
    if disc is not None:
        for i, name in enumerate(disc.track_titles, start=1):
            click.echo(f"Track {i}: {name}")
        if config.disc_titles:
            overrides = list(disc.track_titles)
    else:
        click.echo("Could not fetch track names from MusicBrainz.")

    job = ConversionJob.from_paths(
        wav_files,
        output or Path(f"{output_folder}.m4b"),
        title_overrides=overrides,
        title=(disc.title if disc else "") or output_folder.name,
        artist=disc.artist if disc else None,
    )
    if not _convert(job, config):
        ctx.exit(1)


@click.command()
@click.argument("folder", type=click.Path(file_okay=False, path_type=Path))
@click.argument("device", required=False)
@click.option(
    "--rip-cd",
    "rip_cd",
    is_flag=True,
    help="Rip an audio CD into FOLDER (from DEVICE), then convert it.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output .m4b path. Defaults to <folder name>.m4b.",
)
@click.option("--force", is_flag=True, help="Overwrite the output file if it exists.")
@click.option(
    "--keep-work-dir", is_flag=True, help="Keep intermediate files for inspection."
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to .env file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    folder: Path,
    device: str | None,
    rip_cd: bool,
    output: Path | None,
    force: bool,
    keep_work_dir: bool,
    verbose: bool,
    config_file: str | None,
) -> None:
    """Merge a folder of audio tracks (or a ripped CD) into one chaptered M4B.

    \b
      m4b-merge <input_folder>
      m4b-merge --rip-cd <output_folder> [device]
    """
    if device is not None and not rip_cd:
        raise click.UsageError("DEVICE is only accepted together with --rip-cd.")

    # Only flags that were given override .env / environment values
    config_kwargs: dict[str, bool] = {}
    if force:
        config_kwargs["force"] = True
    if keep_work_dir:
        config_kwargs["cleanup_work_dir"] = False
    if verbose:
        config_kwargs["verbose"] = True

    try:
        config = MergeConfig.load(config_file or ".env", **config_kwargs)
        config.setup_logging()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        ctx.exit(1)

    if rip_cd:
        log.debug(f"Rip mode: folder={folder} device={device or config.cd_device}")
        _rip_and_convert(ctx, folder, device or config.cd_device, output, config)
        return

    if not folder.is_dir():
        raise click.UsageError(f"Input folder does not exist: {folder}")

    media_files = collect_media_files(folder)
    if not media_files:
        click.echo(str(NoMediaFilesError(folder)), err=True)
        ctx.exit(1)

    name = folder.resolve().name
    job = ConversionJob.from_paths(
        media_files,
        output or Path(f"{name}.m4b"),
        title=name,
    )
    log.info(f"Converting {len(media_files)} files from {folder}")
    if not _convert(job, config) and config.strict_exit:
        ctx.exit(1)


def run() -> None:
    """Console entry point: every usage error exits with status 1."""
    try:
        rv = main.main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(rv or 0)
