"""Pipeline configuration via pydantic-settings (.env + env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .api.musicbrainz import DEFAULT_API_BASE, DEFAULT_USER_AGENT
from .errors import ConfigError
from .toolchain import FFmpegToolchain


class MergeConfig(BaseSettings):
    """All pipeline configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -- Directories --
    work_dir: Path | None = None  # None = system temp dir
    log_dir: Path | None = None  # None = ffmpeg log lands next to the output

    # -- External tools --
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    cdparanoia_bin: str = "cdparanoia"
    cd_discid_bin: str = "cd-discid"

    # -- Encoding --
    codec: str = "aac"
    bitrate: str = "64k"

    # -- CD ripping / lookup --
    cd_device: str = "/dev/cdrom"
    musicbrainz_url: str = DEFAULT_API_BASE
    musicbrainz_user_agent: str = DEFAULT_USER_AGENT
    lookup_timeout: float = 10.0
    disc_titles: bool = True

    # -- Behavior --
    force: bool = False
    verbose: bool = False  # forces DEBUG on stderr, whatever log_level says
    cleanup_work_dir: bool = True
    strict_exit: bool = False
    log_level: str = "INFO"

    @classmethod
    def load(cls, env_file: str | Path | None = ".env", **overrides) -> "MergeConfig":
        """Build the config, turning pydantic validation failures into ConfigError."""
        try:
            return cls(_env_file=env_file, **overrides)
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
            raise ConfigError(f"Invalid configuration ({fields}): {exc}") from exc

    @property
    def console_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level.upper()

    def toolchain(self) -> FFmpegToolchain:
        """Build the ffmpeg/ffprobe adapter from the configured binaries and profile."""
        return FFmpegToolchain(
            ffmpeg=self.ffmpeg_bin,
            ffprobe=self.ffprobe_bin,
            codec=self.codec,
            bitrate=self.bitrate,
        )

    def setup_logging(self) -> None:
        """Configure loguru for the pipeline. Unknown levels raise ConfigError."""
        level = self.console_level
        try:
            logger.level(level)
        except ValueError as exc:
            raise ConfigError(f"Unknown log level: {self.log_level!r}") from exc

        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<10} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level=level,
            filter=_default_extra,
        )

        if self.log_dir is None:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_dir / "m4b-merge.log"),
            format=log_format,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            filter=_default_extra,
        )
