"""
depmirror — CLI Entry Point

Usage:
    depmirror <GitLabURL> <GitLabGroupName> <GitLabPrivateToken>
    depmirror https://gitlab.example.com go-mirrors $TOKEN --log-format json
"""

from __future__ import annotations

# Load .env file FIRST, before anything reads env vars
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import logging
import sys

import click

from .errors import DepMirrorError
from .logging_config import setup_logging
from .mirror.config import ALLOWED_VISIBILITIES, DEFAULT_API_VERSION, SyncSettings
from .orchestrator import MirrorOrchestrator

logger = logging.getLogger("depmirror")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("host_url", metavar="GITLAB_URL")
@click.argument("namespace", metavar="GITLAB_GROUP")
@click.argument("token", metavar="GITLAB_TOKEN")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory holding glide.yaml and the Go sources",
)
@click.option("--manifest", default=None,
              help="Manifest file name to rewrite [env: DEPMIRROR_MANIFEST, default: glide.yaml]")
@click.option("--glide", "glide_bin", default=None,
              help="glide executable [env: DEPMIRROR_GLIDE_BIN, default: glide]")
@click.option("--glide-home", type=click.Path(path_type=Path), default=None,
              help="Glide home directory [env: GLIDE_HOME, default: ~/.glide]")
@click.option("--api-version", default=None,
              help=f"GitLab REST API version [env: DEPMIRROR_API_VERSION, default: {DEFAULT_API_VERSION}]")
@click.option("--visibility", type=click.Choice(ALLOWED_VISIBILITIES), default="internal",
              show_default=True, help="Visibility of created mirror projects")
@click.option("--log-level", envvar="LOG_LEVEL", default="INFO",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--log-format", envvar="LOG_FORMAT", default="text",
              type=click.Choice(["text", "json"], case_sensitive=False))
def cli(
    host_url: str,
    namespace: str,
    token: str,
    project_dir: Path,
    manifest: str | None,
    glide_bin: str | None,
    glide_home: Path | None,
    api_version: str | None,
    visibility: str,
    log_level: str,
    log_format: str,
) -> None:
    """Mirror every Glide dependency into a GitLab group and rewrite glide.yaml."""
    setup_logging(log_level, log_format)

    settings = SyncSettings.from_env(
        host_url,
        namespace,
        token,
        project_dir=project_dir.resolve(),
        manifest_name=manifest,
        glide_bin=glide_bin,
        glide_home=glide_home,
        api_version=api_version,
        visibility=visibility,
    )

    orchestrator = MirrorOrchestrator(settings)
    try:
        report = orchestrator.run()
    except DepMirrorError as e:
        logger.error(f"Mirror run aborted: {e}")
        output = getattr(e, "output", None)
        if output:
            click.echo(output.rstrip(), err=True)
        sys.exit(1)
    finally:
        orchestrator.close()

    if report.created:
        logger.info(f"Created {len(report.created)} mirror project(s): {', '.join(report.created)}")
    if report.skipped:
        logger.info(f"Not cached, left out: {', '.join(report.skipped)}")

    click.echo(f"Created {settings.manifest_name} with {report.mirrored} repos.")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
