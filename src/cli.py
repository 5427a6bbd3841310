"""
Command-line interface for dockprobe - Container Image Benchmark and Scan Tool.

Provides three subcommands, each emitting a JSON report:
- performance: Build/startup timing and runtime resource metrics
- scan: Vulnerabilities, secrets, permissions, size and layers
- size: Image size and layer analysis only
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import load_config
from core.exceptions import AcquisitionError, ConfigurationException
from core.orchestrator import PipelineOrchestrator
from utils.docker_utils import DockerClient
from utils.logging_helpers import log_warning_section

logger = logging.getLogger(__name__)

COMMANDS = ("performance", "scan", "size")


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(args: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="dockprobe",
        description="dockprobe - Container Image Benchmark and Scan Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("performance", "Benchmark build time, startup time and runtime resources."),
        ("scan", "Scan for vulnerabilities, secrets and permission issues."),
        ("size", "Report image size and layer history."),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("-i", "--image", type=str, default=None, help="Image to test (built from --path if omitted).")
        sub.add_argument("-p", "--path", type=Path, default=Path("."), help="Project directory with a Dockerfile.")
        sub.add_argument("-c", "--config", type=Path, default=None, help="YAML configuration file.")
        sub.add_argument("-o", "--output", type=Path, default=None, help="Write the JSON report to this file.")
        sub.add_argument("--keep-image", action="store_true", help="Keep the image built from --path.")
        sub.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")

    return parser.parse_args(args)


def run_command(orchestrator: PipelineOrchestrator, command: str, image: Optional[str]) -> dict:
    """Run one subcommand and return its report as a dict."""
    if command == "performance":
        return orchestrator.run_performance(image).to_dict()
    if command == "scan":
        return orchestrator.run_scan(image).to_dict()
    return orchestrator.run_size(image).size_summary()


def write_report(data: dict, output: Optional[Path]) -> None:
    """Print the report as JSON or write it to a file."""
    text = json.dumps(data, indent=2)
    if output is None:
        print(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    logger.info(f"✓ Report written to {output}")


def main(args: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code
    """
    parsed = parse_args(args)
    setup_logging(parsed.verbose)

    try:
        config = load_config(parsed.config)
    except ConfigurationException as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        docker_client = DockerClient()
    except RuntimeError as e:
        logger.error(f"Docker/Podman not available: {e}")
        return 1

    orchestrator = PipelineOrchestrator(
        docker_client,
        config=config,
        project_path=parsed.path,
        keep_image=parsed.keep_image,
    )

    try:
        data = run_command(orchestrator, parsed.command, parsed.image)
    except AcquisitionError as e:
        log_warning_section(
            "Could not obtain an image to test.",
            [str(e), "", "Pass an existing image with --image or fix the Dockerfile in --path."],
            logger=logger,
        )
        return 1

    write_report(data, parsed.output)
    return 0


def main_dispatch():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_dispatch()
