"""
Secret scanning of the image's application directory.

The application directory is copied out of a created (never started)
container into a host temporary directory, scanned with a fixed set of
patterns, and the copy is deleted before the probe returns.
"""

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from typing import Iterable, Sequence

from core.models import SecretFinding
from probes.base import LOCAL_ERRORS, Probe

logger = logging.getLogger(__name__)


def should_scan_file(filename: str, extensions: Iterable[str]) -> bool:
    """Whether a file name carries one of the scanned extensions."""
    return any(filename.endswith(ext) for ext in extensions)


def compile_patterns(patterns: Iterable[tuple[str, str]]) -> list[tuple[str, re.Pattern]]:
    return [(category, re.compile(pattern, re.IGNORECASE)) for category, pattern in patterns]


def scan_directory(
    root: Path,
    patterns: Sequence[tuple[str, re.Pattern]],
    extensions: Iterable[str],
    skip_dirs: Iterable[str] = (),
) -> list[SecretFinding]:
    """
    Recursively scan a directory for secret-looking assignments.

    Args:
        root: Directory to scan
        patterns: Compiled (category, regex) pairs
        extensions: File suffixes to scan
        skip_dirs: Directory names not descended into

    Returns:
        One finding per (file, category) with the number of matches,
        ordered by file path then pattern order
    """
    extensions = tuple(extensions)
    skip_dirs = set(skip_dirs)
    findings = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip_dirs)

        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.is_symlink() or not should_scan_file(filename, extensions):
                continue

            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable file {path}: {e}")
                continue

            relative = path.relative_to(root).as_posix()
            for category, regex in patterns:
                matches = len(regex.findall(content))
                if matches:
                    findings.append(SecretFinding(file=relative, category=category, matches=matches))

    return findings


class SecretScanProbe(Probe):
    """Look for hard-coded credentials in the image's application directory."""

    name = "secrets"

    def run(self, image: str) -> tuple[SecretFinding, ...]:
        logger.info("🔍 Scanning for secrets...")

        temp_dir = Path(tempfile.mkdtemp(prefix=f"{self.config.image_prefix}-secrets-"))
        try:
            with self.containers.created(image) as container:
                self.docker.copy_from_container(container, self.config.app_dir, temp_dir)

            app_dir = temp_dir / PurePosixPath(self.config.app_dir).name
            if not app_dir.is_dir():
                logger.debug(f"{self.config.app_dir} not found in {image}")
                return ()

            findings = scan_directory(
                app_dir,
                compile_patterns(self.config.secret_patterns),
                self.config.secret_extensions,
                self.config.secret_skip_dirs,
            )
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  Secret scanning completed with limited results: {e}")
            return ()
        finally:
            self._remove_temp_dir(temp_dir)

        if findings:
            logger.warning(f"⚠️  Found {len(findings)} potential secrets in {image}")
        return tuple(findings)

    def _remove_temp_dir(self, temp_dir: Path) -> None:
        try:
            shutil.rmtree(temp_dir)
        except OSError as e:
            logger.warning(f"⚠️  Failed to remove temporary directory {temp_dir}: {e}")
