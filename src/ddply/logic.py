# src/ddply/logic.py
import logging
import os
import shutil
import stat
import yaml
from pathlib import Path
from pydantic import ValidationError
from typing import Iterable, List, Optional, Tuple, Union

from .exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    InvalidSourceError,
    RemovalError,
    ResolutionError,
)
from .models import DeployConfig, DeployMode, DeployReport, Outcome

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".ddply"

PathLike = Union[str, Path]


# --- path probes ---
def is_dir(path: PathLike) -> bool:
    """True if path exists and (following symlinks) is a directory. Never raises."""
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def is_file(path: PathLike) -> bool:
    """True if path exists and (following symlinks) is a regular file. Never raises."""
    try:
        return stat.S_ISREG(os.stat(path).st_mode)
    except OSError:
        return False


# --- single file copy ---
def copy_file(src: PathLike, dst: PathLike) -> Outcome:
    """
    Copies the contents of src to dst, creating or truncating dst.
    The data is synced to stable storage, then the permission bits and
    owner/group of src are applied to dst.
    Errors propagate unchanged; a partially written dst is left in place.
    """
    with open(src, 'rb') as fin, open(dst, 'wb') as fout:
        logger.debug(f"\tName: {dst}")
        shutil.copyfileobj(fin, fout)
        fout.flush()
        os.fsync(fout.fileno())

    si = os.stat(src)
    os.chmod(dst, stat.S_IMODE(si.st_mode))
    logger.debug(f"\t\tMode: {stat.filemode(si.st_mode)}")

    os.chown(dst, si.st_uid, si.st_gid)
    logger.debug(f"\t\tOwner: {si.st_uid}.{si.st_gid}")

    return Outcome.COPIED


# --- recursive directory copy ---
def copy_directory(src: PathLike, dst: PathLike) -> Outcome:
    """
    Recursively copies a directory tree, preserving permissions and ownership.
    Symlinks inside the tree are skipped. If dst already is a symlink nothing
    is copied and Outcome.SKIPPED is returned.
    The first error aborts the copy; whatever was copied so far stays on disk.
    """
    src = os.path.normpath(src)
    dst = os.path.normpath(dst)

    si = os.stat(src)
    if not stat.S_ISDIR(si.st_mode):
        logger.warning(f"Source directory given {src} is not a directory.")
        raise NotADirectoryError(f"source is not a directory: {src}")

    try:
        di = os.lstat(dst)
    except FileNotFoundError:
        di = None

    if di is not None and stat.S_ISLNK(di.st_mode):
        logger.info(f"Destination directory {dst} is a symlink.")
        return Outcome.SKIPPED

    # makedirs is subject to the umask, so the exact mode is applied afterwards
    os.makedirs(dst, exist_ok=True)
    os.chmod(dst, stat.S_IMODE(si.st_mode))
    os.chown(dst, si.st_uid, si.st_gid)

    with os.scandir(src) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        src_path = os.path.join(src, entry.name)
        dst_path = os.path.join(dst, entry.name)

        if entry.is_symlink():
            logger.debug(f"Skipping symlink {src_path}")
            continue

        if entry.is_dir(follow_symlinks=False):
            copy_directory(src_path, dst_path)
        elif entry.is_file(follow_symlinks=False):
            copy_file(src_path, dst_path)
        else:
            # FIFOs, sockets, device nodes
            logger.warning(f"Skipping special file {src_path}")

    return Outcome.COPIED


# --- shared entry linking ---
def _remove_all(path: str) -> None:
    """Removes a file, symlink or directory tree at path. A missing path is not an error."""
    if not os.path.lexists(path):
        return
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.unlink(path)


def link_shared(shared: Iterable[str], source: PathLike, destination: PathLike) -> List[Tuple[str, Outcome]]:
    """
    Replaces each shared entry under destination with a symlink to the
    absolute path of the same entry under source.
    Whatever exists at the destination is removed first. When the source entry
    is neither a file nor a directory no link is created and the entry ends up
    absent from the destination.
    """
    results: List[Tuple[str, Outcome]] = []

    for entry in shared:
        # an absolute entry still names a path inside the roots
        relative = entry.lstrip(os.sep)
        source_path = os.path.normpath(os.path.join(source, relative))
        destination_path = os.path.normpath(os.path.join(destination, relative))

        logger.info(f"Linking {entry} as {destination_path}")

        try:
            abs_source_path = os.path.abspath(source_path)
        except OSError as e:
            raise ResolutionError(f"Could not resolve {source_path}: {e}") from e

        try:
            _remove_all(destination_path)
        except OSError as e:
            raise RemovalError(f"Could not remove {destination_path}: {e}") from e

        if is_file(abs_source_path) or is_dir(abs_source_path):
            os.symlink(abs_source_path, destination_path)
            results.append((entry, Outcome.LINKED))
        else:
            logger.debug(f"Source {abs_source_path} does not exist. Not linking {entry}")
            results.append((entry, Outcome.LINK_SKIPPED))

    return results


# --- configuration ---
def find_config(path: PathLike) -> bool:
    """True if path is an existing regular file."""
    return is_file(path)


def load_config(path: PathLike) -> DeployConfig:
    """
    Reads and validates a .ddply file.
    OSError from reading propagates; malformed content raises ConfigParseError.
    """
    with open(path, 'rb') as f:
        raw = f.read()

    # the YAML reader decodes bytes itself; bad encodings raise YAMLError
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Could not parse {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"Invalid configuration in {path}: expected a mapping at top level")

    shared = data.get('shared')
    try:
        return DeployConfig(shared=[] if shared is None else shared)
    except ValidationError as e:
        raise ConfigParseError(f"Invalid configuration in {path}: {e}") from e


# --- orchestration ---
def deploy(source: PathLike, destination: PathLike, config_path: Optional[PathLike] = None) -> DeployReport:
    """
    Deploys source into destination.

    Without a readable configuration the destination becomes a single symlink
    to the source (link-only mode). With one, the tree is copied and then the
    configured shared entries are replaced with symlinks (copy-and-link mode).
    An explicit config_path must exist; otherwise <source>/.ddply is optional.
    """
    if not is_dir(source):
        raise InvalidSourceError(f"Source {source} is not a directory")

    explicit = config_path is not None
    if not explicit:
        config_path = os.path.join(source, DEFAULT_CONFIG_FILENAME)

    if explicit and not find_config(config_path):
        raise ConfigNotFoundError(f"Specified config file not found: {config_path}")

    try:
        config = load_config(config_path)
    except OSError as e:
        if explicit:
            raise
        logger.debug(f"Could not read {config_path}: {e}")
        logger.info("No configuration file found or specified. Continuing with linked deploy")
        links = link_shared([""], source, destination)
        return DeployReport(mode=DeployMode.LINK_ONLY, links=links)

    logger.info(f"Shared locations from config: {config.shared}")

    logger.info("Copying directories...")
    copy_outcome = copy_directory(source, destination)
    if copy_outcome is Outcome.SKIPPED and config.shared:
        logger.warning(f"Destination {destination} is a symlink. Shared entries are replaced inside its target.")
    links = link_shared(config.shared, source, destination)
    return DeployReport(mode=DeployMode.COPY_AND_LINK, copy_outcome=copy_outcome, links=links)
