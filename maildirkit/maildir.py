import logging
import os
import time
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional, Union

from . import structure
from .errors import InvalidMaildir, MoveFailed, NotFound, WriteFailed
from .flags import (
    add_flag,
    check_flag,
    format_cur_filename,
    logical_name,
    parse_cur_filename,
    remove_flag,
)
from .names import NameGenerator

logger = logging.getLogger("maildir")

FlagUpdate = Callable[[str, str], str]


def check_name(name: str) -> None:
    if not name or name.startswith(".") or ":" in name or "/" in name:
        raise ValueError(f"Invalid message name {name!r}")


def visible(filename: str) -> bool:
    # Readers skip dot files in new and cur
    return not filename.startswith(".")


class Maildir:
    """A Maildir addressed by logical message names.

    Nothing is cached: every call maps the name to a file on disk again, so
    renames done by other processes are always picked up.
    """

    def __init__(self, path: structure.PathLike, flag_retries: int = 0):
        self.path = Path(path)
        if not structure.verify(self.path):
            raise InvalidMaildir(self.path)
        self.tmp_path = self.path / "tmp"
        self.new_path = self.path / "new"
        self.cur_path = self.path / "cur"
        self.flag_retries = flag_retries
        self.names = NameGenerator()

    @classmethod
    def create(cls, path: structure.PathLike, **kwargs) -> "Maildir":
        structure.initialize(path)
        return cls(path, **kwargs)

    def is_new(self, name: str) -> bool:
        check_name(name)
        return (self.new_path / name).is_file()

    def save_mail(self, content: Union[bytes, str]) -> str:
        if isinstance(content, str):
            content = content.encode()
        name = self.names.next_name()
        tmp_file = self.tmp_path / name
        new_file = self.new_path / name
        try:
            with open(tmp_file, "xb") as fp:
                fp.write(content)
                fp.flush()
                os.fsync(fp.fileno())
        except OSError as e:
            logger.error(f"Failed to write {name} to {self.tmp_path!s}: {e}")
            raise WriteFailed(name, tmp_file) from e
        try:
            os.rename(tmp_file, new_file)
        except OSError as e:
            logger.error(f"Failed to move {name} to new, left in tmp: {e}")
            raise MoveFailed(name, tmp_file, new_file) from e
        logger.info(f"Saved mail {name} size: {len(content)} in {self.path!s}")
        return name

    def _move_to_cur(self, name: str) -> None:
        try:
            os.rename(self.new_path / name, self.cur_path / format_cur_filename(name))
        except FileNotFoundError:
            # Not in new, already moved by us or someone else
            return
        logger.debug(f"Moved {name} to cur")

    def cur(self, name: str) -> None:
        check_name(name)
        self._move_to_cur(name)

    def find_filename(self, name: str) -> Optional[str]:
        """Scan cur for the first entry whose logical name is `name`."""
        check_name(name)
        with os.scandir(self.cur_path) as it:
            for entry in it:
                if visible(entry.name) and logical_name(entry.name) == name:
                    return entry.name
        return None

    def exists(self, name: str) -> bool:
        return self.is_new(name) or self.find_filename(name) is not None

    def get_path(self, name: str) -> Optional[Path]:
        """Current location of a message without moving it to cur."""
        if filename := self.find_filename(name):
            return self.cur_path / filename
        if self.is_new(name):
            return self.new_path / name
        return None

    def _resolve_cur(self, name: str) -> Path:
        self.cur(name)
        filename = self.find_filename(name)
        if filename is None:
            raise NotFound(name)
        return self.cur_path / filename

    def fetch(self, name: str) -> bytes:
        with open(self._resolve_cur(name), "rb") as fp:
            return fp.read()

    def get_stream(self, name: str) -> BinaryIO:
        return open(self._resolve_cur(name), "rb")

    def remove(self, name: str) -> None:
        check_name(name)
        try:
            os.unlink(self.new_path / name)
        except FileNotFoundError:
            filename = self.find_filename(name)
            if filename is None:
                raise NotFound(name)
            os.unlink(self.cur_path / filename)
        logger.debug(f"Removed {name}")

    def get_flags(self, name: str) -> Optional[str]:
        """Flags of a message, None if it does not exist."""
        self.cur(name)
        filename = self.find_filename(name)
        if filename is None:
            return None
        return parse_cur_filename(filename).flags

    def has_flag(self, name: str, flag: str) -> bool:
        check_flag(flag)
        flags = self.get_flags(name)
        return flags is not None and flag in flags

    def set_flag(self, name: str, flag: str) -> None:
        check_flag(flag)
        self._update_flags(name, flag, add_flag)

    def clear_flag(self, name: str, flag: str) -> None:
        check_flag(flag)
        self._update_flags(name, flag, remove_flag)

    def _update_flags(self, name: str, flag: str, update: FlagUpdate) -> None:
        # Read, compute and rename. A concurrent rename of the same message
        # makes the rename fail; that is retried only if flag_retries is set.
        for attempt in range(self.flag_retries + 1):
            self.cur(name)
            filename = self.find_filename(name)
            if filename is None:
                raise NotFound(name)
            old_flags = parse_cur_filename(filename).flags
            new_flags = update(old_flags, flag)
            if new_flags == old_flags:
                return
            try:
                os.rename(
                    self.cur_path / filename,
                    self.cur_path / format_cur_filename(name, new_flags),
                )
            except FileNotFoundError:
                if attempt == self.flag_retries:
                    raise
                logger.warning(f"{filename} changed during flag update, retrying")
            else:
                logger.debug(f"Flags of {name}: {old_flags!r} -> {new_flags!r}")
                return

    def list_names(self) -> Iterator[str]:
        """Lazily yield the names of all messages.

        Moves everything in new to cur on the first pull.
        """
        with os.scandir(self.new_path) as it:
            new_names = [e.name for e in it if visible(e.name) and e.is_file()]
        for name in new_names:
            self._move_to_cur(name)
        with os.scandir(self.cur_path) as it:
            for entry in it:
                if visible(entry.name):
                    yield logical_name(entry.name)

    def list_files(self) -> Iterator[tuple[str, bytes]]:
        for name in self.list_names():
            yield name, self.fetch(name)

    def list_streams(self) -> Iterator[tuple[str, BinaryIO]]:
        for name in self.list_names():
            yield name, self.get_stream(name)

    def clear_tmp(self, older_than: Optional[float] = None) -> int:
        """Delete leftovers of failed deliveries from tmp.

        With `older_than` (seconds) only files not modified since then are
        removed, files still being written are kept.
        """
        cutoff = None if older_than is None else time.time() - older_than
        with os.scandir(self.tmp_path) as it:
            entries = [e for e in it if e.is_file(follow_symlinks=False)]
        removed = 0
        for entry in entries:
            if cutoff is not None and entry.stat(follow_symlinks=False).st_mtime > cutoff:
                continue
            try:
                os.unlink(entry.path)
            except FileNotFoundError:
                # Delivered in the meantime
                continue
            removed += 1
        logger.info(f"Removed {removed} files from {self.tmp_path!s}")
        return removed
