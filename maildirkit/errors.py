from pathlib import Path


class MaildirError(Exception):
    pass


class InvalidMaildir(MaildirError):
    def __init__(self, path: Path):
        super().__init__(f"{path} is not a valid Maildir, create one with Maildir.create()")
        self.path = path


class NotADirectory(MaildirError):
    def __init__(self, path: Path):
        super().__init__(f"{path} is not a directory")
        self.path = path


class WriteFailed(MaildirError):
    """Content could not be written to tmp. Nothing was delivered."""

    def __init__(self, name: str, path: Path):
        super().__init__(f"failed to write {name} to {path}")
        self.name = name
        self.path = path


class MoveFailed(MaildirError):
    """Content is in tmp but the rename into new failed.

    Delivery did not complete; `path` still holds the written message.
    """

    def __init__(self, name: str, path: Path, dest: Path):
        super().__init__(f"mv failed: {name} -> {dest}, content left at {path}")
        self.name = name
        self.path = path
        self.dest = dest


class NotFound(MaildirError):
    def __init__(self, name: str):
        super().__init__(f"unable to find {name}")
        self.name = name
