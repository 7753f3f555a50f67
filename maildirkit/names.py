import itertools
import os
import socket
import time


def sanitize_hostname(hostname: str) -> str:
    # Maildir convention, keeps the flag separator out of generated names
    return hostname.replace("/", r"\057").replace(":", r"\072")


class NameGenerator:
    """Unique message names: ``<sec>.M<usec>P<pid>Q<counter>.<hostname>``

    Time and pid separate processes, the counter separates names made within
    the same microsecond, the hostname separates machines sharing a filesystem.
    """

    def __init__(self):
        self._counter = itertools.count(1)

    def next_name(self) -> str:
        sec, usec = divmod(time.time_ns() // 1000, 1_000_000)
        pid = os.getpid()
        seq = next(self._counter)
        host = sanitize_hostname(socket.gethostname())
        return f"{sec}.M{usec}P{pid}Q{seq}.{host}"


_default_generator = NameGenerator()


def create_name() -> str:
    return _default_generator.next_name()
