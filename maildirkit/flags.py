from dataclasses import dataclass

INFO_SEP = ":"
# Fixed protocol version, never varies
INFO_PREFIX = "2,"


@dataclass(frozen=True)
class CurFilename:
    name: str
    flags: str = ""


def logical_name(filename: str) -> str:
    name, _, _ = filename.partition(INFO_SEP)
    return name


def parse_cur_filename(filename: str) -> CurFilename:
    name, sep, info = filename.partition(INFO_SEP)
    if not sep:
        return CurFilename(name)
    return CurFilename(name, info[len(INFO_PREFIX):])


def format_cur_filename(name: str, flags: str = "") -> str:
    return f"{name}{INFO_SEP}{INFO_PREFIX}{flags}"


def check_flag(flag: str) -> None:
    if len(flag) != 1 or flag in (INFO_SEP, "/"):
        raise ValueError(f"Invalid flag {flag!r}, must be a single character")


def add_flag(flags: str, flag: str) -> str:
    check_flag(flag)
    if flag in flags:
        return flags
    return "".join(sorted(set(flags) | {flag}))


def remove_flag(flags: str, flag: str) -> str:
    check_flag(flag)
    return flags.replace(flag, "")
