import json
import logging
import shutil
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Optional

from . import config
from . import structure
from .errors import MaildirError
from .maildir import Maildir
from .version import VERSION

logger = logging.getLogger("maildirkit")


def setup_logging(cfg: config.LogCfg, debug: bool = False):
    logging_format = (
        "%(asctime)s %(name)s %(levelname)s %(message)s @ %(filename)s:%(lineno)d"
    )
    level = logging.DEBUG if debug else cfg.level
    if cfg.logfile == config.CONSOLE:
        logging.basicConfig(level=level, format=logging_format)
    else:
        logging.basicConfig(filename=cfg.logfile, level=level, format=logging_format)


def load_config(args: Namespace) -> config.Config:
    raw: dict = {}
    if args.config:
        raw = json.loads(args.config.read_text())
    if args.maildir:
        raw["mails_path"] = str(args.maildir)
    if not raw.get("mails_path"):
        raise MaildirError("Either --maildir or mails_path in --config is required")
    return config.Config(raw)


def cmd_init(cfg: config.Config, _) -> int:
    Maildir.create(cfg.mails_path, flag_retries=cfg.flag_retries)
    return 0


def cmd_destroy(cfg: config.Config, _) -> int:
    structure.destroy(cfg.mails_path)
    return 0


def cmd_verify(cfg: config.Config, _) -> int:
    if structure.verify(cfg.mails_path):
        print(f"✓ {cfg.mails_path} is a valid Maildir")
        return 0
    print(f"✗ {cfg.mails_path} is not a valid Maildir")
    return 1


def open_maildir(cfg: config.Config) -> Maildir:
    return Maildir(cfg.mails_path, flag_retries=cfg.flag_retries)


def cmd_deliver(cfg: config.Config, args: Namespace) -> int:
    if args.file:
        content = args.file.read_bytes()
    else:
        content = sys.stdin.buffer.read()
    print(open_maildir(cfg).save_mail(content))
    return 0


def cmd_list(cfg: config.Config, _) -> int:
    for name in open_maildir(cfg).list_names():
        print(name)
    return 0


def cmd_cat(cfg: config.Config, args: Namespace) -> int:
    with open_maildir(cfg).get_stream(args.name) as fp:
        sys.stdout.flush()
        shutil.copyfileobj(fp, sys.stdout.buffer)
    return 0


def cmd_rm(cfg: config.Config, args: Namespace) -> int:
    open_maildir(cfg).remove(args.name)
    return 0


def cmd_flags(cfg: config.Config, args: Namespace) -> int:
    flags = open_maildir(cfg).get_flags(args.name)
    if flags is None:
        logger.error(f"unable to find {args.name}")
        return 1
    print(flags)
    return 0


def cmd_set_flag(cfg: config.Config, args: Namespace) -> int:
    open_maildir(cfg).set_flag(args.name, args.flag)
    return 0


def cmd_clear_flag(cfg: config.Config, args: Namespace) -> int:
    open_maildir(cfg).clear_flag(args.name, args.flag)
    return 0


def cmd_clean_tmp(cfg: config.Config, _) -> int:
    removed = open_maildir(cfg).clear_tmp(older_than=cfg.tmp_max_age_seconds)
    print(removed)
    return 0


def make_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Lock free Maildir management")
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    parser.add_argument(
        "-c",
        "--config",
        metavar="CONFIG_PATH",
        type=Path,
        help="JSON config with mails_path and logging settings",
    )
    parser.add_argument(
        "-m",
        "--maildir",
        metavar="PATH",
        type=Path,
        help="Maildir to operate on, overrides mails_path from config",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create tmp, new and cur").set_defaults(func=cmd_init)
    sub.add_parser("destroy", help="Delete all mails and the subdirectories").set_defaults(
        func=cmd_destroy
    )
    sub.add_parser("verify", help="Check the Maildir structure").set_defaults(
        func=cmd_verify
    )
    deliver = sub.add_parser("deliver", help="Save a mail, prints its name")
    deliver.add_argument("file", nargs="?", type=Path, help="Read from stdin if omitted")
    deliver.set_defaults(func=cmd_deliver)
    sub.add_parser("list", help="List names, marks new mails as seen").set_defaults(
        func=cmd_list
    )
    sub.add_parser("clean-tmp", help="Remove stale files in tmp").set_defaults(
        func=cmd_clean_tmp
    )

    for cmd, func, help_text in (
        ("cat", cmd_cat, "Print mail contents"),
        ("rm", cmd_rm, "Delete a mail"),
        ("flags", cmd_flags, "Print flags of a mail"),
    ):
        p = sub.add_parser(cmd, help=help_text)
        p.add_argument("name")
        p.set_defaults(func=func)

    for cmd, func, help_text in (
        ("set-flag", cmd_set_flag, "Add a flag to a mail"),
        ("clear-flag", cmd_clear_flag, "Remove a flag from a mail"),
    ):
        p = sub.add_parser(cmd, help=help_text)
        p.add_argument("name")
        p.add_argument("flag")
        p.set_defaults(func=func)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = make_parser().parse_args(argv)
    try:
        cfg = load_config(args)
        setup_logging(config.LogCfg(cfg.logging or {}), args.debug)
        logger.debug(f"Running {args.command} {VERSION} {cfg.mails_path=}")
        return args.func(cfg, args)
    except (MaildirError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
