from jata import Jata

# Logs go to stderr instead of a file
CONSOLE = "CONSOLE"

# Maildir readers treat tmp files older than this as abandoned
DEFAULT_TMP_MAX_AGE = 36 * 60 * 60


class LogCfg(Jata):
    logfile: str = CONSOLE
    level: str = "INFO"


class Config(Jata):
    mails_path: str
    flag_retries: int = 0
    tmp_max_age_seconds: int = DEFAULT_TMP_MAX_AGE
    logging: LogCfg | None = None
