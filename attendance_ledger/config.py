"""
Policy configuration. One PolicyConfig is supplied per run and is read-only.
The clock is injected here so classification and notices are reproducible.
"""
import configparser
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .exceptions import ConfigValidationException, InputFileException

logger = logging.getLogger(__name__)

NOTICE_WINDOW_MIN = 12
NOTICE_WINDOW_MAX = 72

DEFAULT_NOTICE_WINDOW_HOURS = 48
DEFAULT_RECONCILIATION_WINDOW_DAYS = 14
DEFAULT_SHIFT_TIME = "5:15pm - 9:05pm"
# Requested timestamps on the call-off page carry no year
DEFAULT_REFERENCE_YEAR = 2026


@dataclass(frozen=True)
class PolicyConfig:
    """Point policy settings for one processing run."""
    notice_window_hours: float = DEFAULT_NOTICE_WINDOW_HOURS
    allow_any_day_2days_rule: bool = False
    reconciliation_window_days: int = DEFAULT_RECONCILIATION_WINDOW_DAYS
    manager_display_name: str = ""
    standard_shift_time_default: str = DEFAULT_SHIFT_TIME
    reference_year: int = DEFAULT_REFERENCE_YEAR
    clock: Callable[[], datetime] = field(default=datetime.now, compare=False, repr=False)

    def now(self) -> datetime:
        return self.clock()

    def validate(self) -> "PolicyConfig":
        """Raise ConfigValidationException for out-of-range settings. Returns self."""
        if not NOTICE_WINDOW_MIN <= self.notice_window_hours <= NOTICE_WINDOW_MAX:
            raise ConfigValidationException(
                "notice_window_hours", self.notice_window_hours,
                f"{NOTICE_WINDOW_MIN}-{NOTICE_WINDOW_MAX}",
            )
        if self.reconciliation_window_days < 0:
            raise ConfigValidationException(
                "reconciliation_window_days", self.reconciliation_window_days, ">= 0",
            )
        return self

    def with_overrides(self, **overrides) -> "PolicyConfig":
        """Copy with the given non-None values replaced (CLI flags, API form fields)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values).validate()


def fixed_clock(moment: datetime) -> Callable[[], datetime]:
    """Clock that always returns the same moment."""
    return lambda: moment


def load_config(path: Optional[Path] = None) -> PolicyConfig:
    """
    Load [policy] settings from an INI file. No path -> defaults; a path that
    doesn't exist raises InputFileException.
    Keys: notice_window_hours, allow_any_day_2days_rule, reconciliation_window_days,
    manager_display_name, standard_shift_time_default, reference_year.
    """
    if path is None:
        return PolicyConfig().validate()
    path = Path(path)
    if not path.exists():
        raise InputFileException(str(path), "config file not found")

    parser = configparser.ConfigParser()
    parser.read(path)
    logger.info("Loaded configuration from %s", path)
    if not parser.has_section("policy"):
        logger.warning("No [policy] section in %s, using defaults", path)
        return PolicyConfig().validate()

    section = "policy"
    try:
        cfg = PolicyConfig(
            notice_window_hours=parser.getfloat(section, "notice_window_hours", fallback=DEFAULT_NOTICE_WINDOW_HOURS),
            allow_any_day_2days_rule=parser.getboolean(section, "allow_any_day_2days_rule", fallback=False),
            reconciliation_window_days=parser.getint(section, "reconciliation_window_days", fallback=DEFAULT_RECONCILIATION_WINDOW_DAYS),
            manager_display_name=parser.get(section, "manager_display_name", fallback=""),
            standard_shift_time_default=parser.get(section, "standard_shift_time_default", fallback=DEFAULT_SHIFT_TIME),
            reference_year=parser.getint(section, "reference_year", fallback=DEFAULT_REFERENCE_YEAR),
        )
    except ValueError as e:
        raise InputFileException(str(path), f"bad value in [policy]: {e}") from e
    return cfg.validate()
