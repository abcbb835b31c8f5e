"""Health subsystem — clock, check engine, history store, scheduler, runner."""

from .clock import Clock, FixedClock, SystemClock, format_timestamp, parse_timestamp
from .engine import CheckResult, HTTPChecker
from .history import History, HistoryLoadError, HistoryPoint, HistoryStore, append_and_trim
from .runner import RunReport, StatusSnapshot, StatusWriteError, UptimeRunner
from .scheduler import Scheduler
