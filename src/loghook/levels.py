# Severity levels and their mapping onto stdlib logging

import logging
from enum import IntEnum
from typing import FrozenSet, Optional


class Level(IntEnum):
	"""Severity scale, most severe first. Lower value = more severe."""
	PANIC = 0
	FATAL = 1
	ERROR = 2
	WARN = 3
	INFO = 4
	DEBUG = 5

	@property
	def label(self) -> str:
		return _LABELS[self]


_ALIASES = {
	"panic": Level.PANIC,
	"fatal": Level.FATAL,
	"critical": Level.FATAL,
	"error": Level.ERROR,
	"err": Level.ERROR,
	"warn": Level.WARN,
	"warning": Level.WARN,
	"info": Level.INFO,
	"debug": Level.DEBUG,
	"trace": Level.DEBUG,
}

# Names written to documents; Warn is spelled out in full
_LABELS = {
	Level.PANIC: "PANIC",
	Level.FATAL: "FATAL",
	Level.ERROR: "ERROR",
	Level.WARN: "WARNING",
	Level.INFO: "INFO",
	Level.DEBUG: "DEBUG",
}

_TO_LEVELNO = {
	Level.PANIC: logging.CRITICAL + 10,
	Level.FATAL: logging.CRITICAL,
	Level.ERROR: logging.ERROR,
	Level.WARN: logging.WARNING,
	Level.INFO: logging.INFO,
	Level.DEBUG: logging.DEBUG,
}


def normalize_level(value) -> Optional[Level]:
	if value is None or isinstance(value, bool):
		return None
	if isinstance(value, Level):
		return value
	# Bare ints are stdlib numeric levels; NOTSET lets everything through
	if isinstance(value, int):
		if value < 0:
			return None
		return from_levelno(value)
	if isinstance(value, str):
		return _ALIASES.get(value.strip().lower())
	return None


def from_levelno(levelno: int) -> Level:
	"""Map a stdlib numeric level onto the severity scale."""
	if levelno > logging.CRITICAL:
		return Level.PANIC
	if levelno >= logging.CRITICAL:
		return Level.FATAL
	if levelno >= logging.ERROR:
		return Level.ERROR
	if levelno >= logging.WARNING:
		return Level.WARN
	if levelno >= logging.INFO:
		return Level.INFO
	return Level.DEBUG


def to_levelno(level: Level) -> int:
	return _TO_LEVELNO[level]


def enabled_levels(threshold: Level) -> FrozenSet[Level]:
	"""Return the threshold and every level more severe than it."""
	return frozenset(level for level in Level if level <= threshold)
