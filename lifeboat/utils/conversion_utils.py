import datetime
import re
from typing import Optional

from lifeboat import constants


def datetime_to_str(date: datetime.datetime, *, decimal: bool = False) -> str:
	fmt = '%Y-%m-%d %H:%M:%S'
	if decimal:
		fmt += '.%f'
	return date.strftime(fmt)


def datetime_to_json(date: datetime.datetime) -> str:
	return date.isoformat()


_FRACTION_PATTERN = re.compile(r'\.(\d+)')


def datetime_from_json(s: str) -> datetime.datetime:
	"""
	Also accepts a trailing Z, and fractions of any length, e.g. the nanoseconds in timestamps written by other tools
	"""
	s = _FRACTION_PATTERN.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), s.replace('Z', '+00:00'), count=1)
	date = datetime.datetime.fromisoformat(s)
	if date.tzinfo is None:
		date = date.astimezone()
	return date


def now() -> datetime.datetime:
	"""
	Current local time, timezone aware
	"""
	return datetime.datetime.now().astimezone()


def date_to_delete_after(date: datetime.date) -> str:
	return date.strftime(constants.DELETE_AFTER_FORMAT)


def parse_delete_after(s: str) -> Optional[datetime.date]:
	"""
	:return: None if the string is empty or cannot be parsed
	"""
	if not s:
		return None
	try:
		return datetime.datetime.strptime(s, constants.DELETE_AFTER_FORMAT).date()
	except ValueError:
		return None
