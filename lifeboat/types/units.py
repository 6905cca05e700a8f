import functools
import re
from typing import Union, Tuple, Dict, NamedTuple

from lifeboat.utils import misc_utils


def _parse_number(s: str) -> Union[int, float]:
	try:
		value = int(s)
	except ValueError:
		try:
			value = float(s)
		except ValueError:
			raise ValueError('{!r} is not a number'.format(s)) from None
		if value.is_integer():
			value = round(value)
	return value


def _split_unit(s: str) -> Tuple[Union[int, float], str]:
	match = re.fullmatch(r'\s*([-+.\d]+)\s*([a-zA-Z]*)\s*', s)
	if not match:
		raise ValueError('bad value {!r}'.format(s))
	return _parse_number(match.group(1)), match.group(2)


class ValueUnitPair(NamedTuple):
	value: Union[int, float]
	unit: str

	def to_str(self, ndigits: int = 1) -> str:
		if isinstance(self.value, int) or ndigits < 0:
			return f'{self.value} {self.unit}'
		return f'{self.value:.{ndigits}f} {self.unit}'


class ByteCount(str):
	"""
	A byte count with its human-readable form, e.g. "1.5 MB"

	Units are 1024-based. Values below 1 KB are formatted as an integer count of bytes
	"""
	_value: int

	__units: Dict[str, int] = {
		'B': 1,
		'KB': 2 ** 10,
		'MB': 2 ** 20,
		'GB': 2 ** 30,
		'TB': 2 ** 40,
		'PB': 2 ** 50,
		'EB': 2 ** 60,
	}

	@classmethod
	@functools.lru_cache
	def __get_unit_map_lowered(cls) -> Dict[str, int]:
		ret = {}
		for unit, k in cls.__units.items():
			ret[unit.lower()] = k
			ret[unit[:-1].lower()] = k  # "10M"
			ret[unit[:-1].lower() + 'ib'] = k  # "10MiB"
		ret[''] = 1
		return ret

	@classmethod
	def parse_unit(cls, unit: str) -> int:
		ret = cls.__get_unit_map_lowered().get(unit.lower())
		if ret is None:
			raise ValueError('unknown unit {!r}'.format(unit))
		return ret

	@classmethod
	def _auto_format(cls, val: int) -> ValueUnitPair:
		if val < 0:
			uvp = cls._auto_format(-val)
			return ValueUnitPair(-uvp.value, uvp.unit)
		if val < 1024:
			return ValueUnitPair(int(val), 'B')
		ret = None
		for unit, k in cls.__units.items():
			if k == 1:
				continue
			if val / k >= 1 or ret is None:
				ret = ValueUnitPair(val / k, unit)
			else:
				break
		return ret

	def __new__(cls, s: Union[int, float, str]):
		if isinstance(s, str):
			value, unit = _split_unit(s)
			value = int(value * cls.parse_unit(unit))
		elif isinstance(s, (int, float)):
			value = int(s)
		else:
			raise TypeError(type(s))

		obj = super().__new__(cls, cls._auto_format(value).to_str())
		obj._value = value
		return obj

	@property
	def value(self) -> int:
		"""
		Byte count
		"""
		return self._value

	def auto_format(self) -> ValueUnitPair:
		return self._auto_format(self._value)

	def auto_str(self, **kwargs) -> str:
		return self.auto_format().to_str(**kwargs)

	def __repr__(self) -> str:
		return misc_utils.represent(self, attrs={'value': self._value})


def format_size(size: int) -> str:
	return ByteCount(size).auto_str()


def parse_size(s: str) -> int:
	return ByteCount(s).value
