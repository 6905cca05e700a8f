import datetime
import threading
from typing import Collection, Set

from lifeboat import constants


class BackupIdGenerator:
	"""
	Time derived backup ids, "backup-YYYYMMDD-HHMMSS"

	Ids are second-resolution. A collision with a known or previously issued id gets a "-N" suffix, N = 2, 3, ...
	"""

	def __init__(self):
		self.__lock = threading.Lock()
		self.__issued: Set[str] = set()

	def next_id(self, now: datetime.datetime, existing_ids: Collection[str] = ()) -> str:
		base = constants.BACKUP_ID_PREFIX + now.strftime(constants.BACKUP_ID_TIME_FORMAT)
		with self.__lock:
			candidate = base
			n = 1
			while candidate in existing_ids or candidate in self.__issued:
				n += 1
				candidate = '{}-{}'.format(base, n)
			self.__issued.add(candidate)
		return candidate
