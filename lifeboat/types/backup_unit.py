import dataclasses
import enum
from pathlib import Path
from typing import Tuple

from lifeboat.utils import path_utils


class UnitKind(enum.Enum):
	webapp = 'webapp'
	custom = 'custom'


@dataclasses.dataclass(frozen=True)
class BackupUnit:
	name: str
	path: Path
	kind: UnitKind
	required: bool = True
	include: Tuple[str, ...] = ()
	exclude: Tuple[str, ...] = ()

	@property
	def archive_base_name(self) -> str:
		return path_utils.sanitize_folder_name(self.name)

	@property
	def member_root(self) -> str:
		"""
		The top-level member of the unit inside its archive. Restored files end up under it
		"""
		if self.kind == UnitKind.webapp:
			return self.name
		return self.archive_base_name

	def get_missing_error(self) -> str:
		if self.kind == UnitKind.webapp:
			return 'webapp not found: {}'.format(self.name)
		else:
			return 'required folder not found: {}'.format(self.name)


@dataclasses.dataclass(frozen=True)
class UnitInfo:
	"""
	A unit available for backup, as shown to the user before selecting
	"""
	name: str
	path: Path
	kind: UnitKind
	size: int
	exists: bool = True
	required: bool = True
	is_war: bool = False
