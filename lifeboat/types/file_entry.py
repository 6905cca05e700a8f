import dataclasses
from pathlib import Path
from typing import List

from lifeboat.types.backup_unit import UnitKind


@dataclasses.dataclass(frozen=True)
class FileEntry:
	source_path: Path
	relative_path: str  # posix style, starts with the archive base name of the unit
	size: int
	is_dir: bool
	category: UnitKind


@dataclasses.dataclass
class CollectionResult:
	files: List[FileEntry] = dataclasses.field(default_factory=list)
	total_size: int = 0
	total_count: int = 0
	errors: List[str] = dataclasses.field(default_factory=list)

	def add(self, entry: FileEntry):
		self.files.append(entry)
		if not entry.is_dir:
			self.total_size += entry.size
			self.total_count += 1

	def get_files_by_category(self, category: UnitKind) -> List[FileEntry]:
		return [f for f in self.files if f.category == category]

	def get_directories(self) -> List[FileEntry]:
		return [f for f in self.files if f.is_dir]

	def get_files(self) -> List[FileEntry]:
		return [f for f in self.files if not f.is_dir]
