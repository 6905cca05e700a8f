import dataclasses
import enum
import os
from typing import Optional, List

from lifeboat.types.common import PathLike
from lifeboat.types.tar_format import TarFormat


@dataclasses.dataclass(frozen=True)
class SevenZipFormat:
	extension: str

	@property
	def all_extensions(self) -> List[str]:
		return [self.extension]


@dataclasses.dataclass(frozen=True)
class ZipFormat:
	extension: str

	@property
	def all_extensions(self) -> List[str]:
		return [self.extension]


class ArchiveFormat(enum.Enum):
	# order matters: multi-part extensions must be checked before the shorter ones they end with
	tar_zst = TarFormat.zstd
	tar_gz = TarFormat.gzip
	tar = TarFormat.plain
	seven_zip = SevenZipFormat('.7z')
	zip = ZipFormat('.zip')

	@property
	def all_extensions(self) -> List[str]:
		if isinstance(self.value, TarFormat):
			return self.value.value.all_extensions
		elif isinstance(self.value, (SevenZipFormat, ZipFormat)):
			return self.value.all_extensions
		else:
			raise ValueError(self.value)

	@property
	def extension(self) -> str:
		return self.all_extensions[0]

	@property
	def tar_format(self) -> Optional[TarFormat]:
		return self.value if isinstance(self.value, TarFormat) else None

	@classmethod
	def from_file_name(cls, file: PathLike) -> Optional['ArchiveFormat']:
		name = os.path.basename(file).lower()
		for af in ArchiveFormat:
			for ext in af.all_extensions:
				if name.endswith(ext):
					return af
		return None
