import os
from typing import List, Optional

from mcdreforged.api.utils import Serializable


class SevenZipConfig(Serializable):
	# None -> search PATH and common install locations
	path: Optional[str] = None
	level: int = 5
	threads: int = 1

	def get_effective_level(self) -> int:
		if 1 <= self.level <= 9:
			return self.level
		return 5


class CompressionConfig(Serializable):
	enabled: bool = True
	level: int = 6
	skip_extensions: List[str] = [
		'.war', '.jar', '.zip', '.gz', '.tar.gz', '.tgz',
		'.7z', '.rar', '.bz2', '.xz',
	]

	# auto, seven_zip, tar_zst, zip
	backend: str = 'auto'
	seven_zip: SevenZipConfig = SevenZipConfig()

	def should_compress(self, file_name: str) -> bool:
		if not self.enabled:
			return False
		name = os.path.basename(file_name).lower()
		for ext in self.skip_extensions:
			if name.endswith(ext.lower()):
				return False
		return True
