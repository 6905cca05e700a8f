import logging
import os
from typing import List

from lifeboat.config.config import Config
from lifeboat.types.backup_unit import BackupUnit, UnitKind, UnitInfo
from lifeboat.utils import file_utils, path_utils

_WAR_EXTENSION = '.war'


class UnitResolver:
	"""
	Turns the configured webapps and custom folders into backup units
	"""

	def __init__(self, config: Config, logger: logging.Logger):
		self.config = config
		self.logger = logger

	def list_webapps(self) -> List[UnitInfo]:
		"""
		Webapps available under webapps_path: directories, and .war files

		:raise ValueError: webapps_path is not configured
		:raise OSError: webapps_path cannot be listed
		"""
		if self.config.webapps_path == '':
			raise ValueError('webapps_path is not configured')
		webapps_root = self.config.webapps_root
		webapps = []
		for name in sorted(os.listdir(webapps_root)):
			path = webapps_root / name
			is_war = name.lower().endswith(_WAR_EXTENSION) and path.is_file()
			if not path.is_dir() and not is_war:
				continue
			try:
				size = file_utils.get_dir_size(path)
			except OSError as e:
				self.logger.warning('Failed to calculate size of webapp {!r}: {}'.format(name, e))
				size = 0
			webapps.append(UnitInfo(name=name, path=path, kind=UnitKind.webapp, size=size, is_war=is_war))
		return webapps

	def list_custom_folders(self) -> List[UnitInfo]:
		folders = []
		for folder in self.config.custom_folders:
			path = path_utils.normalize_path(folder.path)
			exists = path.exists()
			size = 0
			if exists:
				try:
					size = file_utils.get_dir_size(path)
				except OSError as e:
					self.logger.warning('Failed to calculate size of custom folder {!r}: {}'.format(folder.title, e))
			folders.append(UnitInfo(name=folder.title, path=path, kind=UnitKind.custom, size=size, exists=exists, required=folder.required))
		return folders

	def resolve_webapps(self, selected: List[str]) -> List[BackupUnit]:
		names = list(selected)
		if len(names) == 0:
			if len(self.config.webapps) > 0:
				names = list(self.config.webapps)
			elif self.config.webapps_path != '':
				names = [info.name for info in self.list_webapps()]
			else:
				self.logger.debug('webapps_path is not configured, no webapp to backup')
		webapps_root = self.config.webapps_root
		return [
			BackupUnit(name=name, path=webapps_root / name, kind=UnitKind.webapp, required=True)
			for name in names
		]

	def resolve_custom_folders(self, selected: List[str]) -> List[BackupUnit]:
		units = []
		for folder in self.config.custom_folders:
			if len(selected) > 0 and folder.title not in selected:
				continue
			units.append(BackupUnit(
				name=folder.title,
				path=path_utils.normalize_path(folder.path),
				kind=UnitKind.custom,
				required=folder.required,
				include=tuple(folder.include),
				exclude=tuple(folder.exclude),
			))
		return units
