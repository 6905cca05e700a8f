import dataclasses
import os
from pathlib import Path
from typing import List, Union

import yaml
from mcdreforged.api.utils import Serializable

from lifeboat import constants
from lifeboat.config.compression_config import CompressionConfig
from lifeboat.config.custom_folder_config import CustomFolderConfig
from lifeboat.config.logging_config import LoggingConfig
from lifeboat.config.retention_config import RetentionConfig
from lifeboat.utils import path_utils

DEFAULT_CONFIG_FILE_NAME = 'lifeboat.yaml'

_VALID_ENVIRONMENTS = {
	'development', 'dev',
	'staging', 'stage',
	'production', 'prod',
	'testing', 'test',
}


@dataclasses.dataclass(frozen=True)
class ValidationError:
	field: str
	message: str

	def __str__(self) -> str:
		return '{}: {}'.format(self.field, self.message)


@dataclasses.dataclass
class ValidationResult:
	errors: List[ValidationError] = dataclasses.field(default_factory=list)
	warnings: List[str] = dataclasses.field(default_factory=list)

	@property
	def valid(self) -> bool:
		return len(self.errors) == 0

	def add_error(self, field: str, message: str):
		self.errors.append(ValidationError(field, message))

	def add_warning(self, message: str):
		self.warnings.append(message)


class Config(Serializable):
	name: str = 'my-webapp'
	environment: str = 'production'
	webapps_path: str = ''
	backup_path: str = '.'
	webapps: List[str] = []
	custom_folders: List[CustomFolderConfig] = []

	retention: RetentionConfig = RetentionConfig()
	compression: CompressionConfig = CompressionConfig()
	logging: LoggingConfig = LoggingConfig()

	# ==================== Loading ====================

	@classmethod
	def load(cls, path: Union[str, Path]) -> 'Config':
		"""
		Load the config from a yaml file. Relative paths inside are resolved against the directory of the file
		"""
		path = Path(path).absolute()
		with open(path, 'r', encoding='utf8') as f:
			data = yaml.safe_load(f)
		if data is None:
			data = {}
		if not isinstance(data, dict):
			raise ValueError('bad config file {}, root should be a mapping, found {}'.format(path, type(data).__name__))
		config = cls.deserialize(data)
		config.resolve_paths(path.parent)
		return config

	def save(self, path: Union[str, Path]):
		with open(path, 'w', encoding='utf8') as f:
			yaml.safe_dump(self.serialize(), f, allow_unicode=True, sort_keys=False)

	def resolve_paths(self, config_dir: Path):
		if self.backup_path in ('', '.'):
			self.backup_path = str(config_dir)
		else:
			self.backup_path = str(path_utils.resolve_against(self.backup_path, config_dir))
		if self.webapps_path != '':
			self.webapps_path = str(path_utils.resolve_against(self.webapps_path, config_dir))
		for folder in self.custom_folders:
			if folder.path != '':
				folder.path = str(path_utils.resolve_against(folder.path, config_dir))
		if self.logging.path != '':
			self.logging.path = str(path_utils.resolve_against(self.logging.path, config_dir))

	# ==================== Field getters ====================

	@property
	def backup_root(self) -> Path:
		return path_utils.normalize_path(self.backup_path)

	@property
	def index_path(self) -> Path:
		return self.backup_root / constants.INDEX_FILE_NAME

	@property
	def logs_path(self) -> Path:
		return self.backup_root / constants.LOGS_DIR_NAME

	@property
	def webapps_root(self) -> Path:
		return path_utils.normalize_path(self.webapps_path)

	# ==================== Validation ====================

	def validate(self) -> ValidationResult:
		result = ValidationResult()

		if self.name.strip() == '':
			result.add_error('name', 'instance name is required')

		if self.webapps_path.strip() == '':
			result.add_error('webapps_path', 'webapps path is required')
		elif not self.webapps_root.exists():
			result.add_error('webapps_path', 'path does not exist: {}'.format(self.webapps_path))

		if len(self.webapps) == 0:
			result.add_warning('No webapps specified; all apps in webapps_path will be backed up')
		elif self.webapps_path.strip() != '':
			for webapp in self.webapps:
				webapp_path = self.webapps_root / webapp
				if not webapp_path.exists():
					result.add_warning("webapp '{}' does not exist at {}".format(webapp, webapp_path))

		for i, folder in enumerate(self.custom_folders):
			if folder.title.strip() == '':
				result.add_error('custom_folders[{}].title'.format(i), 'folder title is required')
			if folder.path.strip() == '':
				result.add_error('custom_folders[{}].path'.format(i), 'folder path is required')
			elif not os.path.exists(path_utils.normalize_path(folder.path)):
				if folder.required:
					result.add_error('custom_folders[{}].path'.format(i), 'required folder does not exist: {}'.format(folder.path))
				else:
					result.add_warning("optional folder '{}' does not exist: {}".format(folder.title, folder.path))

		if self.retention.enabled:
			if self.retention.days < 1:
				result.add_error('retention.days', 'retention days must be at least 1')
			if self.retention.min_keep < 0:
				result.add_error('retention.min_keep', 'min_keep cannot be negative')

		if self.compression.enabled:
			if not 1 <= self.compression.level <= 9:
				result.add_error('compression.level', 'compression level must be between 1 and 9')

		if self.compression.backend not in ('auto', 'seven_zip', 'tar_zst', 'zip'):
			result.add_error('compression.backend', 'unknown backend {!r}, should be one of auto, seven_zip, tar_zst, zip'.format(self.compression.backend))

		if self.environment != '' and self.environment.lower() not in _VALID_ENVIRONMENTS:
			result.add_warning("unrecognized environment '{}'; consider using: dev, staging, production, testing".format(self.environment))

		return result
