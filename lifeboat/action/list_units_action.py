from typing import List

from lifeboat.action import Action
from lifeboat.action.helpers.unit_resolver import UnitResolver
from lifeboat.types.backup_unit import UnitInfo


class ListUnitsAction(Action[List[UnitInfo]]):
	"""
	Webapps and custom folders that can be backed up, with their sizes
	"""

	def run(self) -> List[UnitInfo]:
		resolver = UnitResolver(self.config, self.logger)
		units: List[UnitInfo] = []
		if self.config.webapps_path != '':
			try:
				units.extend(resolver.list_webapps())
			except OSError as e:
				self.logger.error('Failed to read webapps directory {}: {}'.format(self.config.webapps_path, e))
		units.extend(resolver.list_custom_folders())
		return units
