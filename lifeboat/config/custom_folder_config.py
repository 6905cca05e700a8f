from typing import List

from mcdreforged.api.utils import Serializable


class CustomFolderConfig(Serializable):
	title: str = ''
	path: str = ''
	required: bool = False
	include: List[str] = []
	exclude: List[str] = []
