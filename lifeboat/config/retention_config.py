from mcdreforged.api.utils import Serializable


class RetentionConfig(Serializable):
	enabled: bool = True
	days: int = 30

	# minimum amount of non-checkpoint backups that cleanup never goes below
	min_keep: int = 5
