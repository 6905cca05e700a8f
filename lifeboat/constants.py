PACKAGE_ID = 'lifeboat'

# backup root layout
INDEX_FILE_NAME = 'index.json'
METADATA_FILE_NAME = 'metadata.json'
LOGS_DIR_NAME = 'logs'

# backup id / directory naming
BACKUP_ID_PREFIX = 'backup-'
BACKUP_ID_TIME_FORMAT = '%Y%m%d-%H%M%S'
DATE_FOLDER_FORMAT = '%Y%m%d'
TIME_FOLDER_FORMAT = '%H%M'
DELETE_AFTER_FORMAT = '%Y-%m-%d'
DEFAULT_CHECKPOINT_NAME = 'checkpoint'
LATEST_BACKUP_ALIAS = 'latest'

# io
STREAM_BUFFER_SIZE = 64 * 1024
