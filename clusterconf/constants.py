"""
clusterconf Constants

This module consolidates the property keys, command-line option names, file
locations and built-in defaults used by the configuration resolver, along
with the logging settings of the tool itself.
"""
import os
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load logging settings once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                'INFO',
    'LOG_FORMAT':               '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':          '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING': 'True',
    'LOG_FILE_OUTPUT':          'False',
}


def _setting(key: str) -> str:
    # Process environment wins over .env, .env wins over defaults.
    # dotenv_values returns strings or None. None is treated as missing.
    value = os.environ.get(key)
    if value is None:
        value = _config.get(key)
    return LOGGER_DEFAULTS[key] if value is None else value


LOG_LEVEL = _setting('LOG_LEVEL')
LOG_FORMAT = _setting('LOG_FORMAT')
LOG_DATE_FORMAT = _setting('LOG_DATE_FORMAT')
LOG_CONSOLE_HIGHLIGHTING = _setting('LOG_CONSOLE_HIGHLIGHTING').strip().casefold() == 'true'
LOG_FILE_OUTPUT = _setting('LOG_FILE_OUTPUT').strip().casefold() == 'true'

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# PROPERTIES SOURCE LOCATION
# ==================================================================================
CONFIG_NAME = 'cluster.properties'
CONF_DIR_NAME = 'conf'
ENV_CLUSTER_CONF = 'CLUSTER_CONF'  # directory holding CONFIG_NAME
ENV_CLUSTER_HOME = 'CLUSTER_HOME'  # install root, file under <home>/conf/


# ==================================================================================
# PROPERTY KEYS (case-sensitive)
# ==================================================================================
KEY_LOCAL_IP = 'LOCAL_IP'
KEY_LOCAL_META_PORT = 'LOCAL_META_PORT'
KEY_LOCAL_DATA_PORT = 'LOCAL_DATA_PORT'
KEY_LOCAL_CLIENT_PORT = 'LOCAL_CLIENT_PORT'
KEY_MAX_CONCURRENT_CLIENT_NUM = 'MAX_CONCURRENT_CLIENT_NUM'
KEY_REPLICA_NUM = 'REPLICA_NUM'
KEY_ENABLE_THRIFT_COMPRESSION = 'ENABLE_THRIFT_COMPRESSION'
KEY_CONNECTION_TIME_OUT_MS = 'CONNECTION_TIME_OUT_MS'
KEY_QUERY_TIME_OUT_SEC = 'QUERY_TIME_OUT_SEC'
KEY_MAX_REMOVED_LOG_SIZE = 'MAX_REMOVED_LOG_SIZE'
KEY_USE_BATCH_IN_CATCH_UP = 'USE_BATCH_IN_CATCH_UP'
KEY_MAX_NUMBER_OF_LOGS = 'MAX_NUMBER_OF_LOGS'
KEY_LOG_DELETION_CHECK_INTERVAL_SECOND = 'LOG_DELETION_CHECK_INTERVAL_SECOND'
KEY_ENABLE_AUTO_CREATE_SCHEMA = 'ENABLE_AUTO_CREATE_SCHEMA'
KEY_CONSISTENCY_LEVEL = 'CONSISTENCY_LEVEL'
KEY_SEED_NODES = 'SEED_NODES'


# ==================================================================================
# COMMAND-LINE OPTIONS
# ==================================================================================
OPTION_META_PORT = 'meta_port'
OPTION_DATA_PORT = 'data_port'
OPTION_CLIENT_PORT = 'client_port'
OPTION_SEED_NODES = 'seed_nodes'


# ==================================================================================
# BUILT-IN DEFAULTS
# ==================================================================================
DEFAULT_LOCAL_IP = '127.0.0.1'
DEFAULT_LOCAL_META_PORT = 9003
DEFAULT_LOCAL_DATA_PORT = 40010
DEFAULT_LOCAL_CLIENT_PORT = 55560
DEFAULT_SEED_NODE_URLS = (
    '127.0.0.1:9003:40010',
    '127.0.0.1:9005:40012',
    '127.0.0.1:9007:40014',
)
DEFAULT_REPLICATION_NUM = 2
DEFAULT_CONSISTENCY_LEVEL = 'mid'
DEFAULT_MAX_CONCURRENT_CLIENT_NUM = 10000
DEFAULT_CONNECTION_TIMEOUT_MS = 20 * 1000
DEFAULT_QUERY_TIMEOUT_SEC = 30
DEFAULT_MAX_REMOVED_LOG_SIZE = 512 * 1024 * 1024  # bytes
DEFAULT_MAX_NUMBER_OF_LOGS = 100
DEFAULT_LOG_DELETE_CHECK_INTERVAL_SEC = 3600
DEFAULT_USE_BATCH_IN_LOG_CATCH_UP = True
DEFAULT_ENABLE_AUTO_CREATE_SCHEMA = True
DEFAULT_RPC_THRIFT_COMPRESSION_ENABLED = False

MIN_PORT = 1
MAX_PORT = 65535
