import json
import sys

from clusterconf.config import (
    CliParseError,
    ClusterConfigError,
    ConfigLoader,
    HostResolver,
)
from clusterconf.logger import get_logger

logger = get_logger("run_node")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    loader = ConfigLoader()
    try:
        config = loader.load()
    except ClusterConfigError as e:
        logger.error("Invalid cluster configuration: %s", e)
        return 1

    try:
        loader.apply_cli_overrides(config, argv)
    except CliParseError:
        # Already logged by the loader; carry on with file-derived values
        logger.warning("Continuing without command-line overrides")

    try:
        HostResolver().normalize_addresses(config)
    except ClusterConfigError as e:
        logger.error("Cannot normalize cluster addresses: %s", e)
        return 1

    logger.info("Resolved cluster configuration:\n%s", json.dumps(config.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
