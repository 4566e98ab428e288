"""
Command-line entry point.

Loads the JSON run configuration, sets up logging and runs the pipeline
once. Exits with 0 when the PDF was written.
"""

import sys

from .core.config import DEFAULT_CONFIG_PATH, load_config
from .core.controller import ScraperController
from .core.errors import ConfigurationError
from .core.logger import get_logger, initialize_logging


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else DEFAULT_CONFIG_PATH

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    initialize_logging(config.log_dir)
    logger = get_logger('app')
    logger.info(f"Configuration loaded from {config_path}")

    stats = ScraperController(config, logger=logger).run()

    logger.info(
        f"Run finished: {stats['scraped']} questions, {stats['pages']} pages, "
        f"{stats['images_failed']} images missing, "
        f"{stats['errors']['total_errors']} errors, {stats['errors']['total_warnings']} warnings"
    )
    return 0 if stats["pdf_written"] else 1


if __name__ == "__main__":
    sys.exit(main())
