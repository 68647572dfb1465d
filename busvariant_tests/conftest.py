import os
import sys

import structlog

from busvariant.conf import UNITTESTS_SETTINGS_FILEPATH, get_global_settings

os.environ['BUSVARIANT_CONFIG_YAML'] = os.environ.get('BUSVARIANT_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)

# log lines must not end up in the output compared by doctests
structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))

# load them here so that no test depends on being the first one to read the settings
get_global_settings()
