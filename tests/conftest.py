"""
Point configuration and log files at a temporary directory before the
package is imported.
"""
import os
import tempfile

_test_dir = tempfile.mkdtemp(prefix='lab_metrics_tests_')
_log_dir = os.path.join(_test_dir, 'logs')

with open(os.path.join(_test_dir, 'settings.ini'), 'w') as settings:
    settings.write(
        "[LOGGING]\n"
        "level = DEBUG\n"
        f"directory = {_log_dir}\n"
        "console_output = False\n"
        "\n"
        "[FETCH]\n"
        "timeout_seconds = 5\n"
        "max_workers = 4\n"
        "error_message = Unable to retrieve data\n"
    )

os.environ['LAB_METRICS_CONFIG_DIR'] = _test_dir
