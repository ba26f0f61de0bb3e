"""
Test session setup.

The configuration and logging singletons are created when inventory_manager
is first imported, so the settings file has to exist before collection.
"""
import configparser
import os
import tempfile

_test_dir = tempfile.mkdtemp(prefix='inventory-manager-tests-')

_settings = configparser.ConfigParser(interpolation=None)
_settings['DATABASE'] = {
    'type': 'sqlite',
    'sqlite_path': os.path.join(_test_dir, 'inventory.db'),
    'echo': 'False'
}
_settings['SUPABASE'] = {'url': '', 'key': ''}
_settings['LOGGING'] = {
    'level': 'DEBUG',
    'directory': os.path.join(_test_dir, 'logs'),
    'console_output': 'False'
}

with open(os.path.join(_test_dir, 'settings.ini'), 'w') as settings_file:
    _settings.write(settings_file)

os.environ['INVENTORY_CONFIG_DIR'] = _test_dir
