import json
import os

from dotenv import load_dotenv

from .codec import MAX_STRING

# load .env, real environment variables keep priority
load_dotenv()

DEFAULT_SETTINGS_FILE = 'configs/settings.json'


class Settings:
    @staticmethod
    def file():
        path = os.getenv('SOURCEQUERY_SETTINGS', DEFAULT_SETTINGS_FILE)
        try:
            with open(path, 'r', encoding='utf8') as file:
                settings = json.load(file)
        except FileNotFoundError:
            return {}

        if not isinstance(settings, dict):
            raise ValueError(f'{path} must hold a json object')
        return settings

    @staticmethod
    def get():
        settings = Settings.file()

        timeout = os.getenv('SOURCEQUERY_TIMEOUT', settings.get('timeout'))
        # empty or missing timeout = block until the server answers
        timeout = float(timeout) if timeout not in (None, '') else None
        if timeout is not None and not timeout > 0:
            raise ValueError(f'timeout must be positive or empty, got {timeout}')

        max_string = int(os.getenv('SOURCEQUERY_MAX_STRING', settings.get('max_string', MAX_STRING)))
        if max_string < 1:
            raise ValueError(f'max_string must be positive, got {max_string}')

        return {'timeout': timeout, 'max_string': max_string}
