"""
Calendar settings read from the environment.

The CLI calls load_dotenv() before importing this module, so values can
also live in a local .env file.
"""

import os

TIMEZONE = os.environ.get('TRAINING_CALENDAR_TIMEZONE', 'Australia/Sydney')
DOMAIN = os.environ.get('TRAINING_CALENDAR_DOMAIN', 'thesocialrunner.com')
EVENT_LOCATION = os.environ.get('TRAINING_CALENDAR_LOCATION', 'Running Route')
