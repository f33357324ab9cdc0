"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi init-sheet        # create the key | value header row
    flask --app wsgi sheet-dump        # print the stored report mapping
    flask db init                      # first time only (creates migrations/)
    flask db migrate -m "description"
    flask db upgrade
"""

from app import create_app

app = create_app()
