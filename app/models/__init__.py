"""
Project Status Dashboard
Database models.

The single ``db`` handle is shared by every model module and bound to the
application in ``create_app``.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
