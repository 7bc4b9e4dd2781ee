# Overview: Flask extension instances for database, migrations and the hosted platform.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .platform import Platform

db = SQLAlchemy()
migrate = Migrate()
platform = Platform()
