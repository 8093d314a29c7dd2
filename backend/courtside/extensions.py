# Overview: Flask extension instances for database, migrations and the notification hub.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .realtime import NotificationHub

db = SQLAlchemy()
migrate = Migrate()
notification_hub = NotificationHub()
