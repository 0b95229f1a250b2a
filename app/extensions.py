from celery import Celery
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

# Shared database, migration, JWT and task queue instances
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
celery = Celery('labor_reports')
