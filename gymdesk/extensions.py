from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_session import Session

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
server_session = Session()
login_manager = LoginManager()

# Limits and storage come from RATELIMIT_* config keys at init_app time
limiter = Limiter(key_func=get_remote_address)
