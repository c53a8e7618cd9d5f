import os
from dotenv import load_dotenv

# Load environment variables from .env and .flaskenv files
load_dotenv('.env')
load_dotenv('.flaskenv')

from gymdesk.app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.environ.get('FLASK_RUN_HOST', '0.0.0.0'),
        port=int(os.environ.get('PORT', 5000)),
        debug=os.environ.get('APP_ENV', 'development') == 'development',
    )
