# server/wsgi.py

import os
from inkwell import create_app

# gunicorn --chdir server wsgi:app
app = create_app(os.environ.get("FLASK_ENV", "production"))
