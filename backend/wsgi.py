# backend/wsgi.py
from brewhouse import create_app

app = create_app()
