# backend/wsgi.py
from merrily import create_app

app = create_app()
