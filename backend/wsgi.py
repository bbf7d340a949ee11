# backend/wsgi.py
from warehouse_engine import create_app

app = create_app()
