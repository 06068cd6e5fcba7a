"""Initializes the DBStorage singleton shared by the API and the core components."""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
