import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))
UVICORN_RELOAD = os.getenv("UVICORN_RELOAD", "0") == "1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

MAX_ROOM_ID_LENGTH = int(os.getenv("MAX_ROOM_ID_LENGTH", 128))

SERVICE_NAME = "room-signaling-relay"
