import os
from pathlib import Path

from dotenv import load_dotenv

# .env sits next to the package directory
env_path = Path(__file__).resolve().parent.parent / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
else:
    load_dotenv()

# Database
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "jobboard")

# JWT Authentication
SECRET_KEY = os.getenv("SECRET_KEY", "super_secret_random_key_CHANGE_THIS")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

# CORS (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Resume uploads: "gridfs" or "local"
RESUME_STORAGE = os.getenv("RESUME_STORAGE", "gridfs").lower()
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploads")
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", 5 * 1024 * 1024))
ALLOWED_RESUME_EXTENSIONS = (".pdf", ".doc", ".docx")

# Jobs posted without a location land here
DEFAULT_CITY = os.getenv("DEFAULT_CITY", "Amritsar")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Password reset one-time codes
OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", 10))
OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", 5))

# Outgoing mail; with no credentials messages are only logged
MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "Local Job Board")
MAIL_PROVIDER = os.getenv("MAIL_PROVIDER", "auto").lower()
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.example.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
