import os
from dotenv import load_dotenv

# Load environment variables from .env (only for local development)
if os.getenv("FLASK_ENV") != "production":
    load_dotenv()


class Config:
    """Base configuration."""

    # Token signing secret; create_app refuses to start without it
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    SECRET_KEY = os.getenv("SECRET_KEY") or JWT_SECRET_KEY

    TOKEN_TTL_DAYS = int(os.getenv("TOKEN_TTL_DAYS", "7"))

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///skillswap.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BCRYPT_LOG_ROUNDS = int(os.getenv("BCRYPT_LOG_ROUNDS", "12"))

    # CORS configuration
    CORS_ORIGINS = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()
    ] or "*"

    # Debug mode
    DEBUG = os.getenv("FLASK_ENV") != "production"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")

    PORT = int(os.getenv("PORT", "5000"))
