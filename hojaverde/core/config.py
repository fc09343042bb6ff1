import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hojaverde.db")

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "hoja-verde-secret-key")  # Change this in production
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost,http://localhost:3000,http://localhost:5000"
    ).split(",")
    if origin.strip()
]

# Used to build product page links embedded in QR images
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000").rstrip("/")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
