import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev")
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # uploads
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(50 * 1024 * 1024)))  # 50 MB
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
    ALLOWED_EXTENSIONS = {"xlsx", "xlsm"}

    # stored consolidation templates, addressed by id (file stem)
    TEMPLATE_FOLDER = os.getenv("TEMPLATE_FOLDER", os.path.join(os.getcwd(), "templates"))

    # consolidation defaults
    DEFAULT_DIVISION = os.getenv("DEFAULT_DIVISION", "")
    DEFAULT_IA = os.getenv("DEFAULT_IA", "IA")
    DEFAULT_OUTPUT_NAME = os.getenv("DEFAULT_OUTPUT_NAME", "DIVISION X CONSOLIDATED")
    SKIPPED_HEADER_LIMIT = int(os.getenv("SKIPPED_HEADER_LIMIT", "50"))

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
