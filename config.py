import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{os.path.join(os.path.dirname(__file__), 'data.db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Uploaded ECG scans are held in memory for a single request
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 20 * 1024 * 1024))

    LOG_DIR = os.environ.get("LOG_DIR", os.path.join(os.path.dirname(__file__), "logs"))

    # Provider selection: openai or gemini
    ANALYSIS_PROVIDER = os.environ.get("ANALYSIS_PROVIDER", "openai").lower()
    OPENAI_API_URL = os.environ.get("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-5.2")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
    MAX_COMPLETION_TOKENS = int(os.environ.get("MAX_COMPLETION_TOKENS", 1000))
    ANALYSIS_TIMEOUT_SECONDS = float(os.environ.get("ANALYSIS_TIMEOUT_SECONDS", 60))

    PROMPT_PATH = os.environ.get("PROMPT_PATH", os.path.join(os.path.dirname(__file__), "prompt.txt"))
