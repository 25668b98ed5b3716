"""User-facing messages shown by the page and the API."""

API_KEY_SAVED = "API-Schlüssel gespeichert!"
API_KEY_CLEARED = "API-Schlüssel gelöscht."
INVALID_API_KEY = 'Bitte geben Sie einen gültigen OpenAI API-Schlüssel ein (beginnt mit "sk-")'
INVALID_GEMINI_API_KEY = "Bitte geben Sie einen gültigen Gemini API-Schlüssel ein"
MISSING_API_KEY = "Bitte zuerst einen API-Schlüssel speichern!"
MISSING_IMAGE = "Bitte laden Sie zuerst ein EKG-Bild hoch!"
INVALID_IMAGE = "Bitte laden Sie ein Bild hoch (JPEG, PNG, etc.)"
API_REQUEST_FAILED = "API-Anfrage fehlgeschlagen"
UNKNOWN_ERROR = "Unbekannter Fehler"
ERROR_LABEL = "Fehler:"
