from enum import Enum


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


CIRCLE_API_BASE_URL = "https://api.circle.com"
CIRCLE_PUBLIC_KEY_PATH = "/v1/w3s/config/entity/publicKey"
CIRCLE_WALLET_SETS_PATH = "/v1/w3s/developer/walletSets"

NGROK_SKIP_BROWSER_WARNING = "ngrok-skip-browser-warning"
