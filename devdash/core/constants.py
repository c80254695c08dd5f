"""Константы для DevDash.

Централизованное хранилище всех магических чисел и строк.
"""

# === HTTP и API ===
API_PREFIX = "/api"
WEBSOCKET_PATH = "/ws"

# === Server ===
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 3000
SHUTDOWN_DELAY_SECONDS = 0.5

# === Данные ===
DEFAULT_DATA_DIR = "data"
DEFAULT_HISTORY_LIMIT = 100

# === Движок задач ===
MAX_CONCURRENT_TASKS = 3
MAX_TASK_RETRIES = 2
DEFAULT_BUDGET = 1.0

# === Воркер ===
DEFAULT_WORKER_EXECUTABLE = "claude"
MIN_MAX_TURNS = 25
TURNS_PER_BUDGET_UNIT = 10

# Признак того, что воркер упёрся в собственный лимит шагов
BUDGET_EXCEEDED_PATTERN = r"max[\s_-]?turns|turn[\s_-]?limit|maximum number of turns"

# Сколько ждать завершения воркеров при остановке (SIGTERM, затем SIGKILL)
WORKER_SHUTDOWN_TIMEOUT = 5.0

# === Git ===
RECENT_COMMITS_LIMIT = 10
GIT_LOG_FORMAT = "%H|%s|%aI|%an"

# === Создание проектов ===
PROJECT_TEMPLATE_DIR = "CCSTARTUP"
PROJECT_INFO_FILE = ".project-info.json"
PROJECT_INIT_TIMEOUT = 300.0

# === Do-work очередь ===
DOWORK_DIR = "do-work"
DOWORK_ARCHIVE_LIMIT = 10

# === WebSocket ===
SUBSCRIBER_QUEUE_SIZE = 1000
