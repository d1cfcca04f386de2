"""Constants and default values for the system monitor."""

# Sampling defaults
DEFAULT_INTERVAL_SECONDS = 5.0
CPU_SETTLE_SECONDS = 0.1  # warm-up delay for counter-based CPU sampling

# Unit conversion
BYTES_PER_MB = 1024 * 1024

# Console color thresholds (CPU %)
CPU_CRITICAL_PCT = 80.0
CPU_HIGH_PCT = 60.0
CPU_ELEVATED_PCT = 40.0

# File logger defaults
DEFAULT_LOG_FILE_PATH = "system-monitor.log"

# API publisher defaults
DEFAULT_API_TIMEOUT_SECONDS = 30.0
API_USER_AGENT = "SystemMonitor/1.0"

# Disk defaults
DEFAULT_POSIX_DISK_PATH = "/"
DEFAULT_WINDOWS_DRIVE = "C:"
