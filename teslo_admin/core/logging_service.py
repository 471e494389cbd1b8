"""
Persistent admin log for the Teslo admin surface.

Every entry goes to the console logger and to the app_logs table in LOGS_DB,
tagged with the request it came from when there is one.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta
from flask import request, has_request_context
from .database import Database
from .config import Config, get_config_value

console = logging.getLogger('teslo_admin')


class LoggingService:
    """Static helpers writing to app_logs; never raise into the caller"""

    @staticmethod
    def _db_path():
        return get_config_value('LOGS_DB', Config.LOGS_DB)

    @staticmethod
    def _ensure_logs_table(db_path):
        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS app_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    ip_address TEXT,
                    user_agent TEXT,
                    request_path TEXT
                )
            """)

            # Create index for better performance
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                ON app_logs(timestamp DESC)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_level
                ON app_logs(level)
            """)
            conn.commit()

    @staticmethod
    def _get_request_context():
        """(ip, user agent, path) of the current request, or Nones"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return ip_address, request.headers.get('User-Agent', ''), request.path

    @staticmethod
    def log(level, source, message, details=None):
        """
        Write one log entry.

        Args:
            level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case)
            source: component name such as "products", "orders" or "uploads"
            message: one-line summary
            details: optional str or dict; dicts are stored as JSON
        """
        level = level.upper()
        console.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)

        try:
            db_path = LoggingService._db_path()
            LoggingService._ensure_logs_table(db_path)

            ip_address, user_agent, request_path = LoggingService._get_request_context()

            if isinstance(details, dict):
                details = json.dumps(details, indent=2, default=str)

            with Database.connect(db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message, details,
                    ip_address, user_agent, request_path
                ))
                conn.commit()

        except Exception as e:
            console.warning("Logging service error: %s", e)
            if details:
                console.warning("Details: %s", details)

    @staticmethod
    def debug(source, message, details=None):
        LoggingService.log('DEBUG', source, message, details)

    @staticmethod
    def info(source, message, details=None):
        LoggingService.log('INFO', source, message, details)

    @staticmethod
    def warning(source, message, details=None):
        LoggingService.log('WARNING', source, message, details)

    @staticmethod
    def error(source, message, details=None):
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_api_call(source, endpoint, method='GET', status_code=200, details=None):
        """One entry per admin API response; level follows the status class"""
        if status_code >= 500:
            level = 'ERROR'
        elif status_code >= 400:
            level = 'WARNING'
        else:
            level = 'INFO'
        message = f"{method} {endpoint} -> {status_code}"
        LoggingService.log(level, source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """ERROR entry for an unexpected exception, with the active traceback"""
        name = type(error).__name__
        payload = {'exception': name, 'message': str(error), 'traceback': traceback.format_exc()}
        if details:
            payload['context'] = details
        LoggingService.error(source, f"Unhandled {name}: {error}", payload)

    @staticmethod
    def recent(limit=100, level=None):
        """Most recent log rows, newest first"""
        db_path = LoggingService._db_path()
        LoggingService._ensure_logs_table(db_path)
        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            if level:
                cursor.execute(
                    "SELECT * FROM app_logs WHERE level = ? ORDER BY id DESC LIMIT ?",
                    (level.upper(), limit)
                )
            else:
                cursor.execute("SELECT * FROM app_logs ORDER BY id DESC LIMIT ?", (limit,))
            return [dict(row) for row in cursor.fetchall()]

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Delete entries older than ``days_to_keep`` days; returns the count"""
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        db_path = LoggingService._db_path()
        LoggingService._ensure_logs_table(db_path)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM app_logs WHERE timestamp < ?", (cutoff_iso,))
            deleted_count = cursor.rowcount
            conn.commit()

        LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
        return deleted_count


def db_log(level, source, message, details=None):
    """Log to the persistent app_logs table; never raises"""
    LoggingService.log(level, source, message, details)
