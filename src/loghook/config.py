# Configuration loading for loghook

import os
import socket

# Lazy load dotenv - only when config is first accessed
_dotenv_loaded = False
_custom_dotenv_path = None

def _getenv(name, default):
	value = os.getenv(name)
	return value if value else default

def _getbool(name, default):
	value = os.getenv(name)
	if not value:
		return default
	return value.strip().lower() in ("1", "true", "yes", "on")

def _getfloat(name):
	value = os.getenv(name)
	return float(value) if value else None

class LoghookConfig:
	"""Loads configuration from environment variables and provides defaults."""
	def __init__(self):
		self.opensearch_host = _getenv("LOGHOOK_OPENSEARCH_HOST", "localhost")
		self.opensearch_port = int(_getenv("LOGHOOK_OPENSEARCH_PORT", "9200"))
		self.opensearch_user = _getenv("LOGHOOK_OPENSEARCH_USER", "admin")
		self.opensearch_pass = _getenv("LOGHOOK_OPENSEARCH_PASS", "admin")
		self.opensearch_scheme = _getenv("LOGHOOK_OPENSEARCH_SCHEME", "http")
		self.opensearch_timeout = int(_getenv("LOGHOOK_OPENSEARCH_TIMEOUT", "30"))
		self.client = _getenv("LOGHOOK_CLIENT", "lightweight")
		# Pre-7.x clusters take the "log" doc type in the document path
		self.mapping_types = _getbool("LOGHOOK_MAPPING_TYPES", False)
		self.index = _getenv("LOGHOOK_INDEX", "logs")
		self.index_rotation = _getenv("LOGHOOK_INDEX_ROTATION", "none")
		self.level = _getenv("LOGHOOK_LEVEL", "info")
		self.source_host = _getenv("LOGHOOK_SOURCE_HOST", socket.gethostname())
		# Dispatch
		self.async_mode = _getbool("LOGHOOK_ASYNC", False)
		self.workers = int(_getenv("LOGHOOK_WORKERS", "2"))
		self.queue_size = int(_getenv("LOGHOOK_QUEUE_SIZE", "1000"))
		self.overflow = _getenv("LOGHOOK_OVERFLOW", "drop_newest")
		self.write_timeout = _getfloat("LOGHOOK_WRITE_TIMEOUT")

def set_dotenv_path(path: str):
	"""Set a custom .env file path to load. Must be called before load_config()."""
	global _custom_dotenv_path, _dotenv_loaded
	_custom_dotenv_path = path
	_dotenv_loaded = False  # Reset to force reload with new path

def load_config() -> LoghookConfig:
	"""Return a config object with all settings loaded."""
	global _dotenv_loaded, _custom_dotenv_path
	if not _dotenv_loaded:
		from dotenv import load_dotenv, find_dotenv
		dotenv_path = os.getenv("DOTENV_PATH") or _custom_dotenv_path
		if dotenv_path:
			# Explicit file wins over the process environment
			load_dotenv(dotenv_path, override=True)
		else:
			dotenv_path = find_dotenv(usecwd=True)
			if dotenv_path:
				load_dotenv(dotenv_path)
		_dotenv_loaded = True
	return LoghookConfig()
