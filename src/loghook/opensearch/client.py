# OpenSearch/Elasticsearch clients - stdlib urllib by default for fast imports

import json
import urllib.request
import urllib.error
from base64 import b64encode

from ..config import load_config
from ..context import ContextCancelledError


class OpenSearchError(Exception):
	"""Base exception for OpenSearch errors with user-friendly messages."""
	pass


class ConnectionFailedError(OpenSearchError):
	"""Raised when OpenSearch is not reachable."""
	pass


class AuthenticationError(OpenSearchError):
	"""Raised when authentication fails."""
	pass


def _request_timeout(default, ctx):
	if ctx is None:
		return default
	ctx.raise_if_cancelled()
	remaining = ctx.remaining()
	if remaining is None:
		return default
	return min(default, remaining) if default else remaining


class LightweightOpenSearchClient:
	"""Minimal OpenSearch client using stdlib urllib for fast imports.

	Every call takes an optional CancelContext. A cancelled context fails the
	call before any request is made, and a context deadline caps the socket
	timeout.
	"""

	def __init__(self, host, port, user, password, timeout=5, scheme="http", mapping_types=False):
		self.base_url = f"{scheme}://{host}:{port}"
		self.timeout = timeout
		self.mapping_types = mapping_types
		# Pre-compute auth header
		credentials = b64encode(f"{user}:{password}".encode()).decode('ascii')
		self.headers = {
			"Authorization": f"Basic {credentials}",
			"Content-Type": "application/json",
		}
		self.indices = _IndicesClient(self)

	def _request(self, method, path, body=None, ctx=None, allow_404=False):
		"""Make HTTP request to OpenSearch. With allow_404, a 404 returns None."""
		timeout = _request_timeout(self.timeout, ctx)
		url = f"{self.base_url}{path}"
		data = json.dumps(body).encode('utf-8') if body is not None else None
		req = urllib.request.Request(url, data=data, headers=self.headers, method=method)
		try:
			with urllib.request.urlopen(req, timeout=timeout) as resp:
				raw = resp.read().decode('utf-8')
				if not raw:
					return {}
				return json.loads(raw)
		except urllib.error.HTTPError as e:
			if e.code == 401:
				raise AuthenticationError(f"Authentication failed (HTTP 401)")
			if e.code == 404 and allow_404:
				return None
			raise
		except urllib.error.URLError as e:
			raise ConnectionFailedError(f"Cannot connect: {e.reason}")

	def info(self, ctx=None):
		"""Get cluster info (used for connection check)."""
		return self._request("GET", "/", ctx=ctx)

	def index(self, index, body, doc_type=None, ctx=None, refresh=None):
		"""Index a document."""
		segment = doc_type if (self.mapping_types and doc_type) else "_doc"
		path = f"/{index}/{segment}"
		if refresh is not None:
			path += f"?refresh={'true' if refresh else 'false'}"
		return self._request("POST", path, body, ctx=ctx)


class _IndicesClient:
	"""Minimal indices operations."""

	def __init__(self, client):
		self._client = client

	def exists(self, index, ctx=None):
		"""Check if index exists."""
		result = self._client._request("HEAD", f"/{index}", ctx=ctx, allow_404=True)
		return result is not None

	def create(self, index, body=None, ctx=None):
		"""Create an index."""
		return self._client._request("PUT", f"/{index}", body, ctx=ctx)

	def delete(self, index, ctx=None):
		"""Delete an index."""
		return self._client._request("DELETE", f"/{index}", ctx=ctx)

	def put_index_template(self, name, body, ctx=None):
		"""Create or update an index template."""
		return self._client._request("PUT", f"/_index_template/{name}", body, ctx=ctx)

	def refresh(self, index, ctx=None):
		"""Refresh an index to make recent changes searchable."""
		return self._client._request("POST", f"/{index}/_refresh", ctx=ctx)


class OpenSearchPyBackend:
	"""Context-aware adapter over an opensearchpy.OpenSearch client."""

	def __init__(self, client, timeout=30, mapping_types=False):
		self._client = client
		self.timeout = timeout
		self.mapping_types = mapping_types
		self.indices = _OpenSearchPyIndices(self)

	def _params(self, ctx):
		return {"request_timeout": _request_timeout(self.timeout, ctx)}

	def info(self, ctx=None):
		return self._client.info(params=self._params(ctx))

	def index(self, index, body, doc_type=None, ctx=None, refresh=None):
		params = self._params(ctx)
		if refresh is not None:
			params["refresh"] = "true" if refresh else "false"
		if self.mapping_types and doc_type:
			return self._client.transport.perform_request(
				"POST", f"/{index}/{doc_type}", params=params, body=body,
			)
		return self._client.index(index=index, body=body, params=params)


class _OpenSearchPyIndices:

	def __init__(self, backend):
		self._backend = backend

	def exists(self, index, ctx=None):
		return bool(self._backend._client.indices.exists(index=index, params=self._backend._params(ctx)))

	def create(self, index, body=None, ctx=None):
		return self._backend._client.indices.create(index=index, body=body, params=self._backend._params(ctx))

	def delete(self, index, ctx=None):
		return self._backend._client.indices.delete(index=index, params=self._backend._params(ctx))

	def put_index_template(self, name, body, ctx=None):
		return self._backend._client.indices.put_index_template(name=name, body=body, params=self._backend._params(ctx))

	def refresh(self, index, ctx=None):
		return self._backend._client.indices.refresh(index=index, params=self._backend._params(ctx))


def get_opensearch_client(cfg=None):
	cfg = cfg or load_config()
	if cfg.client == "opensearch-py":
		from opensearchpy import OpenSearch
		client = OpenSearch(
			hosts=[{"host": cfg.opensearch_host, "port": cfg.opensearch_port}],
			http_auth=(cfg.opensearch_user, cfg.opensearch_pass),
			use_ssl=cfg.opensearch_scheme == "https",
			verify_certs=False,
			timeout=cfg.opensearch_timeout,
		)
		return OpenSearchPyBackend(client, timeout=cfg.opensearch_timeout, mapping_types=cfg.mapping_types)
	return LightweightOpenSearchClient(
		host=cfg.opensearch_host,
		port=cfg.opensearch_port,
		user=cfg.opensearch_user,
		password=cfg.opensearch_pass,
		timeout=cfg.opensearch_timeout,
		scheme=cfg.opensearch_scheme,
		mapping_types=cfg.mapping_types,
	)


def check_connection(client, cfg=None):
	"""Check if OpenSearch is reachable. Raises ConnectionFailedError if not."""
	cfg = cfg or load_config()
	try:
		client.info()
	except ConnectionFailedError:
		raise ConnectionFailedError(
			f"Cannot connect to OpenSearch at {cfg.opensearch_host}:{cfg.opensearch_port}\n"
			f"Make sure OpenSearch is running and accessible."
		)
	except AuthenticationError:
		raise AuthenticationError(
			f"Authentication failed for OpenSearch at {cfg.opensearch_host}:{cfg.opensearch_port}\n"
			f"Check LOGHOOK_OPENSEARCH_USER and LOGHOOK_OPENSEARCH_PASS in your .env file."
		)


__all__ = [
	"AuthenticationError",
	"ConnectionFailedError",
	"ContextCancelledError",
	"LightweightOpenSearchClient",
	"OpenSearchError",
	"OpenSearchPyBackend",
	"check_connection",
	"get_opensearch_client",
]
