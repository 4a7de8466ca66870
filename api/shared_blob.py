"""Shared blob/storage helpers for the questions API.

Question records live as one JSON blob per record under the virtual folder
``questions/`` of a single container. Blobs are uploaded with public read
access so clients (and the listing endpoint) can fetch them by URL.

Environment expectations (Functions runtime automatically provides
AzureWebJobsStorage). For local dev you can use the Azurite emulator
or a real connection string.
"""

from __future__ import annotations

import os
import logging
from typing import List, Dict, Any, Optional, Tuple

import requests
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings

QUESTIONS_PREFIX = "questions/"
DEFAULT_CONTAINER = "question-data"
JSON_CONTENT_TYPE = "application/json"

CONNECTION_KEYS = [
	"QUESTIONS_BLOB_CONNECTION",
	"AzureWebJobsStorage",
	"AZURE_STORAGE_CONNECTION_STRING",
	"BLOB_CONNECTION_STRING",
]


class StorageNotConfiguredError(RuntimeError):
	pass


def _detect_storage_source() -> Tuple[str, bool]:
	for key in CONNECTION_KEYS:
		if os.getenv(key):
			return key, True
	return "(none)", False


def _get_connection_string() -> Optional[str]:
	"""Return the first non-empty connection string among CONNECTION_KEYS."""
	key, found = _detect_storage_source()
	return os.getenv(key) if found else None


def _get_fetch_timeout() -> Optional[float]:
	raw = os.getenv("QUESTIONS_FETCH_TIMEOUT")
	if not raw:
		return None
	return float(raw)


def get_container_name() -> str:
	return os.getenv("QUESTIONS_CONTAINER") or DEFAULT_CONTAINER


def debug_storage_config() -> Dict[str, Any]:
	key_used, found = _detect_storage_source()
	raw = _get_connection_string() or ""
	masked = (raw[:20] + "…" + raw[-4:]) if raw and len(raw) > 30 else raw
	return {
		"envVarDetected": key_used,
		"found": found,
		"maskedValue": masked,
		"container": get_container_name(),
	}


class QuestionBlobStore:
	"""Thin wrapper over a container client exposing the four operations
	the questions endpoint needs: prefix listing, fetch by URL, put, delete.
	"""

	def __init__(self, container: ContainerClient, fetch_timeout: Optional[float] = None):
		self._container = container
		self._fetch_timeout = fetch_timeout
		self._container_ready = False

	def _ensure_container(self) -> None:
		if self._container_ready:
			return
		try:
			self._container.create_container(public_access="blob")
			logging.info("[shared_blob] created container %s", self._container.container_name)
		except ResourceExistsError:
			pass
		self._container_ready = True

	def list_blobs(self, prefix: str) -> List[Dict[str, Any]]:
		"""List blobs whose name starts with ``prefix``."""
		out: List[Dict[str, Any]] = []
		for props in self._container.list_blobs(name_starts_with=prefix):
			last_modified = props.last_modified
			out.append({
				"pathname": props.name,
				"url": self._container.get_blob_client(props.name).url,
				"uploadedAt": last_modified.isoformat() if last_modified else None,
			})
		return out

	def fetch_text(self, url: str) -> str:
		response = requests.get(url, timeout=self._fetch_timeout)
		response.raise_for_status()
		response.encoding = "utf-8"
		return response.text

	def put_json(self, pathname: str, text: str) -> str:
		"""Upload ``text`` as a public JSON blob, overwriting any existing one.

		Returns the blob URL.
		"""
		self._ensure_container()
		blob = self._container.upload_blob(
			name=pathname,
			data=text.encode("utf-8"),
			overwrite=True,
			content_settings=ContentSettings(content_type=JSON_CONTENT_TYPE),
		)
		return blob.url

	def delete(self, pathname: str) -> None:
		try:
			self._container.delete_blob(pathname)
		except ResourceNotFoundError:
			logging.info("[shared_blob] delete of missing blob %s ignored", pathname)


def get_question_store() -> QuestionBlobStore:
	conn = _get_connection_string()
	if not conn:
		raise StorageNotConfiguredError(
			"Missing " + " / ".join(CONNECTION_KEYS) + " in configuration"
		)
	logging.debug("[shared_blob] storage config: %s", debug_storage_config())
	service = BlobServiceClient.from_connection_string(conn)
	container = service.get_container_client(get_container_name())
	return QuestionBlobStore(container, fetch_timeout=_get_fetch_timeout())


__all__ = [
	"QUESTIONS_PREFIX",
	"QuestionBlobStore",
	"StorageNotConfiguredError",
	"get_question_store",
	"get_container_name",
	"debug_storage_config",
]
