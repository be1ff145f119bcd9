"""
File-backed storage for collections, environments, config and history.

Layout under the root directory::

    collections/<collectionId>.json
    environments/<environmentId>.json
    config.json
    history.json

Loaders recover from unreadable documents (log, skip or fall back to
defaults); writers raise PersistenceError. The store assumes a single writer.
"""

import json
import shutil
from collections import deque
from pathlib import Path
from typing import Any, Deque, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import ValidationError as ModelValidationError

from terminapi.config import settings
from terminapi.constants import (
    COLLECTION_ID_PREFIX,
    COLLECTIONS_DIRNAME,
    CONFIG_FILENAME,
    DOCUMENT_SUFFIX,
    ENVIRONMENTS_DIRNAME,
    HISTORY_FILENAME,
    JSON_INDENT,
)
from terminapi.core.models import AppConfig, CamelModel, Collection, Environment, HistoryEntry, Request
from terminapi.exceptions import CollectionImportError, PersistenceError, ResourceNotFoundError
from terminapi.logger import get_logger
from terminapi.utils.helpers import generate_id, get_dir_size, next_timestamp, utc_now

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=CamelModel)


class CollectionStore:
    """
    Persists collections, environments, configuration and history as JSON.

    Construct one store per process and hand it to whatever needs storage.
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the store, creating the directory layout on first use.

        Args:
            base_dir: Root directory (defaults to settings.data_dir)

        Raises:
            PersistenceError: If the layout cannot be created
        """
        self.base_dir = Path(base_dir or settings.data_dir).expanduser()
        self.collections_dir = self.base_dir / COLLECTIONS_DIRNAME
        self.environments_dir = self.base_dir / ENVIRONMENTS_DIRNAME
        self.config_path = self.base_dir / CONFIG_FILENAME
        self.history_path = self.base_dir / HISTORY_FILENAME

        self._ensure_layout()
        logger.debug(f"Initialized collection store at {self.base_dir}")

    def _ensure_layout(self) -> None:
        try:
            for directory in (self.base_dir, self.collections_dir, self.environments_dir):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create storage directory {self.base_dir}: {e}") from e

        if not self.config_path.exists():
            self.save_config(AppConfig())
        if not self.history_path.exists():
            self._write_json(self.history_path, [])

    @property
    def storage_path(self) -> Path:
        return self.base_dir

    # -- low level -----------------------------------------------------------

    @staticmethod
    def _write_json(path: Path, data: Any) -> None:
        try:
            path.write_text(json.dumps(data, indent=JSON_INDENT, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    @staticmethod
    def _document_path(directory: Path, entity_id: str) -> Path:
        return directory / f"{entity_id}{DOCUMENT_SUFFIX}"

    @staticmethod
    def _delete_document(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path}: {e}") from e

    def _load_directory(self, directory: Path, model: Type[ModelT]) -> List[ModelT]:
        """Load every document in a directory, skipping the ones that fail."""
        try:
            paths = sorted(directory.glob(f"*{DOCUMENT_SUFFIX}"))
        except OSError as e:
            logger.error(f"Error listing {directory}: {e}")
            return []

        documents: List[ModelT] = []
        for path in paths:
            try:
                documents.append(model.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValueError) as e:
                logger.error(f"Skipping unreadable document {path.name}: {e}")
        return documents

    # -- collections -----------------------------------------------------------

    def load_collections(self) -> List[Collection]:
        """Load all collections; corrupt files are logged and skipped."""
        return self._load_directory(self.collections_dir, Collection)

    def get_collection(self, collection_id: str) -> Collection:
        """
        Load a single collection.

        Raises:
            ResourceNotFoundError: If the collection is not stored
            PersistenceError: If the document cannot be read or parsed
        """
        path = self._document_path(self.collections_dir, collection_id)
        if not path.exists():
            raise ResourceNotFoundError(f"Collection not found: {collection_id}")
        try:
            return Collection.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read collection {collection_id}: {e}") from e

    def save_collection(self, collection: Collection) -> None:
        """
        Write a collection, stamping ``updated_at`` strictly later than before.

        Raises:
            PersistenceError: If the write fails
        """
        collection.updated_at = next_timestamp(collection.updated_at)
        path = self._document_path(self.collections_dir, collection.id)
        self._write_json(path, collection.to_document())
        logger.debug(f"Saved collection {collection.id}")

    def delete_collection(self, collection_id: str) -> None:
        """Delete a collection file; deleting a missing collection is a no-op."""
        self._delete_document(self._document_path(self.collections_dir, collection_id))
        logger.debug(f"Deleted collection {collection_id}")

    def save_request(self, collection: Collection, request: Request) -> Request:
        """Insert or replace a request in a collection and persist the collection."""
        stored = collection.upsert_request(request)
        self.save_collection(collection)
        return stored

    def find_request(self, request_id: str) -> Tuple[Collection, Request]:
        """
        Find a request across all collections.

        Returns:
            Tuple of the owning collection and the request

        Raises:
            ResourceNotFoundError: If no collection owns the request
        """
        for collection in self.load_collections():
            request = collection.get_request(request_id)
            if request is not None:
                return collection, request
        raise ResourceNotFoundError(f"Request not found: {request_id}")

    # -- environments ---------------------------------------------------------

    def load_environments(self) -> List[Environment]:
        """Load all environments; corrupt files are logged and skipped."""
        return self._load_directory(self.environments_dir, Environment)

    def save_environment(self, environment: Environment) -> None:
        path = self._document_path(self.environments_dir, environment.id)
        self._write_json(path, environment.to_document())
        logger.debug(f"Saved environment {environment.id}")

    def delete_environment(self, environment_id: str) -> None:
        self._delete_document(self._document_path(self.environments_dir, environment_id))
        logger.debug(f"Deleted environment {environment_id}")

    def find_environment(self, id_or_name: str) -> Optional[Environment]:
        """Find an environment by id first, then by name."""
        environments = self.load_environments()
        for environment in environments:
            if environment.id == id_or_name:
                return environment
        for environment in environments:
            if environment.name == id_or_name:
                return environment
        return None

    # -- config ----------------------------------------------------------------

    def load_config(self) -> AppConfig:
        """Load the user configuration, falling back to defaults on any failure."""
        try:
            return AppConfig.model_validate_json(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Error loading config, using defaults: {e}")
            return AppConfig()

    def save_config(self, config: AppConfig) -> None:
        self._write_json(self.config_path, config.to_document())

    # -- history ---------------------------------------------------------------

    def load_history(self) -> List[HistoryEntry]:
        """
        Load history, most recent first.

        An unreadable file yields an empty list. Entries that fail validation
        are logged and skipped so the rest survive the next write.
        """
        try:
            document = json.loads(self.history_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Error loading history: {e}")
            return []
        if not isinstance(document, list):
            logger.error(f"Error loading history: expected a list, got {type(document).__name__}")
            return []

        entries: List[HistoryEntry] = []
        for index, item in enumerate(document):
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ModelValidationError as e:
                logger.warning(f"Skipping invalid history entry {index}: {e.error_count()} error(s)")
        return entries

    def add_to_history(self, entry: HistoryEntry) -> None:
        """
        Prepend an entry and keep at most ``max_history_size`` entries.

        Raises:
            PersistenceError: If the history file cannot be written
        """
        max_size = self.load_config().max_history_size
        history: Deque[HistoryEntry] = deque(maxlen=max_size)
        # extendleft over the reversed list keeps the newest entries when full
        history.extendleft(reversed(self.load_history()))
        history.appendleft(entry)
        self._write_json(self.history_path, [item.to_document() for item in history])

    def clear_history(self) -> None:
        self._write_json(self.history_path, [])
        logger.debug("Cleared history")

    # -- import / export -------------------------------------------------------

    def import_collection(self, source_path: Union[str, Path]) -> Collection:
        """
        Import a collection document under a new identity.

        The source id and timestamps are discarded, so importing the same file
        twice yields two collections.

        Raises:
            CollectionImportError: If the file cannot be read or is not a
                valid collection document
            PersistenceError: If the imported collection cannot be written
        """
        source = Path(source_path)
        try:
            document = json.loads(source.read_text(encoding="utf-8"))
        except OSError as e:
            raise CollectionImportError(f"Cannot read {source}: {e}") from e
        except ValueError as e:
            raise CollectionImportError(f"{source} is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise CollectionImportError(f"{source} does not contain a collection object")

        now = utc_now()
        document.update({"id": generate_id(COLLECTION_ID_PREFIX), "createdAt": now, "updatedAt": now})
        for key in ("created_at", "updated_at"):
            document.pop(key, None)
        try:
            collection = Collection.model_validate(document)
        except ModelValidationError as e:
            raise CollectionImportError(f"{source} is not a valid collection: {e}") from e

        dangling = collection.dangling_references()
        if dangling:
            logger.warning(
                f"Imported collection {collection.id} has {len(dangling)} folder reference(s) "
                f"to missing requests"
            )

        self.save_collection(collection)
        logger.info(f"Imported collection {collection.id} from {source}")
        return collection

    def export_collection(self, collection_id: str, output_path: Union[str, Path]) -> Path:
        """
        Copy a stored collection file byte for byte.

        Raises:
            ResourceNotFoundError: If the collection is not stored
            PersistenceError: If the copy fails
        """
        source = self._document_path(self.collections_dir, collection_id)
        if not source.exists():
            raise ResourceNotFoundError(f"Collection not found: {collection_id}")
        destination = Path(output_path)
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise PersistenceError(f"Failed to export {collection_id} to {destination}: {e}") from e
        logger.info(f"Exported collection {collection_id} to {destination}")
        return destination

    # -- stats -----------------------------------------------------------------

    def get_storage_size(self) -> int:
        """Total size in bytes of everything under the storage root (0 on error)."""
        try:
            return get_dir_size(self.base_dir)
        except OSError as e:
            logger.error(f"Error calculating storage size: {e}")
            return 0
