# directo/schema_downloader.py
"""
Downloads the XSD files referenced by the endpoint definitions.

Provides:
- Schema discovery from the registered endpoint classes (deduplicated)
- Bulk download with a tqdm progress bar and per-file results
- Single-file download
"""

from pathlib import Path
from typing import Dict, List, Optional, Union, Iterable, Type

import requests
from tqdm import tqdm

from directo.config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT
from directo.endpoints import ENDPOINT_CLASSES, EndpointDefinition
from directo.logger import setup_logger

logger = setup_logger()


class SchemaDownloader:
    """Fetches schema files from the Directo server into a local directory."""

    def __init__(self, output_path: Union[str, Path], schema_base_url: str,
                 session: Optional[requests.Session] = None,
                 endpoint_classes: Optional[Iterable[Type[EndpointDefinition]]] = None):
        """
        Args:
            output_path: Directory the files are written to (created if missing)
            schema_base_url: Base URL the files are published under
            session: requests session, mainly for tests
            endpoint_classes: Endpoint definitions to collect schema names from
        """
        self.output_path = Path(output_path)
        self.schema_base_url = schema_base_url
        self.session = session or requests.Session()
        self.endpoint_classes = list(endpoint_classes or ENDPOINT_CLASSES)

    def get_all_schemas(self) -> List[Dict[str, str]]:
        """
        All schema files used by the endpoints.

        Returns:
            List of {"file": name, "url": url}, first-seen order, no duplicates
        """
        schemas: List[Dict[str, str]] = []
        seen = set()
        for endpoint_class in self.endpoint_classes:
            for schema_file in endpoint_class().schemas().values():
                if schema_file is None or schema_file in seen:
                    continue
                seen.add(schema_file)
                schemas.append({'file': schema_file, 'url': f"{self.schema_base_url}{schema_file}"})
        return schemas

    def download_all(self, show_progress: bool = True) -> Dict[str, Dict[str, str]]:
        """
        Download every schema file.

        Args:
            show_progress: Show a tqdm progress bar

        Returns:
            {"success": {file: path}, "failed": {file: reason}}
        """
        results: Dict[str, Dict[str, str]] = {'success': {}, 'failed': {}}
        schemas = self.get_all_schemas()

        try:
            self._ensure_output_directory()
        except OSError as e:
            logger.error(f"❌ Failed to create directory {self.output_path}: {e}")
            return results

        for schema in tqdm(schemas, desc="Downloading schemas", unit="files",
                           dynamic_ncols=True, disable=not show_progress):
            schema_file = schema['file']
            logger.debug(f"Downloading: {schema['url']}")
            try:
                path = self._fetch(schema['url'], self.output_path / schema_file)
            except (requests.exceptions.RequestException, OSError) as e:
                results['failed'][schema_file] = str(e)
                logger.warning(f"❌ {schema_file}: {e}")
                continue
            results['success'][schema_file] = str(path)
            logger.info(f"✅ Saved {schema_file}")

        return results

    def download(self, schema_file: str) -> Path:
        """
        Download one schema file.

        Returns:
            Path of the written file

        Raises:
            RuntimeError: If the directory cannot be created or the download fails
        """
        url = f"{self.schema_base_url}{schema_file}"
        try:
            self._ensure_output_directory()
        except OSError as e:
            raise RuntimeError(f"Failed to create directory: {self.output_path}") from e

        try:
            return self._fetch(url, self.output_path / schema_file)
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"Failed to download schema from {url}: {e}") from e
        except OSError as e:
            raise RuntimeError(f"Failed to write schema file: {self.output_path / schema_file}") from e

    def _ensure_output_directory(self) -> None:
        self.output_path.mkdir(parents=True, exist_ok=True)

    def _fetch(self, url: str, target: Path) -> Path:
        response = self.session.get(url, timeout=(DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT))
        response.raise_for_status()
        target.write_bytes(response.content)
        return target
