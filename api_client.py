import logging
import os
from typing import Optional, Protocol
from urllib.parse import quote

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from filename_pattern import PREFIX, SUFFIX

logger = logging.getLogger("api")

class ConfigStoreError(Exception):
    pass

class ConfigStoreHTTPError(ConfigStoreError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class ConfigStoreClient(Protocol):
    def exists_input_config(self, cluster_name: str, service_key: str) -> bool:
        ...

    def create_input_config(self, cluster_name: str, service_key: str, content: str) -> None:
        ...

_transient_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    reraise=True,
)

class LogSearchApiClient:
    """Shipper input config endpoints of the Log Search server.

    Connection errors and timeouts are retried a few times, then raised.
    HTTP errors are raised straight away as ConfigStoreHTTPError.
    """

    def __init__(self,
                 host: str,
                 port: int = 61888,
                 protocol: str = "http",
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 timeout: float = 10.0):
        self.base_url = f"{protocol}://{host}:{port}/api/v1/shipper/input"
        self.auth = (username, password) if username else None
        self.timeout = timeout

    def _url(self, cluster_name: str, service_key: str) -> str:
        return f"{self.base_url}/{quote(cluster_name, safe='')}/services/{quote(service_key, safe='')}"

    @_transient_retry
    def _get(self, url: str) -> requests.Response:
        return requests.get(url, auth=self.auth, timeout=self.timeout)

    @_transient_retry
    def _post(self, url: str, content: str) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        return requests.post(
            url,
            headers=headers,
            data=content.encode("utf-8"),
            auth=self.auth,
            timeout=self.timeout,
        )

    def exists_input_config(self, cluster_name: str, service_key: str) -> bool:
        url = self._url(cluster_name, service_key)
        response = self._get(url)

        if response.status_code == 404:
            logger.debug("action=exists service=%s cluster=%s result=false", service_key, cluster_name)
            return False

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ConfigStoreHTTPError(
                f"exists check failed for {service_key}: {e}",
                getattr(e.response, "status_code", None),
            ) from e

        logger.debug("action=exists service=%s cluster=%s result=true", service_key, cluster_name)
        return True

    def create_input_config(self, cluster_name: str, service_key: str, content: str) -> None:
        url = self._url(cluster_name, service_key)
        response = self._post(url, content)

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ConfigStoreHTTPError(
                f"create failed for {service_key}: {e}",
                getattr(e.response, "status_code", None),
            ) from e

        logger.info(
            "action=create service=%s cluster=%s status_code=%s target=%s",
            service_key, cluster_name, response.status_code, self.base_url
        )

class LocalConfigStore:
    """Keeps input configs as files under <root>/<cluster>/."""

    def __init__(self, root_dir: str):
        self.root_dir = os.path.abspath(root_dir)

    def _path(self, cluster_name: str, service_key: str) -> str:
        return os.path.join(self.root_dir, cluster_name, f"{PREFIX}{service_key}{SUFFIX}")

    def exists_input_config(self, cluster_name: str, service_key: str) -> bool:
        return os.path.isfile(self._path(cluster_name, service_key))

    def create_input_config(self, cluster_name: str, service_key: str, content: str) -> None:
        path = self._path(cluster_name, service_key)
        if os.path.exists(path):
            raise ConfigStoreError(f"input config already exists: {service_key}")

        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp = f"{path}.{os.getpid()}.tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as fp:
                fp.write(content)
            os.replace(tmp, path)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)

        logger.info(
            "action=create service=%s cluster=%s path=%s",
            service_key, cluster_name, path
        )

def build_store(store_config) -> ConfigStoreClient:
    if store_config.type == "local":
        return LocalConfigStore(store_config.local_dir)

    return LogSearchApiClient(
        host=store_config.host,
        port=store_config.port,
        protocol=store_config.protocol,
        username=store_config.username,
        password=store_config.password,
        timeout=store_config.timeout_seconds,
    )
