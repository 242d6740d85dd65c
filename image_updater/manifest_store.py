import logging
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from ruamel.yaml import YAMLError

from image_updater.exceptions import (
    ManifestNotFound,
    ServiceNotFound,
)
from image_updater.utils.ruamel import (
    create_ruamel_instance,
    dump_file,
    load_file,
)

IMAGES_FILE_NAME = "images.yaml"
IMAGE_KEY = "image"

ManifestDocument = MutableMapping[str, Any]


class ManifestStore:
    """
    Accessor for the image manifests of a deployment repository.
    A manifest lives at <base_path>/<tenant>/<application>/<environment>/<file_name>
    and maps service names to records holding (at least) an `image` field.

    This class only reads and writes data; deciding whether a change
    matters is left to the caller.
    """

    def __init__(self, base_path: Path | str, file_name: str = IMAGES_FILE_NAME):
        self._base_path = Path(base_path)
        self._file_name = file_name
        self._yml = create_ruamel_instance(pure=True)

    def path(self, tenant: str, application: str, environment: str) -> Path:
        return self._base_path / tenant / application / environment / self._file_name

    def _load(self, path: Path) -> ManifestDocument:
        try:
            content = load_file(path, yml=self._yml)
        except (OSError, YAMLError) as e:
            raise ManifestNotFound(path, e) from e
        if not isinstance(content, MutableMapping):
            raise ManifestNotFound(path, "content is not a mapping of services")
        return content

    def load(self, tenant: str, application: str, environment: str) -> ManifestDocument:
        return self._load(self.path(tenant, application, environment))

    def set_image(
        self,
        tenant: str,
        application: str,
        environment: str,
        service: str,
        new_image: str,
    ) -> str | None:
        """
        Sets the image of a service and returns the image it had before.
        An unchanged image is returned as is and the file is not rewritten.

        :raises:
            ManifestNotFound: the manifest can not be read
            ServiceNotFound: the manifest has no record for the service
        """
        path = self.path(tenant, application, environment)
        content = self._load(path)
        record = content.get(service)
        if not isinstance(record, MutableMapping):
            raise ServiceNotFound(service, path)

        old_image = record.get(IMAGE_KEY)
        if old_image == new_image:
            return old_image

        record[IMAGE_KEY] = new_image
        try:
            dump_file(path, content, yml=self._yml)
        except OSError as e:
            raise ManifestNotFound(path, e) from e
        logging.debug(f"{path}: {service} image {old_image} -> {new_image}")
        return old_image
