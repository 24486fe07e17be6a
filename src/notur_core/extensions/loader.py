"""Loading extension classes from manifest entrypoints."""

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any

from notur_core.errors import create_error

from .base import NoturExtension
from .manifest import ExtensionManifest

logger = logging.getLogger(__name__)


def load_extension(
    manifest: ExtensionManifest, config: dict[str, Any] | None = None
) -> NoturExtension:
    """Instantiate the extension named by ``manifest.entrypoint``.

    Entrypoints take two forms:
    - ``package.module:ClassName`` - imported from an installed package
    - ``relative/file.py:ClassName`` - loaded from a file under the extension root

    Without an entrypoint a plain NoturExtension is returned.

    Raises:
        NoturError: ENTRYPOINT_INVALID if the class cannot be loaded
    """
    entrypoint = manifest.entrypoint
    if not entrypoint:
        return NoturExtension(manifest, config)

    extension_class = load_extension_class(entrypoint, manifest.base_path, manifest.id)
    logger.debug(f"Loaded extension class {extension_class.__name__} for {manifest.id}")
    return extension_class(manifest, config)


def load_extension_class(
    entrypoint: str, base_path: Path | None = None, extension_id: str = "extension"
) -> type[NoturExtension]:
    """Resolve an entrypoint string to a NoturExtension subclass."""
    target, _, class_name = entrypoint.partition(":")
    if not target or not class_name:
        raise create_error(
            "ENTRYPOINT_INVALID",
            entrypoint=entrypoint,
            detail="Entrypoint must have the form 'target:ClassName'",
        )

    if target.endswith(".py"):
        module = _load_from_file(target, base_path, extension_id, entrypoint)
    else:
        try:
            module = importlib.import_module(target)
        except ImportError as e:
            raise create_error(
                "ENTRYPOINT_INVALID",
                entrypoint=entrypoint,
                detail=f"Cannot import extension module: {target}",
            ) from e

    extension_class = getattr(module, class_name, None)
    if not (isinstance(extension_class, type) and issubclass(extension_class, NoturExtension)):
        raise create_error(
            "ENTRYPOINT_INVALID",
            entrypoint=entrypoint,
            detail=f"{class_name} is not a NoturExtension subclass",
        )
    return extension_class


def _load_from_file(target: str, base_path: Path | None, extension_id: str, entrypoint: str) -> Any:
    file_path = Path(target)
    if not file_path.is_absolute() and base_path is not None:
        file_path = base_path / file_path

    if not file_path.is_file():
        raise create_error(
            "ENTRYPOINT_INVALID",
            entrypoint=entrypoint,
            detail=f"Extension file not found: {file_path}",
        )

    module_name = "notur_ext_" + extension_id.replace("/", "_").replace("-", "_")
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if not spec or not spec.loader:
        raise create_error(
            "ENTRYPOINT_INVALID",
            entrypoint=entrypoint,
            detail=f"Cannot load extension from: {file_path}",
        )

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module
