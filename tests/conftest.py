"""
Pytest configuration and shared fixtures for Notur tests.
"""

import sys
import textwrap
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from notur_core.bridge import PluginRegistry  # noqa: E402
from notur_core.extensions import ExtensionManager, ExtensionManifest  # noqa: E402
from notur_core.logging import reset_loggers  # noqa: E402


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_loggers() -> Generator[None, None, None]:
    """Give every test a clean logger cache."""
    reset_loggers()
    yield
    reset_loggers()


# =============================================================================
# Manifest Fixtures
# =============================================================================


def manifest_data(ext_id: str = "acme/analytics", **overrides: Any) -> dict[str, Any]:
    """Minimal valid manifest mapping, with overrides merged on top."""
    data: dict[str, Any] = {
        "id": ext_id,
        "name": ext_id.split("/")[-1].title(),
        "version": "1.0.0",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_manifest() -> Callable[..., ExtensionManifest]:
    """Factory for in-memory manifests."""

    def factory(ext_id: str = "acme/analytics", **overrides: Any) -> ExtensionManifest:
        return ExtensionManifest.from_dict(manifest_data(ext_id, **overrides))

    return factory


@pytest.fixture
def extensions_root(tmp_path: Path) -> Path:
    """Directory laid out as ``<vendor>/<name>/`` extension roots."""
    root = tmp_path / "extensions"
    root.mkdir()
    return root


@pytest.fixture
def make_extension_dir(extensions_root: Path) -> Callable[..., Path]:
    """Factory writing an extension directory with a manifest and extra files.

    ``files`` maps relative paths to file contents (dedented).
    """

    def factory(
        ext_id: str = "acme/analytics",
        files: dict[str, str] | None = None,
        **overrides: Any,
    ) -> Path:
        ext_dir = extensions_root / ext_id
        ext_dir.mkdir(parents=True, exist_ok=True)
        with (ext_dir / "extension.yaml").open("w") as f:
            yaml.safe_dump(manifest_data(ext_id, **overrides), f)
        for relative, content in (files or {}).items():
            target = ext_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(content))
        return ext_dir

    return factory


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def manager() -> ExtensionManager:
    """Extension manager with an in-memory store and no HTTP app."""
    return ExtensionManager()


@pytest.fixture
def registry() -> PluginRegistry:
    """Fresh client-side plugin registry."""
    return PluginRegistry()
