"""Shared test fixtures for the batch progress engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
import structlog

from src.services.batch_processor import BatchExecutor
from src.services.progress_store import ProgressStore

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after tests that configure logging."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def progress_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for snapshot files."""
    return tmp_path / "progress"


@pytest.fixture
def store(progress_dir: Path) -> ProgressStore:
    """Provide a progress store for a test operation."""
    return ProgressStore("test-operation", progress_dir=progress_dir)


@pytest.fixture
def executor(store: ProgressStore) -> BatchExecutor:
    """Provide an executor with pacing disabled."""
    return BatchExecutor(store, item_delay=0.0, chunk_delay=0.0)


@pytest.fixture
def sample_plugins() -> dict[str, dict[str, Any]]:
    """Work items keyed by plugin slug, each with a display name."""
    return {
        "akismet": {"name": "Akismet Anti-Spam", "version": "5.3"},
        "hello-dolly": {"name": "Hello Dolly", "version": "1.7.2"},
        "jetpack": {"name": "Jetpack", "version": "13.1"},
        "wordfence": {"name": "Wordfence Security", "version": "7.11"},
        "yoast": {"name": "Yoast SEO", "version": "22.0"},
        "woocommerce": {"name": "WooCommerce", "version": "8.6"},
        "contact-form-7": {"name": "Contact Form 7", "version": "5.9"},
    }


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """A small directory of files for integrity checks."""
    root = tmp_path / "site"
    (root / "wp-includes").mkdir(parents=True)
    (root / "index.php").write_text("<?php echo 'hello';\n", encoding="utf-8")
    (root / "wp-config.php").write_text("<?php define('DB_NAME', 'wp');\n", encoding="utf-8")
    version_file = root / "wp-includes" / "version.php"
    version_file.write_text("<?php $wp_version = '6.4';\n", encoding="utf-8")
    return root
