"""Shared test fixtures."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from apiscan.intake.entries import byte_size
from apiscan.intake.language import detect_language
from apiscan.intake.models import ScanFile


def make_file(path: str, content: str, language: str | None = None) -> ScanFile:
    """Build a ScanFile directly, bypassing intake filters."""
    lang = language or detect_language(path)
    assert lang is not None, f"unsupported extension in {path}"
    return ScanFile(path=path, content=content, language=lang, size=byte_size(content))


@pytest.fixture
def scan_file() -> Callable[..., ScanFile]:
    return make_file


@pytest.fixture
def clean_js() -> str:
    """A documented, versioned, paginated Express router."""
    return textwrap.dedent("""\
        const express = require('express');
        const router = express.Router();

        /**
         * @swagger
         * /api/v1/items:
         *   get:
         *     summary: List items
         */
        router.get('/api/v1/items', async (req, res) => {
          const items = await Item.findMany({ take: 20 });
          res.json(items);
        });

        module.exports = router;
    """)


@pytest.fixture
def users_route_js() -> str:
    """Verb in the path and an unbounded collection query."""
    return textwrap.dedent("""\
        const router = require('express').Router();

        router.get('/getAllUsers', (req, res) => {
          const users = User.findAll();
          res.json(users);
        });
    """)


@pytest.fixture
def hardcoded_password_js() -> str:
    return 'const password = "SuperSecret123";\n'


@pytest.fixture
def cors_with_credentials_js() -> str:
    return textwrap.dedent("""\
        const cors = require('cors');
        app.use(cors({ origin: '*' }));

        const corsOptions = {
          credentials: true,
        };
    """)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A small on-disk project with one JS route file and one non-source file."""
    (tmp_path / "routes").mkdir()
    (tmp_path / "routes" / "users.js").write_text(
        'const password = "SuperSecret123";\n', encoding="utf-8"
    )
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def clean_project(tmp_path: Path, clean_js: str) -> Path:
    (tmp_path / "items.js").write_text(clean_js, encoding="utf-8")
    return tmp_path
