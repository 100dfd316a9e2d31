"""Fixtures for end-to-end pipeline tests."""

from pathlib import Path

import pytest

from contentdb.core.config import CollectionDeclaration, Config, DevConfig, RepositoryConfig
from tests.fakes import write_file

CONFIG_YAML = """\
collections:
  posts:
    type: page
    source: posts/**/*.md
    schema:
      title: string
      tags: array<string>?
  authors:
    type: data
    source: authors/*.yml
    schema:
      name: string
dev:
  poll_interval: 0.05
"""


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Write a small content tree with two posts and one author."""
    content = tmp_path / "content"
    write_file(content, "posts/hello.md", "---\ntitle: Hello\ntags: [intro]\n---\n# Hello\n\nFirst post.\n")
    write_file(content, "posts/2.world.md", "---\ntitle: World\n---\nSecond post.\n")
    write_file(content, "authors/ada.yml", "name: Ada\nrole: maintainer\n")
    write_file(tmp_path, "contentdb.yml", CONFIG_YAML)
    return tmp_path


@pytest.fixture
def site_config(site: Path) -> Config:
    """Configuration equivalent to the site's ``contentdb.yml``."""
    return Config(
        root_dir=site,
        collections=[
            CollectionDeclaration(
                "posts", "page", "posts/**/*.md", {"title": "string", "tags": "array<string>?"}
            ),
            CollectionDeclaration("authors", "data", "authors/*.yml", {"name": "string"}),
        ],
        dev=DevConfig(poll_interval=0.05),
        repository=RepositoryConfig(cache_dir=site / "cache", token=None),
    )
