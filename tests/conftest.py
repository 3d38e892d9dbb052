"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from annotkit.model import Model, Node


@pytest.fixture
def fixtures_path() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def config_path(fixtures_path: Path) -> Path:
    """Annotation configuration for the library fixture model."""
    return fixtures_path / "library.toml"


@pytest.fixture
def model_path(fixtures_path: Path) -> Path:
    return fixtures_path / "library.json"


@pytest.fixture
def three_node_model() -> Model:
    """Library -> (Shelf -> Book)."""
    book = Node("Book", {"title": "Dune"}, uid="b1")
    shelf = Node("Shelf", {"label": "SciFi"}, uid="s1", children=[book])
    library = Node("Library", {"name": "City"}, uid="l1", children=[shelf])
    return Model.of(library, name="three")
