"""Checks that the package and its test tooling are wired up."""

import tomllib
from pathlib import Path

import pytest
from hypothesis import given, strategies as st

import neko_companion.main
from neko_companion.models import BANNER_ORDER, BannerType

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def test_version_matches_pyproject() -> None:
    project = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]

    assert project["version"] == neko_companion.main.VERSION
    assert project["scripts"]["neko-companion"] == "neko_companion.main:main"


def test_banner_order_covers_every_banner() -> None:
    assert set(BANNER_ORDER) == {banner.value for banner in BannerType}


@given(st.integers())
def test_hypothesis_setup(x: int) -> None:
    assert x + 0 == x


@pytest.mark.asyncio
async def test_async_setup() -> None:
    async def async_function() -> str:
        return "neko"

    assert await async_function() == "neko"
