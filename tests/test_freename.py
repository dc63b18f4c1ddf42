"""Tests for the PokeAPI project name picker."""

import random

import httpx
import pytest

from bananadb.services.freename import random_freename


@pytest.mark.asyncio
async def test_name_from_pokeapi():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"name": "bulbasaur"})

    name = await random_freename(transport=httpx.MockTransport(handler), rng=random.Random(1))
    assert name == "bulbasaur"
    assert seen[0].startswith("/api/v2/pokemon/")


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(500),
    httpx.Response(200, text="<html>"),
    httpx.Response(200, json=[]),
])
async def test_fallback_name(response):
    rng = random.Random(7)
    expected_id = random.Random(7).randint(1, 1008)
    name = await random_freename(transport=httpx.MockTransport(lambda r: response), rng=rng)
    assert name == f"pokemon{expected_id}"
