import json

import pytest


class FakeProvider:
    """Provider double: queued completion replies and a fixed search answer."""

    def __init__(self, replies=None, hits=None, search_error=None):
        self.replies = list(replies or [])
        self.hits = hits or []
        self.search_error = search_error
        self.prompts = []
        self.searches = []

    async def complete_json(self, system, prompt, schema_name, schema):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply)
        return reply

    async def search(self, prompt):
        self.searches.append(prompt)
        if self.search_error:
            raise self.search_error
        return self.hits


@pytest.fixture
def fake_provider():
    return FakeProvider
