# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from typing import List

import fakeredis
import httpx
from fastapi.testclient import TestClient

from ayurtrack.ai.client import ChatModel
from ayurtrack.ai.service import AIDraftingService, extract_json
from ayurtrack.api import create_app
from ayurtrack.cache import CacheService
from ayurtrack.config import Settings
from ayurtrack.documents import SqliteDocumentStore
from ayurtrack.errors import AIServiceError

DIET_REPLY = {
    "dietChart": "## Day 1\n- Breakfast: warm oats",
    "recommendations": ["Eat warm meals"],
    "warnings": ["Avoid cold drinks"],
}


def completion(text: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})


class FakeModelServer:
    """Records chat-completion requests and answers with canned replies."""

    def __init__(self, *replies: str, status: int = 200) -> None:
        self.replies = list(replies)
        self.status = status
        self.requests: List[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "upstream failure"})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        return completion(reply)

    def model(self) -> ChatModel:
        return ChatModel(
            base_url="http://model.test/v1",
            model="test-model",
            api_key="secret",
            transport=httpx.MockTransport(self),
        )


class TestExtractJson(unittest.TestCase):
    def test_plain_fenced_and_wrapped(self) -> None:
        self.assertEqual(extract_json('{"a": 1}'), {"a": 1})
        self.assertEqual(extract_json('```json\n{"a": 1}\n```'), {"a": 1})
        self.assertEqual(extract_json('Here you go:\n{"a": {"b": 2}}\nEnjoy!'), {"a": {"b": 2}})

    def test_rejects_prose(self) -> None:
        with self.assertRaises(ValueError):
            extract_json("I cannot help with that.")


class TestAIDraftingService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.cache = CacheService(fakeredis.FakeAsyncRedis(decode_responses=True))
        await self.cache.connect()

    async def asyncTearDown(self) -> None:
        await self.cache.close()

    async def test_diet_plan_is_parsed_and_cached(self) -> None:
        server = FakeModelServer("```json\n" + json.dumps(DIET_REPLY) + "\n```")
        service = AIDraftingService(server.model(), self.cache)

        first = await service.generate_diet_plan({"name": "Asha"}, {"bmi": 22}, {"lunch": ["dal"]})
        second = await service.generate_diet_plan({"name": "Asha"}, {"bmi": 22}, {"lunch": ["dal"]})
        await service.generate_diet_plan({"name": "Asha"}, {"bmi": 23}, {"lunch": ["dal"]})

        self.assertEqual(first, DIET_REPLY)
        self.assertEqual(second, DIET_REPLY)
        self.assertEqual(len(server.requests), 2)

        sent = server.requests[0]
        self.assertEqual(sent["model"], "test-model")
        self.assertEqual(sent["top_p"], 0.8)
        self.assertEqual([m["role"] for m in sent["messages"]], ["system", "user"])
        self.assertIn("expert Ayurvedic dietitian", sent["messages"][0]["content"])
        self.assertIn('"name": "Asha"', sent["messages"][1]["content"])
        self.assertIn("General Ayurvedic principles", sent["messages"][1]["content"])

    async def test_operations_share_cache_only_for_same_operation(self) -> None:
        server = FakeModelServer('{"alternatives": []}')
        service = AIDraftingService(server.model(), self.cache)

        await service.suggest_alternatives("curd", "Kapha aggravating")
        await service.suggest_alternatives("curd", "Kapha aggravating")
        await service.generate_meal_timings("curd", "Kapha aggravating")

        self.assertEqual(len(server.requests), 2)
        self.assertIn("FOOD TO REPLACE: curd", server.requests[0]["messages"][1]["content"])
        self.assertIn("DOSHA TYPE: curd", server.requests[1]["messages"][1]["content"])

    async def test_upstream_failure_becomes_service_error(self) -> None:
        service = AIDraftingService(FakeModelServer(status=503).model(), self.cache)
        with self.assertLogs("ayurtrack.ai.service", level="ERROR"):
            with self.assertRaises(AIServiceError) as ctx:
                await service.generate_diet_plan({}, {}, {})
        self.assertEqual(str(ctx.exception), "Failed to generate diet plan. Please try again.")

    async def test_unparseable_reply_becomes_service_error_and_is_not_cached(self) -> None:
        server = FakeModelServer("Vata, mostly.", '{"primaryDosha": "Vata"}')
        service = AIDraftingService(server.model(), self.cache)

        with self.assertLogs("ayurtrack.ai.service", level="ERROR"):
            with self.assertRaises(AIServiceError) as ctx:
                await service.analyze_dosha(["insomnia"], ["dry skin"], [])
        self.assertEqual(str(ctx.exception), "Failed to analyze dosha. Please try again.")

        result = await service.analyze_dosha(["insomnia"], ["dry skin"], [])
        self.assertEqual(result, {"primaryDosha": "Vata"})
        self.assertIn("insomnia", server.requests[1]["messages"][1]["content"])

    async def test_health_check(self) -> None:
        healthy = AIDraftingService(FakeModelServer("AI service is healthy").model(), self.cache)
        chatty = AIDraftingService(FakeModelServer("Sure! AI service is healthy.").model(), self.cache)
        self.assertTrue(await healthy.health_check())
        self.assertFalse(await chatty.health_check())
        with self.assertLogs("ayurtrack.ai.service", level="ERROR"):
            self.assertFalse(await AIDraftingService(FakeModelServer(status=500).model(), self.cache).health_check())


class TestAIRoutes(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="ayurtrack-test-"))

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _client(self, server: FakeModelServer, rate_limit: int = 100) -> TestClient:
        settings = Settings()
        settings.env = "test"
        settings.ai_rate_limit = rate_limit
        cache = CacheService(fakeredis.FakeAsyncRedis(decode_responses=True))
        app = create_app(
            settings,
            store=SqliteDocumentStore(self._tmp / "docs.db"),
            cache=cache,
            ai=AIDraftingService(server.model(), cache),
        )
        return TestClient(app)

    def test_generate_diet_requires_all_inputs(self) -> None:
        server = FakeModelServer(json.dumps(DIET_REPLY))
        with self._client(server) as client:
            resp = client.post("/api/ai/generate-diet", json={"patientProfile": {"name": "Asha"}, "messMenu": {}})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json(),
            {"success": False, "error": "Missing required fields: patientProfile, vitals, messMenu"},
        )
        self.assertEqual(server.requests, [])

    def test_empty_objects_and_arrays_count_as_sent(self) -> None:
        server = FakeModelServer(json.dumps(DIET_REPLY))
        with self._client(server) as client:
            diet = client.post("/api/ai/generate-diet", json={"patientProfile": {}, "vitals": {}, "messMenu": {}})
            dosha = client.post("/api/ai/analyze-dosha", json={"symptoms": [], "characteristics": []})
            blank = client.post("/api/ai/suggest-alternatives", json={"foodName": "", "reason": "cold"})
        self.assertEqual(diet.status_code, 200)
        self.assertEqual(dosha.status_code, 200)
        self.assertEqual(len(server.requests), 2)
        self.assertEqual(blank.status_code, 400)
        self.assertEqual(blank.json()["error"], "Missing required fields: foodName, reason")

    def test_generate_diet_success_and_failure(self) -> None:
        body = {"patientProfile": {"name": "Asha"}, "vitals": {"bmi": 22}, "messMenu": {"lunch": ["dal"]}}
        with self._client(FakeModelServer(json.dumps(DIET_REPLY))) as client:
            resp = client.post("/api/ai/generate-diet", json=body)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True, "data": DIET_REPLY})

        with self._client(FakeModelServer(status=500)) as client:
            resp = client.post("/api/ai/generate-diet", json=body)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(),
            {
                "success": False,
                "error": "Failed to generate diet plan",
                "message": "Failed to generate diet plan. Please try again.",
            },
        )

    def test_analyze_dosha_accepts_single_strings(self) -> None:
        server = FakeModelServer('{"primaryDosha": "Pitta", "imbalanceScore": 6, "recommendations": []}')
        with self._client(server) as client:
            resp = client.post("/api/ai/analyze-dosha", json={"symptoms": "acid reflux", "characteristics": ["irritable"]})
            missing = client.post("/api/ai/suggest-alternatives", json={"foodName": "curd"})
        self.assertEqual(resp.json()["data"]["primaryDosha"], "Pitta")
        self.assertIn("acid reflux", server.requests[0]["messages"][1]["content"])
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json()["error"], "Missing required fields: foodName, reason")

    def test_rate_limit_per_client(self) -> None:
        server = FakeModelServer('{"schedule": [], "rationale": "regularity"}')
        body = {"doshaType": "Vata", "dailyRoutine": "Office 9-5"}
        with self._client(server, rate_limit=2) as client:
            codes = [client.post("/api/ai/generate-timings", json=body).status_code for _ in range(3)]
            limited = client.get("/api/ai/health")
        self.assertEqual(codes, [200, 200, 429])
        self.assertEqual(limited.status_code, 429)
        self.assertFalse(limited.json()["success"])
        self.assertEqual(len(server.requests), 1)

    def test_health_and_cache_clear(self) -> None:
        server = FakeModelServer('{"alternatives": []}', "AI service is healthy")
        with self._client(server) as client:
            client.post("/api/ai/suggest-alternatives", json={"foodName": "curd", "reason": "cold"})
            health = client.get("/api/ai/health").json()
            cleared = client.post("/api/ai/cache/clear").json()
            client.post("/api/ai/suggest-alternatives", json={"foodName": "curd", "reason": "cold"})

        self.assertTrue(health["healthy"])
        self.assertEqual(health["service"], "AI Service")
        self.assertEqual(cleared["data"], {"cacheCleared": True, "keysRemoved": 1})
        self.assertEqual(cleared["message"], "AI cache cleared successfully")
        self.assertEqual(len(server.requests), 3)
