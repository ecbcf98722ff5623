"""TaskEnrichmentService 单元测试 -- 状态流转与结果"""

import httpx
import pytest
from smarttask.core.config import BackendConfig
from smarttask.core.exceptions import InvalidInput, PersistenceError, Unauthorized
from smarttask.core.models import EnrichmentState, TaskLabel
from smarttask.core.store import SupabaseBackend
from smarttask.gateway.services.task_enrichment import TaskEnrichmentService

ALICE = "Bearer token-alice"

S = EnrichmentState


class TestEnrichmentPaths:
    async def test_labeled_path(self, backend, model_gateway, mock_llm, make_llm_response):
        mock_llm.return_value = make_llm_response("home")
        service = TaskEnrichmentService(backend, model_gateway)

        outcome = await service.create_task(ALICE, {"title": "Fix sink"})

        assert outcome.state is S.DONE
        assert outcome.history == [
            S.UNAUTHENTICATED,
            S.AUTHENTICATED,
            S.TASK_PERSISTED,
            S.LABEL_ATTEMPTED,
            S.DONE,
        ]
        assert outcome.label is TaskLabel.HOME
        assert outcome.label_applied is True
        assert outcome.task.label is TaskLabel.HOME
        assert outcome.task.user_id == "user-alice"

    async def test_no_provider_skips_label_attempt(self, backend, unconfigured_gateway, mock_llm):
        service = TaskEnrichmentService(backend, unconfigured_gateway)

        outcome = await service.create_task(ALICE, {"title": "Fix sink"})

        assert outcome.history == [
            S.UNAUTHENTICATED,
            S.AUTHENTICATED,
            S.TASK_PERSISTED,
            S.DONE,
        ]
        assert outcome.label is None
        assert outcome.task.label is None
        mock_llm.assert_not_awaited()

    async def test_rejected_label(self, backend, model_gateway, mock_llm, make_llm_response):
        mock_llm.return_value = make_llm_response("errands")
        service = TaskEnrichmentService(backend, model_gateway)

        outcome = await service.create_task(ALICE, {"title": "x"})

        assert outcome.history[-2:] == [S.LABEL_ATTEMPTED, S.DONE]
        assert outcome.label is None
        assert outcome.label_applied is False

    async def test_provider_failure(self, backend, model_gateway, mock_llm, provider_error):
        mock_llm.side_effect = provider_error("down", status_code=503)
        service = TaskEnrichmentService(backend, model_gateway)

        outcome = await service.create_task(ALICE, {"title": "x"})

        assert outcome.state is S.DONE
        assert outcome.label is None
        assert len(backend.rows) == 1

    async def test_patch_failure_keeps_pre_patch_task(
        self, backend, model_gateway, mock_llm, make_llm_response
    ):
        mock_llm.return_value = make_llm_response("work")
        backend.fail_update = True
        service = TaskEnrichmentService(backend, model_gateway)

        outcome = await service.create_task(ALICE, {"title": "x"})

        assert outcome.label is TaskLabel.WORK
        assert outcome.label_applied is False
        assert outcome.task.label is None

    async def test_single_session_per_request(
        self, backend, model_gateway, mock_llm, make_llm_response
    ):
        mock_llm.return_value = make_llm_response("work")
        service = TaskEnrichmentService(backend, model_gateway)

        await service.create_task(ALICE, {"title": "x"})

        assert backend.sessions_opened == 1


class TestEnrichmentAborts:
    async def test_unauthorized(self, backend, model_gateway):
        service = TaskEnrichmentService(backend, model_gateway)
        with pytest.raises(Unauthorized):
            await service.create_task(None, {"title": "x"})
        assert backend.sessions_opened == 0

    async def test_invalid_input_after_auth(self, backend, model_gateway):
        service = TaskEnrichmentService(backend, model_gateway)
        with pytest.raises(InvalidInput):
            await service.create_task(ALICE, {"title": ""})
        assert backend.insert_calls == 0

    async def test_persistence_error_propagates(self, backend, model_gateway, mock_llm):
        backend.fail_insert = True
        service = TaskEnrichmentService(backend, model_gateway)
        with pytest.raises(PersistenceError):
            await service.create_task(ALICE, {"title": "x"})
        mock_llm.assert_not_awaited()


def _platform(patch_response: httpx.Response) -> tuple[SupabaseBackend, list[str]]:
    """GoTrue + PostgREST 替身：鉴权与插入正常，PATCH 返回指定响应"""
    calls: list[str] = []
    row = {
        "task_id": "t1",
        "user_id": "u1",
        "title": "x",
        "completed": False,
        "label": None,
        "created_at": "2026-03-01T10:00:00+00:00",
    }

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        if request.url.path.endswith("/auth/v1/user"):
            return httpx.Response(200, json={"id": "u1", "email": "a@example.com"})
        if request.method == "POST":
            return httpx.Response(201, json=[row])
        return patch_response

    config = BackendConfig(service_url="https://abc.supabase.co", anon_key="anon")
    return SupabaseBackend(config, transport=httpx.MockTransport(handler)), calls


class TestLabelPatchOverHttp:
    """回写标签阶段平台返回异常响应：任务照常返回"""

    @pytest.mark.parametrize(
        "patch_response",
        [
            httpx.Response(200, text="<html>proxy ok</html>"),
            httpx.Response(200, json=[{"task_id": "t1"}]),
            httpx.Response(200, json="ok"),
            httpx.Response(500, json={"message": "boom"}),
        ],
    )
    async def test_unusable_patch_response_returns_unlabeled_task(
        self, model_gateway, mock_llm, make_llm_response, patch_response
    ):
        mock_llm.return_value = make_llm_response("work")
        backend, calls = _platform(patch_response)
        service = TaskEnrichmentService(backend, model_gateway)

        outcome = await service.create_task("Bearer tok", {"title": "x"})

        assert calls == ["GET", "POST", "PATCH"]
        assert outcome.state is S.DONE
        assert outcome.task.task_id == "t1"
        assert outcome.task.label is None
        assert outcome.label is TaskLabel.WORK
        assert outcome.label_applied is False


def single_record(logs, event):
    records = [entry for entry in logs if entry["event"] == event]
    assert len(records) == 1
    return records[0]


class TestEnrichmentLogs:
    """每个打标分支输出对应的结构化记录"""

    async def test_patch_failure_record(
        self, backend, model_gateway, mock_llm, make_llm_response, captured_logs
    ):
        mock_llm.return_value = make_llm_response("work")
        backend.fail_update = True

        outcome = await TaskEnrichmentService(backend, model_gateway).create_task(
            ALICE, {"title": "x"}
        )

        record = single_record(captured_logs, "label_patch_failed")
        assert record["log_level"] == "error"
        assert record["task_id"] == outcome.task.task_id
        assert record["label"] == "work"
        assert record["status_code"] == 500
        assert record["error"] == "update failed"
        assert not any(e["event"] == "label_applied" for e in captured_logs)

    async def test_applied_record(
        self, backend, model_gateway, mock_llm, make_llm_response, captured_logs
    ):
        mock_llm.return_value = make_llm_response("home")

        outcome = await TaskEnrichmentService(backend, model_gateway).create_task(
            ALICE, {"title": "Fix sink"}
        )

        record = single_record(captured_logs, "label_applied")
        assert record["task_id"] == outcome.task.task_id
        assert record["label"] == "home"
        assert single_record(captured_logs, "model_call_completed")["outcome"] == "success"

    async def test_provider_failure_record(
        self, backend, model_gateway, mock_llm, provider_error, captured_logs
    ):
        mock_llm.side_effect = provider_error("down", status_code=503)

        await TaskEnrichmentService(backend, model_gateway).create_task(ALICE, {"title": "x"})

        record = single_record(captured_logs, "label_provider_failed")
        assert record["error_class"] == "ProviderUnavailable"
        assert record["provider_status"] == 503
        assert single_record(captured_logs, "model_call_failed")["provider_status"] == 503

    async def test_rejected_label_record(
        self, backend, model_gateway, mock_llm, make_llm_response, captured_logs
    ):
        mock_llm.return_value = make_llm_response("errands")

        await TaskEnrichmentService(backend, model_gateway).create_task(ALICE, {"title": "x"})

        record = single_record(captured_logs, "label_rejected")
        assert record["raw_response"] == "errands"
        assert record["valid_labels"] == [lbl.value for lbl in TaskLabel]

    async def test_no_provider_record(self, backend, unconfigured_gateway, captured_logs):
        await TaskEnrichmentService(backend, unconfigured_gateway).create_task(
            ALICE, {"title": "x"}
        )

        assert single_record(captured_logs, "label_skipped_no_provider")["log_level"] == "warning"
        assert not any(e["event"] == "model_call_failed" for e in captured_logs)
