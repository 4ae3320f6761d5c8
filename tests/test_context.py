"""
Tests for request-scoped permission context isolation and cleanup.
"""
import asyncio
import pytest

from security.context import RequestContext, get_request_context, permission_context


@pytest.mark.unit
class TestPermissionContext:

    def test_no_context_outside_a_request(self):
        assert get_request_context() is None

    def test_context_visible_inside_and_cleared_after(self):
        with permission_context("/api/staffs/1/schedules") as context:
            assert isinstance(context, RequestContext)
            assert get_request_context() is context
            assert context.uri == "/api/staffs/1/schedules"
            assert context.body_buffered is False
            assert context.principal is None
            assert context.targets == []
        assert get_request_context() is None

    def test_context_cleared_when_request_fails(self):
        with pytest.raises(RuntimeError):
            with permission_context("/boom"):
                raise RuntimeError("handler failed")
        assert get_request_context() is None

    def test_each_request_gets_a_fresh_context(self):
        with permission_context("/first") as first:
            first.body = b"secret"
            first.body_buffered = True
        with permission_context("/second") as second:
            assert second is not first
            assert second.body is None
            assert second.body_buffered is False

    def test_nested_contexts_restore_outer(self):
        with permission_context("/outer") as outer:
            with permission_context("/inner") as inner:
                assert get_request_context() is inner
            assert get_request_context() is outer

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_isolated(self):
        seen = {}

        async def handle(uri: str, body: bytes):
            with permission_context(uri) as context:
                context.body = body
                context.body_buffered = True
                await asyncio.sleep(0.01)
                current = get_request_context()
                seen[uri] = (current is context, current.body)

        await asyncio.gather(*(handle(f"/req/{i}", f"body-{i}".encode()) for i in range(20)))

        assert len(seen) == 20
        for i in range(20):
            assert seen[f"/req/{i}"] == (True, f"body-{i}".encode())
        assert get_request_context() is None

    @pytest.mark.asyncio
    async def test_worker_thread_sees_request_context(self):
        from starlette.concurrency import run_in_threadpool

        with permission_context("/threaded") as context:
            seen = await run_in_threadpool(get_request_context)
        assert seen is context
