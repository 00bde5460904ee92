"""Unit tests for the per-case lock registry."""

import asyncio
from uuid import uuid4

import pytest

from casegraph.pipeline.case_pipeline import CaseExtractionPipeline, CaseLockRegistry


class TestCaseLockRegistry:

    @pytest.mark.asyncio
    async def test_lock_dropped_after_release(self):
        registry = CaseLockRegistry()
        case_id = uuid4()

        async with registry.hold(case_id):
            assert len(registry) == 1

        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_holders_of_same_case_serialize(self):
        """Test a second holder waits and the entry lives until both are done."""
        registry = CaseLockRegistry()
        case_id = uuid4()
        order = []
        first_inside = asyncio.Event()

        async def first():
            async with registry.hold(case_id):
                order.append("first-in")
                first_inside.set()
                await asyncio.sleep(0.01)
                order.append("first-out")

        async def second():
            await first_inside.wait()
            async with registry.hold(case_id):
                order.append("second-in")
                assert len(registry) == 1

        await asyncio.gather(first(), second())

        assert order == ["first-in", "first-out", "second-in"]
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_different_cases_do_not_block(self):
        registry = CaseLockRegistry()

        async with registry.hold(uuid4()):
            async with registry.hold(uuid4()):
                assert len(registry) == 2

        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_lock_dropped_when_body_raises(self):
        registry = CaseLockRegistry()

        with pytest.raises(RuntimeError):
            async with registry.hold(uuid4()):
                raise RuntimeError("boom")

        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_pipeline_run_leaves_no_idle_lock(self, store, extraction_config, case_id, interview_document):
        """Test many cases processed in turn do not accumulate locks."""
        registry = CaseLockRegistry()
        pipeline = CaseExtractionPipeline(store, config=extraction_config, lock_registry=registry)

        await pipeline.run(case_id, [interview_document])
        await pipeline.run(uuid4(), [interview_document])

        assert len(registry) == 0
        assert pipeline.locks is registry
