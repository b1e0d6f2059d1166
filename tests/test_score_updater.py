from __future__ import annotations

import asyncio
import unittest

from livescores.scores.updater import ScoreUpdater


class _StubService:
    def __init__(self, *, fail: bool = False, fail_times: int = 0) -> None:
        self.fail = fail
        self.fail_times = fail_times
        self.refresh_calls = 0
        self.cleanup_calls: list[int] = []

    async def refresh_all_scores(self) -> dict[str, int]:
        self.refresh_calls += 1
        if self.fail or self.refresh_calls <= self.fail_times:
            raise RuntimeError("database is locked")
        return {"football": 3, "basketball": 4}

    async def cleanup_old_scores(self, days: int = 7) -> int:
        self.cleanup_calls.append(days)
        return 2


async def _let_tasks_run() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class ScoreUpdaterTests(unittest.IsolatedAsyncioTestCase):
    async def test_update_scores_records_successful_cycle(self) -> None:
        updater = ScoreUpdater(_StubService())

        await updater.update_scores()

        self.assertEqual(1, updater.update_count)
        self.assertIsNotNone(updater.last_update)

    async def test_failed_cycle_is_logged_and_not_counted(self) -> None:
        updater = ScoreUpdater(_StubService(fail=True))

        with self.assertLogs("livescores.scores.updater", level="ERROR"):
            await updater.update_scores()

        self.assertEqual(0, updater.update_count)
        self.assertIsNone(updater.last_update)

    async def test_start_runs_both_jobs_immediately_and_stop_joins_them(self) -> None:
        service = _StubService()
        updater = ScoreUpdater(service, interval_seconds=3600, retention_days=5)

        updater.start()
        await _let_tasks_run()

        self.assertTrue(updater.is_running)
        self.assertEqual(1, service.refresh_calls)
        self.assertEqual([5], service.cleanup_calls)

        await updater.stop()

        self.assertFalse(updater.is_running)
        self.assertFalse(updater.get_status()["is_running"])

    async def test_start_twice_keeps_single_set_of_loops(self) -> None:
        service = _StubService()
        updater = ScoreUpdater(service, interval_seconds=3600)

        updater.start()
        with self.assertLogs("livescores.scores.updater", level="WARNING"):
            updater.start()
        await _let_tasks_run()
        await updater.stop()

        self.assertEqual(1, service.refresh_calls)

    async def test_stop_when_not_running_is_a_noop(self) -> None:
        updater = ScoreUpdater(_StubService())

        await updater.stop()

        self.assertFalse(updater.is_running)

    async def test_force_update_runs_one_cycle(self) -> None:
        service = _StubService()
        updater = ScoreUpdater(service)

        await updater.force_update()
        await updater.force_update()

        self.assertEqual(2, service.refresh_calls)
        self.assertEqual(2, updater.update_count)

    async def test_status_reports_interval_in_milliseconds(self) -> None:
        status = ScoreUpdater(_StubService()).get_status()

        self.assertEqual(
            {"is_running": False, "last_update": None, "update_count": 0, "interval_ms": 60000},
            status,
        )

    async def test_stopped_loop_exits_before_interval(self) -> None:
        updater = ScoreUpdater(_StubService(), interval_seconds=3600)
        updater.start()
        await _let_tasks_run()
        tasks = list(updater._tasks)

        await asyncio.wait_for(updater.stop(), timeout=1)

        self.assertTrue(all(task.done() for task in tasks))

    async def test_loop_keeps_running_after_a_failed_cycle(self) -> None:
        service = _StubService(fail_times=1)
        updater = ScoreUpdater(service, interval_seconds=0.01)

        with self.assertLogs("livescores.scores.updater", level="ERROR"):
            updater.start()
            for _ in range(200):
                if updater.update_count >= 1:
                    break
                await asyncio.sleep(0.01)

        try:
            self.assertTrue(updater.is_running)
            self.assertGreaterEqual(service.refresh_calls, 2)
            self.assertEqual(service.refresh_calls - 1, updater.update_count)
            self.assertIsNotNone(updater.last_update)
        finally:
            await updater.stop()


if __name__ == "__main__":
    unittest.main()
