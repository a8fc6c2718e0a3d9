import threading
import time
import unittest

from drimefs.mutation import GateTable


class TestGateTable(unittest.TestCase):
    def test_single_caller(self) -> None:
        gates: GateTable[int] = GateTable()
        self.assertEqual(gates.run("k", lambda: 5), 5)
        self.assertEqual(len(gates), 0)

    def test_concurrent_callers_share_one_execution(self) -> None:
        gates: GateTable[int] = GateTable()
        started = threading.Event()
        release = threading.Event()
        calls = []

        def body() -> int:
            calls.append(1)
            started.set()
            release.wait(5)
            return 42

        results = []
        owner = threading.Thread(target=lambda: results.append(gates.run("k", body)))
        owner.start()
        self.assertTrue(started.wait(5))
        self.assertEqual(len(gates), 1)

        waiters = [
            threading.Thread(target=lambda: results.append(gates.run("k", body)))
            for _ in range(4)
        ]
        for t in waiters:
            t.start()
        time.sleep(0.1)
        release.set()
        for t in [owner, *waiters]:
            t.join(5)

        self.assertEqual(len(calls), 1)
        self.assertEqual(results, [42] * 5)
        self.assertEqual(len(gates), 0)

    def test_error_is_shared_with_waiters(self) -> None:
        gates: GateTable[int] = GateTable()
        started = threading.Event()
        release = threading.Event()

        def body() -> int:
            started.set()
            release.wait(5)
            raise ValueError("boom")

        errors = []

        def call() -> None:
            try:
                gates.run("k", body)
            except ValueError as exc:
                errors.append(exc)

        owner = threading.Thread(target=call)
        owner.start()
        self.assertTrue(started.wait(5))
        waiter = threading.Thread(target=call)
        waiter.start()
        time.sleep(0.1)
        release.set()
        owner.join(5)
        waiter.join(5)

        self.assertEqual(len(errors), 2)
        self.assertIs(errors[0], errors[1])

    def test_gate_retires_after_completion(self) -> None:
        gates: GateTable[int] = GateTable()
        calls = []
        gates.run("k", lambda: calls.append(1) or 1)
        gates.run("k", lambda: calls.append(1) or 2)
        self.assertEqual(len(calls), 2)

    def test_keys_are_independent(self) -> None:
        gates: GateTable[str] = GateTable()
        self.assertEqual(gates.run("a", lambda: "a"), "a")
        self.assertEqual(gates.run("b", lambda: "b"), "b")


if __name__ == "__main__":
    unittest.main()
