import threading

import pytest

from clickhub.container.build_stack import BuildStack
from clickhub.container.errors import CyclicDependency


def test_frame_pushes_and_pops():
    stack = BuildStack()
    with stack.frame("a"):
        with stack.frame("b"):
            assert stack.snapshot() == ("a", "b")
        assert stack.snapshot() == ("a",)
    assert len(stack) == 0


def test_frame_pops_on_failure():
    stack = BuildStack()
    with pytest.raises(RuntimeError):
        with stack.frame("a"):
            raise RuntimeError("boom")
    assert stack.snapshot() == ()


def test_reentering_open_entry_is_a_cycle():
    stack = BuildStack()
    with stack.frame("a"), stack.frame("b"), stack.frame("c"):
        with pytest.raises(CyclicDependency) as exc_info:
            with stack.frame("b"):
                pass
        assert exc_info.value.chain == ("b", "c", "b")
        assert stack.snapshot() == ("a", "b", "c")


def test_stacks_are_per_thread():
    stack = BuildStack()
    seen: list[tuple] = []
    entered = threading.Event()
    release = threading.Event()

    def other() -> None:
        with stack.frame("worker"):
            entered.set()
            release.wait(timeout=5)
            seen.append(stack.snapshot())

    with stack.frame("main"):
        thread = threading.Thread(target=other)
        thread.start()
        assert entered.wait(timeout=5)
        assert stack.snapshot() == ("main",)
        release.set()
        thread.join(timeout=5)

    assert seen == [("worker",)]
